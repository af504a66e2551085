"""Detección de choques de horario de un docente entre cursos.

Las claves de curso llevan el id del establecimiento, así que un docente que
trabaja en dos escuelas queda cubierto igual que dentro de una sola.
"""

from typing import Optional

from pydantic import BaseModel

from models.establishment import Establishment
from models.grid import ScheduleGrid
from models.keys import CourseKey, SlotKey, establishment_id_of

UNKNOWN_ESTABLISHMENT = "Establecimiento desconocido"


def find_conflict(
    teacher_id: int,
    weekday: str,
    block_id: int,
    current_course_key: str,
    grid: ScheduleGrid,
) -> Optional[str]:
    """Primer curso (distinto del actual) donde el docente ya ocupa ese día y bloque."""
    slot = SlotKey(weekday, block_id).format()
    for course_key, course in grid.items():
        if course_key == current_course_key:
            continue
        entry = course.get(slot)
        if entry is not None and entry.teacher_id == teacher_id:
            return course_key
    return None


class ConflictInfo(BaseModel):
    """Choque encontrado, con datos para el mensaje al usuario."""

    course_key: str
    establishment_id: Optional[int] = None
    establishment_name: str = UNKNOWN_ESTABLISHMENT
    cross_establishment: bool = False

    @property
    def course_label(self) -> str:
        try:
            return CourseKey.parse(self.course_key).course_label
        except ValueError:
            return self.course_key


def describe_conflict(
    teacher_id: int,
    weekday: str,
    block_id: int,
    current_course_key: str,
    grid: ScheduleGrid,
    establishments: list[Establishment],
) -> Optional[ConflictInfo]:
    """Como ``find_conflict``, pero resolviendo el nombre del otro establecimiento."""
    other = find_conflict(teacher_id, weekday, block_id, current_course_key, grid)
    if other is None:
        return None
    other_est_id = establishment_id_of(other)
    name = next(
        (e.name for e in establishments if e.id == other_est_id),
        UNKNOWN_ESTABLISHMENT,
    )
    return ConflictInfo(
        course_key=other,
        establishment_id=other_est_id,
        establishment_name=name,
        cross_establishment=other_est_id != establishment_id_of(current_course_key),
    )
