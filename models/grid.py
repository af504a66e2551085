"""Horario semanal: curso → celda → bloque asignado."""

from typing import Optional

from pydantic import BaseModel

from models.subject import Subject


class BlockEntry(BaseModel):
    """Un bloque ocupado del horario de un curso.

    ``teacher_name`` es un dato desnormalizado; datos antiguos pueden traerlo
    vacío (ver ``ScheduleStore.repair_corrupt_data``).
    """

    subject: Optional[Subject] = None
    teacher_id: int = 0
    teacher_name: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.subject is not None and self.teacher_id and self.teacher_name)


# "<estId>-<curso>" → "<Día>-<bloque>" → BlockEntry
ScheduleGrid = dict[str, dict[str, BlockEntry]]


def iter_entries(grid: ScheduleGrid):
    """Recorre (course_key, slot_key, entry) de todo el horario."""
    for course_key, course in grid.items():
        for slot_key, entry in course.items():
            yield course_key, slot_key, entry


def copy_grid(grid: ScheduleGrid) -> ScheduleGrid:
    """Copia de dos niveles: los BlockEntry se comparten (no se mutan in situ)."""
    return {course_key: dict(course) for course_key, course in grid.items()}
