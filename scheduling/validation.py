"""Validación de la asignación de un bloque (función pura).

Recibe una foto inmutable de docentes y horario y devuelve un horario nuevo
o un ``AssignmentError``. Orden de las verificaciones (la primera que falla
gana):

1. El docente existe.
2. Tiene asignación en el establecimiento del curso.
3. La asignación no es Directiva.
4. La asignación no es PIE.
5. El día no está bloqueado para esa asignación.
6. No tiene clase en otro curso a esa misma hora.
7. Le quedan horas lectivas por ocupar.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from hours.calculator import hours_used_in_grid, schedulable_hours, teaching_assignment_at
from models.establishment import Establishment
from models.grid import BlockEntry, ScheduleGrid
from models.keys import SlotKey, establishment_id_of
from models.subject import Subject
from models.teacher import AssignmentType, Teacher
from scheduling.conflicts import describe_conflict


class AssignmentErrorCode(str, Enum):
    TEACHER_NOT_FOUND = "TeacherNotFound"
    NO_ASSIGNMENT_AT_ESTABLISHMENT = "NoAssignmentAtEstablishment"
    DIRECTIVA_CANNOT_SCHEDULE = "DirectivaCannotSchedule"
    PIE_CANNOT_SCHEDULE = "PIECannotSchedule"
    TEACHER_UNAVAILABLE_THIS_DAY = "TeacherUnavailableThisDay"
    SCHEDULE_CONFLICT = "ScheduleConflict"
    NO_HOURS_AVAILABLE = "NoHoursAvailable"


class AssignmentError(BaseModel):
    """Motivo concreto por el que se rechaza un bloque."""

    code: AssignmentErrorCode
    message: str
    teacher_name: str = ""
    conflict_course_key: Optional[str] = None
    conflict_establishment_name: Optional[str] = None
    hours_used: Optional[int] = None
    hours_allowed: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class AssignmentResult(BaseModel):
    success: bool
    error: Optional[AssignmentError] = None

    @classmethod
    def ok(cls) -> "AssignmentResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: AssignmentError) -> "AssignmentResult":
        return cls(success=False, error=error)


def validate_block_assignment(
    course_key: str,
    weekday: str,
    block_id: int,
    teacher_id: int,
    teachers: list[Teacher],
    grid: ScheduleGrid,
    establishments: Optional[list[Establishment]] = None,
) -> Optional[AssignmentError]:
    """None si el bloque se puede asignar; si no, el primer error encontrado."""
    teacher = next((t for t in teachers if t.id == teacher_id), None)
    if teacher is None:
        return AssignmentError(
            code=AssignmentErrorCode.TEACHER_NOT_FOUND,
            message=f"Docente no encontrado (id {teacher_id})",
        )

    name = teacher.name
    est_id = establishment_id_of(course_key)
    assignment = teaching_assignment_at(teacher, est_id) if est_id is not None else None
    if assignment is None:
        return AssignmentError(
            code=AssignmentErrorCode.NO_ASSIGNMENT_AT_ESTABLISHMENT,
            message=f"{name} no tiene asignación en este establecimiento",
            teacher_name=name,
        )

    if assignment.assignment_type == AssignmentType.DIRECTIVA:
        return AssignmentError(
            code=AssignmentErrorCode.DIRECTIVA_CANNOT_SCHEDULE,
            message=f"{name}: las horas Directiva no se asignan al horario de clases",
            teacher_name=name,
        )

    if assignment.assignment_type == AssignmentType.PIE:
        return AssignmentError(
            code=AssignmentErrorCode.PIE_CANNOT_SCHEDULE,
            message=f"{name}: las horas PIE son adicionales y no van al horario de clases",
            teacher_name=name,
        )

    if assignment.is_blocked_on(weekday):
        return AssignmentError(
            code=AssignmentErrorCode.TEACHER_UNAVAILABLE_THIS_DAY,
            message=f"{name} NO está disponible los {weekday} en este establecimiento",
            teacher_name=name,
        )

    conflict = describe_conflict(
        teacher_id, weekday, block_id, course_key, grid, establishments or []
    )
    if conflict is not None:
        where = conflict.course_label
        if conflict.cross_establishment:
            where += f" ({conflict.establishment_name})"
        return AssignmentError(
            code=AssignmentErrorCode.SCHEDULE_CONFLICT,
            message=f"{name} ya tiene clase en este horario en {where}",
            teacher_name=name,
            conflict_course_key=conflict.course_key,
            conflict_establishment_name=conflict.establishment_name,
        )

    used = hours_used_in_grid(teacher_id, grid)
    allowed = schedulable_hours(assignment)
    if used >= allowed:
        return AssignmentError(
            code=AssignmentErrorCode.NO_HOURS_AVAILABLE,
            message=f"{name} no tiene horas lectivas disponibles ({used}/{allowed})",
            teacher_name=name,
            hours_used=used,
            hours_allowed=allowed,
        )

    return None


def apply_block_assignment(
    course_key: str,
    weekday: str,
    block_id: int,
    subject: Subject,
    teacher_id: int,
    teachers: list[Teacher],
    grid: ScheduleGrid,
    establishments: Optional[list[Establishment]] = None,
) -> Union[ScheduleGrid, AssignmentError]:
    """Horario nuevo con el bloque escrito, o el error. ``grid`` no se modifica."""
    error = validate_block_assignment(
        course_key, weekday, block_id, teacher_id, teachers, grid, establishments
    )
    if error is not None:
        return error

    teacher = next(t for t in teachers if t.id == teacher_id)
    new_grid = dict(grid)
    course = dict(new_grid.get(course_key, {}))
    course[SlotKey(weekday, block_id).format()] = BlockEntry(
        subject=subject, teacher_id=teacher_id, teacher_name=teacher.name
    )
    new_grid[course_key] = course
    return new_grid
