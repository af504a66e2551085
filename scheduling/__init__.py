"""Motor de horario: conflictos, validación, store y generación automática."""

from scheduling.auto_generator import AutoGenerator, GenerationResult, Placement
from scheduling.store import CommitReport, RepairReport, ScheduleStore, TeacherValidationError
from scheduling.validation import AssignmentError, AssignmentErrorCode, AssignmentResult

__all__ = [
    "AutoGenerator",
    "GenerationResult",
    "Placement",
    "CommitReport",
    "RepairReport",
    "ScheduleStore",
    "TeacherValidationError",
    "AssignmentError",
    "AssignmentErrorCode",
    "AssignmentResult",
]
