from models.subject import Subject
from models.block import BlockConfig, BlockKind
from models.keys import CourseKey, SlotKey
from models.teacher import (
    Assignment,
    AssignmentType,
    Ratio,
    Subsidy,
    Teacher,
    TeachingCycle,
)
from models.establishment import CombinedCourse, Establishment, EstablishmentSchedule
from models.grid import BlockEntry, ScheduleGrid
from models.app_state import AppState

__all__ = [
    "Subject",
    "BlockConfig",
    "BlockKind",
    "CourseKey",
    "SlotKey",
    "Assignment",
    "AssignmentType",
    "Ratio",
    "Subsidy",
    "Teacher",
    "TeachingCycle",
    "CombinedCourse",
    "Establishment",
    "EstablishmentSchedule",
    "BlockEntry",
    "ScheduleGrid",
    "AppState",
]
