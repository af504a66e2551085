"""Horas docentes: tablas normativas y calculadora."""

from hours.calculator import (
    HoursTableError,
    InvariantViolation,
    OutOfRangeError,
    TeacherHoursSummary,
    build_assignment,
    detect_cycle,
    hours_available_for_grid,
    hours_used_in_grid,
    lectivas_from_table,
    no_lectivas_from,
    ratio_for,
    schedulable_hours,
    teacher_summary,
    teaching_assignment_at,
    total_contracted_hours,
    total_lectivas_hours,
    total_no_lectivas_hours,
)

__all__ = [
    "HoursTableError",
    "InvariantViolation",
    "OutOfRangeError",
    "TeacherHoursSummary",
    "build_assignment",
    "detect_cycle",
    "hours_available_for_grid",
    "hours_used_in_grid",
    "lectivas_from_table",
    "no_lectivas_from",
    "ratio_for",
    "schedulable_hours",
    "teacher_summary",
    "teaching_assignment_at",
    "total_contracted_hours",
    "total_lectivas_hours",
    "total_no_lectivas_hours",
]
