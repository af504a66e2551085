"""Cálculo de horas docentes (Ley 20.903).

Única fuente de verdad para:
- la proporción legal (60/40 vs. 65/35) de una asignación,
- la división de las horas de contrato en lectivas / no lectivas,
- las horas que un docente puede ocupar en el horario semanal,
- los totales por docente (con las exclusiones PIE / Directiva).

Todas las funciones son puras: no leen ni escriben estado.
"""

import re
from typing import Iterable, Optional

from pydantic import BaseModel

from hours.tables import MAX_HOURS, MIN_HOURS, TABLE_60_40, TABLE_65_35
from models.establishment import Establishment
from models.grid import ScheduleGrid, iter_entries
from models.keys import CourseKey
from models.teacher import (
    Assignment,
    AssignmentType,
    Ratio,
    Subsidy,
    Teacher,
    TeachingCycle,
    UNSCHEDULED_TYPES,
)


class HoursTableError(ValueError):
    """Error de datos al consultar la tabla normativa."""


class OutOfRangeError(HoursTableError):
    """Horas de contrato fuera de 1..44 o sin fila en la tabla."""


class InvariantViolation(HoursTableError):
    """Una regla de horas no se cumple (p.ej. lectivas > contrato, tope de 44h)."""


_TABLES: dict[Ratio, dict[int, tuple[int, int]]] = {
    Ratio.R60_40: TABLE_60_40,
    Ratio.R65_35: TABLE_65_35,
}


# ─── PROPORCIÓN Y TABLA ───

def ratio_for(cycle: TeachingCycle, prioritized: bool) -> Ratio:
    """60/40 solo para Primer Ciclo en establecimiento prioritario; si no, 65/35."""
    if cycle == TeachingCycle.PRIMER_CICLO and prioritized:
        return Ratio.R60_40
    return Ratio.R65_35


def lectivas_from_table(contract_hours: int, ratio: Ratio) -> int:
    if isinstance(contract_hours, bool) or not isinstance(contract_hours, int):
        raise OutOfRangeError(f"Horas de contrato no enteras: {contract_hours!r}")
    if not MIN_HOURS <= contract_hours <= MAX_HOURS:
        raise OutOfRangeError(
            f"Horas de contrato fuera de rango: {contract_hours} "
            f"(permitido {MIN_HOURS}-{MAX_HOURS})"
        )
    row = _TABLES[Ratio(ratio)].get(contract_hours)
    if row is None:
        raise OutOfRangeError(f"Sin fila en la tabla {ratio} para {contract_hours}h")
    return row[0]


def no_lectivas_from(contract_hours: int, lectivas: int) -> int:
    result = contract_hours - lectivas
    if result < 0:
        raise InvariantViolation(
            f"Lectivas ({lectivas}) mayores que las horas de contrato ({contract_hours})"
        )
    return result


def build_assignment(
    establishment: Establishment,
    contract_hours: int,
    cycle: TeachingCycle = TeachingCycle.SEGUNDO_CICLO,
    assignment_type: AssignmentType = AssignmentType.NORMAL,
    role: str = "DOCENTE DE AULA",
    tenure: str = "Titular",
    blocked_days: Optional[Iterable[str]] = None,
    subsidies: Optional[Iterable[Subsidy]] = None,
) -> Assignment:
    """Crea una asignación con proporción, lectivas y no lectivas derivadas.

    Es la única forma de obtener esos tres valores: quien necesite recalcularlos
    (p.ej. al cambiar ``prioritized`` del establecimiento) vuelve a llamar aquí.
    """
    ratio = ratio_for(cycle, establishment.prioritized)
    lectivas = lectivas_from_table(contract_hours, ratio)
    return Assignment(
        establishment_id=establishment.id,
        establishment_name=establishment.name,
        role=role,
        tenure=tenure,
        contract_hours=contract_hours,
        assignment_type=assignment_type,
        cycle=cycle,
        ratio=ratio,
        lectivas=lectivas,
        no_lectivas=no_lectivas_from(contract_hours, lectivas),
        blocked_days=list(blocked_days or []),
        subsidies=list(subsidies or []),
    )


def rederive(assignment: Assignment, establishment: Establishment) -> Assignment:
    """Recalcula proporción y lectivas con el estado actual del establecimiento."""
    return build_assignment(
        establishment,
        assignment.contract_hours,
        cycle=assignment.cycle,
        assignment_type=assignment.assignment_type,
        role=assignment.role,
        tenure=assignment.tenure,
        blocked_days=assignment.blocked_days,
        subsidies=assignment.subsidies,
    )


# ─── HORAS DE HORARIO ───

def schedulable_hours(assignment: Assignment) -> int:
    """Bloques que la asignación puede ocupar: 0 para Directiva y PIE."""
    if assignment.assignment_type in UNSCHEDULED_TYPES:
        return 0
    return assignment.lectivas


def teaching_assignment_at(teacher: Teacher, establishment_id: int) -> Optional[Assignment]:
    """Asignación del docente que cuenta para el horario de ese establecimiento.

    Con varias asignaciones en la misma escuela (p.ej. Normal + Directiva)
    gana la primera que puede ocupar bloques; si ninguna puede, la primera.
    """
    at_school = [a for a in teacher.assignments if a.establishment_id == establishment_id]
    for a in at_school:
        if schedulable_hours(a) > 0:
            return a
    return at_school[0] if at_school else None


def hours_used_in_grid(teacher_id: int, grid: ScheduleGrid) -> int:
    """Bloques del horario (todos los cursos) ocupados por el docente."""
    return sum(1 for _, _, entry in iter_entries(grid) if entry.teacher_id == teacher_id)


def hours_used_in_grid_for_cycle(
    teacher_id: int, grid: ScheduleGrid, cycle: TeachingCycle
) -> int:
    """Como ``hours_used_in_grid``, pero solo en cursos del ciclo indicado."""
    used = 0
    for course_key, _, entry in iter_entries(grid):
        if entry.teacher_id != teacher_id:
            continue
        try:
            label = CourseKey.parse(course_key).course_label
        except ValueError:
            label = course_key
        if detect_cycle(label) == cycle:
            used += 1
    return used


# ─── TOTALES POR DOCENTE ───

def counted_assignments(teacher: Teacher, exclude_directiva: bool = True) -> list[Assignment]:
    """Asignaciones que cuentan para los totales y el tope de 44h.

    PIE nunca cuenta (horas adicionales). Directiva se excluye salvo que
    ``exclude_directiva`` sea False.
    """
    excluded = {AssignmentType.PIE}
    if exclude_directiva:
        excluded.add(AssignmentType.DIRECTIVA)
    return [a for a in teacher.assignments if a.assignment_type not in excluded]


def total_contracted_hours(teacher: Teacher, exclude_directiva: bool = True) -> int:
    return sum(a.contract_hours for a in counted_assignments(teacher, exclude_directiva))


def total_lectivas_hours(teacher: Teacher, exclude_directiva: bool = True) -> int:
    return sum(a.lectivas for a in counted_assignments(teacher, exclude_directiva))


def total_no_lectivas_hours(teacher: Teacher, exclude_directiva: bool = True) -> int:
    return sum(a.no_lectivas for a in counted_assignments(teacher, exclude_directiva))


def total_pie_hours(teacher: Teacher) -> int:
    return sum(a.contract_hours for a in teacher.assignments
               if a.assignment_type == AssignmentType.PIE)


def total_directiva_hours(teacher: Teacher) -> int:
    return sum(a.contract_hours for a in teacher.assignments
               if a.assignment_type == AssignmentType.DIRECTIVA)


def hours_available_for_grid(
    teacher: Teacher, grid: ScheduleGrid, exclude_directiva: bool = True
) -> int:
    """Lectivas totales menos bloques ya ocupados (nunca negativo)."""
    total = total_lectivas_hours(teacher, exclude_directiva)
    return max(0, total - hours_used_in_grid(teacher.id, grid))


def check_contract_ceiling(
    teacher: Teacher, max_hours: int = MAX_HOURS, exclude_directiva: bool = True
) -> None:
    """Lanza InvariantViolation si el docente supera el tope semanal."""
    total = total_contracted_hours(teacher, exclude_directiva)
    if total > max_hours:
        raise InvariantViolation(
            f"{teacher.name}: {total}h de contrato superan el máximo de {max_hours}h"
        )


# ─── CICLO ───

_LEVEL_RE = re.compile(r"(\d+)°")


def detect_cycle(course_label: str) -> TeachingCycle:
    """Ciclo de enseñanza de un curso a partir de su nombre.

    "3° Básico A" → Primer Ciclo; "7° Básico A" y todo Medio → Segundo Ciclo.
    En cursos combinados manda el nivel más alto ("4°-5° Básico A" → Segundo).
    """
    if "Medio" in course_label:
        return TeachingCycle.SEGUNDO_CICLO
    levels = [int(n) for n in _LEVEL_RE.findall(course_label)]
    if not levels:
        return TeachingCycle.SEGUNDO_CICLO
    if max(levels) <= 4:
        return TeachingCycle.PRIMER_CICLO
    return TeachingCycle.SEGUNDO_CICLO


# ─── RESUMEN ───

class AssignmentHours(BaseModel):
    establishment_id: int
    establishment_name: str
    assignment_type: AssignmentType
    ratio: Ratio
    contract_hours: int
    lectivas: int
    no_lectivas: int
    schedulable: int


class TeacherHoursSummary(BaseModel):
    """Horas de un docente, tal como se muestran en el panel y en el detalle."""

    teacher_id: int
    name: str
    rut: str
    contract_hours: int
    lectivas: int
    no_lectivas: int
    pie_hours: int
    directiva_hours: int
    used_in_grid: int = 0
    available_for_grid: int = 0
    assignments: list[AssignmentHours] = []

    @property
    def usage_percent(self) -> float:
        """Porcentaje de lectivas ya ocupadas en el horario."""
        if self.lectivas == 0:
            return 0.0
        return 100.0 * self.used_in_grid / self.lectivas


def teacher_summary(
    teacher: Teacher,
    grid: Optional[ScheduleGrid] = None,
    exclude_directiva: bool = True,
) -> TeacherHoursSummary:
    grid = grid or {}
    return TeacherHoursSummary(
        teacher_id=teacher.id,
        name=teacher.name,
        rut=teacher.rut,
        contract_hours=total_contracted_hours(teacher, exclude_directiva),
        lectivas=total_lectivas_hours(teacher, exclude_directiva),
        no_lectivas=total_no_lectivas_hours(teacher, exclude_directiva),
        pie_hours=total_pie_hours(teacher),
        directiva_hours=total_directiva_hours(teacher),
        used_in_grid=hours_used_in_grid(teacher.id, grid),
        available_for_grid=hours_available_for_grid(teacher, grid, exclude_directiva),
        assignments=[
            AssignmentHours(
                establishment_id=a.establishment_id,
                establishment_name=a.establishment_name,
                assignment_type=a.assignment_type,
                ratio=a.ratio,
                contract_hours=a.contract_hours,
                lectivas=a.lectivas,
                no_lectivas=a.no_lectivas,
                schedulable=schedulable_hours(a),
            )
            for a in teacher.assignments
        ],
    )
