"""Auditoría del horario completo.

Revisa el horario ya guardado contra todas las reglas de asignación, como red
de seguridad independiente de ``assign_block`` (datos importados, reparados o
editados a mano pueden saltarse la validación).
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from hours.calculator import schedulable_hours, teaching_assignment_at, total_lectivas_hours
from models.grid import iter_entries
from models.keys import CourseKey, SlotKey
from models.teacher import UNSCHEDULED_TYPES
from scheduling.store import ScheduleStore


class ValidationViolation(BaseModel):
    """Una regla no cumplida."""

    severity: Literal["error", "warning"]
    constraint: str      # p.ej. "teacher_double_booking"
    description: str
    entity: str          # clave de curso o id de docente


class ValidationReport(BaseModel):
    """Resultado de la auditoría."""

    violations: list[ValidationViolation]
    is_valid: bool       # True si no hay errores (advertencias permitidas)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Muestra el reporte con Rich."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ HORARIO VÁLIDO[/bold green]"
            if self.is_valid
            else "[bold red]✗ SE ENCONTRARON PROBLEMAS[/bold red]"
        )
        lines = [status, f"Errores: {len(self.errors)} | Advertencias: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Auditoría del horario",
                            border_style="cyan"))

        if not self.violations:
            console.print("[dim]Sin observaciones.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Tipo", width=8)
        table.add_column("Regla", width=26)
        table.add_column("Entidad", width=18)
        table.add_column("Descripción")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(f"[{color}]{v.severity.upper()}[/{color}]",
                          v.constraint, v.entity, v.description)
        console.print(table)


class GridValidator:
    """Revisa el horario de un ScheduleStore."""

    def validate(self, store: ScheduleStore) -> ValidationReport:
        violations: list[ValidationViolation] = []
        violations.extend(self._check_keys(store))
        violations.extend(self._check_double_booking(store))
        violations.extend(self._check_entries(store))
        violations.extend(self._check_hours(store))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Revisiones ──

    def _check_keys(self, store: ScheduleStore) -> list[ValidationViolation]:
        """Claves legibles, establecimiento existente y bloque de clase."""
        violations: list[ValidationViolation] = []
        layouts: dict[int, set[int]] = {}
        for course_key, course in store.grid.items():
            try:
                est_id = CourseKey.parse(course_key).establishment_id
            except ValueError as e:
                violations.append(ValidationViolation(
                    severity="error", constraint="invalid_course_key",
                    entity=course_key, description=str(e)))
                continue
            if store.get_establishment(est_id) is None:
                violations.append(ValidationViolation(
                    severity="error", constraint="unknown_establishment",
                    entity=course_key,
                    description=f"Establecimiento {est_id} no existe"))
                continue
            if est_id not in layouts:
                layouts[est_id] = {b.id for b in store.get_block_layout(est_id) if b.is_class}
            for slot_key in course:
                try:
                    slot = SlotKey.parse(slot_key)
                except ValueError as e:
                    violations.append(ValidationViolation(
                        severity="error", constraint="invalid_slot_key",
                        entity=course_key, description=str(e)))
                    continue
                if slot.weekday not in store.config.day_names:
                    violations.append(ValidationViolation(
                        severity="warning", constraint="unknown_weekday",
                        entity=course_key, description=f"Día desconocido: {slot.weekday}"))
                if slot.block_id not in layouts[est_id]:
                    violations.append(ValidationViolation(
                        severity="warning", constraint="not_a_class_block",
                        entity=course_key,
                        description=f"{slot_key}: el bloque {slot.block_id} "
                                    f"no es de clase en la jornada"))
        return violations

    def _check_double_booking(self, store: ScheduleStore) -> list[ValidationViolation]:
        """Un docente no puede estar en dos cursos en la misma celda."""
        seen: dict[tuple[int, str], list[str]] = defaultdict(list)
        for course_key, slot_key, entry in iter_entries(store.grid):
            if entry.teacher_id:
                seen[(entry.teacher_id, slot_key)].append(course_key)

        violations: list[ValidationViolation] = []
        for (teacher_id, slot_key), courses in seen.items():
            if len(courses) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="teacher_double_booking",
                    entity=str(teacher_id),
                    description=f"{slot_key}: a la vez en {', '.join(sorted(courses))}",
                ))
        return violations

    def _check_entries(self, store: ScheduleStore) -> list[ValidationViolation]:
        """Docente existente, asignación válida, día no bloqueado, datos completos."""
        violations: list[ValidationViolation] = []
        for course_key, slot_key, entry in iter_entries(store.grid):
            where = f"{course_key} {slot_key}"
            if not entry.is_complete:
                violations.append(ValidationViolation(
                    severity="warning", constraint="incomplete_entry",
                    entity=course_key,
                    description=f"{slot_key}: bloque incompleto (ejecute 'repair')"))

            teacher = store.get_teacher(entry.teacher_id)
            if teacher is None:
                violations.append(ValidationViolation(
                    severity="error", constraint="unknown_teacher",
                    entity=course_key,
                    description=f"{slot_key}: docente {entry.teacher_id} no existe"))
                continue
            try:
                course = CourseKey.parse(course_key)
                slot = SlotKey.parse(slot_key)
            except ValueError:
                continue   # ya reportado en _check_keys

            assignment = teaching_assignment_at(teacher, course.establishment_id)
            if assignment is None:
                violations.append(ValidationViolation(
                    severity="error", constraint="no_assignment",
                    entity=str(teacher.id),
                    description=f"{where}: {teacher.name} sin asignación en el establecimiento"))
                continue
            if assignment.assignment_type in UNSCHEDULED_TYPES:
                violations.append(ValidationViolation(
                    severity="error", constraint="unscheduled_type",
                    entity=str(teacher.id),
                    description=f"{where}: horas {assignment.assignment_type.value} "
                                f"de {teacher.name} en el horario"))
            if assignment.is_blocked_on(slot.weekday):
                violations.append(ValidationViolation(
                    severity="error", constraint="blocked_day",
                    entity=str(teacher.id),
                    description=f"{where}: {teacher.name} no está disponible los {slot.weekday}"))
        return violations

    def _check_hours(self, store: ScheduleStore) -> list[ValidationViolation]:
        """Bloques ocupados ≤ horas lectivas asignables."""
        per_est: dict[tuple[int, int], int] = defaultdict(int)
        per_teacher: dict[int, int] = defaultdict(int)
        for course_key, _, entry in iter_entries(store.grid):
            try:
                est_id = CourseKey.parse(course_key).establishment_id
            except ValueError:
                continue
            per_est[(entry.teacher_id, est_id)] += 1
            per_teacher[entry.teacher_id] += 1

        violations: list[ValidationViolation] = []
        for (teacher_id, est_id), used in sorted(per_est.items()):
            teacher = store.get_teacher(teacher_id)
            assignment = teaching_assignment_at(teacher, est_id) if teacher else None
            if assignment is None:
                continue
            allowed = schedulable_hours(assignment)
            if used > allowed:
                violations.append(ValidationViolation(
                    severity="error", constraint="hours_exceeded",
                    entity=str(teacher_id),
                    description=f"{teacher.name} en {assignment.establishment_name}: "
                                f"{used} bloques, máximo {allowed}"))

        for teacher_id, used in sorted(per_teacher.items()):
            teacher = store.get_teacher(teacher_id)
            if teacher is None:
                continue
            total = total_lectivas_hours(teacher, store.exclude_directiva)
            if used > total:
                violations.append(ValidationViolation(
                    severity="warning", constraint="total_lectivas_exceeded",
                    entity=str(teacher_id),
                    description=f"{teacher.name}: {used} bloques en total, "
                                f"{total} horas lectivas"))
        return violations
