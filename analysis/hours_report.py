"""Reporte de horas: detalle por docente, totales por tipo y por establecimiento."""

from collections import defaultdict
from typing import Optional

from pydantic import BaseModel

from hours.calculator import TeacherHoursSummary, teacher_summary
from models.keys import establishment_id_of
from models.teacher import AssignmentType
from scheduling.store import ScheduleStore


class TypeTotals(BaseModel):
    """Horas de contrato por tipo de asignación."""

    assignment_type: AssignmentType
    assignments: int = 0
    contract_hours: int = 0
    lectivas: int = 0


class EstablishmentStats(BaseModel):
    establishment_id: int
    name: str
    staff: int            # docentes con asignación
    contract_hours: int
    scheduled_blocks: int


class HoursReport(BaseModel):
    teachers: list[TeacherHoursSummary]
    by_type: list[TypeTotals]
    establishments: list[EstablishmentStats]
    exclude_directiva: bool = True

    @property
    def total_used(self) -> int:
        return sum(t.used_in_grid for t in self.teachers)

    @property
    def total_lectivas(self) -> int:
        return sum(t.lectivas for t in self.teachers)

    def teacher(self, teacher_id: int) -> Optional[TeacherHoursSummary]:
        return next((t for t in self.teachers if t.teacher_id == teacher_id), None)

    def print_rich(self, show_establishments: bool = False) -> None:
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        rule = "PIE y Directiva" if self.exclude_directiva else "solo PIE"
        console.print(Panel(
            f"Docentes: {len(self.teachers)} | "
            f"Bloques ocupados: {self.total_used}/{self.total_lectivas} lectivas\n"
            f"[dim]Fuera de los totales: {rule}[/dim]",
            title="Horas docentes", border_style="cyan",
        ))

        table = Table(box=box.SIMPLE_HEAVY)
        table.add_column("ID", justify="right")
        table.add_column("Docente", style="bold")
        table.add_column("RUT")
        table.add_column("Contrato", justify="right")
        table.add_column("Lectivas", justify="right")
        table.add_column("No lect.", justify="right")
        table.add_column("PIE", justify="right")
        table.add_column("Directiva", justify="right")
        table.add_column("En horario", justify="right")
        table.add_column("Uso", justify="right")
        for t in self.teachers:
            pct = t.usage_percent
            color = "red" if pct >= 100 else ("yellow" if pct >= 80 else "green")
            table.add_row(
                str(t.teacher_id), t.name, t.rut,
                f"{t.contract_hours}h", f"{t.lectivas}h", f"{t.no_lectivas}h",
                f"{t.pie_hours}h" if t.pie_hours else "–",
                f"{t.directiva_hours}h" if t.directiva_hours else "–",
                str(t.used_in_grid),
                f"[{color}]{pct:.0f}%[/{color}]",
            )
        console.print(table)

        types = Table(title="Por tipo de asignación", box=box.ROUNDED)
        types.add_column("Tipo", style="bold")
        types.add_column("Asignaciones", justify="right")
        types.add_column("Horas contrato", justify="right")
        types.add_column("Lectivas", justify="right")
        for row in self.by_type:
            types.add_row(row.assignment_type.value, str(row.assignments),
                          str(row.contract_hours), str(row.lectivas))
        console.print(types)

        if show_establishments:
            ests = Table(title="Por establecimiento", box=box.ROUNDED)
            ests.add_column("ID", justify="right")
            ests.add_column("Establecimiento", style="bold")
            ests.add_column("Dotación", justify="right")
            ests.add_column("Horas", justify="right")
            ests.add_column("Bloques", justify="right")
            for e in self.establishments:
                ests.add_row(str(e.establishment_id), e.name, str(e.staff),
                             str(e.contract_hours), str(e.scheduled_blocks))
            console.print(ests)


def build_hours_report(store: ScheduleStore) -> HoursReport:
    """Reporte a partir del estado actual del store."""
    exclude = store.exclude_directiva
    summaries = [
        teacher_summary(t, store.grid, exclude)
        for t in sorted(store.teachers, key=lambda t: t.id)
    ]

    by_type = {kind: TypeTotals(assignment_type=kind) for kind in AssignmentType}
    for t in store.teachers:
        for a in t.assignments:
            row = by_type[a.assignment_type]
            row.assignments += 1
            row.contract_hours += a.contract_hours
            row.lectivas += a.lectivas

    blocks_per_est: dict[int, int] = defaultdict(int)
    for course_key, course in store.grid.items():
        est_id = establishment_id_of(course_key)
        if est_id is not None:
            blocks_per_est[est_id] += len(course)

    establishments = []
    for est in store.establishments:
        staff = [t for t in store.teachers if t.works_at(est.id)]
        establishments.append(EstablishmentStats(
            establishment_id=est.id,
            name=est.name,
            staff=len(staff),
            contract_hours=sum(t.assignment_at(est.id).contract_hours for t in staff),
            scheduled_blocks=blocks_per_est.get(est.id, 0),
        ))

    return HoursReport(
        teachers=summaries,
        by_type=[row for row in by_type.values() if row.assignments],
        establishments=establishments,
        exclude_directiva=exclude,
    )
