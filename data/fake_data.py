"""Generador de datos de demostración.

Crea docentes con asignaciones realistas sobre los establecimientos iniciales:
- RUT válidos (dígito verificador correcto), sin repetir
- 1 o 2 asignaciones por docente, nunca más de 44h contadas
- algunos docentes PIE y Directiva (horas fuera del horario)
- algunos días bloqueados en docentes que trabajan en dos escuelas
"""

import random
from typing import Optional

from config.defaults import WEEKDAYS, initial_establishments
from config.schema import AppConfig
from hours.calculator import build_assignment
from models.app_state import AppState
from models.establishment import Establishment
from models.teacher import AssignmentType, Teacher, TeachingCycle, format_rut, rut_check_digit

# ─── Listas de nombres ───

_FIRST_NAMES = [
    "MARÍA", "JOSÉ", "CAROLINA", "JUAN", "PATRICIA", "LUIS", "CLAUDIA",
    "PEDRO", "ANDREA", "JORGE", "CAMILA", "FRANCISCO", "VALENTINA", "MANUEL",
    "XIMENA", "RODRIGO", "PAULINA", "SEBASTIÁN", "LORENA", "CRISTIÁN",
]

_LAST_NAMES = [
    "GONZÁLEZ", "MUÑOZ", "ROJAS", "DÍAZ", "PÉREZ", "SOTO", "CONTRERAS",
    "SILVA", "MARTÍNEZ", "SEPÚLVEDA", "MORALES", "RODRÍGUEZ", "LÓPEZ",
    "FUENTES", "HERNÁNDEZ", "TORRES", "ARAYA", "FLORES", "ESPINOZA",
    "VALENZUELA", "CASTILLO", "HUENCHUMILLA", "PAINEMAL", "ÑANCUPIL",
]

_ROLES: list[tuple[str, AssignmentType, int]] = [
    ("DOCENTE DE AULA", AssignmentType.NORMAL, 14),
    ("DOCENTE SEP", AssignmentType.SEP, 3),
    ("DOCENTE EIB", AssignmentType.EIB, 2),
    ("EDUCADORA DIFERENCIAL PIE", AssignmentType.PIE, 2),
    ("JEFE UTP", AssignmentType.DIRECTIVA, 1),
]

_HOURS_CHOICES = [30, 32, 36, 38, 40, 44]


class FakeDataGenerator:
    """Datos de prueba reproducibles (``seed``)."""

    def __init__(self, config: Optional[AppConfig] = None, seed: Optional[int] = None) -> None:
        self.config = config or AppConfig()
        self.rng = random.Random(seed)
        self._used_ruts: set[str] = set()

    def _make_rut(self) -> str:
        while True:
            body = str(self.rng.randint(6_000_000, 24_999_999))
            rut = format_rut(body + rut_check_digit(body))
            if rut not in self._used_ruts:
                self._used_ruts.add(rut)
                return rut

    def _make_name(self) -> str:
        first = self.rng.choice(_FIRST_NAMES)
        return f"{first} {self.rng.choice(_LAST_NAMES)} {self.rng.choice(_LAST_NAMES)}"

    def _pick_role(self) -> tuple[str, AssignmentType]:
        roles = [(r, t) for r, t, _ in _ROLES]
        weights = [w for _, _, w in _ROLES]
        return self.rng.choices(roles, weights=weights)[0]

    def _cycle_for(self, establishment: Establishment) -> TeachingCycle:
        low, _ = establishment.level_range
        if low <= 4 and self.rng.random() < 0.5:
            return TeachingCycle.PRIMER_CICLO
        return TeachingCycle.SEGUNDO_CICLO

    def _make_teacher(self, teacher_id: int,
                      establishments: list[Establishment]) -> Teacher:
        main = self.rng.choice(establishments)
        role, kind = self._pick_role()
        hours = self.rng.choice(_HOURS_CHOICES)
        assignments = [build_assignment(
            main, hours, cycle=self._cycle_for(main), assignment_type=kind,
            role=role, tenure=self.rng.choice(["Titular", "Contrata"]),
        )]

        # ~25%: segunda escuela con las horas que sobran y días repartidos
        remaining = self.config.hours.max_contract_hours - hours
        others = [e for e in establishments if e.id != main.id]
        if kind == AssignmentType.NORMAL and remaining >= 4 and others \
                and self.rng.random() < 0.25:
            second = self.rng.choice(others)
            days = list(WEEKDAYS)
            self.rng.shuffle(days)
            split = self.rng.randint(1, 2)
            assignments[0] = assignments[0].model_copy(
                update={"blocked_days": sorted(days[:split], key=WEEKDAYS.index)})
            assignments.append(build_assignment(
                second, self.rng.randint(4, remaining),
                cycle=self._cycle_for(second), role="DOCENTE DE AULA",
                tenure="Contrata",
                blocked_days=sorted(days[split:], key=WEEKDAYS.index),
            ))

        return Teacher(id=teacher_id, rut=self._make_rut(),
                       name=self._make_name(), assignments=assignments)

    def generate(self, num_teachers: int = 40,
                 establishments: Optional[list[Establishment]] = None) -> AppState:
        """Estado completo con establecimientos, docentes y horario vacío."""
        establishments = establishments or initial_establishments()
        teachers = [self._make_teacher(i, establishments)
                    for i in range(1, num_teachers + 1)]
        return AppState(teachers=teachers, establishments=establishments)

    # ─── Salida ───

    def print_summary(self, state: AppState) -> None:
        """Tabla Rich con el resumen de los datos generados."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        counts: dict[str, int] = {}
        for t in state.teachers:
            for a in t.assignments:
                counts[a.assignment_type.value] = counts.get(a.assignment_type.value, 0) + 1

        table = Table(title="Datos de demostración", box=box.ROUNDED)
        table.add_column("Elemento", style="bold")
        table.add_column("Cantidad", justify="right")
        table.add_row("Establecimientos", str(len(state.establishments)))
        table.add_row("Docentes", str(len(state.teachers)))
        for kind, n in sorted(counts.items()):
            table.add_row(f"  Asignaciones {kind}", str(n))
        Console().print(table)
