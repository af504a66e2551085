"""Modelo de datos para docentes y sus asignaciones (Pydantic v2)."""

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class AssignmentType(str, Enum):
    NORMAL = "Normal"
    SEP = "SEP"
    EIB = "EIB"
    DIRECTIVA = "Directiva"
    PIE = "PIE"


class TeachingCycle(str, Enum):
    PRIMER_CICLO = "Primer Ciclo"      # 1° a 4° Básico
    SEGUNDO_CICLO = "Segundo Ciclo"    # todo lo demás


class Ratio(str, Enum):
    R60_40 = "60/40"
    R65_35 = "65/35"


class Subsidy(str, Enum):
    PIE = "PIE"   # Programa de Integración Escolar
    SEP = "SEP"   # Subvención Escolar Preferencial
    SN = "SN"     # Subvención Normal


# Tipos cuyas horas nunca ocupan bloques del horario semanal
UNSCHEDULED_TYPES = frozenset({AssignmentType.DIRECTIVA, AssignmentType.PIE})


# ─── RUT ───

def clean_rut(rut: str) -> str:
    """Deja solo dígitos y K: '12.345.678-5' → '123456785'."""
    return re.sub(r"[^0-9kK]", "", rut).upper()


def rut_check_digit(body: str) -> str:
    """Dígito verificador (módulo 11, multiplicadores 2..7 de derecha a izquierda)."""
    total = 0
    factor = 2
    for digit in reversed(body):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1
    expected = 11 - (total % 11)
    if expected == 11:
        return "0"
    if expected == 10:
        return "K"
    return str(expected)


def validate_rut(rut: str) -> bool:
    """True si el RUT (con o sin puntos/guion) tiene un dígito verificador correcto."""
    cleaned = rut.replace(".", "").replace("-", "").strip().upper()
    if len(cleaned) < 2:
        return False
    body, dv = cleaned[:-1], cleaned[-1]
    if not body.isdigit():
        return False
    return rut_check_digit(body) == dv


def format_rut(rut: str) -> str:
    """Formato estándar XX.XXX.XXX-X."""
    cleaned = rut.replace(".", "").replace("-", "").strip().upper()
    if len(cleaned) < 2:
        return rut
    body, dv = cleaned[:-1], cleaned[-1]
    if not body.isdigit():
        return rut
    return f"{int(body):,}".replace(",", ".") + f"-{dv}"


# ─── ASIGNACIÓN ───

class Assignment(BaseModel):
    """Contrato de un docente en un establecimiento.

    ``lectivas`` y ``no_lectivas`` son derivados de la tabla normativa
    (ver ``hours.calculator.build_assignment``) y siempre suman ``contract_hours``.
    """

    establishment_id: int
    establishment_name: str
    role: str = "DOCENTE DE AULA"           # cargo / función
    tenure: str = "Titular"                 # Titular / Contrata
    contract_hours: int = Field(ge=1, le=44)
    assignment_type: AssignmentType = AssignmentType.NORMAL
    cycle: TeachingCycle = TeachingCycle.SEGUNDO_CICLO
    ratio: Ratio = Ratio.R65_35
    lectivas: int = Field(ge=0)
    no_lectivas: int = Field(ge=0)
    blocked_days: list[str] = []            # días en que trabaja en otra escuela
    subsidies: list[Subsidy] = Field(default=[], max_length=3)

    @field_validator("blocked_days")
    @classmethod
    def _normalize_days(cls, v: list[str]) -> list[str]:
        result: list[str] = []
        for day in v:
            day = day.strip()
            if day and day not in result:
                result.append(day)
        return result

    @field_validator("subsidies")
    @classmethod
    def _unique_subsidies(cls, v: list[Subsidy]) -> list[Subsidy]:
        if len(set(v)) != len(v):
            raise ValueError("Subvenciones repetidas en la asignación.")
        return v

    @model_validator(mode="after")
    def _check_hours_split(self):
        if self.lectivas + self.no_lectivas != self.contract_hours:
            raise ValueError(
                f"Lectivas ({self.lectivas}) + no lectivas ({self.no_lectivas}) "
                f"≠ horas de contrato ({self.contract_hours})"
            )
        return self

    def is_blocked_on(self, weekday: str) -> bool:
        return weekday in self.blocked_days


# ─── DOCENTE ───

class Teacher(BaseModel):
    """Docente con una o más asignaciones (posiblemente en varios establecimientos)."""

    id: int
    rut: str                    # "12.345.678-5"
    name: str                   # "MARÍA GONZÁLEZ PÉREZ"
    assignments: list[Assignment] = []

    @field_validator("rut")
    @classmethod
    def _check_rut(cls, v: str) -> str:
        if not validate_rut(v):
            raise ValueError(f"RUT inválido: '{v}'")
        return format_rut(v)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El nombre es obligatorio.")
        return v

    def assignment_at(self, establishment_id: int) -> Assignment | None:
        """Primera asignación del docente en el establecimiento, o None."""
        for a in self.assignments:
            if a.establishment_id == establishment_id:
                return a
        return None

    def works_at(self, establishment_id: int) -> bool:
        return self.assignment_at(establishment_id) is not None
