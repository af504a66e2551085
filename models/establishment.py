"""Modelo de datos para un establecimiento (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator

from config.schema import BlockLayoutConfig
from models.subject import Subject


def level_name(level: int) -> str:
    """Nivel 1..12 → '5°' (Básico hasta 8, Medio desde 9)."""
    return f"{level}°" if level <= 8 else f"{level - 8}°"


class CombinedCourse(BaseModel):
    """Curso combinado (multigrado), p.ej. "1°-2° Básico A"."""

    name: str
    levels: list[int]
    section: str

    @classmethod
    def build(cls, levels: list[int], section: str) -> "CombinedCourse":
        ordered = sorted(set(levels))
        if not ordered:
            raise ValueError("Un curso combinado necesita al menos un nivel.")
        if all(n <= 8 for n in ordered):
            suffix = "Básico"
        elif all(n > 8 for n in ordered):
            suffix = "Medio"
        else:
            suffix = "Mixto"
        labels = "-".join(level_name(n) for n in ordered)
        return cls(name=f"{labels} {suffix} {section}", levels=ordered, section=section)


class EstablishmentSchedule(BaseModel):
    """Jornada personalizada del establecimiento."""

    layout: BlockLayoutConfig
    use_custom: bool = True


class Establishment(BaseModel):
    """Escuela o liceo."""

    id: int
    name: str
    levels: str = "1-8"                 # "1-8" Básica, "7-12" hasta 4° Medio
    prioritized: bool = False           # 80%+ alumnos prioritarios
    sections: list[str] = ["A"]
    subjects: Optional[list[Subject]] = None    # None → asignaturas base
    schedule_config: Optional[EstablishmentSchedule] = None
    combined_courses: list[CombinedCourse] = []

    @field_validator("levels")
    @classmethod
    def _check_levels(cls, v: str) -> str:
        low, sep, high = v.partition("-")
        if not sep or not low.strip().isdigit() or not high.strip().isdigit():
            raise ValueError(f"Rango de niveles inválido: '{v}' (formato '1-8')")
        if int(low) < 1 or int(high) > 12 or int(low) > int(high):
            raise ValueError(f"Rango de niveles fuera de 1..12: '{v}'")
        return f"{int(low)}-{int(high)}"

    @property
    def level_range(self) -> tuple[int, int]:
        low, _, high = self.levels.partition("-")
        return int(low), int(high)

    def course_labels(self) -> list[str]:
        """Cursos del establecimiento: "N° Básico S" / "N° Medio S" + combinados."""
        low, high = self.level_range
        labels = []
        for level in range(low, high + 1):
            suffix = "Básico" if level <= 8 else "Medio"
            for section in self.sections or ["A"]:
                labels.append(f"{level_name(level)} {suffix} {section}")
        labels.extend(c.name for c in self.combined_courses)
        return labels

    def subjects_or_default(self) -> list[Subject]:
        from config.defaults import BASE_SUBJECTS
        return list(self.subjects) if self.subjects else list(BASE_SUBJECTS)
