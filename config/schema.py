import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_to_minutes(value: str) -> int:
    """'08:45' → 525."""
    hours, _, minutes = value.partition(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(value: int) -> str:
    """525 → '08:45'."""
    return f"{value // 60:02d}:{value % 60:02d}"


# ─── JORNADA DIARIA (configurable) ───

class BreakSlot(BaseModel):
    """Recreo o colación después de un bloque de clase."""
    # Después de cuántos bloques de clase (1-basado)
    after_block: int = Field(ge=1)
    # Duración en minutos
    duration_minutes: int = Field(ge=5, le=120)


class BlockLayoutConfig(BaseModel):
    """Generador de la jornada diaria.

    Define:
    - Hora de inicio y término de la jornada
    - Duración de cada bloque de clase
    - Después de qué bloque de clase hay recreo / colación
    """
    # Inicio de la jornada "HH:MM"
    start_time: str = Field("08:00", description="Hora de inicio")
    # Término de la jornada "HH:MM"
    end_time: str = Field("16:45", description="Hora de término")
    # Minutos por bloque de clase
    block_minutes: int = Field(45, description="Duración de un bloque de clase")
    # Recreos después del bloque de clase N
    recesses: list[BreakSlot] = Field(
        default=[
            BreakSlot(after_block=2, duration_minutes=15),
            BreakSlot(after_block=4, duration_minutes=15),
            BreakSlot(after_block=8, duration_minutes=15),
        ],
        description="Recreos (después del bloque de clase N)")
    # Colación (almuerzo), opcional
    lunch: Optional[BreakSlot] = Field(
        default=BreakSlot(after_block=6, duration_minutes=30),
        description="Colación (después del bloque de clase N)")

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        if not _TIME_RE.match(v):
            raise ValueError(f"Hora inválida '{v}' (formato debe ser HH:MM)")
        return v

    @model_validator(mode="after")
    def _check_layout(self):
        """Jornada coherente y con al menos 6 bloques de clase."""
        start = time_to_minutes(self.start_time)
        end = time_to_minutes(self.end_time)
        if start >= end:
            raise ValueError("La hora de inicio debe ser menor que la hora de término")
        if not 30 <= self.block_minutes <= 90:
            raise ValueError("La duración del bloque debe estar entre 30 y 90 minutos")
        if end - start > 12 * 60:
            raise ValueError("La jornada no puede exceder 12 horas")

        from scheduling.block_layout import generate_blocks
        num_class = sum(1 for b in generate_blocks(self) if b.is_class)
        if num_class < 6:
            raise ValueError(
                f"Debe haber al menos 6 bloques de clase (la jornada genera {num_class})")
        return self


# ─── HORAS (Ley 20.903) ───

class HoursConfig(BaseModel):
    """Límites legales y reglas de agregación de horas."""
    # Mínimo legal de horas de contrato por asignación
    min_contract_hours: int = Field(1, ge=1)
    # Máximo legal de horas semanales por docente
    max_contract_hours: int = Field(44, ge=1, le=44)
    # Directiva fuera de los totales (lectivas / no lectivas / tope de 44h).
    # PIE siempre queda fuera. False = solo PIE se excluye (revisión anterior).
    exclude_directiva_from_totals: bool = Field(True,
        description="Excluir horas Directiva de los totales del docente")
    # Máximo de subvenciones por asignación
    max_subsidies: int = Field(3, ge=0, le=3)


# ─── AUTO-GENERACIÓN ───

class AutoGenConfig(BaseModel):
    """Generación automática (greedy) del horario de un curso."""
    # Semilla para la elección aleatoria de asignatura (None = no determinista)
    seed: Optional[int] = Field(None,
        description="Semilla para elegir asignaturas")
    # Tope externo de candidatos por bloque (0 = sin tope)
    max_candidates: int = Field(0, ge=0,
        description="Máx. docentes candidatos considerados (0 = todos)")


# ─── PERSISTENCIA ───

class StorageConfig(BaseModel):
    """Ubicación del documento de estado."""
    state_path: str = Field("output/sistema-horario-storage.json",
        description="Archivo JSON con el estado completo")


# ─── CONFIG GLOBAL ───

class AppConfig(BaseModel):
    """Configuración global del sistema."""
    # Nombre que aparece en reportes
    system_name: str = Field("Sistema de Horarios Docentes")
    # Días hábiles, en el orden en que se recorren
    day_names: list[str] = Field(
        default=["Lunes", "Martes", "Miércoles", "Jueves", "Viernes"],
        min_length=1,
        description="Días de la semana")
    # Generador de la jornada por defecto (None = jornada estándar fija)
    block_layout: Optional[BlockLayoutConfig] = None
    hours: HoursConfig = Field(default_factory=HoursConfig)
    autogen: AutoGenConfig = Field(default_factory=AutoGenConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
