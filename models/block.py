"""Modelo de datos para un bloque del horario diario (Pydantic v2)."""

from enum import Enum

from pydantic import BaseModel


class BlockKind(str, Enum):
    CLASE = "clase"
    RECREO = "recreo"
    COLACION = "colacion"


class BlockConfig(BaseModel):
    """Un bloque de la jornada diaria (clase, recreo o colación).

    Solo los bloques de tipo ``clase`` participan en la asignación de docentes.
    """

    id: int
    start_time: str         # "08:00"
    end_time: str           # "08:45"
    kind: BlockKind
    duration_minutes: int

    @property
    def is_class(self) -> bool:
        return self.kind == BlockKind.CLASE

    def __str__(self) -> str:
        return f"Bloque {self.id} ({self.start_time}-{self.end_time})"
