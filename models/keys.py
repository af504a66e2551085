"""Claves compuestas del horario: curso y celda (día + bloque).

Formato de texto (se persiste tal cual como clave del JSON):
  CourseKey → "<establecimientoId>-<curso>"   p.ej. "3-5° Básico A"
  SlotKey   → "<Día>-<bloqueId>"              p.ej. "Lunes-4"

Inmutables (frozen=True) para usarlas como clave de dict / elemento de set.
"""

from dataclasses import dataclass

KEY_SEPARATOR = "-"


@dataclass(frozen=True)
class CourseKey:
    """Curso de un establecimiento.

    El id del establecimiento es el texto ANTES del primer guion: el nombre
    del curso puede contener más guiones ("1°-2° Básico A", multigrado).
    """

    establishment_id: int
    course_label: str

    @classmethod
    def parse(cls, raw: str) -> "CourseKey":
        est_raw, sep, label = raw.partition(KEY_SEPARATOR)
        if not sep or not label:
            raise ValueError(f"Clave de curso inválida: '{raw}'")
        try:
            est_id = int(est_raw)
        except ValueError:
            raise ValueError(
                f"Clave de curso inválida: '{raw}' (id de establecimiento no numérico)"
            ) from None
        return cls(establishment_id=est_id, course_label=label)

    def format(self) -> str:
        return f"{self.establishment_id}{KEY_SEPARATOR}{self.course_label}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class SlotKey:
    """Celda semanal: día + id de bloque."""

    weekday: str    # "Lunes".."Viernes"
    block_id: int

    @classmethod
    def parse(cls, raw: str) -> "SlotKey":
        day, sep, block_raw = raw.rpartition(KEY_SEPARATOR)
        if not sep or not day:
            raise ValueError(f"Clave de bloque inválida: '{raw}'")
        try:
            return cls(weekday=day, block_id=int(block_raw))
        except ValueError:
            raise ValueError(
                f"Clave de bloque inválida: '{raw}' (bloque no numérico)"
            ) from None

    def format(self) -> str:
        return f"{self.weekday}{KEY_SEPARATOR}{self.block_id}"

    def __str__(self) -> str:
        return self.format()


def establishment_id_of(course_key: str) -> int | None:
    """Id del establecimiento de una clave de curso, o None si no se puede leer."""
    try:
        return CourseKey.parse(course_key).establishment_id
    except ValueError:
        return None
