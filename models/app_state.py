"""AppState: documento completo persistido (docentes, establecimientos, horario)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.block import BlockConfig
from models.establishment import Establishment
from models.grid import BlockEntry, iter_entries
from models.teacher import Teacher


class AppState(BaseModel):
    """Estado completo del sistema; se lee y escribe de una vez."""

    teachers: list[Teacher] = []
    establishments: list[Establishment] = []
    grid: dict[str, dict[str, BlockEntry]] = {}
    block_overrides: dict[int, list[BlockConfig]] = {}
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Resumen ───

    def summary(self) -> str:
        """Resumen breve del estado."""
        num_entries = sum(1 for _ in iter_entries(self.grid))
        num_courses = sum(1 for course in self.grid.values() if course)
        num_assignments = sum(len(t.assignments) for t in self.teachers)
        lines = [
            f"Establecimientos: {len(self.establishments)}",
            f"Docentes: {len(self.teachers)} ({num_assignments} asignaciones)",
            f"Cursos con horario: {num_courses}",
            f"Bloques asignados: {num_entries}",
        ]
        if self.block_overrides:
            lines.append(f"Jornadas personalizadas: {len(self.block_overrides)}")
        return "\n".join(lines)

    # ─── Persistencia ───

    def save_json(self, path: Path) -> None:
        """Guarda el estado completo como JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "AppState":
        """Carga el estado desde un archivo JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Archivo de estado no encontrado: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
