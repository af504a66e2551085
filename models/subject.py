"""Modelo de datos para una asignatura (Pydantic v2)."""

from pydantic import BaseModel


class Subject(BaseModel):
    """Asignatura que se imparte en un bloque de clase."""

    id: int
    code: str             # "LyC", "Mat"
    name: str             # "Lenguaje y Comunicación"
    color: str            # "#ef4444"
    editable: bool = False  # Solo "Otras" y asignaturas creadas por el usuario


def generate_code(name: str, existing: list[Subject]) -> str:
    """Código corto (2-3 letras) a partir del nombre, único entre las existentes.

    "Taller de Robótica" → "TDR", "Química" → "QUÍ", repetido → "QUÍ2".
    """
    words = name.strip().split()
    if len(words) > 1:
        code = "".join(w[0] for w in words).upper()[:3]
    else:
        code = words[0][:3].upper()

    used = {s.code for s in existing}
    if code not in used:
        return code
    counter = 2
    while f"{code}{counter}" in used:
        counter += 1
    return f"{code}{counter}"


# Paleta para asignaturas nuevas (sin repetir colores ya usados)
SUBJECT_COLORS = [
    "#ef4444", "#3b82f6", "#8b5cf6", "#ec4899", "#10b981", "#06b6d4",
    "#f59e0b", "#a855f7", "#64748b", "#f97316", "#14b8a6", "#d946ef",
    "#84cc16", "#0ea5e9", "#eab308", "#f43f5e", "#22c55e", "#6366f1",
]


def create_subject(name: str, existing: list[Subject]) -> Subject:
    """Crea una asignatura editable con código y color libres."""
    used_colors = {s.color.lower() for s in existing}
    color = next((c for c in SUBJECT_COLORS if c not in used_colors), "#6b7280")
    next_id = max((s.id for s in existing), default=0) + 1
    return Subject(
        id=next_id,
        code=generate_code(name, existing),
        name=name.strip(),
        color=color,
        editable=True,
    )
