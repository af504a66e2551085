"""Carga masiva de docentes desde Excel y plantilla de importación.

Plantilla:  una hoja "Docentes" con las columnas requeridas y una fila de ejemplo.
Importación: filas → candidatos ``Teacher`` (una asignación cada uno) + advertencias.

Los errores de una fila nunca abortan la importación: la fila se descarta o se
ajusta y queda una advertencia. Solo los problemas del archivo completo
(no se puede abrir, hoja vacía, faltan columnas) lanzan ``TeacherImportError``.
"""

import logging
import unicodedata
from pathlib import Path
from typing import Any, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from pydantic import BaseModel, ValidationError

from hours.calculator import build_assignment
from hours.tables import MAX_HOURS
from models.establishment import Establishment
from models.teacher import AssignmentType, Teacher, TeachingCycle

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["RUT", "NOMBRE", "FUNCION", "TITULARIDAD", "HRS"]


class TeacherImportError(Exception):
    """Error del archivo completo (no de una fila)."""


class ImportPreview(BaseModel):
    """Candidatos listos para revisar antes de agregarlos al store."""

    candidates: list[Teacher] = []
    warnings: list[str] = []
    skipped: int = 0

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


# ─── Normalización ───

def _normalize_header(raw: Any) -> str:
    """'  Función ' → 'FUNCION'."""
    text = unicodedata.normalize("NFKD", str(raw or "").strip().upper())
    return "".join(c for c in text if not unicodedata.combining(c))


def _parse_hours(raw: Any) -> Optional[int]:
    """Horas como entero, o None si no es un entero válido."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            return None
        return int(value) if value.is_integer() else None


def assignment_type_for_role(role: str) -> AssignmentType:
    """Tipo de asignación según la función: PIE, Directiva (DIRECTIV/UTP), EIB o Normal."""
    upper = role.upper()
    if "PIE" in upper:
        return AssignmentType.PIE
    if "DIRECTIV" in upper or "UTP" in upper:
        return AssignmentType.DIRECTIVA
    if "EIB" in upper:
        return AssignmentType.EIB
    return AssignmentType.NORMAL


def cycle_for_establishment(establishment: Establishment) -> TeachingCycle:
    """Primer Ciclo solo si el establecimiento llega como máximo a 4° Básico."""
    _, high = establishment.level_range
    return TeachingCycle.PRIMER_CICLO if high <= 4 else TeachingCycle.SEGUNDO_CICLO


# ─── Filas → candidatos ───

def parse_teacher_rows(
    rows: list[dict],
    establishment: Establishment,
    start_id: int = 1,
) -> ImportPreview:
    """Convierte filas (encabezado → valor) en docentes candidatos."""
    if not rows:
        raise TeacherImportError("El archivo Excel está vacío")

    normalized = [{_normalize_header(k): v for k, v in row.items()} for row in rows]
    present = set(normalized[0].keys())
    missing = [c for c in REQUIRED_COLUMNS if c not in present]
    if missing:
        raise TeacherImportError(f"Faltan las columnas: {', '.join(missing)}")

    preview = ImportPreview()
    cycle = cycle_for_establishment(establishment)
    next_id = start_id

    for index, row in enumerate(normalized):
        line = index + 2   # fila 1 = encabezado
        name = str(row.get("NOMBRE") or "").strip()
        label = name or f"fila {line}"

        hours = _parse_hours(row.get("HRS"))
        if hours is None or hours <= 0:
            preview.warnings.append(f"Fila {line}: horas inválidas, se omite el registro")
            preview.skipped += 1
            continue
        if hours > MAX_HOURS:
            preview.warnings.append(
                f"Fila {line}: {label} tiene {hours}h (máx {MAX_HOURS}h), "
                f"se ajusta a {MAX_HOURS}h")
            hours = MAX_HOURS

        role = str(row.get("FUNCION") or "").strip() or "DOCENTE DE AULA"
        tenure = str(row.get("TITULARIDAD") or "").strip() or "CONTRATA"
        try:
            assignment = build_assignment(
                establishment,
                hours,
                cycle=cycle,
                assignment_type=assignment_type_for_role(role),
                role=role,
                tenure=tenure,
            )
            teacher = Teacher(
                id=next_id,
                rut=str(row.get("RUT") or "").strip(),
                name=name,
                assignments=[assignment],
            )
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            preview.warnings.append(f"Fila {line}: {label}: {reason}")
            preview.skipped += 1
            continue

        preview.candidates.append(teacher)
        next_id += 1

    logger.info(
        f"Importación {establishment.name}: {len(preview.candidates)} candidatos, "
        f"{preview.skipped} filas omitidas")
    return preview


# ─── Excel ───

def read_rows_from_excel(path: Path) -> list[dict]:
    """Primera hoja del libro → lista de dicts (primera fila = encabezado)."""
    path = Path(path)
    try:
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except FileNotFoundError:
        raise TeacherImportError(f"Archivo no encontrado: {path}")
    except Exception as e:
        raise TeacherImportError(f"Error al abrir el archivo Excel: {e}") from e

    try:
        sheet = wb.worksheets[0]
        rows = list(sheet.iter_rows(values_only=True))
    finally:
        wb.close()
    if not rows:
        return []

    headers = [
        str(h).strip() if h is not None else f"col_{i}"
        for i, h in enumerate(rows[0])
    ]
    result = []
    for row in rows[1:]:
        if all(v is None or v == "" for v in row):
            continue
        result.append({
            headers[i]: ("" if v is None else v)
            for i, v in enumerate(row)
            if i < len(headers)
        })
    return result


def import_from_excel(path: Path, establishment: Establishment,
                      start_id: int = 1) -> ImportPreview:
    return parse_teacher_rows(read_rows_from_excel(path), establishment, start_id)


def generate_template(path: Path) -> Path:
    """Plantilla vacía con las columnas requeridas y una fila de ejemplo."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Docentes"

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    widths = [16, 36, 26, 16, 8]
    for col, (header, width) in enumerate(zip(REQUIRED_COLUMNS, widths), 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = border
        ws.column_dimensions[get_column_letter(col)].width = width

    example = ["12.345.678-5", "MARÍA GONZÁLEZ PÉREZ", "DOCENTE DE AULA", "TITULAR", 44]
    for col, value in enumerate(example, 1):
        cell = ws.cell(row=2, column=col, value=value)
        cell.font = ex_font
        cell.border = border

    notes = wb.create_sheet("Instrucciones")
    note = notes.cell(
        row=1, column=1,
        value="FUNCION con PIE → PIE; DIRECTIVA/UTP → Directiva; EIB → EIB. "
              "HRS entre 1 y 44 (mayores se ajustan a 44).",
    )
    note.font = Font(italic=True, color="555555", size=10)

    wb.save(str(path))
    return path
