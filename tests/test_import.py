"""Tests de la importación masiva de docentes."""

from pathlib import Path

import openpyxl
import pytest

from data.teacher_import import (
    REQUIRED_COLUMNS,
    TeacherImportError,
    assignment_type_for_role,
    generate_template,
    import_from_excel,
    parse_teacher_rows,
    read_rows_from_excel,
)
from models.establishment import Establishment
from models.teacher import AssignmentType, Ratio, TeachingCycle

BASICA = Establishment(id=1, name="Escuela Aillinco", levels="1-8", prioritized=True)
PRIMER = Establishment(id=2, name="Escuela Rural", levels="1-4", prioritized=True)


def _row(rut="12.345.678-5", nombre="MARÍA GONZÁLEZ", funcion="DOCENTE DE AULA",
         titularidad="TITULAR", hrs=44) -> dict:
    return {"RUT": rut, "NOMBRE": nombre, "FUNCION": funcion,
            "TITULARIDAD": titularidad, "HRS": hrs}


class TestParseRows:
    def test_valid_row(self):
        preview = parse_teacher_rows([_row()], BASICA, start_id=7)
        assert len(preview.candidates) == 1
        t = preview.candidates[0]
        assert t.id == 7
        assert t.rut == "12.345.678-5"
        a = t.assignments[0]
        assert a.establishment_id == 1
        assert a.contract_hours == 44
        assert a.cycle == TeachingCycle.SEGUNDO_CICLO
        assert (a.lectivas, a.no_lectivas) == (29, 15)
        assert a.tenure == "TITULAR"
        assert not preview.has_warnings

    def test_consecutive_ids(self):
        rows = [_row(), _row(rut="11.111.111-1", nombre="B"), _row(rut="22.222.222-2", nombre="C")]
        preview = parse_teacher_rows(rows, BASICA, start_id=3)
        assert [t.id for t in preview.candidates] == [3, 4, 5]

    def test_primer_ciclo_school_uses_60_40(self):
        preview = parse_teacher_rows([_row()], PRIMER)
        a = preview.candidates[0].assignments[0]
        assert a.cycle == TeachingCycle.PRIMER_CICLO
        assert a.ratio == Ratio.R60_40

    def test_hours_over_44_clipped(self):
        preview = parse_teacher_rows([_row(hrs=50)], BASICA)
        assert preview.candidates[0].assignments[0].contract_hours == 44
        assert "se ajusta a 44h" in preview.warnings[0]
        assert "Fila 2" in preview.warnings[0]

    @pytest.mark.parametrize("hrs", [0, -5, "", None, "abc", 12.5])
    def test_invalid_hours_dropped(self, hrs):
        rows = [_row(hrs=hrs), _row(rut="11.111.111-1", nombre="OK")]
        preview = parse_teacher_rows(rows, BASICA)
        assert [t.name for t in preview.candidates] == ["OK"]
        assert preview.skipped == 1
        assert "horas inválidas" in preview.warnings[0]

    @pytest.mark.parametrize("hrs,expected", [("30", 30), (30.0, 30), (" 12 ", 12)])
    def test_hours_formats(self, hrs, expected):
        preview = parse_teacher_rows([_row(hrs=hrs)], BASICA)
        assert preview.candidates[0].assignments[0].contract_hours == expected

    def test_invalid_rut_dropped(self):
        rows = [_row(rut="12.345.678-0"), _row(rut="11.111.111-1", nombre="OK")]
        preview = parse_teacher_rows(rows, BASICA)
        assert len(preview.candidates) == 1
        assert "RUT inválido" in preview.warnings[0]

    def test_missing_columns(self):
        rows = [{"RUT": "12.345.678-5", "NOMBRE": "X", "HRS": 10}]
        with pytest.raises(TeacherImportError, match="FUNCION, TITULARIDAD"):
            parse_teacher_rows(rows, BASICA)

    def test_empty(self):
        with pytest.raises(TeacherImportError):
            parse_teacher_rows([], BASICA)

    def test_headers_case_and_accents(self):
        row = {"Rut": "12.345.678-5", "nombre": "X", "Función": "PIE",
               " Titularidad ": "CONTRATA", "Hrs": 10}
        preview = parse_teacher_rows([row], BASICA)
        assert preview.candidates[0].assignments[0].assignment_type == AssignmentType.PIE

    @pytest.mark.parametrize("role,expected", [
        ("EDUCADORA DIFERENCIAL PIE", AssignmentType.PIE),
        ("DIRECTIVA", AssignmentType.DIRECTIVA),
        ("Jefe UTP", AssignmentType.DIRECTIVA),
        ("DOCENTE EIB", AssignmentType.EIB),
        ("DOCENTE DE AULA", AssignmentType.NORMAL),
    ])
    def test_role_mapping(self, role, expected):
        assert assignment_type_for_role(role) == expected


class TestExcel:
    def test_template_has_required_columns(self, tmp_path: Path):
        path = generate_template(tmp_path / "plantilla.xlsx")
        wb = openpyxl.load_workbook(path)
        headers = [c.value for c in wb["Docentes"][1]]
        assert headers == REQUIRED_COLUMNS

    def test_template_example_imports(self, tmp_path: Path):
        path = generate_template(tmp_path / "plantilla.xlsx")
        preview = import_from_excel(path, BASICA)
        assert len(preview.candidates) == 1
        assert preview.candidates[0].name == "MARÍA GONZÁLEZ PÉREZ"

    def test_read_rows(self, tmp_path: Path):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(REQUIRED_COLUMNS)
        ws.append(["11.111.111-1", "ANA", "DOCENTE DE AULA", "TITULAR", 30])
        ws.append([None, None, None, None, None])
        ws.append(["22.222.222-2", "BETO", "UTP", "CONTRATA", 60])
        path = tmp_path / "docentes.xlsx"
        wb.save(path)

        rows = read_rows_from_excel(path)
        assert len(rows) == 2
        assert rows[0]["HRS"] == 30

        preview = import_from_excel(path, BASICA, start_id=10)
        assert [t.id for t in preview.candidates] == [10, 11]
        beto = preview.candidates[1].assignments[0]
        assert beto.assignment_type == AssignmentType.DIRECTIVA
        assert beto.contract_hours == 44
        assert len(preview.warnings) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(TeacherImportError):
            read_rows_from_excel(tmp_path / "no_existe.xlsx")
