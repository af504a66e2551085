"""Tests de la tabla normativa y la calculadora de horas."""

import pytest
from pydantic import ValidationError

from hours.calculator import (
    InvariantViolation,
    OutOfRangeError,
    build_assignment,
    check_contract_ceiling,
    counted_assignments,
    detect_cycle,
    hours_available_for_grid,
    hours_used_in_grid,
    hours_used_in_grid_for_cycle,
    lectivas_from_table,
    no_lectivas_from,
    ratio_for,
    schedulable_hours,
    teacher_summary,
    teaching_assignment_at,
    total_contracted_hours,
    total_directiva_hours,
    total_lectivas_hours,
    total_no_lectivas_hours,
    total_pie_hours,
)
from hours.tables import TABLE_60_40, TABLE_65_35
from models.establishment import Establishment
from models.grid import BlockEntry
from models.subject import Subject
from models.teacher import Assignment, AssignmentType, Ratio, Teacher, TeachingCycle

MAT = Subject(id=2, code="Mat", name="Matemática", color="#3b82f6")


def _est(est_id: int = 1, prioritized: bool = False, levels: str = "1-8") -> Establishment:
    return Establishment(id=est_id, name=f"Escuela {est_id}", levels=levels,
                         prioritized=prioritized)


def _teacher(*assignments: Assignment, teacher_id: int = 1) -> Teacher:
    return Teacher(id=teacher_id, rut="11.111.111-1", name="ANA ROJAS",
                   assignments=list(assignments))


# ─── TABLAS ───

class TestHoursTables:
    @pytest.mark.parametrize("ratio", [Ratio.R60_40, Ratio.R65_35])
    def test_sum_invariant_for_every_hour(self, ratio: Ratio):
        """lectivas + no lectivas == horas de contrato para 1..44."""
        for h in range(1, 45):
            lectivas = lectivas_from_table(h, ratio)
            assert lectivas + no_lectivas_from(h, lectivas) == h

    def test_tables_cover_1_to_44(self):
        for table in (TABLE_60_40, TABLE_65_35):
            assert sorted(table) == list(range(1, 45))
            for h, (lect, no_lect) in table.items():
                assert lect + no_lect == h

    def test_known_rows(self):
        assert TABLE_65_35[44] == (29, 15)
        assert TABLE_60_40[44] == (26, 18)
        assert TABLE_65_35[30] == (20, 10)
        assert TABLE_60_40[30] == (18, 12)

    def test_lectivas_never_decrease(self):
        for table in (TABLE_60_40, TABLE_65_35):
            values = [table[h][0] for h in range(1, 45)]
            assert values == sorted(values)

    def test_60_40_gives_fewer_lectivas(self):
        for h in range(1, 45):
            assert TABLE_60_40[h][0] <= TABLE_65_35[h][0]

    @pytest.mark.parametrize("hours", [0, -3, 45, 100])
    def test_out_of_range(self, hours: int):
        with pytest.raises(OutOfRangeError):
            lectivas_from_table(hours, Ratio.R65_35)

    def test_non_integer_hours(self):
        with pytest.raises(OutOfRangeError):
            lectivas_from_table(10.5, Ratio.R65_35)

    def test_no_lectivas_negative_raises(self):
        with pytest.raises(InvariantViolation):
            no_lectivas_from(10, 11)


# ─── PROPORCIÓN ───

class TestRatio:
    def test_ratio_determinism(self):
        assert ratio_for(TeachingCycle.PRIMER_CICLO, True) == Ratio.R60_40
        assert ratio_for(TeachingCycle.PRIMER_CICLO, False) == Ratio.R65_35
        assert ratio_for(TeachingCycle.SEGUNDO_CICLO, True) == Ratio.R65_35
        assert ratio_for(TeachingCycle.SEGUNDO_CICLO, False) == Ratio.R65_35

    def test_build_assignment_prioritized_primer_ciclo(self):
        a = build_assignment(_est(prioritized=True), 44, cycle=TeachingCycle.PRIMER_CICLO)
        assert a.ratio == Ratio.R60_40
        assert (a.lectivas, a.no_lectivas) == (26, 18)

    def test_build_assignment_default_65_35(self):
        a = build_assignment(_est(), 44)
        assert a.ratio == Ratio.R65_35
        assert (a.lectivas, a.no_lectivas) == (29, 15)
        assert a.establishment_name == "Escuela 1"

    def test_assignment_rejects_broken_split(self):
        with pytest.raises(ValidationError):
            Assignment(establishment_id=1, establishment_name="X",
                       contract_hours=44, lectivas=30, no_lectivas=15)

    def test_assignment_rejects_out_of_range_hours(self):
        with pytest.raises(ValidationError):
            Assignment(establishment_id=1, establishment_name="X",
                       contract_hours=45, lectivas=30, no_lectivas=15)


# ─── EXCLUSIONES ───

class TestExclusionRule:
    @pytest.mark.parametrize("kind", [AssignmentType.DIRECTIVA, AssignmentType.PIE])
    def test_unscheduled_types_have_zero_schedulable(self, kind: AssignmentType):
        a = build_assignment(_est(), 30, assignment_type=kind)
        assert a.lectivas > 0
        assert schedulable_hours(a) == 0

    @pytest.mark.parametrize("kind", [AssignmentType.NORMAL, AssignmentType.SEP,
                                      AssignmentType.EIB])
    def test_teaching_types_use_lectivas(self, kind: AssignmentType):
        a = build_assignment(_est(), 30, assignment_type=kind)
        assert schedulable_hours(a) == a.lectivas == 20

    def test_pie_never_counts(self):
        t = _teacher(build_assignment(_est(1), 30),
                     build_assignment(_est(2), 20, assignment_type=AssignmentType.PIE))
        for exclude in (True, False):
            assert total_contracted_hours(t, exclude) == 30
        assert total_pie_hours(t) == 20

    def test_directiva_excluded_from_totals(self):
        """Regla vigente: Directiva fuera de contrato, lectivas y no lectivas."""
        t = _teacher(build_assignment(_est(1), 30),
                     build_assignment(_est(1), 10, assignment_type=AssignmentType.DIRECTIVA))
        assert total_contracted_hours(t) == 30
        assert total_lectivas_hours(t) == 20
        assert total_no_lectivas_hours(t) == 10
        assert total_directiva_hours(t) == 10
        assert len(counted_assignments(t)) == 1

    def test_directiva_included_when_only_pie_excluded(self):
        """Regla anterior: solo PIE queda fuera; Directiva suma."""
        t = _teacher(build_assignment(_est(1), 30),
                     build_assignment(_est(1), 10, assignment_type=AssignmentType.DIRECTIVA))
        assert total_contracted_hours(t, exclude_directiva=False) == 40
        assert total_lectivas_hours(t, exclude_directiva=False) == 20 + 7
        assert total_no_lectivas_hours(t, exclude_directiva=False) == 10 + 3

    def test_contract_ceiling(self):
        t = _teacher(build_assignment(_est(1), 30), build_assignment(_est(2), 14))
        check_contract_ceiling(t)
        over = _teacher(build_assignment(_est(1), 30), build_assignment(_est(2), 15))
        with pytest.raises(InvariantViolation):
            check_contract_ceiling(over)

    def test_ceiling_depends_on_directiva_rule(self):
        t = _teacher(build_assignment(_est(1), 40),
                     build_assignment(_est(1), 10, assignment_type=AssignmentType.DIRECTIVA))
        check_contract_ceiling(t, exclude_directiva=True)
        with pytest.raises(InvariantViolation):
            check_contract_ceiling(t, exclude_directiva=False)

    def test_teaching_assignment_prefers_schedulable(self):
        """Directiva + Normal en la misma escuela: cuenta la Normal."""
        directiva = build_assignment(_est(1), 10, assignment_type=AssignmentType.DIRECTIVA)
        normal = build_assignment(_est(1), 30)
        t = _teacher(directiva, normal)
        assert teaching_assignment_at(t, 1) == normal
        assert teaching_assignment_at(t, 2) is None

        only_pie = _teacher(build_assignment(_est(1), 20, assignment_type=AssignmentType.PIE))
        assert teaching_assignment_at(only_pie, 1).assignment_type == AssignmentType.PIE


# ─── HORARIO ───

class TestGridHours:
    def _grid(self):
        e1 = BlockEntry(subject=MAT, teacher_id=1, teacher_name="ANA ROJAS")
        e2 = BlockEntry(subject=MAT, teacher_id=2, teacher_name="OTRO")
        return {
            "1-3° Básico A": {"Lunes-1": e1, "Lunes-2": e1, "Martes-1": e2},
            "1-7° Básico A": {"Martes-1": e1},
            "2-1° Medio A": {"Jueves-4": e1},
        }

    def test_hours_used_counts_all_courses(self):
        assert hours_used_in_grid(1, self._grid()) == 4
        assert hours_used_in_grid(2, self._grid()) == 1
        assert hours_used_in_grid(99, self._grid()) == 0

    def test_hours_used_per_cycle(self):
        grid = self._grid()
        assert hours_used_in_grid_for_cycle(1, grid, TeachingCycle.PRIMER_CICLO) == 2
        assert hours_used_in_grid_for_cycle(1, grid, TeachingCycle.SEGUNDO_CICLO) == 2

    def test_hours_available_never_negative(self):
        t = _teacher(build_assignment(_est(1), 4))   # 65/35 → 3 lectivas
        assert hours_available_for_grid(t, self._grid()) == 0
        assert hours_available_for_grid(t, {}) == 3

    def test_teacher_summary(self):
        t = _teacher(build_assignment(_est(1), 30),
                     build_assignment(_est(2), 6, assignment_type=AssignmentType.PIE))
        s = teacher_summary(t, self._grid())
        assert s.contract_hours == 30
        assert s.lectivas == 20
        assert s.pie_hours == 6
        assert s.used_in_grid == 4
        assert s.available_for_grid == 16
        assert s.usage_percent == pytest.approx(20.0)
        assert [a.schedulable for a in s.assignments] == [20, 0]


# ─── CICLO ───

class TestDetectCycle:
    @pytest.mark.parametrize("label,expected", [
        ("1° Básico A", TeachingCycle.PRIMER_CICLO),
        ("4° Básico B", TeachingCycle.PRIMER_CICLO),
        ("5° Básico A", TeachingCycle.SEGUNDO_CICLO),
        ("8° Básico A", TeachingCycle.SEGUNDO_CICLO),
        ("1° Medio A", TeachingCycle.SEGUNDO_CICLO),
        ("1°-2° Básico A", TeachingCycle.PRIMER_CICLO),
        ("4°-5° Básico A", TeachingCycle.SEGUNDO_CICLO),
        ("Taller de música", TeachingCycle.SEGUNDO_CICLO),
    ])
    def test_detect_cycle(self, label: str, expected: TeachingCycle):
        assert detect_cycle(label) == expected
