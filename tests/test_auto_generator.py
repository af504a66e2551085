"""Tests de la generación automática (greedy) y su aplicación al store."""

import pytest

from config.defaults import BASE_SUBJECTS
from config.schema import AppConfig, AutoGenConfig
from hours.calculator import build_assignment
from models.app_state import AppState
from models.block import BlockConfig, BlockKind
from models.establishment import Establishment
from models.grid import BlockEntry
from models.teacher import AssignmentType, Teacher
from scheduling.auto_generator import NO_ELIGIBLE_TEACHER, AutoGenerator, generate_for_course
from scheduling.store import ScheduleStore

EST = Establishment(id=1, name="Escuela Aillinco", levels="1-8")
OTHER = Establishment(id=2, name="Escuela Chacaico", levels="1-6")
COURSE = "1-5° Básico A"


def _first(subjects):
    return subjects[0]


def _layout(num_class: int = 3) -> list[BlockConfig]:
    """num_class bloques de clase con un recreo después del primero."""
    blocks = [BlockConfig(id=1, start_time="08:00", end_time="08:45",
                          kind=BlockKind.CLASE, duration_minutes=45),
              BlockConfig(id=2, start_time="08:45", end_time="09:00",
                          kind=BlockKind.RECREO, duration_minutes=15)]
    start = 9 * 60
    for i in range(num_class - 1):
        s, e = start + 45 * i, start + 45 * (i + 1)
        blocks.append(BlockConfig(
            id=3 + i, start_time=f"{s // 60:02d}:{s % 60:02d}",
            end_time=f"{e // 60:02d}:{e % 60:02d}",
            kind=BlockKind.CLASE, duration_minutes=45))
    return blocks


def _teacher(teacher_id: int, hours: int, kind=AssignmentType.NORMAL,
             blocked=None, est=EST) -> Teacher:
    rut = f"{teacher_id}" * 8 + f"-{teacher_id}"
    return Teacher(id=teacher_id, rut=rut, name=f"DOCENTE {teacher_id}",
                   assignments=[build_assignment(est, hours, assignment_type=kind,
                                                 blocked_days=blocked)])


def _generator(days=("Lunes",), **kw) -> AutoGenerator:
    return AutoGenerator(pick_subject=_first, day_names=list(days), **kw)


class TestAutoGenerator:
    def test_scenario_e_partial_fill(self):
        """3 bloques vacíos, un docente con 2 horas → 2 propuestas, 1 sin asignar."""
        t = _teacher(1, 3)
        assert t.assignments[0].lectivas == 2

        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), {})
        assert len(result.placements) == 2
        assert len(result.unplaced) == 1
        assert result.unplaced[0].reason == NO_ELIGIBLE_TEACHER == "no eligible teacher"
        assert result.unplaced[0].block_id == 4
        assert not result.success
        assert all(p.teacher_id == 1 for p in result.placements)

    def test_skips_non_class_and_filled_slots(self):
        t = _teacher(1, 30)
        filled = BlockEntry(subject=BASE_SUBJECTS[0], teacher_id=9, teacher_name="X")
        grid = {COURSE: {"Lunes-1": filled}}

        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), grid)
        assert [p.slot_key for p in result.placements] == ["Lunes-3", "Lunes-4"]
        assert result.success
        assert grid[COURSE] == {"Lunes-1": filled}

    def test_days_in_fixed_order(self):
        t = _teacher(1, 30)
        result = _generator(days=("Lunes", "Martes")).generate(
            COURSE, 1, [t], BASE_SUBJECTS, _layout(2), {})
        assert [p.slot_key for p in result.placements] == \
               ["Lunes-1", "Lunes-3", "Martes-1", "Martes-3"]

    def test_first_teacher_by_id_wins(self):
        teachers = [_teacher(3, 30), _teacher(2, 30)]
        result = _generator().generate(COURSE, 1, teachers, BASE_SUBJECTS, _layout(3), {})
        assert {p.teacher_id for p in result.placements} == {2}

    def test_moves_to_next_teacher_when_hours_run_out(self):
        teachers = [_teacher(1, 1), _teacher(2, 30)]   # 1h → 1 lectiva
        result = _generator().generate(COURSE, 1, teachers, BASE_SUBJECTS, _layout(3), {})
        assert [p.teacher_id for p in result.placements] == [1, 2, 2]

    def test_hours_used_elsewhere_count(self):
        t = _teacher(1, 3)   # 2 lectivas
        entry = BlockEntry(subject=BASE_SUBJECTS[0], teacher_id=1, teacher_name="DOCENTE 1")
        grid = {"1-6° Básico A": {"Martes-1": entry}}
        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), grid)
        assert len(result.placements) == 1

    def test_blocked_day_skipped(self):
        blocked = _teacher(1, 30, blocked=["Lunes"])
        free = _teacher(2, 30)
        result = _generator().generate(
            COURSE, 1, [blocked, free], BASE_SUBJECTS, _layout(3), {})
        assert {p.teacher_id for p in result.placements} == {2}

    def test_conflict_skipped(self):
        t = _teacher(1, 30)
        entry = BlockEntry(subject=BASE_SUBJECTS[0], teacher_id=1, teacher_name="DOCENTE 1")
        grid = {"1-6° Básico A": {"Lunes-3": entry}}
        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), grid)
        assert [p.slot_key for p in result.placements] == ["Lunes-1", "Lunes-4"]
        assert [(u.weekday, u.block_id) for u in result.unplaced] == [("Lunes", 3)]

    @pytest.mark.parametrize("kind", [AssignmentType.PIE, AssignmentType.DIRECTIVA])
    def test_unscheduled_types_never_candidates(self, kind):
        t = _teacher(1, 30, kind=kind)
        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), {})
        assert result.placements == []
        assert len(result.unplaced) == 3
        assert "No hay docentes disponibles" in result.messages[1]

    def test_teacher_from_other_establishment_ignored(self):
        t = _teacher(1, 30, est=OTHER)
        result = _generator().generate(COURSE, 1, [t], BASE_SUBJECTS, _layout(3), {})
        assert result.placements == []

    def test_max_candidates(self):
        teachers = [_teacher(1, 1), _teacher(2, 30)]
        result = _generator(max_candidates=1).generate(
            COURSE, 1, teachers, BASE_SUBJECTS, _layout(3), {})
        assert len(result.placements) == 1
        assert len(result.unplaced) == 2

    def test_subject_picker_injected(self):
        picks = iter(BASE_SUBJECTS[3:6])
        gen = AutoGenerator(pick_subject=lambda _: next(picks), day_names=["Lunes"])
        result = gen.generate(COURSE, 1, [_teacher(1, 30)], BASE_SUBJECTS, _layout(3), {})
        assert [p.subject.code for p in result.placements] == ["HGyCs", "Ing", "EF"]

    def test_seeded_random_picker_reproducible(self):
        def run():
            gen = AutoGenerator(seed=11, day_names=["Lunes", "Martes"])
            result = gen.generate(COURSE, 1, [_teacher(1, 30)], BASE_SUBJECTS, _layout(3), {})
            return [p.subject.code for p in result.placements]
        assert run() == run()

    def test_no_subjects_raises(self):
        with pytest.raises(ValueError):
            _generator().generate(COURSE, 1, [_teacher(1, 30)], [], _layout(3), {})


class TestCommitPlacements:
    def _store(self, *teachers: Teacher) -> ScheduleStore:
        state = AppState(establishments=[EST, OTHER], teachers=list(teachers))
        config = AppConfig(day_names=["Lunes"], autogen=AutoGenConfig(seed=1))
        return ScheduleStore(state, config)

    def test_commit_all(self):
        store = self._store(_teacher(1, 3))
        store.set_block_layout(1, _layout(3))
        result = generate_for_course(store, COURSE, pick_subject=_first)
        report = store.commit_placements(COURSE, result.placements)
        assert (report.exitosos, report.fallidos) == (2, 0)
        assert report.all_ok
        assert store.hours_used(1) == 2
        assert store.grid[COURSE]["Lunes-1"].subject.code == "LyC"

    def test_commit_partial_success(self):
        """Dos cursos generados sobre la misma foto compiten por el mismo docente."""
        store = self._store(_teacher(1, 30))
        store.set_block_layout(1, _layout(3))
        first = generate_for_course(store, COURSE, pick_subject=_first)
        second = generate_for_course(store, "1-6° Básico A", pick_subject=_first)

        assert store.commit_placements(COURSE, first.placements).exitosos == 3
        report = store.commit_placements("1-6° Básico A", second.placements)
        assert report.exitosos == 0
        assert report.fallidos == 3
        assert len(report.errores) == 3
        assert "ya tiene clase" in report.errores[0]

    def test_generate_for_unknown_establishment(self):
        store = self._store()
        with pytest.raises(ValueError):
            generate_for_course(store, "99-1° Básico A")
