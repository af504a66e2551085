"""Generación automática (greedy) del horario de un curso.

Recorre los días en orden fijo y, dentro de cada día, los bloques de clase en
el orden de la jornada. Para cada bloque vacío toma el PRIMER docente que
cumple todo (asignación en el establecimiento, horas libres, día no bloqueado,
sin choque). No hay búsqueda ni retroceso: termina siempre, en
O(bloques × docentes), sin garantía de óptimo.

El resultado son propuestas; ``ScheduleStore.commit_placements`` las aplica
una por una con la validación normal.
"""

import logging
import random
from typing import TYPE_CHECKING, Callable, Optional

from pydantic import BaseModel

from config.defaults import WEEKDAYS
from hours.calculator import hours_used_in_grid, schedulable_hours, teaching_assignment_at
from models.block import BlockConfig
from models.grid import ScheduleGrid
from models.keys import CourseKey, SlotKey
from models.subject import Subject
from models.teacher import Teacher
from scheduling.block_layout import class_blocks
from scheduling.conflicts import find_conflict

if TYPE_CHECKING:
    from scheduling.store import ScheduleStore

logger = logging.getLogger(__name__)

NO_ELIGIBLE_TEACHER = "no eligible teacher"

SubjectPicker = Callable[[list[Subject]], Subject]


class Placement(BaseModel):
    """Bloque propuesto."""

    weekday: str
    block_id: int
    subject: Subject
    teacher_id: int
    teacher_name: str

    @property
    def slot_key(self) -> str:
        return SlotKey(self.weekday, self.block_id).format()


class UnplacedSlot(BaseModel):
    weekday: str
    block_id: int
    reason: str = NO_ELIGIBLE_TEACHER


class GenerationResult(BaseModel):
    placements: list[Placement] = []
    unplaced: list[UnplacedSlot] = []
    messages: list[str] = []
    success: bool = False


class AutoGenerator:
    """Generador greedy con estrategia de asignatura intercambiable.

    ``pick_subject`` recibe la lista de asignaturas y devuelve una; por defecto
    es una elección aleatoria (con ``seed`` reproducible). ``max_candidates``
    limita cuántos docentes se consideran por bloque (0 = todos).
    """

    def __init__(
        self,
        pick_subject: Optional[SubjectPicker] = None,
        seed: Optional[int] = None,
        max_candidates: int = 0,
        day_names: Optional[list[str]] = None,
    ):
        self.pick_subject = pick_subject or random.Random(seed).choice
        self.max_candidates = max_candidates
        self.day_names = list(day_names or WEEKDAYS)

    def generate(
        self,
        course_key: str,
        establishment_id: int,
        teachers: list[Teacher],
        subjects: list[Subject],
        blocks: list[BlockConfig],
        grid: ScheduleGrid,
    ) -> GenerationResult:
        if not subjects:
            raise ValueError("No hay asignaturas para generar el horario")

        result = GenerationResult()
        current = grid.get(course_key, {})
        teaching_blocks = class_blocks(blocks)

        # Orden fijo por id: el "primer docente" es siempre el mismo
        candidates: list[tuple[Teacher, int]] = []
        for teacher in sorted(teachers, key=lambda t: t.id):
            assignment = teaching_assignment_at(teacher, establishment_id)
            if assignment is None:
                continue
            available = schedulable_hours(assignment) - hours_used_in_grid(teacher.id, grid)
            if available > 0:
                candidates.append((teacher, available))
        if self.max_candidates:
            candidates = candidates[:self.max_candidates]

        if not candidates:
            result.messages.append(
                "No hay docentes disponibles con horas libres en este establecimiento")

        staged: dict[int, int] = {}
        for day in self.day_names:
            for block in teaching_blocks:
                slot = SlotKey(day, block.id).format()
                if slot in current:
                    continue
                placement = self._first_candidate(
                    course_key, establishment_id, day, block, candidates,
                    staged, subjects, grid)
                if placement is None:
                    result.unplaced.append(UnplacedSlot(weekday=day, block_id=block.id))
                    logger.debug(f"{course_key} {slot}: {NO_ELIGIBLE_TEACHER}")
                    continue
                staged[placement.teacher_id] = staged.get(placement.teacher_id, 0) + 1
                result.placements.append(placement)
                result.messages.append(
                    f"{day} Bloque {block.id} ({block.start_time}): "
                    f"{placement.subject.name} - {placement.teacher_name}")

        result.success = not result.unplaced
        total = len(result.placements) + len(result.unplaced)
        if result.success:
            summary = f"Horario generado: {len(result.placements)} bloques propuestos"
        else:
            summary = (
                f"Se propusieron {len(result.placements)} de {total} bloques vacíos; "
                f"faltan {len(result.unplaced)}")
        result.messages.insert(0, summary)
        logger.info(f"{course_key}: {summary}")
        return result

    def _first_candidate(
        self,
        course_key: str,
        establishment_id: int,
        day: str,
        block: BlockConfig,
        candidates: list[tuple[Teacher, int]],
        staged: dict[int, int],
        subjects: list[Subject],
        grid: ScheduleGrid,
    ) -> Optional[Placement]:
        for teacher, available in candidates:
            if available - staged.get(teacher.id, 0) <= 0:
                continue
            assignment = teaching_assignment_at(teacher, establishment_id)
            if assignment.is_blocked_on(day):
                continue
            if find_conflict(teacher.id, day, block.id, course_key, grid) is not None:
                continue
            return Placement(
                weekday=day,
                block_id=block.id,
                subject=self.pick_subject(subjects),
                teacher_id=teacher.id,
                teacher_name=teacher.name,
            )
        return None


def generate_for_course(store: "ScheduleStore", course_key: str,
                        pick_subject: Optional[SubjectPicker] = None) -> GenerationResult:
    """Genera propuestas para un curso tomando todo del store y su configuración."""
    key = CourseKey.parse(course_key)
    est = store.get_establishment(key.establishment_id)
    if est is None:
        raise ValueError(f"Establecimiento {key.establishment_id} no existe")
    cfg = store.config
    generator = AutoGenerator(
        pick_subject=pick_subject,
        seed=cfg.autogen.seed,
        max_candidates=cfg.autogen.max_candidates,
        day_names=cfg.day_names,
    )
    return generator.generate(
        course_key,
        est.id,
        store.teachers,
        est.subjects_or_default(),
        store.get_block_layout(est.id),
        store.grid,
    )
