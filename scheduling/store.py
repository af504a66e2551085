"""ScheduleStore: servicio que posee el estado (docentes, establecimientos, horario).

Se construye una vez por proceso y se inyecta a quien lo necesite. La única
vía que escribe un bloque de clase validado es ``assign_block``; el resto de
las escrituras al horario (borrados en cascada, reparación, importación) son
de limpieza y no pasan por la validación.

Toda operación que modifica el estado toma el mismo ``RLock`` del store, de
modo que un store compartido entre hilos nunca pierde una escritura.
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel

from config.defaults import default_block_layout, initial_establishments
from config.schema import AppConfig
from hours.calculator import (
    InvariantViolation,
    check_contract_ceiling,
    hours_used_in_grid,
    rederive,
    schedulable_hours,
    teaching_assignment_at,
)
from models.app_state import AppState
from models.block import BlockConfig
from models.establishment import Establishment
from models.grid import BlockEntry, iter_entries
from models.keys import SlotKey, establishment_id_of
from models.subject import Subject
from models.teacher import Teacher, TeachingCycle
from scheduling.block_layout import generate_blocks
from scheduling.conflicts import ConflictInfo, describe_conflict
from scheduling.validation import (
    AssignmentResult,
    apply_block_assignment,
)

if TYPE_CHECKING:
    from scheduling.auto_generator import Placement

logger = logging.getLogger(__name__)


class TeacherValidationError(ValueError):
    """Docente rechazado al agregar / actualizar."""


class RepairReport(BaseModel):
    repaired: int = 0
    deleted: int = 0


class CommitReport(BaseModel):
    """Resultado de aplicar un lote (importación o generación automática)."""

    exitosos: int = 0
    fallidos: int = 0
    errores: list[str] = []

    @property
    def all_ok(self) -> bool:
        return self.fallidos == 0


class ScheduleStore:
    """Repositorio en memoria con las reglas de asignación."""

    def __init__(self, state: Optional[AppState] = None,
                 config: Optional[AppConfig] = None):
        self.state = state if state is not None else AppState(
            establishments=initial_establishments())
        self.config = config or AppConfig()
        self._lock = threading.RLock()
        self.path: Optional[Path] = None

    # ─── Accesos ───

    @property
    def teachers(self) -> list[Teacher]:
        return self.state.teachers

    @property
    def establishments(self) -> list[Establishment]:
        return self.state.establishments

    @property
    def grid(self) -> dict[str, dict[str, BlockEntry]]:
        return self.state.grid

    @property
    def exclude_directiva(self) -> bool:
        return self.config.hours.exclude_directiva_from_totals

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        return next((t for t in self.state.teachers if t.id == teacher_id), None)

    def get_establishment(self, establishment_id: int) -> Optional[Establishment]:
        return next(
            (e for e in self.state.establishments if e.id == establishment_id), None)

    def next_teacher_id(self) -> int:
        return max((t.id for t in self.state.teachers), default=0) + 1

    # ─── Docentes ───

    def _check_teacher(self, teacher: Teacher) -> None:
        for a in teacher.assignments:
            if self.get_establishment(a.establishment_id) is None:
                raise TeacherValidationError(
                    f"{teacher.name}: establecimiento {a.establishment_id} no existe")
        try:
            check_contract_ceiling(
                teacher,
                max_hours=self.config.hours.max_contract_hours,
                exclude_directiva=self.exclude_directiva,
            )
        except InvariantViolation as e:
            raise TeacherValidationError(str(e)) from e

    def add_teacher(self, teacher: Teacher) -> Teacher:
        with self._lock:
            if self.get_teacher(teacher.id) is not None:
                raise TeacherValidationError(f"Ya existe un docente con id {teacher.id}")
            self._check_teacher(teacher)
            self.state.teachers.append(teacher)
        logger.info(f"Docente agregado: {teacher.name} (id {teacher.id})")
        return teacher

    def update_teacher(self, teacher_id: int, teacher: Teacher) -> Teacher:
        """Reemplaza el docente conservando su id.

        Refresca su nombre en el horario y quita los bloques que las nuevas
        asignaciones ya no permiten (ver ``_reconcile_teacher``).
        """
        with self._lock:
            for i, current in enumerate(self.state.teachers):
                if current.id == teacher_id:
                    break
            else:
                raise TeacherValidationError(f"Docente {teacher_id} no existe")

            updated = teacher.model_copy(update={"id": teacher_id})
            self._check_teacher(updated)
            self.state.teachers[i] = updated

            if updated.name != current.name:
                for course in self.state.grid.values():
                    for slot_key, entry in course.items():
                        if entry.teacher_id == teacher_id:
                            course[slot_key] = entry.model_copy(
                                update={"teacher_name": updated.name})
            self._reconcile_teacher(updated)
        logger.info(f"Docente actualizado: {updated.name} (id {teacher_id})")
        return updated

    def remove_teacher(self, teacher_id: int) -> int:
        """Elimina el docente y todos sus bloques. Devuelve los bloques borrados."""
        with self._lock:
            removed = 0
            for course_key, course in self.state.grid.items():
                kept = {k: e for k, e in course.items() if e.teacher_id != teacher_id}
                removed += len(course) - len(kept)
                self.state.grid[course_key] = kept
            before = len(self.state.teachers)
            self.state.teachers = [t for t in self.state.teachers if t.id != teacher_id]
            if len(self.state.teachers) < before:
                logger.info(f"Docente {teacher_id} eliminado ({removed} bloques)")
        return removed

    def _reconcile_teacher(self, teacher: Teacher) -> int:
        """Quita del horario los bloques que las asignaciones del docente ya no cubren.

        Sale todo bloque en un establecimiento donde no tiene una asignación
        que ocupe bloques (sin asignación, PIE o Directiva) o en un día
        bloqueado. Si en una escuela quedan más bloques que horas asignables,
        se quitan los últimos de la semana. Devuelve los bloques quitados.
        """
        day_order = {day: i for i, day in enumerate(self.config.day_names)}
        dropped: list[tuple[str, str]] = []
        per_school: dict[int, list[tuple[int, int, str, str]]] = {}

        for course_key, slot_key, entry in iter_entries(self.state.grid):
            if entry.teacher_id != teacher.id:
                continue
            est_id = establishment_id_of(course_key)
            assignment = teaching_assignment_at(teacher, est_id) if est_id is not None else None
            if assignment is None or schedulable_hours(assignment) == 0:
                dropped.append((course_key, slot_key))
                continue
            try:
                slot = SlotKey.parse(slot_key)
            except ValueError:
                continue   # lo informa la auditoría
            if assignment.is_blocked_on(slot.weekday):
                dropped.append((course_key, slot_key))
                continue
            per_school.setdefault(est_id, []).append((
                day_order.get(slot.weekday, len(day_order)), slot.block_id,
                course_key, slot_key))

        for est_id, cells in per_school.items():
            allowed = schedulable_hours(teaching_assignment_at(teacher, est_id))
            if len(cells) > allowed:
                cells.sort()
                dropped.extend((course_key, slot_key) for _, _, course_key, slot_key
                               in cells[allowed:])

        for course_key, slot_key in dropped:
            del self.state.grid[course_key][slot_key]
        if dropped:
            logger.info(f"{teacher.name}: {len(dropped)} bloques quitados del horario")
        return len(dropped)

    def import_teachers(self, teachers: Iterable[Teacher]) -> CommitReport:
        """Agrega varios docentes con la misma validación que ``add_teacher``."""
        report = CommitReport()
        for teacher in teachers:
            try:
                self.add_teacher(teacher)
                report.exitosos += 1
            except TeacherValidationError as e:
                report.fallidos += 1
                report.errores.append(f"{teacher.rut} {teacher.name}: {e}")
        logger.info(
            f"Importación: {report.exitosos} docentes agregados, "
            f"{report.fallidos} rechazados")
        return report

    # ─── Establecimientos ───

    def add_establishment(self, establishment: Establishment) -> Establishment:
        with self._lock:
            if self.get_establishment(establishment.id) is not None:
                raise ValueError(f"Ya existe un establecimiento con id {establishment.id}")
            self.state.establishments.append(establishment)
        logger.info(f"Establecimiento agregado: {establishment.name}")
        return establishment

    def update_establishment(self, establishment: Establishment) -> Establishment:
        """Reemplaza el establecimiento y re-deriva las asignaciones que lo usan."""
        with self._lock:
            for i, current in enumerate(self.state.establishments):
                if current.id == establishment.id:
                    break
            else:
                raise ValueError(f"Establecimiento {establishment.id} no existe")
            self.state.establishments[i] = establishment
            self._rederive_assignments(establishment)
        return establishment

    def delete_establishment(self, establishment_id: int) -> int:
        """Elimina el establecimiento, su jornada y todos los horarios de sus cursos."""
        with self._lock:
            self.state.block_overrides.pop(establishment_id, None)
            removed = 0
            kept_grid = {}
            for course_key, course in self.state.grid.items():
                if establishment_id_of(course_key) == establishment_id:
                    removed += len(course)
                else:
                    kept_grid[course_key] = course
            self.state.grid = kept_grid
            self.state.establishments = [
                e for e in self.state.establishments if e.id != establishment_id]
        logger.info(
            f"Establecimiento {establishment_id} eliminado ({removed} bloques del horario)")
        return removed

    def toggle_prioritized(self, establishment_id: int) -> Establishment:
        """Cambia la marca 80%+ prioritarios y recalcula 60/40 vs. 65/35."""
        with self._lock:
            est = self.get_establishment(establishment_id)
            if est is None:
                raise ValueError(f"Establecimiento {establishment_id} no existe")
            return self.update_establishment(
                est.model_copy(update={"prioritized": not est.prioritized}))

    def set_sections(self, establishment_id: int, sections: list[str]) -> Establishment:
        cleaned = [s.strip() for s in sections if s.strip()]
        if not cleaned:
            raise ValueError("Debe haber al menos una sección")
        with self._lock:
            est = self.get_establishment(establishment_id)
            if est is None:
                raise ValueError(f"Establecimiento {establishment_id} no existe")
            return self.update_establishment(est.model_copy(update={"sections": cleaned}))

    def _rederive_assignments(self, establishment: Establishment) -> None:
        """Recalcula las asignaciones en la escuela y ajusta el horario de esos docentes."""
        changed = 0
        for i, teacher in enumerate(self.state.teachers):
            if not teacher.works_at(establishment.id):
                continue
            new_assignments = []
            for a in teacher.assignments:
                if a.establishment_id == establishment.id:
                    new = rederive(a, establishment)
                    if new.cycle == TeachingCycle.PRIMER_CICLO and new.ratio != a.ratio:
                        changed += 1
                    a = new
                new_assignments.append(a)
            self.state.teachers[i] = teacher.model_copy(
                update={"assignments": new_assignments})
            self._reconcile_teacher(self.state.teachers[i])
        if changed:
            logger.info(
                f"{establishment.name}: {changed} asignaciones de Primer Ciclo "
                f"recalculadas")

    # ─── Jornada ───

    def get_block_layout(self, establishment_id: int) -> list[BlockConfig]:
        """Bloques del día: propios, jornada personalizada, configuración o estándar."""
        override = self.state.block_overrides.get(establishment_id)
        if override:
            return list(override)
        est = self.get_establishment(establishment_id)
        if est is not None and est.schedule_config and est.schedule_config.use_custom:
            return generate_blocks(est.schedule_config.layout)
        if self.config.block_layout is not None:
            return generate_blocks(self.config.block_layout)
        return default_block_layout()

    def set_block_layout(self, establishment_id: int, blocks: list[BlockConfig]) -> None:
        ids = [b.id for b in blocks]
        if len(set(ids)) != len(ids):
            raise ValueError("Ids de bloque repetidos en la jornada")
        if not any(b.is_class for b in blocks):
            raise ValueError("La jornada no tiene bloques de clase")
        with self._lock:
            self.state.block_overrides[establishment_id] = list(blocks)

    def reset_block_layout(self, establishment_id: int) -> None:
        with self._lock:
            self.state.block_overrides.pop(establishment_id, None)

    # ─── Horario ───

    def assign_block(
        self,
        course_key: str,
        weekday: str,
        block_id: int,
        subject: Subject,
        teacher_id: int,
    ) -> AssignmentResult:
        """Asigna un bloque validando todas las reglas; lectura y escritura atómicas."""
        with self._lock:
            outcome = apply_block_assignment(
                course_key, weekday, block_id, subject, teacher_id,
                self.state.teachers, self.state.grid, self.state.establishments,
            )
            if isinstance(outcome, dict):
                self.state.grid = outcome
                logger.info(
                    f"Bloque asignado: {course_key} {weekday}-{block_id} "
                    f"→ docente {teacher_id} ({subject.code})")
                return AssignmentResult.ok()
        logger.info(
            f"Bloque rechazado: {course_key} {weekday}-{block_id} "
            f"docente {teacher_id}: {outcome.code.value}")
        return AssignmentResult.fail(outcome)

    def update_entry(self, course_key: str, slot_key: str, entry: BlockEntry) -> None:
        """Escritura directa, sin validación (reparación / carga de datos)."""
        with self._lock:
            self.state.grid.setdefault(course_key, {})[slot_key] = entry

    def remove_block(self, course_key: str, slot_key: str) -> bool:
        """Borra un bloque; si no existe no hace nada."""
        with self._lock:
            course = self.state.grid.get(course_key)
            if not course or slot_key not in course:
                return False
            del course[slot_key]
            return True

    def hours_used(self, teacher_id: int) -> int:
        return hours_used_in_grid(teacher_id, self.state.grid)

    def find_conflict(self, teacher_id: int, weekday: str, block_id: int,
                      course_key: str) -> Optional[ConflictInfo]:
        return describe_conflict(
            teacher_id, weekday, block_id, course_key,
            self.state.grid, self.state.establishments)

    def repair_corrupt_data(self) -> RepairReport:
        """Completa bloques sin nombre de docente o los elimina si no se pueden reparar.

        Un bloque incompleto se repara si el docente existe y tiene asignatura;
        si no, se borra. Los cursos que quedan vacíos se eliminan.
        """
        report = RepairReport()
        with self._lock:
            new_grid = {}
            for course_key, course in self.state.grid.items():
                new_course = {}
                for slot_key, entry in course.items():
                    if entry.is_complete:
                        new_course[slot_key] = entry
                        continue
                    teacher = self.get_teacher(entry.teacher_id)
                    if teacher is not None and entry.subject is not None:
                        new_course[slot_key] = entry.model_copy(update={
                            "teacher_name": teacher.name,
                            "teacher_id": teacher.id,
                        })
                        report.repaired += 1
                    else:
                        report.deleted += 1
                if new_course:
                    new_grid[course_key] = new_course
            self.state.grid = new_grid
        logger.info(
            f"Reparación: {report.repaired} bloques reparados, "
            f"{report.deleted} eliminados")
        return report

    def commit_placements(self, course_key: str,
                          placements: Iterable["Placement"]) -> CommitReport:
        """Aplica propuestas una por una a través de ``assign_block``."""
        report = CommitReport()
        for p in placements:
            result = self.assign_block(
                course_key, p.weekday, p.block_id, p.subject, p.teacher_id)
            if result.success:
                report.exitosos += 1
            else:
                report.fallidos += 1
                report.errores.append(f"{p.weekday} bloque {p.block_id}: {result.error}")
        logger.info(
            f"{course_key}: {report.exitosos} bloques aplicados, "
            f"{report.fallidos} rechazados")
        return report

    # ─── Persistencia ───

    def save(self, path: Optional[Path] = None) -> Path:
        target = Path(path or self.path or self.config.storage.state_path)
        with self._lock:
            self.state.save_json(target)
            self.path = target
        logger.info(f"Estado guardado: {target}")
        return target

    @classmethod
    def load(cls, path: Optional[Path] = None,
             config: Optional[AppConfig] = None) -> "ScheduleStore":
        config = config or AppConfig()
        target = Path(path or config.storage.state_path)
        store = cls(AppState.load_json(target), config)
        store.path = target
        return store
