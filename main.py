"""Sistema de Horarios Docentes: CLI principal.

Uso:
  python main.py setup                           Crear configuración por defecto
  python main.py config show                     Mostrar configuración
  python main.py generate                        Datos de demostración
  python main.py template                        Plantilla Excel de importación
  python main.py import <archivo.xlsx> -e ID     Importar docentes
  python main.py teachers                        Horas de todos los docentes
  python main.py teacher <id>                    Detalle de un docente
  python main.py assign <curso> <día> <bloque>   Asignar un bloque
  python main.py remove <curso> <día-bloque>     Quitar un bloque
  python main.py autogen <curso>                 Generar horario de un curso
  python main.py repair                          Reparar datos del horario
  python main.py validate                        Auditar el horario completo
  python main.py establishment delete <id>       Eliminar establecimiento

Claves: curso "<idEstablecimiento>-<curso>" (p.ej. "3-5° Básico A"),
celda "<Día>-<bloque>" (p.ej. "Lunes-4").
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _load_config():
    """Configuración del archivo, o la por defecto si aún no se creó."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print("[dim]Sin archivo de configuración; usando valores por defecto "
                      "(python main.py setup).[/dim]")
    try:
        return mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red bold]{e}[/red bold]")
        sys.exit(1)


def _load_store_or_abort(state_path: Optional[str] = None):
    """Carga el estado guardado o termina con un mensaje."""
    from scheduling.store import ScheduleStore
    config = _load_config()
    path = Path(state_path or config.storage.state_path)
    try:
        return ScheduleStore.load(path, config)
    except FileNotFoundError:
        console.print(
            f"[red]No se encontró el estado: {path}[/red]\n"
            "Ejecute primero [bold]python main.py generate[/bold] o "
            "[bold]python main.py import[/bold]."
        )
        sys.exit(1)


def _load_or_new_store(state_path: Optional[str] = None):
    """Como ``_load_store_or_abort``, pero sin estado parte con la red inicial."""
    from scheduling.store import ScheduleStore
    config = _load_config()
    path = Path(state_path or config.storage.state_path)
    if path.exists():
        return ScheduleStore.load(path, config)
    store = ScheduleStore(config=config)
    store.path = path
    return store


state_option = click.option("--state", "state_path", default=None,
                            help="Archivo JSON de estado (por defecto el de la configuración).")


# ─── SETUP ───

@click.command("setup")
@click.option("--force", is_flag=True, default=False, help="Sobrescribir sin preguntar.")
def cmd_setup(force: bool):
    """Crea el archivo de configuración con los valores por defecto."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print("[yellow]Ya existe una configuración.[/yellow]")
        if not click.confirm("¿Sobrescribir?", default=False):
            return
    mgr.save(default_app_config())
    console.print("Ahora ejecute [bold]python main.py generate[/bold] "
                  "o importe docentes con [bold]python main.py import[/bold].")


# ─── CONFIG ───

@click.group("config")
def cmd_config():
    """Mostrar la configuración."""


@cmd_config.command("show")
def config_show():
    """Muestra la configuración actual."""
    from config.manager import ConfigManager
    ConfigManager().print_rich(_load_config())


# ─── GENERATE ───

@click.command("generate")
@click.option("--seed", default=42, help="Semilla para datos reproducibles.")
@click.option("--teachers", "num_teachers", default=40, help="Cantidad de docentes.")
@state_option
def cmd_generate(seed: int, num_teachers: int, state_path: Optional[str]):
    """Genera datos de demostración (establecimientos y docentes)."""
    from data.fake_data import FakeDataGenerator
    from scheduling.store import ScheduleStore

    config = _load_config()
    gen = FakeDataGenerator(config, seed=seed)
    state = gen.generate(num_teachers=num_teachers)
    gen.print_summary(state)

    store = ScheduleStore(state, config)
    path = store.save(Path(state_path) if state_path else None)
    console.print(f"[green]✓[/green] Estado guardado: {path}")


# ─── TEMPLATE ───

@click.command("template")
@click.option("--output", "-o", default="output/plantilla_docentes.xlsx",
              help="Ruta de la plantilla Excel.")
def cmd_template(output: str):
    """Crea la plantilla Excel para importar docentes."""
    from data.teacher_import import REQUIRED_COLUMNS, generate_template

    path = generate_template(Path(output))
    console.print(f"[green]✓[/green] Plantilla guardada: {path}")
    console.print(f"Columnas requeridas: [cyan]{', '.join(REQUIRED_COLUMNS)}[/cyan]")


# ─── IMPORT ───

@click.command("import")
@click.argument("archivo", type=click.Path(exists=True, path_type=Path))
@click.option("--establishment", "-e", "est_id", type=int, required=True,
              help="Id del establecimiento de las asignaciones.")
@click.option("--yes", "-y", is_flag=True, default=False, help="Importar sin confirmar.")
@state_option
def cmd_import(archivo: Path, est_id: int, yes: bool, state_path: Optional[str]):
    """Importa docentes desde Excel (una asignación por fila)."""
    from data.teacher_import import TeacherImportError, import_from_excel

    store = _load_or_new_store(state_path)
    est = store.get_establishment(est_id)
    if est is None:
        console.print(f"[red]Establecimiento {est_id} no existe.[/red]")
        sys.exit(1)

    try:
        preview = import_from_excel(archivo, est, start_id=store.next_teacher_id())
    except TeacherImportError as e:
        console.print(f"[red bold]Importación fallida:[/red bold] {e}")
        sys.exit(1)

    table = Table(title=f"Vista previa: {est.name}", box=box.SIMPLE)
    for col in ("RUT", "Nombre", "Función", "Tipo", "Contrato", "Lectivas", "No lect."):
        table.add_column(col)
    for t in preview.candidates:
        a = t.assignments[0]
        table.add_row(t.rut, t.name, a.role, a.assignment_type.value,
                      f"{a.contract_hours}h", f"{a.lectivas}h", f"{a.no_lectivas}h")
    console.print(table)
    for w in preview.warnings:
        console.print(f"[yellow]⚠ {w}[/yellow]")

    if not preview.candidates:
        console.print("[yellow]No hay docentes para importar.[/yellow]")
        return
    if not yes and not click.confirm(
            f"¿Importar {len(preview.candidates)} docentes?", default=True):
        return

    report = store.import_teachers(preview.candidates)
    for err in report.errores:
        console.print(f"[red]✗ {err}[/red]")
    store.save()
    console.print(f"[green]✓[/green] {report.exitosos} docentes importados, "
                  f"{report.fallidos} rechazados")


# ─── DOCENTES ───

@click.command("teachers")
@click.option("--establishments", "show_est", is_flag=True, default=False,
              help="Incluir totales por establecimiento.")
@state_option
def cmd_teachers(show_est: bool, state_path: Optional[str]):
    """Horas de contrato, lectivas y uso del horario de cada docente."""
    from analysis.hours_report import build_hours_report
    store = _load_store_or_abort(state_path)
    build_hours_report(store).print_rich(show_establishments=show_est)


@click.command("teacher")
@click.argument("teacher_id", type=int)
@state_option
def cmd_teacher(teacher_id: int, state_path: Optional[str]):
    """Detalle de horas de un docente."""
    from hours.calculator import teacher_summary

    store = _load_store_or_abort(state_path)
    teacher = store.get_teacher(teacher_id)
    if teacher is None:
        console.print(f"[red]Docente {teacher_id} no existe.[/red]")
        sys.exit(1)

    s = teacher_summary(teacher, store.grid, store.exclude_directiva)
    console.print(Panel(
        f"[bold]{s.name}[/bold]  {s.rut}\n"
        f"Contrato: {s.contract_hours}h | Lectivas: {s.lectivas}h | "
        f"No lectivas: {s.no_lectivas}h\n"
        f"PIE: {s.pie_hours}h | Directiva: {s.directiva_hours}h\n"
        f"En horario: {s.used_in_grid} bloques | Disponibles: {s.available_for_grid}",
        title=f"Docente {s.teacher_id}", border_style="cyan",
    ))
    table = Table(box=box.ROUNDED)
    for col in ("Establecimiento", "Tipo", "Proporción", "Contrato",
                "Lectivas", "No lect.", "Asignables", "Días bloqueados"):
        table.add_column(col)
    for a, detail in zip(teacher.assignments, s.assignments):
        table.add_row(a.establishment_name, a.assignment_type.value, a.ratio.value,
                      f"{a.contract_hours}h", f"{a.lectivas}h", f"{a.no_lectivas}h",
                      str(detail.schedulable), ", ".join(a.blocked_days) or "–")
    console.print(table)


# ─── HORARIO ───

@click.command("assign")
@click.argument("course_key")
@click.argument("weekday")
@click.argument("block_id", type=int)
@click.option("--teacher", "-t", "teacher_id", type=int, required=True, help="Id del docente.")
@click.option("--subject", "-s", "subject_code", required=True,
              help="Código de la asignatura (p.ej. Mat).")
@state_option
def cmd_assign(course_key: str, weekday: str, block_id: int, teacher_id: int,
               subject_code: str, state_path: Optional[str]):
    """Asigna un bloque de clase a un docente."""
    from models.keys import establishment_id_of

    store = _load_store_or_abort(state_path)
    est = store.get_establishment(establishment_id_of(course_key) or 0)
    subjects = est.subjects_or_default() if est else []
    subject = next((s for s in subjects if s.code.lower() == subject_code.lower()), None)
    if subject is None:
        console.print(f"[red]Asignatura '{subject_code}' no encontrada.[/red]")
        sys.exit(1)

    result = store.assign_block(course_key, weekday, block_id, subject, teacher_id)
    if not result.success:
        console.print(f"[red]✗ {result.error.message}[/red]")
        sys.exit(1)
    store.save()
    console.print(f"[green]✓[/green] {course_key} {weekday}-{block_id}: {subject.name}")


@click.command("remove")
@click.argument("course_key")
@click.argument("slot_key")
@state_option
def cmd_remove(course_key: str, slot_key: str, state_path: Optional[str]):
    """Quita un bloque del horario de un curso."""
    store = _load_store_or_abort(state_path)
    if store.remove_block(course_key, slot_key):
        store.save()
        console.print(f"[green]✓[/green] Bloque {slot_key} eliminado de {course_key}")
    else:
        console.print(f"[dim]{course_key} {slot_key} ya estaba vacío.[/dim]")


@click.command("autogen")
@click.argument("course_key")
@click.option("--seed", type=int, default=None, help="Semilla para elegir asignaturas.")
@click.option("--apply", "apply_", is_flag=True, default=False,
              help="Aplicar las propuestas al horario.")
@state_option
def cmd_autogen(course_key: str, seed: Optional[int], apply_: bool,
                state_path: Optional[str]):
    """Propone (y opcionalmente aplica) el horario de un curso."""
    from scheduling.auto_generator import generate_for_course

    store = _load_store_or_abort(state_path)
    if seed is not None:
        store.config.autogen.seed = seed
    try:
        result = generate_for_course(store, course_key)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"[bold]{result.messages[0]}[/bold]")
    table = Table(box=box.SIMPLE)
    for col in ("Día", "Bloque", "Asignatura", "Docente"):
        table.add_column(col)
    for p in result.placements:
        table.add_row(p.weekday, str(p.block_id), p.subject.name, p.teacher_name)
    for u in result.unplaced:
        table.add_row(u.weekday, str(u.block_id), "[yellow]–[/yellow]",
                      f"[yellow]{u.reason}[/yellow]")
    console.print(table)

    if not apply_:
        console.print("[dim]Use --apply para guardar las propuestas.[/dim]")
        return
    report = store.commit_placements(course_key, result.placements)
    for err in report.errores:
        console.print(f"[red]✗ {err}[/red]")
    store.save()
    console.print(f"[green]✓[/green] {report.exitosos} aplicados, {report.fallidos} rechazados")


@click.command("repair")
@state_option
def cmd_repair(state_path: Optional[str]):
    """Completa o elimina bloques con datos incompletos."""
    store = _load_store_or_abort(state_path)
    report = store.repair_corrupt_data()
    store.save()
    console.print(f"[green]✓[/green] Reparados: {report.repaired} | "
                  f"Eliminados: {report.deleted}")


@click.command("validate")
@state_option
def cmd_validate(state_path: Optional[str]):
    """Audita el horario completo. Termina con código 1 si hay errores."""
    from analysis.grid_validator import GridValidator
    store = _load_store_or_abort(state_path)
    report = GridValidator().validate(store)
    report.print_rich()
    if not report.is_valid:
        sys.exit(1)


# ─── ESTABLECIMIENTOS ───

@click.group("establishment")
def cmd_establishment():
    """Operaciones sobre establecimientos."""


@cmd_establishment.command("delete")
@click.argument("est_id", type=int)
@click.option("--yes", "-y", is_flag=True, default=False, help="Eliminar sin confirmar.")
@state_option
def establishment_delete(est_id: int, yes: bool, state_path: Optional[str]):
    """Elimina un establecimiento, su jornada y los horarios de sus cursos."""
    store = _load_store_or_abort(state_path)
    est = store.get_establishment(est_id)
    if est is None:
        console.print(f"[red]Establecimiento {est_id} no existe.[/red]")
        sys.exit(1)
    if not yes and not click.confirm(f"¿Eliminar {est.name}?", default=False):
        return
    removed = store.delete_establishment(est_id)
    store.save()
    console.print(f"[green]✓[/green] {est.name} eliminado ({removed} bloques del horario)")


# ─── CLI PRINCIPAL ───

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log detallado.")
def cli(verbose: bool):
    """Horas docentes (Ley 20.903) y horario semanal por bloques.

    Comience con: python main.py setup
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def main():
    cli()


# Registrar comandos
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_teachers)
cli.add_command(cmd_teacher)
cli.add_command(cmd_assign)
cli.add_command(cmd_remove)
cli.add_command(cmd_autogen)
cli.add_command(cmd_repair)
cli.add_command(cmd_validate)
cli.add_command(cmd_establishment)


if __name__ == "__main__":
    main()
