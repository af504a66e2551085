"""Administrador de configuración: cargar, guardar y validar.

Usa ruamel.yaml para escribir YAML con comentarios por sección.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── COMENTARIOS YAML ───

_YAML_HEADER = f"""\
# ============================================
# Sistema de Horarios Docentes: configuración
# Ley 20.903 (horas lectivas / no lectivas)
# Creado: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "day_names": (
        "Días hábiles",
        "Orden fijo en que la generación automática recorre la semana.",
    ),
    "block_layout": (
        "Jornada por defecto",
        "null = jornada estándar de 14 bloques (08:00 - 16:45).",
    ),
    "hours": (
        "Horas",
        "exclude_directiva_from_totals: false = solo PIE queda fuera de los totales.",
    ),
    "autogen": (
        "Generación automática",
        None,
    ),
    "storage": (
        "Persistencia",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"

    def __init__(self, path: Optional[Path] = None):
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """True si todavía no existe un archivo de configuración."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Cargar ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Carga la configuración desde YAML, validada con Pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Archivo de configuración no encontrado: {target}\n"
                f"Ejecute 'python main.py setup' para crearlo."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Archivo de configuración inválido: {target}\n"
                f"Error de Pydantic: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> AppConfig:
        """Como ``load``, pero sin archivo devuelve la configuración por defecto."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            return AppConfig()
        return self.load(target)

    # ─── Guardar ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> Path:
        """Guarda la configuración como YAML comentado."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Configuración guardada: {target}")
        return target

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        hours_map = CommentedMap(cm["hours"])
        hours_map.yaml_add_eol_comment("Tope legal semanal", "max_contract_hours")
        cm["hours"] = hours_map

        return cm

    # ─── Mostrar ───

    def print_rich(self, config: AppConfig) -> None:
        """Tabla con los parámetros principales."""
        table = Table(title=config.system_name, box=box.SIMPLE)
        table.add_column("Parámetro", style="bold")
        table.add_column("Valor")
        table.add_row("Días", ", ".join(config.day_names))
        if config.block_layout is None:
            table.add_row("Jornada", "estándar (14 bloques)")
        else:
            bl = config.block_layout
            table.add_row("Jornada", f"{bl.start_time}-{bl.end_time}, "
                                     f"bloques de {bl.block_minutes} min")
        for k, v in config.hours.model_dump().items():
            table.add_row(f"hours.{k}", str(v))
        for k, v in config.autogen.model_dump().items():
            table.add_row(f"autogen.{k}", str(v))
        table.add_row("storage.state_path", config.storage.state_path)
        console.print(table)
