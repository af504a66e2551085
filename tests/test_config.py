"""Tests de configuración, valores por defecto y generación de la jornada."""

from pathlib import Path

import pytest

from config.defaults import (
    BASE_SUBJECTS,
    WEEKDAYS,
    default_app_config,
    default_block_layout,
    initial_establishments,
)
from config.manager import ConfigManager
from config.schema import AppConfig, BlockLayoutConfig, BreakSlot, HoursConfig
from models.block import BlockKind
from scheduling.block_layout import class_blocks, generate_blocks


# ─── VALORES POR DEFECTO ───

class TestDefaults:
    def test_default_block_layout(self):
        """Jornada estándar: 14 bloques, 10 de clase, 3 recreos y colación."""
        blocks = default_block_layout()
        assert len(blocks) == 14
        assert len(class_blocks(blocks)) == 10
        assert [b.id for b in blocks] == list(range(1, 15))
        assert blocks[2].kind == BlockKind.RECREO
        assert blocks[8].kind == BlockKind.COLACION
        assert blocks[0].start_time == "08:00"
        assert blocks[-1].end_time == "16:45"

    def test_generator_reproduces_default_layout(self):
        """BlockLayoutConfig() genera exactamente la jornada estándar."""
        generated = generate_blocks(BlockLayoutConfig())
        assert [b.model_dump() for b in generated] == \
               [b.model_dump() for b in default_block_layout()]

    def test_base_subjects(self):
        assert len(BASE_SUBJECTS) == 16
        assert len({s.code for s in BASE_SUBJECTS}) == 16
        editable = [s.code for s in BASE_SUBJECTS if s.editable]
        assert editable == ["Otras"]

    def test_initial_establishments(self):
        ests = initial_establishments()
        assert len(ests) == 20
        assert [e.id for e in ests] == list(range(1, 21))
        assert all(e.prioritized for e in ests)
        liceo = ests[-1]
        assert liceo.level_range == (7, 12)
        assert "4° Medio A" in liceo.course_labels()

    def test_default_app_config(self):
        config = default_app_config()
        assert config.day_names == WEEKDAYS
        assert config.hours.max_contract_hours == 44
        assert config.hours.exclude_directiva_from_totals is True
        assert config.block_layout is None


# ─── VALIDACIÓN DE LA JORNADA ───

class TestBlockLayoutValidation:
    def test_custom_layout(self):
        layout = BlockLayoutConfig(
            start_time="08:30", end_time="14:00", block_minutes=40,
            recesses=[BreakSlot(after_block=3, duration_minutes=20)],
            lunch=None,
        )
        blocks = generate_blocks(layout)
        kinds = [b.kind for b in blocks]
        assert kinds.count(BlockKind.CLASE) == 7
        assert kinds[3] == BlockKind.RECREO
        assert BlockKind.COLACION not in kinds
        assert blocks[-1].end_time <= "14:00"

    def test_bad_time_format(self):
        with pytest.raises(Exception):
            BlockLayoutConfig(start_time="8:00")

    def test_start_after_end(self):
        with pytest.raises(Exception):
            BlockLayoutConfig(start_time="17:00", end_time="08:00")

    def test_block_duration_bounds(self):
        with pytest.raises(Exception):
            BlockLayoutConfig(block_minutes=20)
        with pytest.raises(Exception):
            BlockLayoutConfig(block_minutes=95)

    def test_day_longer_than_twelve_hours(self):
        with pytest.raises(Exception):
            BlockLayoutConfig(start_time="07:00", end_time="19:30")

    def test_too_few_class_blocks(self):
        with pytest.raises(Exception):
            BlockLayoutConfig(start_time="08:00", end_time="11:00", block_minutes=45)

    def test_hours_config_bounds(self):
        with pytest.raises(Exception):
            HoursConfig(max_contract_hours=45)


# ─── YAML ───

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Guardar, cargar y validar: ida y vuelta completa."""
        config = default_app_config()
        config.hours.exclude_directiva_from_totals = False
        config.autogen.seed = 7
        config.block_layout = BlockLayoutConfig(start_time="08:15", end_time="17:00")

        mgr = ConfigManager(tmp_path / "app_config.yaml")
        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "─── Horas ───" in text

        loaded = mgr.load()
        assert loaded == config

    def test_first_run_check(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "app_config.yaml")
        assert mgr.first_run_check() is True
        mgr.save(AppConfig())
        assert mgr.first_run_check() is False

    def test_load_missing_raises(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "no_existe.yaml")
        with pytest.raises(FileNotFoundError):
            mgr.load()
        assert mgr.load_or_default() == AppConfig()

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "app_config.yaml"
        path.write_text("hours:\n  max_contract_hours: 99\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(path).load()
