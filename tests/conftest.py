# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

import sample_records
from sheet_binder.logging.init import reset_logging

MONSTERS_CSV = """Name,Max Health,Element,Speed,Tags,Attack,Defense,Drop 0,Drop Chance 0,Drop 1,Drop Chance 1,Rune Power
Slime,20,water,0.5,soft;slow,2,1,,,,,
Dragon,500,FIRE,2.5,boss,90,70,Scale,25%,Fang,0.1,9
,1,fire,1,,,,,,,,
Phantom,10,earth,1,,,,,,,,
"""

CREATURES_CSV = """Name,Health,Tag 0,Tag 1
Goblin,15,weak,fast
"""

TREES_CSV = """Name,Label
Oak,leaf
"""

PALETTES_CSV = """Name,primary_color,Signature,brightness
Sunset,#ff8800,#010203,140
"""


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_state():
    reset_logging()
    sample_records.IMPORTED.clear()
    yield
    reset_logging()


@pytest.fixture()
def sample_sources(temp_workdir: Path) -> dict[str, Path]:
    files = {
        sample_records.MONSTER_SHEET: ("monsters.csv", MONSTERS_CSV),
        sample_records.CREATURE_SHEET: ("creatures.csv", CREATURES_CSV),
        sample_records.TREE_SHEET: ("trees.csv", TREES_CSV),
        sample_records.PALETTE_SHEET: ("palettes.csv", PALETTES_CSV),
    }
    paths: dict[str, Path] = {}
    for spreadsheet_id, (name, text) in files.items():
        path = temp_workdir / "data" / name
        path.write_text(text, encoding="utf-8")
        paths[spreadsheet_id] = path
    return paths


@pytest.fixture()
def sample_config_yaml(sample_sources: dict[str, Path]) -> str:
    lines = [
        "registry: sample_records:REGISTRY",
        "object_store: sample_records:build_store",
        "key_column: Name",
        "error_log_dir: ./logs",
        "sources:",
    ]
    for spreadsheet_id, path in sample_sources.items():
        lines.append(f"  - spreadsheet_id: {spreadsheet_id}")
        lines.append(f"    path: {path.as_posix()}")
    return "\n".join(lines) + "\n"


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
