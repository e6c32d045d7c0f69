from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from sheet_binder.config.loader import SCHEMA_PATH

"""Config schema contract test."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example():
    config = {
        "modules": ["game.records"],
        "registry": "game.records:REGISTRY",
        "object_store": "game.store:open_store",
        "key_column": "Name",
        "default_casing": "title",
        "export_url_template": "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=csv",
        "error_log_dir": "./logs",
        "sources": [
            {"spreadsheet_id": "1AbC", "gid": 0, "path": "data/monsters.xlsx", "sheet": "Monsters"},
            {"spreadsheet_id": "2XyZ", "path": "data/items.csv"},
        ],
    }
    jsonschema.validate(config, _schema())


def test_config_schema_empty_config_is_valid():
    jsonschema.validate({}, _schema())


@pytest.mark.parametrize(
    "config",
    [
        {"database": {"host": "localhost"}},
        {"default_casing": "camel"},
        {"object_store": "no_colon_here"},
        {"export_url_template": "https://example.com/export.csv"},
        {"sources": [{"spreadsheet_id": "abc"}]},
        {"sources": [{"spreadsheet_id": "abc", "path": "a.csv", "columns": ["A"]}]},
        {"modules": "game.records"},
    ],
)
def test_config_schema_rejects_invalid(config):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())
