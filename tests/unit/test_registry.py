from __future__ import annotations

from dataclasses import dataclass

import pytest

from sample_records import MONSTER_SHEET, REGISTRY, Creature, Monster, Node, Palette, Tree
from sheet_binder.binding.case import Case
from sheet_binder.binding.metadata import (
    ASSIGNER,
    CONVERTER,
    MethodBinding,
    SheetInfo,
    method_bindings,
    sheet_converter,
)
from sheet_binder.binding.registry import SheetRegistry, sheet, sheet_imported
from sheet_binder.logging.init import setup_logging
from sheet_binder.models.sheet_source import SheetSource


class Dungeon:
    @dataclass
    class Boss:
        name: str = ""


def test_sheet_decorator_registers_in_order():
    assert REGISTRY.record_types() == [Monster, Creature, Tree, Palette]
    info = REGISTRY.info_for(Monster)
    assert info.source == SheetSource(MONSTER_SHEET, "0")
    assert info.casing is Case.TITLE
    assert Monster.__sheet_info__ is info


def test_sheet_casing_string_is_parsed():
    assert REGISTRY.info_for(Palette).casing is Case.SNAKE
    assert REGISTRY.info_for(Creature).casing is None


def test_sheet_decorator_with_private_registry():
    registry = SheetRegistry()

    @sheet("private", registry=registry)
    @dataclass
    class Local:
        name: str

    assert registry.record_types() == [Local]
    assert Local not in REGISTRY.record_types()


def test_select_returns_types_with_their_sheet_info():
    pairs = REGISTRY.select()
    assert [t for t, _ in pairs] == [Monster, Creature, Tree, Palette]
    assert all(info is REGISTRY.info_for(t) for t, info in pairs)
    assert REGISTRY.select(["Palette", "Monster"]) == [
        (Monster, REGISTRY.info_for(Monster)),
        (Palette, REGISTRY.info_for(Palette)),
    ]


def test_select_accepts_qualified_names():
    registry = SheetRegistry()
    info = SheetInfo(SheetSource("dungeon"))
    registry.register_type(Dungeon.Boss, info)
    assert registry.select(["Dungeon.Boss"]) == [(Dungeon.Boss, info)]
    assert registry.select(["Boss"]) == [(Dungeon.Boss, info)]


def test_select_warns_on_unknown_names(capsys):
    setup_logging()
    assert REGISTRY.select(["Unicorn", "Tree"]) == [(Tree, REGISTRY.info_for(Tree))]
    assert "WARN --only Unicorn does not name a registered record type" in capsys.readouterr().out


def test_opaque_types():
    registry = SheetRegistry()
    assert not registry.is_opaque(Node)
    registry.add_opaque_type(Node)
    registry.add_opaque_type(Node)
    assert registry.is_opaque(Node)
    assert not registry.is_opaque(int | None)


def test_method_binding_requires_exactly_one_selector():
    with pytest.raises(ValueError):
        MethodBinding(CONVERTER)
    with pytest.raises(ValueError):
        MethodBinding(CONVERTER, column="A", value_type=int)
    with pytest.raises(ValueError):
        MethodBinding("transform", column="A")


def test_stacked_marks():
    @sheet_converter("A")
    @sheet_converter(value_type=int)
    def parse(raw: str) -> int:
        return int(raw)

    assert method_bindings(parse) == (
        MethodBinding(CONVERTER, value_type=int),
        MethodBinding(CONVERTER, column="A"),
    )
    assert method_bindings(42) == ()


def test_register_functions():
    registry = SheetRegistry()
    registry.register_converter(Node, int, column="Depth")
    registry.register_assigner(Node, setattr, value_type=str)
    kinds = [binding.kind for binding, _ in registry.functions_for(Node)]
    assert kinds == [CONVERTER, ASSIGNER]


def test_callback_gid_filters():
    registry = SheetRegistry()
    any_gid = registry.register_callback("sheet", lambda: None)
    listed = registry.register_callback("sheet", lambda: None, gid="1, 2,,")
    as_list = registry.register_callback("sheet", lambda: None, gid=["3"])

    assert listed.gids == ("1", "2")
    assert as_list.gids == ("3",)
    assert any_gid.matches(SheetSource("sheet", "9"))
    assert any_gid.matches(SheetSource("sheet"))
    assert listed.matches(SheetSource("sheet", "2"))
    assert not listed.matches(SheetSource("sheet", "3"))
    assert not listed.matches(SheetSource("sheet"))
    assert not any_gid.matches(SheetSource("other", "1"))


def test_sheet_imported_registers_callback():
    registry = SheetRegistry()

    @sheet_imported("sheet", gid="0", registry=registry)
    def done() -> None:
        pass

    (registration,) = registry.callbacks()
    assert registration.callback is done
    assert registration.name.endswith("done")


def test_register_type_replaces_info():
    registry = SheetRegistry()
    registry.register_type(Node, SheetInfo(SheetSource("a")))
    registry.register_type(Node, SheetInfo(SheetSource("b")))
    assert registry.info_for(Node).source.spreadsheet_id == "b"
    assert registry.record_types() == [Node]
