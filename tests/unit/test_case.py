from __future__ import annotations

import pytest

from sheet_binder.binding.case import Case, normalize, split_words


@pytest.mark.parametrize(
    "identifier, expected",
    [
        ("maxHealth", ["max", "Health"]),
        ("max_health", ["max", "health"]),
        ("drop-chance", ["drop", "chance"]),
        ("level2Boss", ["level2", "Boss"]),
        ("  spaced   out ", ["spaced", "out"]),
        ("", []),
    ],
)
def test_split_words(identifier, expected):
    assert split_words(identifier) == expected


@pytest.mark.parametrize(
    "policy, expected",
    [
        (Case.NONE, "max_health"),
        (Case.PASCAL, "MaxHealth"),
        (Case.TITLE, "Max Health"),
        (Case.SNAKE, "max_health"),
        (Case.NICIFIED, "Max health"),
    ],
)
def test_normalize_snake_identifier(policy, expected):
    assert normalize("max_health", policy) == expected


def test_normalize_camel_identifier():
    assert normalize("maxHealth", Case.PASCAL) == "MaxHealth"
    assert normalize("maxHealth", Case.TITLE) == "Max Health"
    assert normalize("maxHealth", Case.SNAKE) == "max_health"
    assert normalize("maxHealth", Case.NICIFIED) == "Max Health"


def test_title_lowercases_rest_of_each_word():
    assert normalize("HTMLParser", Case.TITLE) == "Htmlparser"


def test_nicified_keeps_acronyms_and_drops_member_prefix():
    assert normalize("HTMLParser", Case.NICIFIED) == "HTML Parser"
    assert normalize("m_spawnRate", Case.NICIFIED) == "Spawn Rate"
    assert normalize("_hidden", Case.NICIFIED) == "Hidden"


def test_empty_identifier():
    for policy in Case:
        assert normalize("", policy) == ""


def test_normalize_is_deterministic():
    assert normalize("dropChance", Case.TITLE) == normalize("dropChance", Case.TITLE)


def test_case_parse():
    assert Case.parse("Title") is Case.TITLE
    assert Case.parse(None) is Case.NONE
    assert Case.parse(Case.SNAKE) is Case.SNAKE
    with pytest.raises(ValueError):
        Case.parse("kebab")


def test_normalize_accepts_policy_string():
    assert normalize("max_health", "pascal") == "MaxHealth"
