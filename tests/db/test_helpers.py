from __future__ import annotations

import pytest

from syncgate.db.helpers import bind_names, quote_backtick, quote_bracket, quote_double


def test_double_quote_plain_name() -> None:
    assert quote_double("todos") == '"todos"'


def test_double_quote_doubles_embedded_quotes() -> None:
    assert quote_double('my"table') == '"my""table"'


def test_double_quote_splits_schema_qualifier() -> None:
    assert quote_double("public.todos") == '"public"."todos"'


def test_backtick_rules_match_double_quote_rules() -> None:
    assert quote_backtick("todos") == "`todos`"
    assert quote_backtick("my`table") == "`my``table`"
    assert quote_backtick("app.todos") == "`app`.`todos`"


def test_bracket_wraps_and_escapes_closing_bracket() -> None:
    assert quote_bracket("todos") == "[todos]"
    assert quote_bracket("we]ird") == "[we]]ird]"
    assert quote_bracket("a.b") == "[a.b]"


def test_injection_attempt_stays_inside_identifier() -> None:
    name = 'x"; DROP TABLE todos; --'
    quoted = quote_double(name)
    assert quoted == '"x""; DROP TABLE todos; --"'
    # the only unescaped quotes are the outer pair
    assert quoted[1:-1].replace('""', "").count('"') == 0


@pytest.mark.parametrize("quote", [quote_double, quote_backtick, quote_bracket])
def test_empty_and_nul_names_are_rejected(quote) -> None:
    with pytest.raises(ValueError):
        quote("")
    with pytest.raises(ValueError):
        quote("a\x00b")


@pytest.mark.parametrize("quote", [quote_double, quote_backtick, quote_bracket])
def test_non_string_names_are_rejected(quote) -> None:
    with pytest.raises(TypeError):
        quote(42)


def test_bind_names_are_positional() -> None:
    assert bind_names(3) == ["p0", "p1", "p2"]
