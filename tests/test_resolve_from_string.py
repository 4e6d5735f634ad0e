from __future__ import annotations

import pytest
from pydantic import SecretStr
from pydantic.errors import PydanticSchemaGenerationError

from explicon import Env, Value
from explicon.exceptions import ParseFailed, ValidationFailed, VarLookupFailed


class Opaque:
    """String-constructible type with no pydantic schema."""

    def __init__(self, raw: str) -> None:
        self.raw = raw


def test_resolve_from_string_builds_secret() -> None:
    token = Env("TOKEN", target=SecretStr).resolve_from_string(lookup={"TOKEN": "s3cr3t"})

    assert isinstance(token, SecretStr)
    assert token.get_secret_value() == "s3cr3t"
    assert "s3cr3t" not in repr(token)


def test_resolve_from_string_value_returns_literal() -> None:
    secret = SecretStr("inline")
    assert Value(secret).resolve_from_string() == secret


def test_resolve_from_string_never_parses() -> None:
    resolved = Env("BLOB", target=Opaque).resolve_from_string(lookup={"BLOB": "{not json"})

    assert isinstance(resolved, Opaque)
    assert resolved.raw == "{not json"


def test_resolve_from_string_missing_raises_lookup_error() -> None:
    with pytest.raises(VarLookupFailed):
        Env("BLOB", target=Opaque).resolve_from_string(lookup={})


def test_parse_family_needs_a_schema_for_target() -> None:
    with pytest.raises(PydanticSchemaGenerationError):
        Env("BLOB", target=Opaque).resolve(lookup={"BLOB": "abc"})


def test_resolve_from_string_or_returns_fallback() -> None:
    fallback = SecretStr("fallback")
    sourced = Env("TOKEN", target=SecretStr)

    assert sourced.resolve_from_string_or(fallback, lookup={}) is fallback
    assert sourced.resolve_from_string_or(fallback, lookup={"TOKEN": "t"}).get_secret_value() == "t"


def test_resolve_from_string_and_validate() -> None:
    sourced = Env("TOKEN", target=SecretStr)

    def long_enough(value: SecretStr) -> bool:
        return len(value.get_secret_value()) >= 8

    resolved = sourced.resolve_from_string_and_validate(long_enough, lookup={"TOKEN": "0123456789"})
    assert resolved.get_secret_value() == "0123456789"

    with pytest.raises(ValidationFailed, match="Validation failed"):
        sourced.resolve_from_string_and_validate(long_enough, lookup={"TOKEN": "short"})
    with pytest.raises(VarLookupFailed):
        sourced.resolve_from_string_and_validate(long_enough, lookup={})


def test_string_family_and_parse_family_differ_on_same_text() -> None:
    sourced = Env("RETRIES", target=int)
    environ = {"RETRIES": "abc"}

    with pytest.raises(ParseFailed):
        sourced.resolve(lookup=environ)
    with pytest.raises(ValueError):
        sourced.resolve_from_string(lookup=environ)
    assert sourced.resolve_from_string(lookup={"RETRIES": "3"}) == 3
