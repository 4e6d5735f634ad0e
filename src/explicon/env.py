from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from typing import TypeAlias

from .exceptions import VarLookupFailed

logger = logging.getLogger(__name__)

EnvLookup: TypeAlias = Callable[[str], str]
LookupSource: TypeAlias = EnvLookup | Mapping[str, str] | None

NOT_PRESENT = "not present"
NOT_UNICODE = "not valid unicode"


def _ensure_text(name: str, value: str) -> str:
    # os.environ keeps undecodable bytes as lone surrogates
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise VarLookupFailed(name, NOT_UNICODE) from exc
    return value


def _read(environ: Mapping[str, str], name: str) -> str:
    try:
        value = environ[name]
    except KeyError as exc:
        raise VarLookupFailed(name, NOT_PRESENT) from exc
    if not isinstance(value, str):
        raise VarLookupFailed(name, NOT_UNICODE)
    return _ensure_text(name, value)


def read_env_var(name: str) -> str:
    """Read one variable from the process environment, on every call."""

    logger.debug("reading env var %r", name)
    return _read(os.environ, name)


def mapping_lookup(environ: Mapping[str, str]) -> EnvLookup:
    """Build a lookup over ``environ`` that fails the same way ``read_env_var`` does."""

    def _lookup(name: str) -> str:
        logger.debug("reading env var %r from mapping", name)
        return _read(environ, name)

    return _lookup


def as_lookup(source: LookupSource) -> EnvLookup:
    if source is None:
        return read_env_var
    if isinstance(source, Mapping):
        return mapping_lookup(source)
    if callable(source):
        return source
    raise TypeError(f"env lookup must be a callable or a mapping, got {type(source).__name__}")


__all__ = [
    "EnvLookup",
    "LookupSource",
    "NOT_PRESENT",
    "NOT_UNICODE",
    "as_lookup",
    "mapping_lookup",
    "read_env_var",
]
