from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any, Generic, Literal, TypeVar, get_args

from pydantic import GetCoreSchemaHandler, TypeAdapter, ValidationError
from pydantic_core import core_schema

from .env import LookupSource, as_lookup
from .exceptions import ExpliconError, ParseFailed, ValidationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENV_KEY = "env"


@lru_cache(maxsize=None)
def _text_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


class Sourced(ABC, Generic[T]):
    """A configuration value given directly or via an environment variable name.

    Exactly one of two variants is ever constructed: ``Env`` or ``Value``.
    When used as a pydantic field, ``{"env": "NAME"}`` becomes ``Env("NAME")``
    and anything else is validated as ``T`` and wrapped in ``Value``. An input
    that is literally ``{"env": ...}`` is always read as a reference, even
    when ``T`` could accept it.

    Resolution comes in two families. ``resolve*`` parses environment text
    with pydantic's string-mode validation for ``T``. ``resolve_from_string*``
    builds ``T(text)`` instead, for types such as ``SecretStr`` that are
    constructed from a raw string.

    The target of an ``Env`` is set by the enclosing ``Sourced[T]`` field or
    by ``target=``. Subscripting the variant, as in ``Env[int]("PORT")``,
    only annotates it; such a reference still resolves as ``str``.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError("Sourced is closed to Env and Value")

    @staticmethod
    def from_env(name: str, target: type[T] | None = None) -> Sourced[T]:
        return Env(name, target=target)

    @staticmethod
    def of(value: T) -> Sourced[T]:
        return Value(value)

    @abstractmethod
    def _resolve_with(self, convert: Callable[[Any, str], T], lookup: LookupSource) -> T: ...

    @abstractmethod
    def _default(self) -> T: ...

    def _note_fallback(self, exc: ExpliconError, substitute: str) -> None:
        logger.debug("%r unresolved (%s); using %s", self, type(exc).__name__, substitute)

    # text-parseable targets

    def resolve(self, *, lookup: LookupSource = None) -> T:
        """Return the literal, or read and parse the environment variable.

        Raises ``VarLookupFailed`` when the variable is absent or not valid
        text, and ``ParseFailed`` when the text does not parse as ``T``.
        """
        return self._resolve_with(_parse_text, lookup)

    def resolve_or_default(self, *, lookup: LookupSource = None) -> T:
        try:
            return self.resolve(lookup=lookup)
        except ExpliconError as exc:
            self._note_fallback(exc, "default")
            return self._default()

    def resolve_or(self, fallback: T, *, lookup: LookupSource = None) -> T:
        try:
            return self.resolve(lookup=lookup)
        except ExpliconError as exc:
            self._note_fallback(exc, "fallback")
            return fallback

    def resolve_and_validate(self, predicate: Callable[[T], bool], *, lookup: LookupSource = None) -> T:
        value = self.resolve(lookup=lookup)
        if not predicate(value):
            raise ValidationFailed()
        return value

    # string-constructible targets

    def resolve_from_string(self, *, lookup: LookupSource = None) -> T:
        """Like ``resolve`` but builds ``T(text)``; only the lookup can fail."""
        return self._resolve_with(_construct, lookup)

    def resolve_from_string_or(self, fallback: T, *, lookup: LookupSource = None) -> T:
        try:
            return self.resolve_from_string(lookup=lookup)
        except ExpliconError as exc:
            self._note_fallback(exc, "fallback")
            return fallback

    def resolve_from_string_and_validate(
        self,
        predicate: Callable[[T], bool],
        *,
        lookup: LookupSource = None,
    ) -> T:
        value = self.resolve_from_string(lookup=lookup)
        if not predicate(value):
            raise ValidationFailed()
        return value

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        args = get_args(source_type)
        target = args[0] if args else Any
        env_target = None if target is Any or isinstance(target, TypeVar) else target

        value_schema = handler.generate_schema(target)
        env_schema = core_schema.no_info_after_validator_function(
            lambda raw: Env(raw[ENV_KEY], target=env_target),
            core_schema.typed_dict_schema(
                {ENV_KEY: core_schema.typed_dict_field(core_schema.str_schema(strict=True))},
                extra_behavior="forbid",
            ),
        )
        literal_schema = core_schema.no_info_after_validator_function(Value, value_schema)

        def _bind_target(env: Env[Any]) -> Env[Any]:
            if env.target is None and env_target is not None:
                return replace(env, target=env_target)
            return env

        env_instance_schema = core_schema.no_info_after_validator_function(
            _bind_target,
            core_schema.is_instance_schema(Env),
        )
        # literals built in code are validated as T like decoded ones
        value_instance_schema = core_schema.chain_schema(
            [
                core_schema.is_instance_schema(Value),
                core_schema.no_info_plain_validator_function(lambda literal: literal.value),
                literal_schema,
            ]
        )

        return core_schema.json_or_python_schema(
            json_schema=core_schema.union_schema([env_schema, literal_schema], mode="left_to_right"),
            python_schema=core_schema.union_schema(
                [env_instance_schema, value_instance_schema, env_schema, literal_schema],
                mode="left_to_right",
            ),
            serialization=core_schema.wrap_serializer_function_ser_schema(
                _serialize_sourced,
                schema=value_schema,
                info_arg=False,
            ),
        )


@dataclass(frozen=True)
class Env(Sourced[T]):
    name: str
    target: Any = field(default=None, compare=False, repr=False)

    def _target_type(self) -> Any:
        return str if self.target is None else self.target

    def _resolve_with(self, convert: Callable[[Any, str], T], lookup: LookupSource) -> T:
        return convert(self._target_type(), as_lookup(lookup)(self.name))

    def _default(self) -> T:
        return self._target_type()()


@dataclass(frozen=True)
class Value(Sourced[T]):
    value: T

    def _resolve_with(self, convert: Callable[[Any, str], T], lookup: LookupSource) -> T:
        return deepcopy(self.value)

    def _default(self) -> T:
        return deepcopy(self.value)


def _parse_text(target: Any, text: str) -> Any:
    try:
        return _text_adapter(target).validate_strings(text)
    except ValidationError as exc:
        raise ParseFailed(str(exc)) from exc


def _construct(target: Any, text: str) -> Any:
    return target(text)


def _serialize_sourced(sourced: Any, handler: core_schema.SerializerFunctionWrapHandler) -> Any:
    if isinstance(sourced, Env):
        return {ENV_KEY: sourced.name}
    if isinstance(sourced, Value):
        return handler(sourced.value)
    return handler(sourced)


@lru_cache(maxsize=None)
def _sourced_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(Sourced[target])


def load_sourced(raw: Any, target: Any = Any) -> Sourced[Any]:
    """Validate already-decoded configuration data as a ``Sourced[target]``."""
    return _sourced_adapter(target).validate_python(raw)


def dump_sourced(
    sourced: Sourced[Any],
    target: Any = Any,
    *,
    mode: Literal["python", "json"] = "python",
) -> Any:
    return _sourced_adapter(target).dump_python(sourced, mode=mode)


__all__ = [
    "ENV_KEY",
    "Env",
    "Sourced",
    "Value",
    "dump_sourced",
    "load_sourced",
]
