from . import exceptions
from .env import EnvLookup, mapping_lookup, read_env_var
from .exceptions import ExpliconError, Other, ParseFailed, ResolveError, ValidationFailed, VarLookupFailed
from .sourced import Env, Sourced, Value, dump_sourced, load_sourced

__all__ = [
    "Env",
    "EnvLookup",
    "ExpliconError",
    "Other",
    "ParseFailed",
    "ResolveError",
    "Sourced",
    "ValidationFailed",
    "Value",
    "VarLookupFailed",
    "dump_sourced",
    "exceptions",
    "load_sourced",
    "mapping_lookup",
    "read_env_var",
]
