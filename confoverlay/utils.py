import re
from typing import TypedDict, TypeVar

T = TypeVar("T", bound=TypedDict("T", {}))
U = TypeVar("U", bound=TypedDict("U", {}))

_IDENTIFIER_RE = re.compile(r"[^\W\d_]\w*")


def resolve_config(config: T, default_config: U) -> U:
    _config = default_config.copy()
    if config:
        for key in _config:
            if key in config:
                _config[key] = config[key]
    return _config


def valid_identifier(name: str) -> bool:
    """A letter followed by zero or more letters, digits or underscores."""
    return bool(_IDENTIFIER_RE.fullmatch(name))
