"""Typed views over string-valued module preferences."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from .preferences import ScopedPreferences

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})


@runtime_checkable
class ModuleConfig(Protocol):
    """A module's settings dataclass, buildable from preferences."""

    @classmethod
    def from_preferences(cls, prefs: ScopedPreferences, args: Any = None) -> "ModuleConfig":
        ...

    def to_dict(self) -> dict[str, Any]:
        ...


C = TypeVar("C", bound=ModuleConfig)
V = TypeVar("V")


def load_typed_config(config_cls: type[C], prefs: ScopedPreferences, args: Any = None) -> C:
    """Build ``config_cls`` from ``prefs``, letting non-None ``args`` attributes win."""
    return config_cls.from_preferences(prefs, args)


def _coerce(prefs: ScopedPreferences, key: str, default: V, convert: Callable[[Any], V]) -> V:
    raw = prefs.get(key)
    if raw is None:
        return default
    try:
        return convert(raw)
    except (TypeError, ValueError):
        return default


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in _TRUE_WORDS


def _to_path(raw: Any) -> Path:
    text = str(raw).strip()
    if not text:
        raise ValueError("empty path")
    return Path(text)


def get_pref_str(prefs: ScopedPreferences, key: str, default: str) -> str:
    return _coerce(prefs, key, default, str)


def get_pref_int(prefs: ScopedPreferences, key: str, default: int) -> int:
    return _coerce(prefs, key, default, int)


def get_pref_float(prefs: ScopedPreferences, key: str, default: float) -> float:
    return _coerce(prefs, key, default, float)


def get_pref_bool(prefs: ScopedPreferences, key: str, default: bool) -> bool:
    """Unrecognized words read as False, a missing key as ``default``."""
    return _coerce(prefs, key, default, _to_bool)


def get_pref_path(prefs: ScopedPreferences, key: str, default: Path) -> Path:
    return _coerce(prefs, key, default, _to_path)


__all__ = [
    "ModuleConfig",
    "load_typed_config",
    "get_pref_bool",
    "get_pref_float",
    "get_pref_int",
    "get_pref_path",
    "get_pref_str",
]
