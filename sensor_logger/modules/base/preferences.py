"""Cached preference views over a module's ``config.txt``.

``ModulePreferences`` holds the merged (file + override) key/value map of one
config file. ``ScopedPreferences`` exposes a dotted sub-namespace of it, so
``gps.min_time_ms`` reads as ``min_time_ms`` through ``prefs.scope("gps")``.
Values are always strings; typed access goes through ``typed_config``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from sensor_logger.core.config_manager import ConfigManager, format_value, get_config_manager
from sensor_logger.core.logging_utils import get_module_logger

logger = get_module_logger(__name__)


@dataclass(slots=True)
class PreferenceChange:
    """Keys (and raw values) written by one ``write_*`` call."""

    updated: Dict[str, Any]


ChangeCallback = Callable[[PreferenceChange], None]


class ModulePreferences:
    def __init__(
        self,
        config_path: Path,
        *,
        config_manager: Optional[ConfigManager] = None,
        on_change: Optional[ChangeCallback] = None,
        initial_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._config_path = Path(config_path)
        self._manager = config_manager or get_config_manager()
        self._on_change = on_change
        self._values: Dict[str, Any] = dict(initial_data) if initial_data else {}
        if not initial_data:
            self.reload()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(key, default)

    def scope(self, prefix: str, *, separator: str = ".") -> "ScopedPreferences":
        return ScopedPreferences(self, prefix, separator=separator)

    def reload(self) -> Dict[str, Any]:
        """Re-read the file and its override layer."""
        self._values = self._manager.read_config(self._config_path)
        return self.snapshot()

    async def reload_async(self) -> Dict[str, Any]:
        self._values = await self._manager.read_config_async(self._config_path)
        return self.snapshot()

    def write_sync(self, updates: Dict[str, Any]) -> bool:
        """Persist ``updates``; the cache follows only if the write succeeded."""
        if not updates:
            return True
        ok = self._manager.write_config(self._config_path, updates)
        if ok:
            self._remember(updates)
        return ok

    async def write_async(self, updates: Dict[str, Any]) -> bool:
        if not updates:
            return True
        ok = await self._manager.write_config_async(self._config_path, updates)
        if ok:
            self._remember(updates)
        return ok

    def _remember(self, updates: Dict[str, Any]) -> None:
        self._values.update({key: format_value(value) for key, value in updates.items()})
        if self._on_change is None:
            return
        try:
            self._on_change(PreferenceChange(updated=dict(updates)))
        except Exception:
            logger.debug("Preference change callback failed", exc_info=True)


class ScopedPreferences:
    """Prefixing view of a ModulePreferences; an empty prefix is a passthrough."""

    def __init__(self, base: ModulePreferences, prefix: str, *, separator: str = ".") -> None:
        self._base = base
        self._separator = separator
        self._prefix = prefix.strip().rstrip(separator)

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, key: str) -> str:
        if not self._prefix:
            return key
        return f"{self._prefix}{self._separator}{key}" if key else self._prefix

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._base.get(self._key(key), default)

    def snapshot(self) -> Dict[str, Any]:
        values = self._base.snapshot()
        if not self._prefix:
            return values
        head = self._prefix + self._separator
        return {key[len(head):]: value for key, value in values.items() if key.startswith(head)}

    def scope(self, prefix: str, *, separator: str = ".") -> "ScopedPreferences":
        return self._base.scope(self._key(prefix), separator=separator)

    def write_sync(self, updates: Dict[str, Any]) -> bool:
        return self._base.write_sync({self._key(key): value for key, value in updates.items()})

    async def write_async(self, updates: Dict[str, Any]) -> bool:
        return await self._base.write_async({self._key(key): value for key, value in updates.items()})


__all__ = ["ModulePreferences", "PreferenceChange", "ScopedPreferences"]
