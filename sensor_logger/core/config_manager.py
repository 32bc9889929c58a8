"""Reader/writer for the ``key = value`` config files used by every module.

A module's ``config.txt`` may live somewhere read-only (an installed
package, a mounted image). Writes that fail for lack of permission are
stored instead in a per-user override file, and reads always layer that
override on top of the shipped file.
"""

import asyncio
import errno
import hashlib
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import aiofiles

from .logging_utils import get_module_logger
from .paths import PROJECT_ROOT, USER_CONFIG_OVERRIDES_DIR

logger = get_module_logger("ConfigManager")

_QUOTES = ('"', "'")


def format_value(value: Any) -> str:
    """Render a setting the way config files spell it (``true``, ``100``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``key = value`` lines; ``#`` starts a comment, quotes are stripped."""
    config: Dict[str, str] = {}
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        value = value.split("#", 1)[0].strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
            value = value[1:-1]
        config[key] = value
    return config


def apply_updates(lines: List[str], updates: Dict[str, Any]) -> List[str]:
    """Rewrite existing keys in place, keeping indentation; append new keys."""
    pending = dict(updates)
    result: List[str] = []
    for line in lines:
        stripped = line.strip()
        key = stripped.split("=", 1)[0].strip() if "=" in stripped else None
        if key in pending and not stripped.startswith("#"):
            indent = line[: len(line) - len(line.lstrip())]
            result.append(f"{indent}{key} = {format_value(pending.pop(key))}\n")
        else:
            result.append(line)
    if result and not result[-1].endswith("\n"):
        result[-1] += "\n"
    for key, value in pending.items():
        result.append(f"{key} = {format_value(value)}\n")
        logger.debug("Added new config key: %s = %s", key, format_value(value))
    return result


def _is_read_only(exc: OSError) -> bool:
    return isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EROFS)


class ConfigManager:
    """Reads and updates module config files, with a per-user override layer."""

    def __init__(self, overrides_dir: Optional[Path] = None):
        self.lock = asyncio.Lock()
        self.overrides_dir = Path(overrides_dir) if overrides_dir else USER_CONFIG_OVERRIDES_DIR
        self._project_root = PROJECT_ROOT.resolve()

    # ------------------------------------------------------------------
    # Override layer

    def override_path(self, config_path: Path) -> Path:
        """Where writes to ``config_path`` go when it is not writable."""
        try:
            relative = Path(config_path).resolve().relative_to(self._project_root)
        except ValueError:
            digest = hashlib.sha1(str(config_path).encode("utf-8")).hexdigest()[:10]
            stem = re.sub(r"[^a-zA-Z0-9._-]+", "_", config_path.stem or "config")
            relative = Path("external") / f"{stem}_{digest}{config_path.suffix or '.txt'}"
        return self.overrides_dir / relative

    def _read_override(self, config_path: Path) -> Dict[str, str]:
        path = self.override_path(config_path)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return parse_config_lines(fh)
        except OSError as exc:
            logger.warning("Failed to read override config %s: %s", path, exc)
            return {}

    def _store_override(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        path = self.override_path(config_path)
        merged = self._read_override(config_path)
        merged.update({key: format_value(value) for key, value in updates.items()})
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                fh.writelines(f"{key} = {merged[key]}\n" for key in sorted(merged))
        except OSError as exc:
            logger.error("Failed to write config override %s: %s", path, exc)
            return False
        logger.debug("Stored config overrides in %s", path)
        return True

    def _drop_override(self, config_path: Path) -> None:
        try:
            self.override_path(config_path).unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove override for %s", config_path, exc_info=True)

    def _write_failed(self, config_path: Path, updates: Dict[str, Any], exc: OSError) -> bool:
        if _is_read_only(exc):
            logger.warning("Config %s is not writable (%s). Falling back to override file", config_path, exc)
            return self._store_override(config_path, updates)
        logger.error("Failed to write config %s: %s", config_path, exc, exc_info=True)
        return False

    # ------------------------------------------------------------------
    # Reading

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read ``config_path`` and layer any stored overrides on top."""
        config_path = Path(config_path)
        config: Dict[str, str] = {}
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as fh:
                    config = parse_config_lines(fh)
            except OSError as exc:
                logger.error("Failed to read config %s: %s", config_path, exc)
        config.update(self._read_override(config_path))
        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async variant of :meth:`read_config`."""
        config_path = Path(config_path)
        config: Dict[str, str] = {}
        if await asyncio.to_thread(config_path.exists):
            try:
                async with aiofiles.open(config_path, "r", encoding="utf-8") as fh:
                    config = parse_config_lines([line async for line in fh])
            except OSError as exc:
                logger.error("Failed to read config %s: %s", config_path, exc)
        config.update(await asyncio.to_thread(self._read_override, config_path))
        return config

    # ------------------------------------------------------------------
    # Writing

    def write_config(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        """Apply ``updates`` to an existing config file. False on failure."""
        config_path = Path(config_path)
        if not config_path.exists():
            logger.error("Config file not found: %s", config_path)
            return False
        if not updates:
            return True
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                lines = apply_updates(fh.readlines(), updates)
            with open(config_path, "w", encoding="utf-8") as fh:
                fh.writelines(lines)
        except OSError as exc:
            return self._write_failed(config_path, updates, exc)
        self._drop_override(config_path)
        return True

    async def write_config_async(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        """Async variant of :meth:`write_config`, serialized by ``self.lock``."""
        config_path = Path(config_path)
        if not await asyncio.to_thread(config_path.exists):
            logger.error("Config file not found: %s", config_path)
            return False
        if not updates:
            return True
        async with self.lock:
            try:
                async with aiofiles.open(config_path, "r", encoding="utf-8") as fh:
                    lines = apply_updates(await fh.readlines(), updates)
                async with aiofiles.open(config_path, "w", encoding="utf-8") as fh:
                    await fh.writelines(lines)
            except OSError as exc:
                return await asyncio.to_thread(self._write_failed, config_path, updates, exc)
            await asyncio.to_thread(self._drop_override, config_path)
            return True


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager using the default override directory."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


__all__ = [
    "ConfigManager",
    "apply_updates",
    "format_value",
    "get_config_manager",
    "parse_config_lines",
]
