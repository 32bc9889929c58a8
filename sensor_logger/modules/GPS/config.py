"""Typed configuration for the GPS module."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from sensor_logger.modules.base.preferences import ModulePreferences, ScopedPreferences
from sensor_logger.modules.base.typed_config import (
    get_pref_bool,
    get_pref_float,
    get_pref_int,
    get_pref_path,
    get_pref_str,
    load_typed_config,
)
from .gps_core.constants import CSV_EXTENSION, MIN_DISTANCE_M, MIN_TIME_MS, SENSOR_NAME

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.txt")


@dataclass(slots=True)
class GPSConfig:
    """Typed configuration for the GPS module."""

    display_name: str = "GPS"
    enabled: bool = True

    # Output settings
    output_dir: Path = field(default_factory=lambda: Path("gps_data"))
    sensor_name: str = SENSOR_NAME
    file_extension: str = CSV_EXTENSION
    file_prefix: str = ""
    use_scoped_storage: bool = False
    log_level: str = "info"
    console_output: bool = False

    # Provider cadence
    min_time_ms: int = MIN_TIME_MS
    min_distance_m: float = MIN_DISTANCE_M
    use_secondary_provider: bool = True

    @classmethod
    def from_preferences(
        cls, prefs: ScopedPreferences, args: Any = None
    ) -> "GPSConfig":
        """Build config from preferences with optional CLI overrides."""
        defaults = cls()

        config = cls(
            display_name=get_pref_str(prefs, "display_name", defaults.display_name),
            enabled=get_pref_bool(prefs, "enabled", defaults.enabled),
            output_dir=get_pref_path(prefs, "output_dir", defaults.output_dir),
            sensor_name=get_pref_str(prefs, "sensor_name", defaults.sensor_name),
            file_extension=get_pref_str(prefs, "file_extension", defaults.file_extension),
            file_prefix=get_pref_str(prefs, "file_prefix", defaults.file_prefix),
            use_scoped_storage=get_pref_bool(prefs, "use_scoped_storage", defaults.use_scoped_storage),
            log_level=get_pref_str(prefs, "log_level", defaults.log_level),
            console_output=get_pref_bool(prefs, "console_output", defaults.console_output),
            min_time_ms=get_pref_int(prefs, "min_time_ms", defaults.min_time_ms),
            min_distance_m=get_pref_float(prefs, "min_distance_m", defaults.min_distance_m),
            use_secondary_provider=get_pref_bool(
                prefs, "use_secondary_provider", defaults.use_secondary_provider
            ),
        )

        if args is not None:
            config = config._apply_args_override(args)

        return config

    def _apply_args_override(self, args: Any) -> "GPSConfig":
        """Apply CLI argument overrides to config values."""
        values = asdict(self)

        for key in ("output_dir", "log_level", "console_output", "file_prefix", "min_time_ms"):
            if hasattr(args, key):
                val = getattr(args, key)
                if val is not None:
                    values[key] = Path(val) if key == "output_dir" else val

        return GPSConfig(**values)

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        return asdict(self)


def load_gps_config(
    config_path: Optional[Path] = None,
    args: Any = None,
    *,
    scope: str = "",
) -> GPSConfig:
    """Read ``config.txt`` (plus user overrides) into a GPSConfig."""
    prefs = ModulePreferences(config_path or DEFAULT_CONFIG_PATH)
    return load_typed_config(GPSConfig, prefs.scope(scope), args)


__all__ = ["DEFAULT_CONFIG_PATH", "GPSConfig", "load_gps_config"]
