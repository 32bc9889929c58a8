"""
Base module utilities shared by sensor modules.

Provides preference access, typed config coercion helpers, and filename
conventions for capture output files.
"""

from .preferences import ModulePreferences, PreferenceChange, ScopedPreferences
from .storage_utils import capture_filename, sanitize_path_component, unique_path
from .typed_config import (
    ModuleConfig,
    get_pref_bool,
    get_pref_float,
    get_pref_int,
    get_pref_path,
    get_pref_str,
    load_typed_config,
)

__all__ = [
    "ModulePreferences",
    "PreferenceChange",
    "ScopedPreferences",
    "capture_filename",
    "sanitize_path_component",
    "unique_path",
    "ModuleConfig",
    "load_typed_config",
    "get_pref_str",
    "get_pref_int",
    "get_pref_float",
    "get_pref_bool",
    "get_pref_path",
]
