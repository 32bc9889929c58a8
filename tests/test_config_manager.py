import asyncio
import builtins
from pathlib import Path

import aiofiles
import pytest

from sensor_logger.core.config_manager import ConfigManager


@pytest.fixture()
def config_env(tmp_path):
    return ConfigManager(overrides_dir=tmp_path / "state" / "config_overrides")


def _force_permission_error(config_path: Path, monkeypatch):
    original_open = builtins.open

    def fake_open(path, mode='r', *args, **kwargs):
        if Path(path) == config_path and 'w' in mode and 'r' not in mode:
            raise PermissionError("mock permission denied")
        return original_open(path, mode, *args, **kwargs)

    monkeypatch.setattr('builtins.open', fake_open)
    return original_open


def test_read_config_parses_key_values(tmp_path, config_env):
    config_path = tmp_path / "config.txt"
    config_path.write_text(
        "# comment\n"
        "output_dir = gps_data\n"
        "file_prefix = \"trial_\"\n"
        "min_time_ms = 100  # 10 Hz\n"
        "not a setting\n"
        "empty =\n",
        encoding='utf-8',
    )

    config = config_env.read_config(config_path)
    assert config == {
        'output_dir': 'gps_data',
        'file_prefix': 'trial_',
        'min_time_ms': '100',
        'empty': '',
    }


def test_read_missing_config_is_empty(tmp_path, config_env):
    assert config_env.read_config(tmp_path / "missing.txt") == {}


def test_write_config_updates_in_place(tmp_path, config_env):
    config_path = tmp_path / "config.txt"
    config_path.write_text("# GPS\n  enabled = true\nmin_time_ms = 100\n", encoding='utf-8')

    assert config_env.write_config(config_path, {'enabled': False, 'min_time_ms': 250, 'new_key': 'x'})

    text = config_path.read_text(encoding='utf-8')
    assert text == "# GPS\n  enabled = false\nmin_time_ms = 250\nnew_key = x\n"


def test_write_missing_config_fails(tmp_path, config_env):
    assert config_env.write_config(tmp_path / "missing.txt", {'a': 1}) is False


def test_write_config_falls_back_to_override(tmp_path, monkeypatch, config_env):
    config_path = tmp_path / "module_config.txt"
    config_path.write_text("enabled = true\n", encoding='utf-8')

    original_open = _force_permission_error(config_path, monkeypatch)

    result = config_env.write_config(config_path, {'enabled': False, 'min_time_ms': 320})
    assert result is True

    override_path = config_env.override_path(config_path)
    assert override_path.exists()

    # Base file remains unchanged because write was redirected to override
    assert "enabled = true" in config_path.read_text(encoding='utf-8')

    # Reading config merges overrides
    merged = config_env.read_config(config_path)
    assert merged['enabled'] == 'false'
    assert merged['min_time_ms'] == '320'

    monkeypatch.setattr('builtins.open', original_open, raising=False)


def test_read_config_includes_override_values(tmp_path, config_env):
    config_path = tmp_path / "module_config.txt"
    config_path.write_text("enabled = true\nmin_time_ms = 10\n", encoding='utf-8')

    override_path = config_env.override_path(config_path)
    override_path.parent.mkdir(parents=True, exist_ok=True)
    override_path.write_text("enabled = false\nmin_time_ms = 99\nextra = custom\n", encoding='utf-8')

    merged = config_env.read_config(config_path)
    assert merged['enabled'] == 'false'
    assert merged['min_time_ms'] == '99'
    assert merged['extra'] == 'custom'


def test_successful_write_removes_override(tmp_path, monkeypatch, config_env):
    config_path = tmp_path / "module_config.txt"
    config_path.write_text("enabled = true\n", encoding='utf-8')

    original_open = _force_permission_error(config_path, monkeypatch)
    assert config_env.write_config(config_path, {'enabled': False}) is True

    override_path = config_env.override_path(config_path)
    assert override_path.exists()

    # Allow writes again and ensure override is removed after sync write
    monkeypatch.setattr('builtins.open', original_open, raising=False)
    assert config_env.write_config(config_path, {'enabled': True}) is True
    assert not override_path.exists()


def test_read_config_async_matches_sync(tmp_path, config_env):
    config_path = tmp_path / "config.txt"
    config_path.write_text("a = 1\nb = 'two'\n", encoding='utf-8')

    async def run_test():
        return await config_env.read_config_async(config_path)

    assert asyncio.run(run_test()) == config_env.read_config(config_path)


def test_write_config_async(tmp_path, config_env):
    config_path = tmp_path / "config.txt"
    config_path.write_text("use_scoped_storage = false\n", encoding='utf-8')

    async def run_test():
        return await config_env.write_config_async(config_path, {'use_scoped_storage': True})

    assert asyncio.run(run_test()) is True
    assert config_env.read_config(config_path) == {'use_scoped_storage': 'true'}


def test_write_config_async_falls_back_to_override(tmp_path, monkeypatch, config_env):
    config_path = tmp_path / "config.txt"
    config_path.write_text("enabled = true\n", encoding='utf-8')
    original_open = aiofiles.open

    def fake_open(path, mode='r', *args, **kwargs):
        if Path(path) == config_path and 'w' in mode:
            raise PermissionError("mock permission denied")
        return original_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(aiofiles, 'open', fake_open)

    async def run_test():
        return await config_env.write_config_async(config_path, {'enabled': False})

    assert asyncio.run(run_test()) is True
    assert config_path.read_text(encoding='utf-8') == "enabled = true\n"
    assert config_env.read_config(config_path)['enabled'] == 'false'


def test_external_config_override_path(tmp_path, config_env):
    """Configs outside the project tree map to a hashed name under external/."""
    override = config_env.override_path(tmp_path / "gps.txt")
    assert override.parent.name == "external"
    assert override.name.startswith("gps_")
    assert override.suffix == ".txt"
