import pytest
from pathlib import Path

from nativelib.config import ENV_OVERRIDES, CONFIG_PATH_ENV, LoaderConfig, reset_config
from nativelib.loader import reset_loader
from platform_adapters import reset_adapters


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the user's config, environment and real temp dir."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "no-config.json"))
    monkeypatch.setenv("NATIVELIB_TMPDIR", str(tmp_path / "tmp"))
    reset_config()
    reset_loader()
    reset_adapters()
    yield
    reset_config()
    reset_loader()
    reset_adapters()


@pytest.fixture
def temp_root(tmp_path) -> Path:
    root = tmp_path / "tmp"
    root.mkdir(exist_ok=True)
    return root


@pytest.fixture
def config(temp_root) -> LoaderConfig:
    return LoaderConfig(tmp_dir=str(temp_root), sysinfo="test-sysinfo")


@pytest.fixture
def make_bundle(tmp_path):
    """Create a bundle directory from a {relative path: bytes} mapping."""
    def _make(files, name="bundle"):
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return root
    return _make
