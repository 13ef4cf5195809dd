"""
Pytest configuration and shared fixtures for rtxkit tests.
"""

import os
from pathlib import Path

import pytest

from rtxkit.core.context import RunContext
from rtxkit.core.platform import PlatformInfo, clear_platform_cache


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch):
    """
    Keep every test away from the real home, runner files and inputs.

    Also resets the platform detection cache.
    """
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    for name in (
        "GITHUB_ACTIONS",
        "GITHUB_STATE",
        "GITHUB_OUTPUT",
        "GITHUB_PATH",
        "RTX_DATA_DIR",
        "XDG_DATA_HOME",
        "RTXKIT_CACHE_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    for name in list(os.environ):
        if name.startswith(("INPUT_", "STATE_")):
            monkeypatch.delenv(name, raising=False)

    # add_path prepends to PATH; monkeypatch restores it afterwards
    monkeypatch.setenv("PATH", os.environ.get("PATH", ""))

    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def context():
    """Run context that detaches its log filter after the test."""
    ctx = RunContext()
    yield ctx
    ctx.remove_log_filter()


@pytest.fixture
def linux_x64() -> PlatformInfo:
    return PlatformInfo("linux", "x64")


@pytest.fixture
def macos_arm64() -> PlatformInfo:
    return PlatformInfo("macos", "arm64")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty working directory for tool-version files."""
    workdir = tmp_path / "workspace"
    workdir.mkdir()
    return workdir


@pytest.fixture
def tool_dir(tmp_path: Path) -> Path:
    """rtx data directory (not created)."""
    return tmp_path / "rtx"


