"""
Unit tests for the platform detection module.
"""

import dataclasses
from unittest.mock import patch

import pytest

from rtxkit.core.platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
    _detect_os,
    _detect_architecture,
)


class TestPlatformInfo:
    """Tests for PlatformInfo dataclass."""

    def test_platform_string_linux_x64(self):
        """Test platform string generation for Linux x64."""
        assert PlatformInfo("linux", "x64").platform_string() == "linux-x64"

    def test_platform_string_macos_arm64(self):
        """Test platform string generation for macOS ARM64."""
        assert PlatformInfo("macos", "arm64").platform_string() == "macos-arm64"

    def test_str_is_platform_string(self):
        assert str(PlatformInfo("windows", "x64")) == "windows-x64"

    def test_is_immutable(self):
        """PlatformInfo is fixed for the duration of a run."""
        info = PlatformInfo("linux", "x64")
        with pytest.raises(dataclasses.FrozenInstanceError):
            info.os = "macos"


class TestDetectOS:
    """Tests for OS detection."""

    @patch("platform.system")
    def test_detect_linux(self, mock_system):
        mock_system.return_value = "Linux"
        assert _detect_os() == "linux"

    @patch("platform.system")
    def test_detect_windows(self, mock_system):
        mock_system.return_value = "Windows"
        assert _detect_os() == "windows"

    @patch("platform.system")
    def test_darwin_maps_to_macos(self, mock_system):
        """Test Darwin kernel name is normalized to macos."""
        mock_system.return_value = "Darwin"
        assert _detect_os() == "macos"

    @patch("platform.system")
    def test_unknown_os_passes_through(self, mock_system):
        """Test unknown systems are returned as reported, not rejected."""
        mock_system.return_value = "FreeBSD"
        assert _detect_os() == "freebsd"


class TestDetectArchitecture:
    """Tests for architecture detection and normalization."""

    @patch("platform.machine")
    def test_x86_64_aliases(self, mock_machine):
        for machine in ("x86_64", "AMD64", "x64"):
            mock_machine.return_value = machine
            assert _detect_architecture() == "x64"

    @patch("platform.machine")
    def test_arm64_aliases(self, mock_machine):
        for machine in ("aarch64", "arm64"):
            mock_machine.return_value = machine
            assert _detect_architecture() == "arm64"

    @patch("platform.machine")
    def test_x86(self, mock_machine):
        mock_machine.return_value = "i686"
        assert _detect_architecture() == "x86"

    @patch("platform.machine")
    def test_arm(self, mock_machine):
        mock_machine.return_value = "armv7l"
        assert _detect_architecture() == "arm"

    @patch("platform.machine")
    def test_unknown_architecture_passes_through(self, mock_machine):
        mock_machine.return_value = "s390x"
        assert _detect_architecture() == "s390x"


class TestDetectPlatform:
    """Tests for detect_platform()."""

    @patch("platform.machine", return_value="arm64")
    @patch("platform.system", return_value="Darwin")
    def test_detect_macos_arm64(self, mock_system, mock_machine):
        assert detect_platform() == PlatformInfo("macos", "arm64")

    @patch("platform.machine", return_value="x86_64")
    @patch("platform.system", return_value="Linux")
    def test_detection_is_cached(self, mock_system, mock_machine):
        """Test detection runs once until the cache is cleared."""
        first = detect_platform()
        second = detect_platform()

        assert first is second
        assert mock_system.call_count == 1

        clear_platform_cache()
        detect_platform()
        assert mock_system.call_count == 2
