"""
Tests for downloading the rtx binary.

Network access is mocked with responses.
"""

import logging
import os
import stat

import pytest
import responses

from rtxkit.core.exceptions import (
    BinaryAcquisitionError,
    DownloadError,
    ReleaseAssetNotFoundError,
)
from rtxkit.core.platform import PlatformInfo
from rtxkit.setup.binary import (
    GITHUB_API_URL,
    acquire_binary,
    resolve_binary_source,
)

TOKEN = "ghp_supersecret"
RELEASE_URL = f"{GITHUB_API_URL}/repos/jdxcode/rtx/releases/tags/v1.2.3"
ASSET_URL = f"{GITHUB_API_URL}/repos/jdxcode/rtx/releases/assets/42"


def release_document():
    return {
        "tag_name": "v1.2.3",
        "assets": [
            {"name": "rtx-v1.2.3-linux-x64", "url": f"{GITHUB_API_URL}/assets/1"},
            {"name": "rtx-v1.2.3-macos-arm64", "url": ASSET_URL},
            {"name": "rtx-v1.2.3-macos-arm64.tar.gz", "url": f"{GITHUB_API_URL}/assets/3"},
        ],
    }


class TestResolveBinarySource:
    """Test version-branch selection."""

    def test_latest_is_unauthenticated_url(self, linux_x64):
        source = resolve_binary_source("latest", linux_x64)

        assert source.url == "https://rtx.pub/rtx-latest-linux-x64"
        assert source.authenticated is False
        assert source.asset_pattern is None

    def test_tag_is_authenticated_release(self, macos_arm64):
        source = resolve_binary_source("v1.2.3", macos_arm64)

        assert source.url == RELEASE_URL
        assert source.authenticated is True
        assert source.asset_pattern == "*macos-arm64"

    def test_any_other_string_is_a_tag(self, linux_x64):
        assert resolve_binary_source("Latest", linux_x64).authenticated is True

    def test_unknown_platform_composed_as_is(self):
        source = resolve_binary_source("latest", PlatformInfo("freebsd", "riscv64"))
        assert source.url == "https://rtx.pub/rtx-latest-freebsd-riscv64"


class TestAcquireBinary:
    """Test acquire_binary function."""

    @responses.activate
    def test_latest_download(self, context, tool_dir, linux_x64):
        responses.add(
            responses.GET,
            "https://rtx.pub/rtx-latest-linux-x64",
            body=b"#!/bin/sh\necho rtx\n",
            status=200,
        )

        binary = acquire_binary(context, "latest", tool_dir, platform_info=linux_x64)

        assert binary == (tool_dir / "bin" / "rtx").resolve()
        assert binary.read_bytes() == b"#!/bin/sh\necho rtx\n"
        assert "Authorization" not in responses.calls[0].request.headers
        assert os.environ["PATH"].split(os.pathsep)[0] == str(binary.parent)
        assert context.paths[0] == str(binary.parent)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    @responses.activate
    def test_binary_is_executable(self, context, tool_dir, linux_x64):
        responses.add(
            responses.GET, "https://rtx.pub/rtx-latest-linux-x64", body=b"x", status=200
        )

        binary = acquire_binary(context, "latest", tool_dir, platform_info=linux_x64)

        assert binary.stat().st_mode & stat.S_IXUSR

    @responses.activate
    def test_tagged_release_download(self, context, tool_dir, macos_arm64):
        responses.add(responses.GET, RELEASE_URL, json=release_document(), status=200)
        responses.add(responses.GET, ASSET_URL, body=b"rtx-macos", status=200)

        binary = acquire_binary(
            context, "v1.2.3", tool_dir, token=TOKEN, platform_info=macos_arm64
        )

        assert binary.read_bytes() == b"rtx-macos"
        lookup, download = responses.calls
        assert lookup.request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert download.request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert download.request.headers["Accept"] == "application/octet-stream"

    @responses.activate
    def test_token_never_logged(self, context, tool_dir, macos_arm64, caplog):
        caplog.set_level(logging.DEBUG)
        responses.add(responses.GET, RELEASE_URL, json=release_document(), status=200)
        responses.add(responses.GET, ASSET_URL, body=b"rtx-macos", status=200)

        acquire_binary(context, "v1.2.3", tool_dir, token=TOKEN, platform_info=macos_arm64)

        assert TOKEN in context.secrets
        assert TOKEN not in caplog.text

    @responses.activate
    def test_missing_release(self, context, tool_dir, macos_arm64):
        responses.add(responses.GET, RELEASE_URL, status=404)

        with pytest.raises(ReleaseAssetNotFoundError, match=r"\*macos-arm64"):
            acquire_binary(
                context, "v1.2.3", tool_dir, token=TOKEN, platform_info=macos_arm64
            )

    @responses.activate
    def test_no_asset_for_platform(self, context, tool_dir):
        responses.add(responses.GET, RELEASE_URL, json=release_document(), status=200)

        with pytest.raises(ReleaseAssetNotFoundError):
            acquire_binary(
                context,
                "v1.2.3",
                tool_dir,
                token=TOKEN,
                platform_info=PlatformInfo("windows", "arm64"),
            )

    @responses.activate
    @pytest.mark.parametrize(
        "document",
        [
            ["not", "an", "object"],
            {"assets": "none"},
            {"assets": [{"name": "rtx-v1.2.3-macos-arm64"}]},
        ],
        ids=["list-body", "assets-not-a-list", "asset-without-url"],
    )
    def test_malformed_release_document(self, document, context, tool_dir, macos_arm64):
        responses.add(responses.GET, RELEASE_URL, json=document, status=200)

        with pytest.raises(BinaryAcquisitionError):
            acquire_binary(
                context, "v1.2.3", tool_dir, token=TOKEN, platform_info=macos_arm64
            )

    @responses.activate
    def test_release_lookup_unauthorized(self, context, tool_dir, macos_arm64):
        responses.add(responses.GET, RELEASE_URL, status=401)

        with pytest.raises(BinaryAcquisitionError, match="Release lookup"):
            acquire_binary(
                context, "v1.2.3", tool_dir, token=TOKEN, platform_info=macos_arm64
            )

    @responses.activate
    def test_download_failure_is_fatal(self, context, tool_dir, linux_x64, monkeypatch):
        monkeypatch.setattr("time.sleep", lambda seconds: None)
        responses.add(responses.GET, "https://rtx.pub/rtx-latest-linux-x64", status=503)

        with pytest.raises(DownloadError):
            acquire_binary(context, "latest", tool_dir, platform_info=linux_x64)

        assert context.paths == []
