"""
Download and install the rtx binary.

Two sources are supported:

- 'latest': https://rtx.pub/rtx-latest-{os}-{arch}, no authentication.
- An explicit tag (e.g., 'v1.2.3'): the release asset of jdxcode/rtx whose
  name matches '*{os}-{arch}', fetched through the GitHub REST API with the
  given token.

The binary is always downloaded, whether or not the tool cache was restored.
Every failure here is fatal: without rtx nothing else can run.
"""

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import requests

from rtxkit.config.inputs import LATEST
from rtxkit.core.context import RunContext
from rtxkit.core.download import download_file, get_json
from rtxkit.core.exceptions import (
    BinaryAcquisitionError,
    ReleaseAssetNotFoundError,
)
from rtxkit.core.filesystem import FilesystemError, ensure_directory, make_executable
from rtxkit.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

BINARY_NAME = "rtx"
LATEST_URL = "https://rtx.pub/rtx-latest-{platform}"
RELEASE_REPO = "jdxcode/rtx"
GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class BinarySource:
    """
    Where the rtx binary is downloaded from.

    Attributes:
        version: Requested version specifier
        url: Download URL ('latest') or release lookup URL (tagged)
        authenticated: Whether the download goes through the authenticated release API
        asset_pattern: Glob the release asset name must match (tagged only)
    """

    version: str
    url: str
    authenticated: bool
    asset_pattern: Optional[str] = None


def resolve_binary_source(
    version: str, platform_info: Optional[PlatformInfo] = None
) -> BinarySource:
    """
    Resolve a version specifier to a download source.

    Example:
        >>> resolve_binary_source("latest", PlatformInfo("linux", "x64")).url
        'https://rtx.pub/rtx-latest-linux-x64'
    """
    platform_info = platform_info or detect_platform()

    if version == LATEST:
        return BinarySource(
            version=version,
            url=LATEST_URL.format(platform=platform_info.platform_string()),
            authenticated=False,
        )

    return BinarySource(
        version=version,
        url=f"{GITHUB_API_URL}/repos/{RELEASE_REPO}/releases/tags/{version}",
        authenticated=True,
        asset_pattern=f"*{platform_info.platform_string()}",
    )


def _auth_headers(token: Optional[str], accept: str) -> Dict[str, str]:
    headers = {"Accept": accept}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _find_release_asset(
    source: BinarySource, token: Optional[str], session: requests.Session
) -> dict:
    """
    Look up the release asset matching the platform pattern.

    Raises:
        ReleaseAssetNotFoundError: If the release or a matching asset is missing
        BinaryAcquisitionError: If the lookup fails
    """
    try:
        release = get_json(
            source.url,
            headers=_auth_headers(token, "application/vnd.github+json"),
            session=session,
        )
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code == 404:
            raise ReleaseAssetNotFoundError(source.version, source.asset_pattern) from e
        raise BinaryAcquisitionError(
            f"Release lookup for rtx {source.version} failed: {e}"
        ) from e

    assets = release.get("assets", []) if isinstance(release, dict) else None
    if not isinstance(assets, list):
        raise BinaryAcquisitionError(
            f"Unexpected release document for rtx {source.version}"
        )

    for asset in assets:
        if not isinstance(asset, dict):
            continue
        name = asset.get("name")
        if isinstance(name, str) and fnmatch.fnmatchcase(name, source.asset_pattern):
            if not isinstance(asset.get("url"), str):
                raise BinaryAcquisitionError(
                    f"Release asset {name} of rtx {source.version} has no download URL"
                )
            logger.debug(f"Selected release asset {name}")
            return asset

    raise ReleaseAssetNotFoundError(source.version, source.asset_pattern)


def acquire_binary(
    context: RunContext,
    version: str,
    tool_dir: Path,
    token: Optional[str] = None,
    platform_info: Optional[PlatformInfo] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download rtx into <tool_dir>/bin, make it executable and put it on PATH.

    Args:
        context: Run context (PATH additions, secret registration)
        version: 'latest' or a release tag
        tool_dir: rtx data directory
        token: GitHub token for tagged releases (masked in all output)
        platform_info: Platform identity (auto-detected if None)
        session: requests session (a new one if None)

    Returns:
        Path to the installed binary

    Raises:
        BinaryAcquisitionError: If the binary cannot be downloaded or installed
    """
    context.set_secret(token)
    session = session or requests.Session()

    source = resolve_binary_source(version, platform_info)
    bin_dir = ensure_directory(Path(tool_dir) / "bin")
    binary_path = bin_dir / BINARY_NAME

    logger.info(f"Installing rtx {version} to {binary_path}")

    if source.authenticated:
        asset = _find_release_asset(source, token, session)
        download_file(
            asset["url"],
            binary_path,
            headers=_auth_headers(token, "application/octet-stream"),
            session=session,
        )
    else:
        download_file(source.url, binary_path, session=session)

    try:
        make_executable(binary_path)
    except FilesystemError as e:
        raise BinaryAcquisitionError(str(e)) from e

    context.add_path(bin_dir)
    return binary_path
