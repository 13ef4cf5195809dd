"""
Network download helper with retry logic.

This module provides the HTTP downloads used to fetch the rtx binary:
- HTTP/HTTPS downloads with TLS verification
- Streaming to disk in chunks
- Retry logic with exponential backoff
- Timeout handling
"""

import logging
import time
from pathlib import Path
from typing import Dict, Optional

import requests
from requests.exceptions import RequestException

from rtxkit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)


def download_file(
    url: str,
    destination: Path,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Headers are sent with the request but never logged, so they may carry
    credentials.

    Args:
        url: URL to download from
        destination: Local path to save file (overwritten)
        headers: Extra request headers
        session: requests session to use (a new one per call if None)
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL or destination is invalid

    Example:
        >>> download_file("https://rtx.pub/rtx-latest-linux-x64", Path("bin/rtx"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    http = session or requests.Session()

    for attempt in range(max_retries):
        try:
            return _download(http, url, destination, headers or {}, timeout)
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download of {url} failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"Download of {url} failed for unknown reason")


def _download(
    http: requests.Session,
    url: str,
    destination: Path,
    headers: Dict[str, str],
    timeout: int,
) -> Path:
    """Stream one GET response body to destination."""
    logger.info(f"Downloading from {url}")

    response = http.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    )
    response.raise_for_status()

    downloaded = 0
    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            if chunk:
                f.write(chunk)
                downloaded += len(chunk)

    logger.info(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def get_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> dict:
    """
    GET a JSON document.

    Raises:
        requests.HTTPError: On a non-2xx response
        DownloadError: If the request cannot be made or the body is not JSON
    """
    http = session or requests.Session()
    logger.debug(f"Fetching {url}")

    try:
        response = http.get(url, headers=headers or {}, timeout=timeout)
    except RequestException as e:
        raise DownloadError(f"Request to {url} failed: {e}") from e

    response.raise_for_status()

    try:
        return response.json()
    except ValueError as e:
        raise DownloadError(f"Invalid JSON from {url}: {e}") from e
