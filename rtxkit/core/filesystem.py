"""
File system utilities for rtxkit.

This module provides the file operations the setup step relies on:
- Safe file operations (atomic writes, executable bits)
- Deterministic hashing of glob-matched files (cache key input)
- tar.gz packing and safe extraction (local cache store)
"""

import hashlib
import shutil
import stat
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Iterable, List, Union


# ============================================================================
# Error Handling
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# SHA-256 of empty input; the hash of a file set with no members.
EMPTY_SET_HASH = hashlib.sha256().hexdigest()


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Example:
        >>> ensure_directory('/tmp/rtx/bin')
        PosixPath('/tmp/rtx/bin')
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('.tool-versions', 'nodejs 18.0.0\\n')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            # newline="" keeps the content byte-for-byte on every platform
            with open(temp_fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def make_executable(file_path: Union[str, Path]) -> None:
    """
    Add execute permission for user, group and others (chmod +x).

    Raises:
        FilesystemError: If the file is missing or permissions cannot be changed
    """
    file_path = Path(file_path)

    try:
        mode = file_path.stat().st_mode
        file_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise FilesystemError(f"Failed to make {file_path} executable: {e}") from e


# ============================================================================
# File Hashing
# ============================================================================


def compute_file_hash(
    file_path: Union[str, Path], algorithm: str = "sha256", chunk_size: int = 8192
) -> str:
    """
    Compute hash of a file.

    Memory-efficient implementation that reads file in chunks.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('sha256', 'sha1', 'md5')
        chunk_size: Number of bytes to read at once

    Returns:
        Hex digest of the hash
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FilesystemError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()


def find_matching_files(patterns: Iterable[str], root: Union[str, Path]) -> List[Path]:
    """
    Find regular files under root matching any of the glob patterns.

    Results are de-duplicated and sorted by POSIX relative path so the
    order never depends on filesystem iteration order.

    Args:
        patterns: Glob patterns relative to root (e.g., '**/.tool-versions')
        root: Directory to search

    Returns:
        Sorted list of matching file paths
    """
    root = Path(root)
    matches = {}

    for pattern in patterns:
        for path in root.glob(pattern):
            if path.is_file():
                matches[path.relative_to(root).as_posix()] = path

    return [matches[key] for key in sorted(matches)]


def hash_files(patterns: Iterable[str], root: Union[str, Path]) -> str:
    """
    Compute one deterministic SHA-256 over every file matching the patterns.

    Each matching file is hashed on its own and its digest is fed into an
    outer SHA-256, in sorted relative-path order. With no matching files the
    outer hash sees no input and the result is EMPTY_SET_HASH. A single empty
    file contributes the digest of empty input, so it hashes differently from
    no files at all.

    Args:
        patterns: Glob patterns relative to root
        root: Directory to search

    Returns:
        Hex digest of the combined hash

    Example:
        >>> hash_files(['**/.tool-versions'], '/empty/dir') == EMPTY_SET_HASH
        True
    """
    outer = hashlib.sha256()

    for path in find_matching_files(patterns, root):
        outer.update(bytes.fromhex(compute_file_hash(path)))

    return outer.hexdigest()


# ============================================================================
# Archives
# ============================================================================


def create_tar_gz(archive_path: Union[str, Path], sources: List[Path]) -> Path:
    """
    Pack directories into a .tar.gz archive.

    Each source directory is stored under its index in the list ('0/', '1/',
    ...) so extract_tar_gz can put every one back where it came from.
    Missing sources are skipped.

    Args:
        archive_path: Archive to create
        sources: Directories to pack

    Returns:
        Path to the archive
    """
    archive_path = Path(archive_path)
    archive_path.parent.mkdir(parents=True, exist_ok=True)

    with tarfile.open(archive_path, "w:gz") as tar:
        for index, source in enumerate(sources):
            source = Path(source)
            if source.exists():
                tar.add(str(source), arcname=str(index))

    return archive_path


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _validate_link_target(member: tarfile.TarInfo, destination: Path) -> None:
    """
    Validate that a link member points inside the extraction directory.

    Symlink targets are relative to the link's own directory, hard link
    targets to the archive root. Absolute targets are always rejected.

    Raises:
        InsecureArchiveError: If the link escapes the destination
    """
    if not (member.issym() or member.islnk()):
        return

    if Path(member.linkname).is_absolute():
        raise InsecureArchiveError(
            f"Archive member '{member.name}' links to absolute path '{member.linkname}'"
        )

    base = destination / Path(member.name).parent if member.issym() else destination
    target = (base / member.linkname).resolve()

    if not is_relative_to(target, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{member.name}' links outside the archive: '{member.linkname}'"
        )


def extract_tar_gz(archive_path: Union[str, Path], targets: List[Path]) -> None:
    """
    Extract an archive created by create_tar_gz back into target directories.

    Args:
        archive_path: Archive to extract
        targets: Target directories, in the order they were packed

    Raises:
        InsecureArchiveError: If archive contains malicious paths
        ArchiveExtractionError: If the archive is missing or corrupt
    """
    archive_path = Path(archive_path)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    with tempfile.TemporaryDirectory(prefix="rtxkit_") as tmp:
        staging = Path(tmp)

        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                for member in tar.getmembers():
                    _validate_archive_path(member.name, staging)
                    _validate_link_target(member, staging)

                if sys.version_info >= (3, 12):
                    tar.extractall(staging, filter="data")
                else:
                    tar.extractall(staging)
        except InsecureArchiveError:
            raise
        except (tarfile.TarError, EOFError, OSError) as e:
            raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

        for index, target in enumerate(targets):
            packed = staging / str(index)
            if packed.exists():
                Path(target).mkdir(parents=True, exist_ok=True)
                shutil.copytree(packed, target, symlinks=True, dirs_exist_ok=True)


__all__ = [
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "EMPTY_SET_HASH",
    "is_relative_to",
    "ensure_directory",
    "atomic_write",
    "make_executable",
    "compute_file_hash",
    "find_matching_files",
    "hash_files",
    "create_tar_gz",
    "extract_tar_gz",
]
