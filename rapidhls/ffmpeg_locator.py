"""Locates the ffmpeg executable used for conversions."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

from rapidhls.data_models import ResolvedExecutable


# Path components treated as packaged application archives. Binaries inside
# them cannot be executed in place, an unpacked copy sits next to the archive.
ARCHIVE_SUFFIXES = (".asar", ".pyz", ".zip")
UNPACKED_SUFFIX = ".unpacked"

PathLike = Union[str, Path]


def is_windows() -> bool:
    return os.name == "nt" or sys.platform.startswith("win")


def binary_name() -> str:
    """Return the ffmpeg file name for the current platform."""
    return "ffmpeg.exe" if is_windows() else "ffmpeg"


def alternate_binary_name() -> str:
    """Return the ffmpeg file name used on the other platform family."""
    return "ffmpeg" if is_windows() else "ffmpeg.exe"


def normalize_custom_path(custom_path: Optional[str]) -> Optional[Path]:
    """
    Turn a user supplied ffmpeg location into an existing binary path.

    The value may name the binary itself or the directory that contains it.

    Args:
        custom_path: Path entered by the user (file or directory)

    Returns:
        Path to an existing ffmpeg binary, or None if nothing usable was found
    """
    if not custom_path:
        return None

    trimmed = custom_path.strip()
    if not trimmed:
        return None

    candidate = Path(trimmed)
    is_file_path = candidate.name.lower() in ("ffmpeg", "ffmpeg.exe")
    primary = candidate if is_file_path else candidate / binary_name()

    if primary.exists():
        return primary

    if not is_file_path:
        alternate = candidate / alternate_binary_name()
        if alternate.exists():
            return alternate

    logging.warning(f"Custom ffmpeg path has no ffmpeg binary: {trimmed}")
    return None


def _split_archive(candidate: Path) -> Optional[Tuple[Path, str, Path]]:
    """Split a path into (prefix, archive name, path inside archive)."""
    parts = candidate.parts
    for index, part in enumerate(parts):
        if part.lower().endswith(ARCHIVE_SUFFIXES):
            return Path(*parts[:index]), part, Path(*parts[index + 1:])
    return None


def resolve_bundled_path(
    candidate: Optional[PathLike],
    resources_path: Optional[PathLike] = None
) -> Optional[Path]:
    """
    Find a usable copy of a bundled ffmpeg binary.

    When the candidate lies inside an application archive the unpacked
    sibling and the resources-relative unpacked copy are probed before the
    candidate itself.

    Args:
        candidate: Path of the bundled binary as reported by the bundle
        resources_path: Resources directory of a packaged application, if any

    Returns:
        First existing path, or None
    """
    if not candidate:
        return None

    candidate = Path(candidate)
    probes = []

    split = _split_archive(candidate)
    if split is not None:
        prefix, archive, sub_path = split
        probes.append(prefix / (archive + UNPACKED_SUFFIX) / sub_path)
        if resources_path and sub_path.parts:
            probes.append(Path(resources_path) / (archive + UNPACKED_SUFFIX) / sub_path)

    probes.append(candidate)

    for probe in probes:
        if probe.exists():
            return probe
    return None


def default_resources_path() -> Optional[Path]:
    """Return the resources directory of a frozen application, if running in one."""
    meipass = getattr(sys, "_MEIPASS", None)
    return Path(meipass) if meipass else None


def default_bundled_candidate() -> Optional[Path]:
    """
    Return the location a bundled ffmpeg would have, if this install ships one.

    Frozen builds carry it in an ``ffmpeg/`` folder of the bundle, source
    installs in the package's ``bin/`` folder.
    """
    resources = default_resources_path()
    if resources is not None:
        return resources / "ffmpeg" / binary_name()

    package_bin = Path(__file__).resolve().parent / "bin" / binary_name()
    if package_bin.exists():
        return package_bin
    return None


def resolve_ffmpeg(
    user_override: Optional[str] = None,
    bundled_candidate: Optional[PathLike] = None,
    resources_path: Optional[PathLike] = None
) -> ResolvedExecutable:
    """
    Decide which ffmpeg command to run.

    Priority: user override, bundled binary, bare name on the system PATH.
    Never raises; a missing binary shows up later as a spawn failure.

    Args:
        user_override: Custom ffmpeg path from the user's settings
        bundled_candidate: Path of the bundled binary, if the install has one
        resources_path: Resources directory used to find unpacked bundles

    Returns:
        ResolvedExecutable with the command and where it came from
    """
    custom = normalize_custom_path(user_override)
    bundled = None if custom else resolve_bundled_path(bundled_candidate, resources_path)

    if custom:
        resolved = ResolvedExecutable(command=str(custom), source="custom")
    elif bundled:
        resolved = ResolvedExecutable(command=str(bundled), source="bundled")
    else:
        resolved = ResolvedExecutable(command=binary_name(), source="system")

    logging.info(
        f"[ffmpeg] resolved path: {resolved.command} ({resolved.source}; "
        f"custom={user_override or ''!r}, bundled={str(bundled_candidate or '')!r})"
    )
    return resolved
