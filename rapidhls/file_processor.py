"""File system operations for the HLS conversion workflow."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from rapidhls.data_models import (
    OUTPUT_MODE_CUSTOM,
    OUTPUT_MODE_DEFAULT,
    OUTPUT_MODE_SAME_AS_INPUT,
    OutputAllocation,
)


PLAYLIST_FILENAME = "playlist.m3u8"
SEGMENT_FILENAME_PATTERN = "segment%03d.ts"

VIDEO_EXTENSIONS = (
    "mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v", "mpg", "mpeg", "3gp",
)
AUDIO_EXTENSIONS = ("mp3", "wav", "flac", "aac", "m4a", "ogg", "wma", "opus")
MEDIA_EXTENSIONS = VIDEO_EXTENSIONS + AUDIO_EXTENSIONS

PathLike = Union[str, Path]


def allocate_output_directory(base_path: PathLike, desired_name: str) -> Path:
    """
    Create a new output folder that did not exist before.

    Tries ``desired_name`` first, then ``desired_name-1``, ``desired_name-2``
    and so on until a free name is found.

    Args:
        base_path: Directory the output folder is created in
        desired_name: Preferred folder name

    Returns:
        Path to the freshly created folder

    Raises:
        OSError: If the folder cannot be created
    """
    base = Path(base_path)
    output_dir = base / desired_name
    counter = 1

    while True:
        # lexists so a dangling symlink also counts as taken
        if not os.path.lexists(output_dir):
            try:
                output_dir.mkdir(parents=True, exist_ok=False)
                logging.info(f"Output directory ready: {output_dir}")
                return output_dir
            except FileExistsError:
                logging.debug(f"Output folder appeared concurrently, trying next name: {output_dir}")

        output_dir = base / f"{desired_name}-{counter}"
        counter += 1


def allocate_output(base_path: PathLike, desired_name: str) -> OutputAllocation:
    """
    Reserve an output folder and name the HLS files inside it.

    Args:
        base_path: Directory the output folder is created in
        desired_name: Preferred folder name

    Returns:
        OutputAllocation for the new folder
    """
    output_dir = allocate_output_directory(base_path, desired_name)
    return OutputAllocation(
        output_directory=output_dir,
        playlist_file=output_dir / PLAYLIST_FILENAME,
        segment_pattern=output_dir / SEGMENT_FILENAME_PATTERN
    )


def output_name_for(input_file: PathLike, index: int = 0) -> str:
    """
    Derive the output folder name for an input file.

    Args:
        input_file: Path to the input media file
        index: Position of the file in its batch, used for the fallback name

    Returns:
        File name without its extension, or ``file_<index>`` if that is empty
    """
    # Accept both separators so Windows paths behave the same on every platform
    base_name = str(input_file).replace("\\", "/").rsplit("/", 1)[-1]
    stem = base_name.rsplit(".", 1)[0] if "." in base_name else base_name
    return stem or f"file_{index}"


def input_directory_of(input_file: PathLike) -> str:
    """Return the directory part of an input path, or an empty string."""
    text = str(input_file)
    separator = max(text.rfind("\\"), text.rfind("/"))
    return text[:separator] if separator >= 0 else ""


def resolve_output_location(
    input_file: PathLike,
    output_mode: str,
    default_path: Optional[str] = None,
    custom_path: Optional[str] = None
) -> str:
    """
    Pick the base directory for a file's output folder.

    ``default`` uses the configured default path, ``same-as-input`` the input
    file's directory and ``custom`` the custom path. An empty result falls
    back to the input file's directory.

    Args:
        input_file: Path to the input media file
        output_mode: One of the OUTPUT_MODE_* values
        default_path: Default output path from the settings
        custom_path: Custom output path chosen for this run

    Returns:
        Base output directory
    """
    if output_mode == OUTPUT_MODE_DEFAULT:
        location = default_path or ""
    elif output_mode == OUTPUT_MODE_SAME_AS_INPUT:
        location = input_directory_of(input_file)
    elif output_mode == OUTPUT_MODE_CUSTOM:
        location = custom_path or ""
    else:
        logging.warning(f"Unknown output mode '{output_mode}', using input directory")
        location = ""

    if not location:
        location = input_directory_of(input_file)
    return location


def find_media_files(folder: PathLike, recursive: bool = False) -> List[Path]:
    """
    Scan a folder for supported audio and video files.

    Args:
        folder: Directory to scan
        recursive: Also scan subdirectories

    Returns:
        Sorted list of media file paths, empty if the folder does not exist
    """
    folder = Path(folder)
    if not folder.exists() or not folder.is_dir():
        logging.warning(f"Media folder does not exist: {folder}")
        return []

    entries = folder.rglob("*") if recursive else folder.iterdir()
    media_files = sorted(
        item for item in entries
        if item.is_file() and item.suffix.lower().lstrip(".") in MEDIA_EXTENSIONS
    )

    logging.info(f"Found {len(media_files)} media file(s) in {folder}")
    return media_files
