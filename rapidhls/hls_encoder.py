"""FFmpeg argument construction for HLS output."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

from rapidhls.data_models import ConversionRequest
from rapidhls.file_processor import PLAYLIST_FILENAME, SEGMENT_FILENAME_PATTERN


AUDIO_BITRATES: Dict[str, str] = {
    "low": "64k",
    "medium": "128k",
    "high": "320k",
}

VIDEO_BITRATES: Dict[str, str] = {
    "low": "500k",
    "medium": "1500k",
    "high": "3000k",
}

DEFAULT_QUALITY = "medium"

AUDIO_CODEC = "aac"

# Baseline profile at level 3.0 plays on every HLS client
VIDEO_PROFILE = "baseline"
VIDEO_LEVEL = "3.0"


@dataclass(frozen=True)
class HLSCommand:
    """Arguments for one ffmpeg run and the files it will write."""
    args: List[str]
    playlist_file: Path
    segment_pattern: Path


def audio_bitrate_for(quality: str) -> str:
    """Return the audio bitrate for a quality tier, medium if unknown."""
    return AUDIO_BITRATES.get(quality, AUDIO_BITRATES[DEFAULT_QUALITY])


def video_bitrate_for(quality: str) -> str:
    """Return the video bitrate for a quality tier, medium if unknown."""
    return VIDEO_BITRATES.get(quality, VIDEO_BITRATES[DEFAULT_QUALITY])


def build_arguments(request: ConversionRequest, output_dir: Union[str, Path]) -> HLSCommand:
    """
    Build the ffmpeg argument vector for converting a file to HLS.

    The arguments write ``playlist.m3u8`` and ``segment000.ts``,
    ``segment001.ts``, ... into ``output_dir``. The playlist keeps every
    segment so it can be played on demand. No I/O is performed.

    Args:
        request: The conversion request
        output_dir: Folder the playlist and segments are written to

    Returns:
        HLSCommand with the arguments (without the executable) and target paths
    """
    output_dir = Path(output_dir)
    playlist_file = output_dir / PLAYLIST_FILENAME
    segment_pattern = output_dir / SEGMENT_FILENAME_PATTERN

    if request.audio_only:
        args = [
            "-i", request.input_file,
            # Audio only - no video
            "-vn",
            "-c:a", AUDIO_CODEC,
            "-b:a", audio_bitrate_for(request.quality),
            # HLS settings
            "-start_number", "0",
            "-hls_time", request.segment_duration,
            "-hls_list_size", "0",
            "-f", "hls",
            "-hls_segment_filename", str(segment_pattern),
            str(playlist_file),
        ]
    else:
        args = [
            "-i", request.input_file,
            "-profile:v", VIDEO_PROFILE,
            "-level", VIDEO_LEVEL,
            # HLS settings
            "-start_number", "0",
            "-hls_time", request.segment_duration,
            "-hls_list_size", "0",
            "-b:v", video_bitrate_for(request.quality),
            "-f", "hls",
            "-hls_segment_filename", str(segment_pattern),
            str(playlist_file),
        ]

    return HLSCommand(args=args, playlist_file=playlist_file, segment_pattern=segment_pattern)


def format_command(executable: str, args: List[str]) -> str:
    """Render a command line for log output."""
    return " ".join([executable] + args)
