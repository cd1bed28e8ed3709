"""Shared test fixtures for RapidHLS."""

import sys
from pathlib import Path

import pytest


# Stand-in for ffmpeg: reads the HLS arguments, reports progress on stderr
# like the real binary and writes a tiny playlist. Inputs with "broken" in
# their name fail with a diagnostic, "silent" ones fail without output.
FAKE_FFMPEG_SCRIPT = '''
import sys
from pathlib import Path

args = sys.argv[1:]
input_file = args[args.index("-i") + 1]
playlist = Path(args[-1])
name = Path(input_file).name

if "silent" in name:
    sys.exit(3)
if "broken" in name:
    sys.stderr.write(input_file + ": Invalid data found when processing input\\n")
    sys.exit(1)

sys.stderr.write("ffmpeg version 6.0 Copyright (c) 2000-2023 the FFmpeg developers\\n")
for second in range(1, 4):
    sys.stderr.write(
        "frame=%d fps=0.0 q=-1.0 size=N/A time=00:00:0%d.00 bitrate=N/A speed=10x\\r"
        % (second * 25, second)
    )
    sys.stderr.flush()
sys.stderr.write("\\n")

(playlist.parent / "segment000.ts").write_bytes(b"")
playlist.write_text("#EXTM3U\\n#EXTINF:10.0,\\nsegment000.ts\\n#EXT-X-ENDLIST\\n")
'''

posix_only = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="relies on POSIX shell scripts, signals and newlines"
)


@pytest.fixture
def fake_ffmpeg_dir(tmp_path: Path) -> Path:
    """Directory holding an executable named ffmpeg that runs the fake script."""
    bin_dir = tmp_path / "ffmpeg-bin"
    bin_dir.mkdir()
    script = bin_dir / "fake_ffmpeg.py"
    script.write_text(FAKE_FFMPEG_SCRIPT)

    wrapper = bin_dir / "ffmpeg"
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
    wrapper.chmod(0o755)
    return bin_dir


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Directory with placeholder media files."""
    folder = tmp_path / "media"
    folder.mkdir()
    for name in ("one.mp4", "broken.mp4", "three.mkv", "song.mp3", "notes.txt"):
        (folder / name).touch()
    return folder


def python_command(script: str):
    """Executable and arguments that run a Python snippet as the 'transcoder'."""
    return sys.executable, ["-c", script]
