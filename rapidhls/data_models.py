"""Data models and dataclasses for the HLS conversion engine."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


OUTPUT_MODE_DEFAULT = "default"
OUTPUT_MODE_SAME_AS_INPUT = "same-as-input"
OUTPUT_MODE_CUSTOM = "custom"

OUTPUT_MODES = (OUTPUT_MODE_DEFAULT, OUTPUT_MODE_SAME_AS_INPUT, OUTPUT_MODE_CUSTOM)

QUALITY_TIERS = ("low", "medium", "high")


@dataclass(frozen=True)
class ConversionRequest:
    """One unit of work: a single media file to convert to HLS."""
    input_file: str
    output_name: str
    output_path: str  # base directory the output folder is created in
    output_mode: str = OUTPUT_MODE_DEFAULT
    segment_duration: str = "10"  # passed to ffmpeg verbatim
    quality: str = "medium"
    audio_only: bool = False
    ffmpeg_path: str = ""  # user override, empty for automatic lookup


@dataclass(frozen=True)
class ResolvedExecutable:
    """The transcoder command chosen for one invocation."""
    command: str
    source: str  # "custom", "bundled" or "system" (bare name left to the OS search path)


@dataclass(frozen=True)
class OutputAllocation:
    """Output folder reserved for one conversion job."""
    output_directory: Path
    playlist_file: Path    # playlist.m3u8
    segment_pattern: Path  # segment%03d.ts


@dataclass(frozen=True)
class ConversionOutcome:
    """Terminal result of one conversion."""
    success: bool
    input_file: str
    output_directory: Optional[Path] = None
    error_message: Optional[str] = None

    @classmethod
    def succeeded(cls, input_file: str, output_directory: Path) -> 'ConversionOutcome':
        return cls(success=True, input_file=input_file, output_directory=output_directory)

    @classmethod
    def failed(
        cls,
        input_file: str,
        error_message: str,
        output_directory: Optional[Path] = None
    ) -> 'ConversionOutcome':
        return cls(
            success=False,
            input_file=input_file,
            output_directory=output_directory,
            error_message=error_message
        )


@dataclass(frozen=True)
class ProgressEvent:
    """A chunk of ffmpeg diagnostic output, with the elapsed time if it reported one."""
    input_file: str
    text: str
    elapsed: Optional[str] = None  # "HH:MM:SS"

    @property
    def is_progress(self) -> bool:
        return self.elapsed is not None

    @property
    def elapsed_seconds(self) -> Optional[int]:
        """Elapsed time in whole seconds, or None for plain log chunks."""
        if self.elapsed is None:
            return None
        hours, minutes, seconds = (int(part) for part in self.elapsed.split(":"))
        return hours * 3600 + minutes * 60 + seconds


@dataclass(frozen=True)
class BatchOptions:
    """Settings shared by every file of a bulk conversion."""
    output_mode: str = OUTPUT_MODE_DEFAULT
    default_output_path: str = ""
    custom_output_path: str = ""
    segment_duration: str = "10"
    quality: str = "medium"
    audio_only: bool = False
    ffmpeg_path: str = ""


@dataclass(frozen=True)
class BatchItem:
    """Outcome of one file within a batch."""
    index: int  # 1-based position in the batch
    input_file: str
    outcome: ConversionOutcome


@dataclass
class BatchState:
    """Aggregate state of a bulk conversion, owned by the caller."""
    total_files: int
    completed_files: int = 0  # successful conversions
    current_file: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    items: List[BatchItem] = field(default_factory=list)
    output_directory: Optional[Path] = None  # last successful output location
    progress: int = 0
    finished: bool = False
    cancelled: bool = False

    @property
    def attempted_files(self) -> int:
        return len(self.items)

    @property
    def failed_files(self) -> int:
        return sum(1 for item in self.items if not item.outcome.success)
