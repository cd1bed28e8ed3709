"""Progress bar for HLS conversions."""

from typing import Optional


# Each ffmpeg status line moves the bar by a fixed step. The bar does not
# know the media duration, so it stops short of 100 until the file is done.
PROGRESS_STEP = 5
PROGRESS_CAP = 95


def advance_progress(progress: int) -> int:
    """Return the progress value after one more ffmpeg status line."""
    return min(progress + PROGRESS_STEP, PROGRESS_CAP)


def batch_progress(completed_index: int, total_files: int) -> int:
    """
    Return the batch percentage after the file at ``completed_index`` succeeded.

    Args:
        completed_index: 1-based position of the file that just finished
        total_files: Number of files in the batch

    Returns:
        Percentage between 0 and 100
    """
    if total_files <= 0:
        return 100
    return round(completed_index / total_files * 100)


class ProgressBar:
    """Simple console progress bar for one conversion or a batch."""

    def __init__(self, total_files: int = 1, bar_width: int = 40, stream=None):
        """
        Initialize progress bar.

        Args:
            total_files: Number of files that will be converted
            bar_width: Width of the bar in characters
            stream: File object to draw on (stdout if not provided)
        """
        self.total_files = total_files
        self.bar_width = bar_width
        self.stream = stream
        self.progress = 0
        self.current_file: Optional[str] = None
        self.elapsed: Optional[str] = None

    def start_file(self, index: int, name: str):
        """Show the header for the next file."""
        self.current_file = name
        self.elapsed = None
        self._print(f"\n{'='*60}")
        self._print(f"File {index}/{self.total_files}: {name}")
        self._print(f"{'='*60}")
        self._render()

    def update(self, elapsed: Optional[str] = None):
        """Advance for one ffmpeg status line."""
        self.progress = advance_progress(self.progress)
        if elapsed is not None:
            self.elapsed = elapsed
        self._render()

    def file_finished(self, index: int, success: bool = True):
        """
        Finish the current file.

        Args:
            index: 1-based position of the file in the batch
            success: Whether the conversion succeeded
        """
        if success:
            if self.total_files > 1:
                self.progress = batch_progress(index, self.total_files)
            else:
                self.progress = 100
            self._render()
            self._print(f"\n[OK] Finished: {self.current_file}")
        else:
            self._print(f"\n[FAILED] {self.current_file}")

    def _print(self, text: str, end: str = "\n"):
        print(text, end=end, flush=True, file=self.stream)

    def _render(self):
        """Render the progress bar."""
        filled = int(self.bar_width * self.progress / 100)
        bar = '#' * filled + '-' * (self.bar_width - filled)
        time_text = f" time={self.elapsed}" if self.elapsed else ""
        self._print(f"\r[{bar}] {self.progress:3d}%{time_text:<16}", end='')
