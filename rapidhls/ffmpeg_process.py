"""Runs ffmpeg and turns its diagnostic output into progress events."""

import io
import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence

from rapidhls.data_models import ConversionOutcome, ProgressEvent
from rapidhls.ffmpeg_locator import is_windows
from rapidhls.hls_encoder import format_command
from rapidhls.stop_flag import StopFlag


PROGRESS_PATTERN = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})")

# Seconds a terminated ffmpeg gets to exit before it is killed
TERMINATE_TIMEOUT = 5

CANCELLED_MESSAGE = "Conversion cancelled"


def parse_progress_time(text: str) -> Optional[str]:
    """
    Extract the elapsed time from an ffmpeg status line.

    Args:
        text: A chunk of ffmpeg stderr output

    Returns:
        "HH:MM:SS" if the chunk contains ``time=HH:MM:SS``, otherwise None
    """
    match = PROGRESS_PATTERN.search(text)
    if match is None:
        return None
    return f"{match.group(1)}:{match.group(2)}:{match.group(3)}"


def _popen_kwargs() -> dict:
    """Extra Popen arguments that keep ffmpeg from opening a console on Windows."""
    if not is_windows():
        return {}
    return {"creationflags": getattr(subprocess, "CREATE_NO_WINDOW", 0)}


class FFmpegProcess:
    """Supervises a single ffmpeg run from spawn to exit."""

    def __init__(
        self,
        executable: str,
        args: Sequence[str],
        input_file: str,
        output_directory: Path,
        stop_flag: Optional[StopFlag] = None
    ):
        """
        Prepare an ffmpeg run. Nothing is spawned until events are consumed.

        Args:
            executable: ffmpeg command (path or bare name)
            args: Argument vector, without the executable
            input_file: Input file the run belongs to, attached to events
            output_directory: Folder reported on success
            stop_flag: Optional flag that terminates the run when set
        """
        self.executable = executable
        self.args = list(args)
        self.input_file = input_file
        self.output_directory = Path(output_directory)
        self._stop_flag = stop_flag
        self._process: Optional[subprocess.Popen] = None
        self._diagnostic: List[str] = []
        self._outcome: Optional[ConversionOutcome] = None
        self._spawn_error: Optional[str] = None
        self._cancelled = False
        self._consumed = False

    @property
    def outcome(self) -> ConversionOutcome:
        """The terminal outcome, available once the event stream is exhausted."""
        if self._outcome is None:
            raise RuntimeError("FFmpeg process has not finished")
        return self._outcome

    @property
    def diagnostic_text(self) -> str:
        """All stderr output seen so far."""
        return "".join(self._diagnostic)

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process is not None else None

    def events(self) -> Iterator[ProgressEvent]:
        """
        Start ffmpeg and stream its stderr output.

        Every chunk becomes one ProgressEvent in the order ffmpeg wrote it.
        The stream can be consumed only once; the outcome is set when it ends.

        Raises:
            RuntimeError: If the events were already consumed
        """
        if self._consumed:
            raise RuntimeError("FFmpeg process events can only be consumed once")
        self._consumed = True
        return self._stream()

    def run(
        self,
        on_log: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[ProgressEvent], None]] = None
    ) -> ConversionOutcome:
        """
        Run ffmpeg to completion, forwarding its output to callbacks.

        Args:
            on_log: Called with every chunk of output, and with a final
                ``[ffmpeg]`` line when the run fails
            on_progress: Called for chunks that report an elapsed time

        Returns:
            ConversionOutcome of the run
        """
        for event in self.events():
            if on_log:
                on_log(event.text)
            if on_progress and event.is_progress:
                on_progress(event)

        outcome = self.outcome
        if not outcome.success and on_log:
            on_log(self.failure_log_line())
        return outcome

    def failure_log_line(self) -> str:
        """Log line describing a failed run."""
        if self._spawn_error is not None:
            return f"\n[ffmpeg] spawn error: {self._spawn_error}\n"
        return f"\n[ffmpeg] {self.outcome.error_message}\n"

    def terminate(self) -> None:
        """Ask a running ffmpeg to stop. The outcome becomes a cancellation failure."""
        process = self._process
        if process is None or process.poll() is not None:
            return
        self._cancelled = True
        logging.warning(f"Terminating ffmpeg for {self.input_file}")
        process.terminate()

    def _stream(self) -> Iterator[ProgressEvent]:
        if self._stop_flag is not None and self._stop_flag.is_stop_requested():
            logging.info(f"Stop requested, not starting ffmpeg for {self.input_file}")
            self._outcome = ConversionOutcome.failed(
                self.input_file, CANCELLED_MESSAGE, self.output_directory
            )
            return

        command = [self.executable] + self.args
        logging.debug(f"FFmpeg command: {format_command(self.executable, self.args)}")

        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                **_popen_kwargs()
            )
        except (OSError, ValueError) as e:
            self._spawn_error = str(e)
            logging.error(f"[ffmpeg] spawn error for {self.input_file}: {e} (command: {self.executable})")
            self._outcome = ConversionOutcome.failed(
                self.input_file, self._spawn_error, self.output_directory
            )
            return

        if self._stop_flag is not None:
            self._stop_flag.add_callback(self.terminate)

        # newline="" splits on \r, \n and \r\n but keeps each terminator as written
        stderr = io.TextIOWrapper(
            self._process.stderr, encoding="utf-8", errors="replace", newline=""
        )

        try:
            for chunk in stderr:
                self._diagnostic.append(chunk)
                yield ProgressEvent(
                    input_file=self.input_file,
                    text=chunk,
                    elapsed=parse_progress_time(chunk)
                )
            returncode = self._wait()
            self._outcome = self._outcome_for(returncode)
        finally:
            if self._stop_flag is not None:
                self._stop_flag.remove_callback(self.terminate)
            if self._outcome is None:
                # Consumer stopped reading before ffmpeg finished
                self.terminate()
                self._wait()
                self._outcome = ConversionOutcome.failed(
                    self.input_file, CANCELLED_MESSAGE, self.output_directory
                )
            stderr.close()

    def _wait(self) -> int:
        if not self._cancelled:
            return self._process.wait()
        try:
            return self._process.wait(timeout=TERMINATE_TIMEOUT)
        except subprocess.TimeoutExpired:
            logging.warning(f"FFmpeg did not exit after terminate, killing it: {self.input_file}")
            self._process.kill()
            return self._process.wait()

    def _outcome_for(self, returncode: int) -> ConversionOutcome:
        # Exit code 0 counts as success even if a stop arrived while ffmpeg was exiting
        if returncode == 0:
            logging.info(f"FFmpeg finished: {self.input_file} -> {self.output_directory}")
            return ConversionOutcome.succeeded(self.input_file, self.output_directory)

        if self._cancelled:
            message = CANCELLED_MESSAGE
        elif self.diagnostic_text.strip():
            message = self.diagnostic_text
        else:
            message = f"FFmpeg exited with code {returncode}"

        logging.error(
            f"[ffmpeg] process closed with error for {self.input_file}: "
            f"code={returncode}, command={format_command(self.executable, self.args)}"
        )
        return ConversionOutcome.failed(self.input_file, message, self.output_directory)
