"""Single-file media conversion to HLS format."""

import logging
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Optional, Union

from rapidhls.data_models import (
    BatchOptions,
    ConversionOutcome,
    ConversionRequest,
    ProgressEvent,
)
from rapidhls.ffmpeg_locator import (
    default_bundled_candidate,
    default_resources_path,
    resolve_ffmpeg,
)
from rapidhls.ffmpeg_process import FFmpegProcess
from rapidhls.file_processor import allocate_output, resolve_output_location
from rapidhls.hls_encoder import build_arguments
from rapidhls.stop_flag import StopFlag


LogCallback = Callable[[str], None]
ProgressCallback = Callable[[ProgressEvent], None]

DEFAULT_OUTPUT_NAME = "output"


def run_in_thread(target: Callable, *args, **kwargs) -> Future:
    """
    Run a callable on a daemon thread and return a Future for its result.

    Args:
        target: Callable to run
        *args, **kwargs: Arguments for the callable

    Returns:
        Future resolved with the callable's return value or exception
    """
    future: Future = Future()

    def worker():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(target(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()
    return future


class VideoConverter:
    """Converts one media file to HLS using ffmpeg."""

    def __init__(
        self,
        bundled_candidate: Union[str, Path, None] = None,
        resources_path: Union[str, Path, None] = None,
        stop_flag: Optional[StopFlag] = None
    ):
        """
        Initialize VideoConverter.

        Args:
            bundled_candidate: Bundled ffmpeg location, looked up when omitted
            resources_path: Resources folder of a packaged build, looked up
                when omitted
            stop_flag: Optional flag that cancels the running conversion
        """
        self.bundled_candidate = bundled_candidate or default_bundled_candidate()
        self.resources_path = resources_path or default_resources_path()
        self.stop_flag = stop_flag

    def convert(
        self,
        request: ConversionRequest,
        on_log: Optional[LogCallback] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ConversionOutcome:
        """
        Convert a media file to HLS.

        Conversion problems never raise; they are returned as a failed outcome.
        The output folder is created under the location the request's output
        mode selects; ``output_path`` serves as the default or custom path and
        an empty one falls back to the input file's directory.

        Args:
            request: What to convert and how
            on_log: Called with each log line, in order
            on_progress: Called for ffmpeg status lines carrying an elapsed time

        Returns:
            ConversionOutcome with the output folder or the error message
        """
        logging.info(f"Starting HLS conversion: {request.input_file}")
        logging.debug(f"Conversion request: {request}")

        executable = resolve_ffmpeg(
            request.ffmpeg_path, self.bundled_candidate, self.resources_path
        )

        output_location = resolve_output_location(
            request.input_file,
            request.output_mode,
            default_path=request.output_path,
            custom_path=request.output_path
        )

        try:
            allocation = allocate_output(output_location, request.output_name)
        except OSError as e:
            error_msg = f"Failed to create output directory for {request.input_file}: {e}"
            logging.error(error_msg)
            if on_log:
                on_log(f"\n[rapidhls] {error_msg}\n")
            return ConversionOutcome.failed(request.input_file, error_msg)

        command = build_arguments(request, allocation.output_directory)

        process = FFmpegProcess(
            executable.command,
            command.args,
            request.input_file,
            allocation.output_directory,
            stop_flag=self.stop_flag
        )
        outcome = process.run(on_log=on_log, on_progress=on_progress)

        if outcome.success:
            logging.info(f"Conversion successful: {request.input_file} -> {command.playlist_file}")
        else:
            logging.error(f"Conversion failed for {request.input_file}")
        return outcome

    def convert_file(
        self,
        input_file: Union[str, Path],
        options: BatchOptions,
        output_name: str = "",
        on_log: Optional[LogCallback] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ConversionOutcome:
        """
        Convert one file with the shared settings, as a single conversion.

        Args:
            input_file: Media file to convert
            options: Output mode, paths and encoding settings
            output_name: Name of the output folder, ``output`` when empty
            on_log: Called with each log line, ending with a completion or
                failure summary
            on_progress: Called for ffmpeg status lines carrying an elapsed time

        Returns:
            ConversionOutcome of the conversion
        """
        input_file = str(input_file)
        output_location = resolve_output_location(
            input_file,
            options.output_mode,
            options.default_output_path,
            options.custom_output_path
        )
        request = ConversionRequest(
            input_file=input_file,
            output_name=output_name or DEFAULT_OUTPUT_NAME,
            output_path=output_location,
            output_mode=options.output_mode,
            segment_duration=options.segment_duration,
            quality=options.quality,
            audio_only=options.audio_only,
            ffmpeg_path=options.ffmpeg_path
        )

        outcome = self.convert(request, on_log=on_log, on_progress=on_progress)

        if on_log:
            if outcome.success:
                on_log("\n✓ Conversion completed successfully!")
                on_log(f"✓ Output saved to: {outcome.output_directory}")
            else:
                on_log(f"\n✗ Conversion failed: {outcome.error_message}")
        return outcome

    def convert_async(
        self,
        request: ConversionRequest,
        on_log: Optional[LogCallback] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> "Future[ConversionOutcome]":
        """Run convert() on a background thread. Callbacks fire on that thread."""
        return run_in_thread(self.convert, request, on_log, on_progress)
