"""Sequential bulk conversion of media files to HLS."""

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from rapidhls.data_models import (
    BatchItem,
    BatchOptions,
    BatchState,
    ConversionRequest,
    ProgressEvent,
)
from rapidhls.file_processor import output_name_for, resolve_output_location
from rapidhls.progress_bar import advance_progress, batch_progress
from rapidhls.stop_flag import StopFlag
from rapidhls.video_converter import VideoConverter, run_in_thread


LogCallback = Callable[[str], None]
ProgressCallback = Callable[[ProgressEvent], None]
FileCompleteCallback = Callable[[BatchItem], None]


class BatchProcessor:
    """
    Converts a list of files one after another.

    A failed file is recorded and the batch moves on to the next one; the
    batch itself always completes. Each call to run_batch() works on its own
    BatchState, nothing is shared between batches.
    """

    def __init__(
        self,
        converter: Optional[VideoConverter] = None,
        stop_flag: Optional[StopFlag] = None
    ):
        """
        Initialize BatchProcessor.

        Args:
            converter: Converter used for each file (one is created if omitted)
            stop_flag: Optional flag checked before each file; also cancels
                the running conversion
        """
        self.stop_flag = stop_flag
        self.converter = converter or VideoConverter(stop_flag=stop_flag)
        if self.converter.stop_flag is None:
            self.converter.stop_flag = stop_flag

    def run_batch(
        self,
        files: Sequence[Union[str, Path]],
        options: BatchOptions,
        on_log: Optional[LogCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_file_complete: Optional[FileCompleteCallback] = None
    ) -> BatchState:
        """
        Convert every file in order with the shared options.

        Args:
            files: Input files, processed strictly in this order
            options: Settings applied to every file
            on_log: Called with every log line of the batch, in order
            on_progress: Called for ffmpeg status lines carrying an elapsed time
            on_file_complete: Called after each file with its BatchItem

        Returns:
            The finalized BatchState
        """
        files = [str(f) for f in files]
        state = BatchState(total_files=len(files))

        def log(line: str) -> None:
            state.logs.append(line)
            if on_log:
                on_log(line)

        def progress(event: ProgressEvent) -> None:
            state.current_file = event.input_file
            state.progress = advance_progress(state.progress)
            if on_progress:
                on_progress(event)

        logging.info(f"Starting batch conversion of {state.total_files} file(s)")

        for index, input_file in enumerate(files, 1):
            if self.stop_flag is not None and self.stop_flag.is_stop_requested():
                state.cancelled = True
                logging.warning(f"Stop requested, skipping remaining {state.total_files - index + 1} file(s)")
                log(f"\n[STOP] Batch stopped before file {index}/{state.total_files}\n")
                break

            file_name = output_name_for(input_file, index - 1)
            logging.info("=" * 60)
            logging.info(f"Processing file {index}/{state.total_files}: {file_name}")
            logging.info("=" * 60)

            log(f"\n=== Processing file {index}/{state.total_files}: {file_name} ===\n")
            state.current_file = input_file

            output_location = resolve_output_location(
                input_file,
                options.output_mode,
                options.default_output_path,
                options.custom_output_path
            )
            request = ConversionRequest(
                input_file=input_file,
                output_name=file_name,
                output_path=output_location,
                output_mode=options.output_mode,
                segment_duration=options.segment_duration,
                quality=options.quality,
                audio_only=options.audio_only,
                ffmpeg_path=options.ffmpeg_path
            )

            outcome = self.converter.convert(request, on_log=log, on_progress=progress)
            item = BatchItem(index=index, input_file=input_file, outcome=outcome)
            state.items.append(item)

            if outcome.success:
                state.completed_files += 1
                state.progress = batch_progress(index, state.total_files)
                state.output_directory = Path(output_location)
                log(f"✓ File {index} completed: {outcome.output_directory}\n")
            else:
                logging.error(f"File {index} failed: {input_file}")
                log(f"✗ File {index} failed: {outcome.error_message}\n")

            if on_file_complete:
                on_file_complete(item)

        state.current_file = None
        state.finished = True
        logging.info(
            f"Batch finished: {state.completed_files}/{state.total_files} succeeded, "
            f"{state.failed_files} failed"
        )
        log(
            f"\n✓ Batch conversion completed! {state.completed_files}/{state.total_files} "
            f"files processed successfully."
        )
        return state

    def run_batch_async(
        self,
        files: Sequence[Union[str, Path]],
        options: BatchOptions,
        on_log: Optional[LogCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_file_complete: Optional[FileCompleteCallback] = None
    ) -> "Future[BatchState]":
        """Run run_batch() on a background thread. Callbacks fire on that thread."""
        return run_in_thread(
            self.run_batch, files, options, on_log, on_progress, on_file_complete
        )
