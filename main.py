#!/usr/bin/env python3
"""
RapidHLS - media to HLS converter
Command-line entry point for single and bulk conversions.
"""

import argparse
import dataclasses
import logging
import sys
from typing import Callable, List, Optional

from rapidhls.batch_processor import BatchProcessor
from rapidhls.config_manager import ConfigManager, ConfigurationError
from rapidhls.data_models import (
    BatchItem,
    BatchOptions,
    OUTPUT_MODES,
    QUALITY_TIERS,
    ProgressEvent,
)
from rapidhls.file_processor import find_media_files, output_name_for
from rapidhls.progress_bar import ProgressBar
from rapidhls.stop_flag import StopFlag
from rapidhls.video_converter import VideoConverter


EXIT_STOPPED = 130


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rapidhls",
        description="Convert media files to HLS (playlist.m3u8 + segment%03d.ts) using ffmpeg."
    )
    parser.add_argument("files", nargs="*", help="Media files to convert, in order")
    parser.add_argument("--folder", action="append", default=[],
                        help="Add every media file found in this folder")
    parser.add_argument("--recursive", action="store_true",
                        help="Also scan subfolders given with --folder")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--output-mode", choices=OUTPUT_MODES, help="Where output folders are created")
    parser.add_argument("--output", dest="custom_output_path",
                        help="Custom output directory (implies --output-mode custom)")
    parser.add_argument("--quality", choices=QUALITY_TIERS)
    parser.add_argument("--segment-duration", help="HLS segment length in seconds")
    parser.add_argument("--audio-only", action="store_true", default=None)
    parser.add_argument("--name", help="Output folder name when converting a single file")
    parser.add_argument("--ffmpeg", dest="ffmpeg_path", help="ffmpeg binary or the folder containing it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show ffmpeg output and debug logs")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the HLS converter."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(asctime)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("RapidHLS - Starting")
    logger.info("=" * 60)

    try:
        config = ConfigManager(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if not args.verbose:
        logging.getLogger().setLevel(config.log_level.upper())

    options = config.batch_options()
    overrides = {
        "output_mode": args.output_mode,
        "custom_output_path": args.custom_output_path,
        "quality": args.quality,
        "segment_duration": args.segment_duration,
        "audio_only": args.audio_only,
        "ffmpeg_path": args.ffmpeg_path,
    }
    if args.custom_output_path and not args.output_mode:
        overrides["output_mode"] = "custom"
    options = dataclasses.replace(
        options, **{key: value for key, value in overrides.items() if value is not None}
    )

    logger.info(f"  - Output mode: {options.output_mode}")
    logger.info(f"  - Quality: {options.quality} ({'audio only' if options.audio_only else 'video'})")
    logger.info(f"  - Segment duration: {options.segment_duration}s")

    files = list(args.files)
    for folder in args.folder:
        files.extend(str(path) for path in find_media_files(folder, recursive=args.recursive))

    if not files:
        logger.warning("No input files given")
        return 0

    if args.name and len(files) != 1:
        logger.error("--name can only be used with a single input file")
        return 1

    stop_flag = StopFlag()
    stop_flag.register_signal_handlers()
    converter = VideoConverter(stop_flag=stop_flag)

    def on_log(line: str) -> None:
        if args.verbose:
            sys.stderr.write(line)

    if len(files) == 1:
        code = convert_single(files[0], args.name, options, converter, stop_flag, on_log)
    else:
        code = convert_batch(files, options, converter, stop_flag, on_log)

    logger.info("=" * 60)
    logger.info("RapidHLS - Completed")
    logger.info("=" * 60)

    return code


def convert_single(
    input_file: str,
    output_name: Optional[str],
    options: BatchOptions,
    converter: VideoConverter,
    stop_flag: StopFlag,
    on_log: Callable[[str], None]
) -> int:
    """Convert one file and print its result. Returns the exit code."""
    name = output_name or output_name_for(input_file)
    progress_bar = ProgressBar(total_files=1)
    progress_bar.start_file(1, name)

    outcome = converter.convert_file(
        input_file,
        options,
        output_name=name,
        on_log=on_log,
        on_progress=lambda event: progress_bar.update(event.elapsed)
    )
    progress_bar.file_finished(1, outcome.success)

    print()
    print("=" * 60)
    print("CONVERSION SUMMARY")
    print("=" * 60)
    if outcome.success:
        print(f"[OK] {input_file} -> {outcome.output_directory}")
        print("=" * 60)
        return 0

    print(f"[FAILED] {input_file}")
    print(outcome.error_message.strip())
    print("=" * 60)
    return EXIT_STOPPED if stop_flag.is_stop_requested() else 1


def convert_batch(
    files: List[str],
    options: BatchOptions,
    converter: VideoConverter,
    stop_flag: StopFlag,
    on_log: Callable[[str], None]
) -> int:
    """Convert files one after another and print a summary. Returns the exit code."""
    logger = logging.getLogger(__name__)
    progress_bar = ProgressBar(total_files=len(files))
    names = [output_name_for(path, index) for index, path in enumerate(files)]
    finished: List[BatchItem] = []
    started = set()

    def start_header(index: int) -> None:
        # Keyed by batch position so a file listed twice gets two headers
        if index not in started:
            started.add(index)
            progress_bar.start_file(index, names[index - 1])

    def on_progress(event: ProgressEvent) -> None:
        start_header(len(finished) + 1)
        progress_bar.update(event.elapsed)

    def on_file_complete(item: BatchItem) -> None:
        finished.append(item)
        start_header(item.index)
        progress_bar.file_finished(item.index, item.outcome.success)
        if not item.outcome.success:
            logger.error(f"Failed: {item.input_file}: {item.outcome.error_message.strip()}")

    processor = BatchProcessor(converter=converter, stop_flag=stop_flag)
    state = processor.run_batch(
        files,
        options,
        on_log=on_log,
        on_progress=on_progress,
        on_file_complete=on_file_complete
    )

    print()
    print("=" * 60)
    print("CONVERSION SUMMARY")
    print("=" * 60)
    print(f"Successful Conversions:   {state.completed_files}")
    print(f"Failed Conversions:       {state.failed_files}")
    print(f"Total Processed:          {state.attempted_files}/{state.total_files}")
    for item in state.items:
        status = "OK" if item.outcome.success else "FAILED"
        location = item.outcome.output_directory if item.outcome.success else ""
        print(f"  [{status}] {item.input_file} {location}")
    print("=" * 60)

    return EXIT_STOPPED if state.cancelled else 0


if __name__ == "__main__":
    sys.exit(main())
