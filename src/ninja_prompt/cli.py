"""
Command Line Interface
======================

Analyze a local video file and print the generated prompt.

Usage:
    ninja-prompt clip.mp4
    ninja-prompt clip.mp4 --frames 8 --no-remote
    ninja-prompt clip.mp4 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from ninja_prompt.config import settings
from ninja_prompt.features.extractor import MalformedBuffer
from ninja_prompt.models.analysis import FrameProgress
from ninja_prompt.pipeline import create_pipeline
from ninja_prompt.sampling.source import SeekTimeout, SourceUnavailable


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ninja-prompt",
        description="Generate a text-to-video prompt from a video file",
    )
    parser.add_argument("video", help="Path (or OpenCV-readable URL) of the video")
    parser.add_argument(
        "--frames",
        type=int,
        default=settings.sampling.frame_count,
        help=f"Frames to sample (default: {settings.sampling.frame_count})",
    )
    parser.add_argument(
        "--no-remote",
        action="store_true",
        help="Skip the remote classifier and use local analysis only",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result (prompt + details) as JSON",
    )
    return parser


def _print_progress(event: FrameProgress) -> None:
    print(
        f"Analyzed frame {event.completed}/{event.total} ({event.provenance.value})",
        file=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.frames < 1:
        print("Error: --frames must be >= 1", file=sys.stderr)
        return 2

    pipeline = create_pipeline(settings, remote_enabled=False if args.no_remote else None)

    try:
        result = asyncio.run(
            pipeline.analyze_path(
                args.video,
                frame_count=args.frames,
                on_progress=_print_progress,
                source_label=args.video,
            )
        )
    except (SourceUnavailable, SeekTimeout, MalformedBuffer) as e:
        print(f"Error: Analysis failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print(result.prompt)
    return 0


if __name__ == "__main__":
    sys.exit(main())
