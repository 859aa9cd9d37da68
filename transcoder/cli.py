"""
Command-Line Interface (CLI) setup for the Transcoder.

This module uses Python's `argparse` to define the command-line arguments and
to turn them into `ConversionOptions`.
"""
import argparse
from typing import List, Optional

from .config.video import DEFAULT_AUDIO_CODEC, DEFAULT_VIDEO_CODEC, SUBTITLE_FORMATS, TARGET_FORMAT_EXTENSIONS
from .domain.options import ConversionOptions


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Transcoder.

    Args:
        argv: Arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(description="Convert a video file with FFmpeg.")
    parser.add_argument("input", help="Path of the video file to convert.")
    parser.add_argument(
        "--format", dest="target_format", default="mp4", choices=sorted(TARGET_FORMAT_EXTENSIONS),
        help="Output container format.",
    )
    parser.add_argument(
        "--quality", type=int, default=None,
        help="Quality preset (360, 480, 720 or 1080). Other values leave the CRF to FFmpeg.",
    )
    parser.add_argument("--output-dir", default=None, help="Directory for the output file. Defaults to the input's directory.")
    parser.add_argument("--width", type=int, default=None, help="Output width. Height follows the aspect ratio if omitted.")
    parser.add_argument("--height", type=int, default=None, help="Output height. Width follows the aspect ratio if omitted.")
    parser.add_argument("--bitrate", default=None, help="Video bitrate, e.g. 5M.")
    parser.add_argument("--video-codec", default=DEFAULT_VIDEO_CODEC, help="FFmpeg video encoder.")
    parser.add_argument("--audio-codec", default=DEFAULT_AUDIO_CODEC, help="FFmpeg audio encoder.")
    parser.add_argument("--subtitle", default=None, help="Subtitle file to add.")
    parser.add_argument("--subtitle-format", default=None, choices=SUBTITLE_FORMATS, help="Format of the subtitle file.")
    parser.add_argument("--burn-in", action="store_true", help="Render the subtitles into the video instead of adding a track.")
    parser.add_argument("--force-style", default=None, help="ASS force_style override, used with --burn-in.")
    parser.add_argument(
        "--info", action="store_true", help="Print information about the input file instead of converting it."
    )
    parser.add_argument(
        "--check-ffmpeg", action="store_true", help="Verify that FFmpeg can be executed before converting."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level.",
    )

    args = parser.parse_args(argv)

    for name in ("width", "height"):
        value = getattr(args, name)
        if value is not None and value < 0:
            parser.error(f"--{name} must not be negative.")
    if args.burn_in and not args.subtitle:
        parser.error("--burn-in requires --subtitle.")

    return args


def options_from_args(args: argparse.Namespace) -> ConversionOptions:
    """Builds `ConversionOptions` from parsed command-line arguments."""
    payload = {
        "format": args.target_format,
        "quality": args.quality,
        "outputDirectory": args.output_dir,
        "bitrate": args.bitrate,
        "codec": args.video_codec,
        "audioCodec": args.audio_codec,
    }
    if args.width is not None or args.height is not None:
        payload["resolution"] = {"width": args.width, "height": args.height}
    if args.subtitle:
        payload["subtitle"] = {
            "path": args.subtitle,
            "format": args.subtitle_format,
            "burnIn": args.burn_in,
            "forceStyle": args.force_style,
        }
    return ConversionOptions.from_dict(payload)
