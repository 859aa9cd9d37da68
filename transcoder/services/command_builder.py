"""
Builds FFmpeg argument lists from `ConversionOptions`.

Everything here is pure: the same options and paths always produce the same
argument list, and nothing touches the filesystem. The resulting list does
not include the executable itself; the supervisor prepends it.
"""
import os
import shlex
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from loguru import logger

from ..config.video import (
    MP4_FASTSTART_FLAGS,
    QUALITY_PRESET_CRF,
    SCALE_KEEP_ASPECT,
    SOFT_SUBTITLE_CODEC,
    TARGET_FORMAT_EXTENSIONS,
)
from ..domain.exceptions import InvalidPathException
from ..domain.options import ConversionOptions, Resolution, SubtitleFormat, SubtitleOptions, TargetFormat


def resolve_output_path(input_path: Path, options: ConversionOptions) -> Path:
    """
    Derives the output file path for a conversion.

    The output goes to `options.output_directory`, or next to the input when
    no directory is given, and keeps the input's base name with the extension
    of the target format.

    Raises:
        InvalidPathException: If the input has no parent directory or no stem.
    """
    input_path = Path(input_path)
    if not input_path.name or input_path.parent == input_path:
        raise InvalidPathException(f"Invalid file path: '{input_path}' has no parent directory.")
    if not input_path.stem:
        raise InvalidPathException(f"Invalid file name: '{input_path}' has no file stem.")

    output_dir = options.output_directory or input_path.parent
    extension = TARGET_FORMAT_EXTENSIONS[options.target_format.value]
    return output_dir / f"{input_path.stem}.{extension}"


def crf_for_preset(quality_preset: Optional[int]) -> Optional[int]:
    """Returns the CRF for a known quality preset, or None for anything else."""
    if quality_preset is None:
        return None
    return QUALITY_PRESET_CRF.get(quality_preset)


def build_scale_filter(resolution: Optional[Resolution]) -> Optional[str]:
    """
    Returns the `scale` filter for the requested resolution.

    A missing side is set to -2 so FFmpeg keeps the aspect ratio and rounds
    to an even size.
    """
    if resolution is None:
        return None
    width, height = resolution.width, resolution.height
    if width is not None and height is not None:
        return f"scale={width}:{height}"
    if width is not None:
        return f"scale={width}:{SCALE_KEEP_ASPECT}"
    if height is not None:
        return f"scale={SCALE_KEEP_ASPECT}:{height}"
    return None


def escape_filter_path(path: Path | str) -> str:
    """Doubles backslashes, which the filter graph parser treats as escapes."""
    return str(path).replace("\\", "\\\\")


def build_subtitle_filter(subtitle: SubtitleOptions) -> str:
    """Returns the burn-in filter for a subtitle file."""
    escaped_path = escape_filter_path(subtitle.path)
    if subtitle.format == SubtitleFormat.ASS:
        if subtitle.force_style:
            return f"ass='{escaped_path}':force_style='{subtitle.force_style}'"
        return f"ass='{escaped_path}'"
    return f"subtitles='{escaped_path}'"


def build_command(
    options: ConversionOptions,
    input_path: Path,
    output_path: Optional[Path] = None,
) -> List[str]:
    """
    Builds the FFmpeg arguments for converting `input_path` with `options`.

    The arguments are laid out as::

        -i <input> -c:v <codec> [-crf <n>] [-vf <filter>]
        [-i <subtitle> -c:s mov_text -map 0 -map 1]
        -c:a <audio codec> [-b:v <bitrate>] [-movflags +faststart] -y <output>

    When both a resize and a subtitle burn-in are requested only the subtitle
    filter is passed with `-vf`; the filters are not chained.

    Args:
        options: The requested conversion settings.
        input_path: The source video.
        output_path: Where to write the result. Derived with
                     `resolve_output_path` when omitted.

    Returns:
        The argument list, without the executable name.

    Raises:
        InvalidPathException: If no output path can be derived from `input_path`.
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = resolve_output_path(input_path, options)

    cmd: List[str] = ["-i", str(input_path)]
    cmd.extend(["-c:v", options.video_codec])

    crf = crf_for_preset(options.quality_preset)
    if crf is not None:
        cmd.extend(["-crf", str(crf)])

    video_filter = build_scale_filter(options.resolution)

    subtitle = options.subtitle
    soft_subtitle_args: List[str] = []
    if subtitle is not None and subtitle.path is not None:
        if subtitle.burn_in:
            if video_filter is not None:
                logger.warning(
                    f"Both '{video_filter}' and a subtitle burn-in were requested; "
                    f"only the subtitle filter is applied."
                )
            video_filter = build_subtitle_filter(subtitle)
        else:
            soft_subtitle_args = [
                "-i", str(subtitle.path),
                "-c:s", SOFT_SUBTITLE_CODEC,
                "-map", "0",
                "-map", "1",
            ]

    if video_filter is not None:
        cmd.extend(["-vf", video_filter])
    cmd.extend(soft_subtitle_args)

    cmd.extend(["-c:a", options.audio_codec])

    if options.bitrate:
        cmd.extend(["-b:v", options.bitrate])

    if options.target_format == TargetFormat.MP4:
        cmd.extend(["-movflags", MP4_FASTSTART_FLAGS])

    cmd.append("-y")
    cmd.append(str(output_path))
    return cmd


def implied_options(args: Sequence[str]) -> Dict[str, Optional[str]]:
    """
    Recovers the codec, audio codec, bitrate and target format implied by an
    argument list produced by `build_command`.

    The target format is taken from the output file's extension.
    """
    implied: Dict[str, Optional[str]] = {
        "target_format": None,
        "video_codec": None,
        "audio_codec": None,
        "bitrate": None,
    }
    flag_to_key = {"-c:v": "video_codec", "-c:a": "audio_codec", "-b:v": "bitrate"}
    for flag, value in zip(args, args[1:]):
        key = flag_to_key.get(flag)
        if key is not None:
            implied[key] = value

    if args:
        extension = Path(args[-1]).suffix.lstrip(".").lower()
        for format_name, format_extension in TARGET_FORMAT_EXTENSIONS.items():
            if format_extension == extension:
                implied["target_format"] = format_name
                break
    return implied


def format_command(cmd: Sequence[str]) -> str:
    """Renders a command list as a single, correctly quoted string for logs."""
    if os.name == "nt":
        return subprocess.list2cmdline(list(cmd))
    return shlex.join(cmd)
