"""
Basic media information for a video file, read with ffprobe.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import ffmpeg
from loguru import logger

from .exceptions import MediaProbeException


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    Accepts either a plain number of seconds (e.g. "3600.5", as found in
    ffprobe's format section) or a timecode such as "01:00:00.500".
    Hours are optional in the timecode form.

    Returns:
        The duration in seconds, or 0.0 if the string cannot be parsed.
    """
    try:
        return float(duration_str)
    except (TypeError, ValueError):
        pattern = r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)"
        match = re.fullmatch(pattern, str(duration_str).strip())
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            return float(hours * 3600 + int(minutes_str) * 60 + float(seconds_str))
        logger.warning(f"Could not parse duration string: {duration_str}")
    return 0.0


@dataclass(frozen=True)
class VideoInfo:
    format: str = "unknown"
    duration: float = 0.0
    width: int = 0
    height: int = 0
    video_codec: str = "unknown"
    audio_codec: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "format": self.format,
            "duration": self.duration,
            "width": self.width,
            "height": self.height,
            "videoCodec": self.video_codec,
            "audioCodec": self.audio_codec,
        }


def probe_video(path: Path, ffprobe_cmd: str = "ffprobe") -> VideoInfo:
    """
    Reads container and stream information for `path` using ffprobe.

    The first video stream and the first audio stream are reported. Missing
    values fall back to "unknown" / 0.

    Raises:
        MediaProbeException: If ffprobe fails or cannot be started.
    """
    path = Path(path)
    try:
        probe = ffmpeg.probe(str(path), cmd=ffprobe_cmd)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.error(f"ffmpeg.probe failed for {path}: {stderr}")
        raise MediaProbeException(f"Could not probe '{path}': {stderr}") from e
    except FileNotFoundError as e:
        raise MediaProbeException(f"ffprobe executable '{ffprobe_cmd}' not found.") from e

    streams = probe.get("streams", [])
    video_stream = _first_stream(streams, "video")
    audio_stream = _first_stream(streams, "audio")
    format_section = probe.get("format", {})

    duration_str = format_section.get("duration")
    if duration_str is None and video_stream:
        duration_str = video_stream.get("duration")

    info = VideoInfo(
        format=format_section.get("format_name", "unknown"),
        duration=parse_duration(duration_str) if duration_str is not None else 0.0,
        width=int(video_stream.get("width", 0)) if video_stream else 0,
        height=int(video_stream.get("height", 0)) if video_stream else 0,
        video_codec=video_stream.get("codec_name", "unknown") if video_stream else "unknown",
        audio_codec=audio_stream.get("codec_name", "unknown") if audio_stream else "unknown",
    )
    logger.debug(f"Probed {path.name}: {info}")
    return info


def _first_stream(streams, codec_type: str) -> Optional[Dict[str, Any]]:
    for stream in streams:
        if stream.get("codec_type") == codec_type:
            return stream
    return None
