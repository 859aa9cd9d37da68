"""
Conversion option models.

`ConversionOptions` is the validated description of a requested conversion:
target container, quality preset, optional resizing, codecs, bitrate and
subtitles. The glue layer sends these as a camelCase JSON-like payload, which
`ConversionOptions.from_dict` turns into typed objects.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config.video import DEFAULT_AUDIO_CODEC, DEFAULT_VIDEO_CODEC
from .exceptions import InvalidOptionsException


class TargetFormat(str, Enum):
    MP4 = "mp4"
    WEBM = "webm"
    MKV = "mkv"
    AVI = "avi"

    @classmethod
    def parse(cls, value: Any) -> "TargetFormat":
        """Returns the matching format, falling back to MP4 for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MP4


class SubtitleFormat(str, Enum):
    SRT = "srt"
    ASS = "ass"
    VTT = "vtt"

    @classmethod
    def parse(cls, value: Any) -> Optional["SubtitleFormat"]:
        """Returns the matching format, or None when missing or unknown."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Resolution:
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class SubtitleOptions:
    """
    Subtitle settings for a conversion.

    When `burn_in` is True the subtitles are rendered into the video frames
    with a filter; otherwise the file is muxed as a separate, togglable track.
    Without a `path` the whole object is ignored.
    """

    path: Optional[Path] = None
    format: Optional[SubtitleFormat] = None
    burn_in: bool = False
    force_style: Optional[str] = None


@dataclass(frozen=True)
class ConversionOptions:
    """
    Everything the command builder needs besides the input path.

    Attributes:
        target_format: Output container. Always present; unknown values become MP4.
        quality_preset: Target vertical resolution preset (360/480/720/1080),
                        mapped to a CRF value. Other values are kept but ignored.
        output_directory: Where to write the output. Defaults to the input's directory.
        resolution: Optional explicit output size.
        bitrate: Optional video bitrate in FFmpeg notation, e.g. "5M".
        video_codec: FFmpeg video encoder name.
        audio_codec: FFmpeg audio encoder name.
        subtitle: Optional subtitle settings.
    """

    target_format: TargetFormat = TargetFormat.MP4
    quality_preset: Optional[int] = None
    output_directory: Optional[Path] = None
    resolution: Optional[Resolution] = None
    bitrate: Optional[str] = None
    video_codec: str = DEFAULT_VIDEO_CODEC
    audio_codec: str = DEFAULT_AUDIO_CODEC
    subtitle: Optional[SubtitleOptions] = None

    def __post_init__(self):
        # Normalize values given as plain strings by direct callers.
        object.__setattr__(self, "target_format", TargetFormat.parse(self.target_format))
        if self.output_directory is not None and not isinstance(self.output_directory, Path):
            object.__setattr__(self, "output_directory", Path(self.output_directory))
        if not self.video_codec:
            object.__setattr__(self, "video_codec", DEFAULT_VIDEO_CODEC)
        if not self.audio_codec:
            object.__setattr__(self, "audio_codec", DEFAULT_AUDIO_CODEC)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversionOptions":
        """
        Builds options from a request payload.

        Both the camelCase keys used by the desktop front end (``format``,
        ``quality``, ``outputDirectory``, ``codec``, ``audioCodec``, ...) and
        their snake_case equivalents are accepted.

        Raises:
            InvalidOptionsException: If a numeric field holds a non-integer or
                                     negative value.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidOptionsException(f"Conversion options must be a mapping, got {type(data).__name__}.")

        output_dir = _first(data, "outputDirectory", "output_directory")
        bitrate = _first(data, "bitrate")
        resolution_data = _first(data, "resolution")
        subtitle_data = _first(data, "subtitle")

        return cls(
            target_format=TargetFormat.parse(_first(data, "targetFormat", "target_format", "format")),
            quality_preset=_parse_int(_first(data, "qualityPreset", "quality_preset", "quality"), "quality"),
            output_directory=Path(output_dir) if output_dir else None,
            resolution=_parse_resolution(resolution_data),
            bitrate=str(bitrate) if bitrate else None,
            video_codec=_first(data, "videoCodec", "video_codec", "codec") or DEFAULT_VIDEO_CODEC,
            audio_codec=_first(data, "audioCodec", "audio_codec") or DEFAULT_AUDIO_CODEC,
            subtitle=_parse_subtitle(subtitle_data),
        )


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _parse_int(value: Any, field_name: str, minimum: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return None
    # bool is an int subclass, but True is not a meaningful dimension.
    if isinstance(value, bool):
        raise InvalidOptionsException(f"'{field_name}' must be an integer, got {value!r}.")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidOptionsException(f"'{field_name}' must be an integer, got {value!r}.") from None
    if isinstance(value, float) and not value.is_integer():
        raise InvalidOptionsException(f"'{field_name}' must be an integer, got {value!r}.")
    if minimum is not None and parsed < minimum:
        raise InvalidOptionsException(f"'{field_name}' must be >= {minimum}, got {parsed}.")
    return parsed


def _parse_resolution(data: Any) -> Optional[Resolution]:
    if not data:
        return None
    if not isinstance(data, Mapping):
        raise InvalidOptionsException(f"'resolution' must be a mapping, got {type(data).__name__}.")
    return Resolution(
        width=_parse_int(data.get("width"), "width", minimum=0),
        height=_parse_int(data.get("height"), "height", minimum=0),
    )


def _parse_subtitle(data: Any) -> Optional[SubtitleOptions]:
    if not data:
        return None
    if not isinstance(data, Mapping):
        raise InvalidOptionsException(f"'subtitle' must be a mapping, got {type(data).__name__}.")
    path = data.get("path")
    return SubtitleOptions(
        path=Path(path) if path else None,
        format=SubtitleFormat.parse(data.get("format")),
        burn_in=bool(_first(data, "burnIn", "burn_in")),
        force_style=_first(data, "forceStyle", "force_style") or None,
    )
