"""
Configuration settings related to video conversion.

Defines the container formats we can produce, the default codecs, the
quality preset to CRF mapping and other values used by the command builder.
"""

# --- Target Containers ---
# Maps a target format name to the file extension of the produced file.
TARGET_FORMAT_EXTENSIONS = {
    "mp4": "mp4",
    "webm": "webm",
    "mkv": "mkv",
    "avi": "avi",
}

# --- Encoder Settings ---
DEFAULT_VIDEO_CODEC = "libx264"
DEFAULT_AUDIO_CODEC = "aac"

# Quality preset (target vertical resolution) -> constant rate factor.
# Lower CRF means higher quality and a larger file. Presets not listed here
# leave the CRF to the encoder's own default.
QUALITY_PRESET_CRF = {
    360: 28,
    480: 26,
    720: 23,
    1080: 20,
}

# Keeps aspect ratio while rounding the computed side to an even number,
# which most codecs (e.g. libx264 with yuv420p) require.
SCALE_KEEP_ASPECT = "-2"

# --- Subtitle Settings ---
# Text subtitle codec understood by the MP4 container for soft subtitles.
SOFT_SUBTITLE_CODEC = "mov_text"
SUBTITLE_FORMATS = ("srt", "ass", "vtt")

# --- MP4 Settings ---
# Moves the moov atom to the front of the file for progressive playback.
MP4_FASTSTART_FLAGS = "+faststart"

# --- Supervisor Settings ---
# Number of trailing diagnostic lines kept for failure messages.
DIAGNOSTIC_TAIL_LINES = 20
