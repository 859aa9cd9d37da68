"""
Common configuration settings used throughout the application.

This module centralizes logging settings, job status constants and the
locations of external tools. Tool locations can be overridden by the user in
a 'config.user.yaml' file at the project root, e.g.::

    paths:
      ffmpeg_dir: /opt/ffmpeg/bin
      module_update_dir: /opt/ffmpeg/updates
"""
from pathlib import Path

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# The directory containing the FFmpeg and ffprobe executables. If None, the
# executables are looked up on the system's PATH.
MODULE_PATH: Path | None = None

# A drop-in directory for new FFmpeg builds. Its contents are moved into
# `MODULE_PATH` before a job starts. If None, the update step is skipped.
MODULE_UPDATE_PATH: Path | None = None

if USER_CONFIG_PATH.is_file():
    try:
        with USER_CONFIG_PATH.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
        if user_config and "paths" in user_config:
            paths_config = user_config.get("paths") or {}
            ffmpeg_dir_str = paths_config.get("ffmpeg_dir")
            update_dir_str = paths_config.get("module_update_dir")

            if ffmpeg_dir_str:
                MODULE_PATH = Path(ffmpeg_dir_str)
            if update_dir_str:
                MODULE_UPDATE_PATH = Path(update_dir_str)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{USER_CONFIG_PATH}': {e}")
else:
    logger.debug(f"User config '{USER_CONFIG_PATH}' not found. Relying on system PATH for executables.")


# --- Logging Configuration ---

LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{thread.name} - <level>{message}</level>"
)

# Progress events are logged at DEBUG level at most once per this many
# seconds of encoded media, to keep the console readable.
PROGRESS_LOG_INTERVAL_SECONDS = 10.0


# --- Job Status Constants ---
# A job moves idle -> starting -> running -> one of the three terminal states.

JOB_STATUS_IDLE = "idle"
JOB_STATUS_STARTING = "starting"  # Prerequisites checked, command being built.
JOB_STATUS_RUNNING = "running"  # The encoder process is alive.
JOB_STATUS_COMPLETED = "completed"
JOB_STATUS_FAILED = "failed"
JOB_STATUS_CANCELLED = "cancelled"

