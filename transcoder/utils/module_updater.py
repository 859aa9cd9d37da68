"""
This module provides the Modules class to locate, update and verify the
FFmpeg executables the transcoder drives.
"""
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config import common
from ..domain.exceptions import PrerequisiteMissingException


class Modules:
    """
    Helpers for the external FFmpeg tools.

    Paths come from the user's `config.user.yaml` (`paths.ffmpeg_dir` and
    `paths.module_update_dir`); without them the executables are looked up
    on the system PATH.
    """

    @staticmethod
    def update():
        """
        Moves new FFmpeg builds from `module_update_dir` into `ffmpeg_dir`.

        This is the "fetch" half of the prerequisite step: dropping a new
        build into the update directory installs it before the next job.

        Raises:
            PrerequisiteMissingException: If an update is found but cannot be installed.
        """
        update_path: Optional[Path] = common.MODULE_UPDATE_PATH
        module_path: Optional[Path] = common.MODULE_PATH

        if not update_path:
            logger.debug("`module_update_dir` not configured in user config. Skipping module update check.")
            return

        if not module_path:
            logger.error(f"Cannot perform update: The update path '{update_path}' is set, but the destination `ffmpeg_dir` is not.")
            return

        if not update_path.is_dir():
            logger.warning(f"Configured module update directory '{update_path}' does not exist. Skipping update.")
            return

        update_files_found = list(update_path.glob("*"))
        if not update_files_found:
            logger.debug("No files found in module update directory. Nothing to do.")
            return

        logger.info(f"Installing module updates from '{update_path}' to '{module_path}'...")
        module_path.mkdir(parents=True, exist_ok=True)
        for update_item_path in update_files_found:
            destination_path = module_path / update_item_path.name
            try:
                # Replace whole directories rather than merging them.
                if destination_path.is_dir() and update_item_path.is_dir():
                    shutil.rmtree(destination_path)
                shutil.move(str(update_item_path), str(destination_path))
                logger.info(f"Successfully moved '{update_item_path.name}' to '{destination_path}'")
            except OSError as e:
                raise PrerequisiteMissingException(
                    f"Failed to install update '{update_item_path.name}' into '{module_path}': {e}"
                ) from e

    @staticmethod
    def _executable_name(tool: str) -> str:
        return f"{tool}.exe" if sys.platform == "win32" else tool

    @staticmethod
    def find_executable(tool: str = "ffmpeg") -> Optional[str]:
        """
        Returns the path of `tool` ('ffmpeg' or 'ffprobe'), or None if it cannot be found.

        The configured `ffmpeg_dir` takes priority over the system PATH.
        """
        exe_name = Modules._executable_name(tool)
        module_path = common.MODULE_PATH

        if module_path and module_path.is_dir():
            configured_path = module_path / exe_name
            if configured_path.is_file():
                return str(configured_path)
            logger.warning(f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH.")

        return shutil.which(exe_name)

    @staticmethod
    def ensure_ffmpeg() -> str:
        """
        Makes sure an FFmpeg executable is available and returns its path.

        Installs pending updates first, then locates the executable.

        Raises:
            PrerequisiteMissingException: If FFmpeg cannot be updated or found.
        """
        Modules.update()
        ffmpeg_path = Modules.find_executable("ffmpeg")
        if ffmpeg_path is None:
            raise PrerequisiteMissingException(
                "FFmpeg command not found. Please ensure FFmpeg is installed and accessible.\n"
                "You can either add it to your system's PATH or specify its location in the 'config.user.yaml' file."
            )
        logger.debug(f"Using FFmpeg at '{ffmpeg_path}'")
        return ffmpeg_path

    @staticmethod
    def verify_ffmpeg(ffmpeg_path: Optional[str] = None) -> str:
        """
        Runs `ffmpeg -version` and returns the first line of its output.

        Raises:
            PrerequisiteMissingException: If FFmpeg is missing or cannot be executed.
        """
        ffmpeg_cmd = ffmpeg_path or Modules.ensure_ffmpeg()
        try:
            result = subprocess.run(
                [ffmpeg_cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.CalledProcessError as e:
            raise PrerequisiteMissingException(
                f"FFmpeg version command failed (return code {e.returncode}):\n{e.stderr}"
            ) from e
        except OSError as e:
            raise PrerequisiteMissingException(f"FFmpeg could not be executed: {e}") from e

        version_line = result.stdout.splitlines()[0] if result.stdout else ""
        logger.info(f"FFmpeg version check successful: {version_line}")
        return version_line
