"""
This module defines the JobSupervisor, which runs one conversion job from
start to finish.

A job goes through idle -> starting -> running and ends as completed, failed
or cancelled. The supervisor checks that FFmpeg is available, builds the
command line, spawns FFmpeg, turns its stderr into progress events, watches
the cancellation signal and finally decides whether the job succeeded.

`JobSupervisor.run` blocks until FFmpeg exits. It never raises: every error
from the taxonomy in `transcoder.domain.exceptions` is turned into a
`JobOutcome`.
"""
import subprocess
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.common import (
    JOB_STATUS_CANCELLED,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_IDLE,
    JOB_STATUS_RUNNING,
    JOB_STATUS_STARTING,
    PROGRESS_LOG_INTERVAL_SECONDS,
)
from ..config.video import DIAGNOSTIC_TAIL_LINES
from ..domain.exceptions import (
    EncodingFailureException,
    InvalidPathException,
    JobCancelledException,
    OutputMissingException,
    SpawnFailureException,
    TranscoderException,
)
from ..domain.job import ConversionJob, JobOutcome, ProgressEvent
from ..domain.options import ConversionOptions
from ..utils.format_utils import format_seconds, format_timedelta, formatted_size
from ..utils.module_updater import Modules
from .cancellation import CANCELLATION_SIGNAL, CancellationSignal
from .command_builder import build_command, format_command, resolve_output_path
from .progress_parser import ProgressParser, iter_lines

ProgressCallback = Callable[[ProgressEvent], None]
CompletionCallback = Callable[[JobOutcome], None]


def notify_callback(callback: Optional[Callable], payload):
    """Calls `callback(payload)`, logging instead of raising if the callback fails."""
    if callback is None:
        return
    try:
        callback(payload)
    except Exception:
        logger.exception(f"Callback {callback!r} raised while handling {payload!r}")


class JobSupervisor:
    """
    Owns the lifecycle of a single conversion job.

    Args:
        executable: Path of the FFmpeg executable. When None it is resolved
                    with `Modules.ensure_ffmpeg()` at the start of each job.
        cancellation: The signal to watch. Defaults to the process-wide
                      `CANCELLATION_SIGNAL`.
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        cancellation: CancellationSignal = CANCELLATION_SIGNAL,
    ):
        self.executable = executable
        self.cancellation = cancellation
        self.job: Optional[ConversionJob] = None
        self.diagnostic_tail: deque = deque(maxlen=DIAGNOSTIC_TAIL_LINES)
        self._last_logged_time = 0.0

    @property
    def status(self) -> str:
        return self.job.status if self.job else JOB_STATUS_IDLE

    def run(
        self,
        input_path: Path,
        options: ConversionOptions,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> JobOutcome:
        """
        Converts `input_path` according to `options` and waits for the result.

        Args:
            input_path: The source video.
            options: The requested conversion settings.
            on_progress: Called with a `ProgressEvent` every time FFmpeg reports
                         a new position. Runs on the calling thread.
            on_complete: Called exactly once with the terminal `JobOutcome`.

        Returns:
            The terminal `JobOutcome`.
        """
        job = ConversionJob(input_path)
        self.job = job
        self.diagnostic_tail.clear()
        self._last_logged_time = 0.0
        start_datetime = datetime.now()

        try:
            executable = self._start(job, options)
            self._run_process(job, executable, on_progress)
            outcome = JobOutcome.completed(job.output_path)
            job.status = JOB_STATUS_COMPLETED
            elapsed = format_timedelta(datetime.now() - start_datetime)
            logger.success(
                f"Conversion finished: {job.output_path} "
                f"({formatted_size(job.output_path.stat().st_size)}, took {elapsed})"
            )
        except JobCancelledException as e:
            job.status = JOB_STATUS_CANCELLED
            outcome = JobOutcome.cancelled_by_user(str(e))
            logger.info(f"Conversion of {job.input_path.name} cancelled.")
        except EncodingFailureException as e:
            job.status = JOB_STATUS_FAILED
            outcome = JobOutcome.failed(e, exit_code=e.exit_code)
            logger.error(f"Conversion of {job.input_path.name} failed: {e}")
        except TranscoderException as e:
            job.status = JOB_STATUS_FAILED
            outcome = JobOutcome.failed(e)
            logger.error(f"Conversion of {job.input_path.name} failed: {e}")
        except Exception as e:
            job.status = JOB_STATUS_FAILED
            outcome = JobOutcome.failed(e)
            logger.exception(f"Unexpected error while converting {job.input_path.name}: {e}")
        finally:
            self._release_process(job)

        notify_callback(on_complete, outcome)
        return outcome

    def _start(self, job: ConversionJob, options: ConversionOptions) -> str:
        job.status = JOB_STATUS_STARTING
        self.cancellation.clear()
        logger.info(f"Starting conversion of {job.input_path} to {options.target_format.value}")

        executable = self.executable or Modules.ensure_ffmpeg()

        job.output_path = resolve_output_path(job.input_path, options)
        # Cancelling deletes the output, which must never be the source.
        if job.output_path.resolve() == job.input_path.resolve():
            raise InvalidPathException(
                f"Output path is the same as the input path: '{job.input_path}'. "
                f"Choose another target format or output directory."
            )
        job.args = build_command(options, job.input_path, job.output_path)

        try:
            job.output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidPathException(f"Cannot create output directory '{job.output_path.parent}': {e}") from e
        return executable

    def _run_process(
        self,
        job: ConversionJob,
        executable: str,
        on_progress: Optional[ProgressCallback],
    ):
        cmd = [executable, *job.args]
        logger.debug(f"Executing command: {format_command(cmd)}")

        try:
            # stderr stays binary; iter_lines splits it on '\r' as well as
            # '\n'. A new session keeps a terminal Ctrl+C from reaching
            # FFmpeg; stopping it is left to the cancellation signal.
            job.process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            raise SpawnFailureException(f"Failed to spawn FFmpeg: {e}") from e

        job.status = JOB_STATUS_RUNNING
        parser = ProgressParser()

        for raw_line in iter_lines(job.process.stderr):
            line = raw_line.rstrip()
            if line:
                self.diagnostic_tail.append(line)
                logger.trace(f"ffmpeg: {line}")

            event = parser.feed(line)
            job.total_time_seconds = parser.total_time_seconds
            job.current_time_seconds = parser.current_time_seconds
            if event is not None:
                self._log_progress(event)
                notify_callback(on_progress, event)

            if self.cancellation.is_set():
                self._cancel(job)

        # The stream can close right after a cancel request arrived.
        if self.cancellation.is_set():
            self._cancel(job)

        return_code = job.process.wait()
        self._check_result(job, return_code)

    def _check_result(self, job: ConversionJob, return_code: int):
        if return_code != 0:
            last_line = self.diagnostic_tail[-1] if self.diagnostic_tail else ""
            logger.debug("FFmpeg diagnostic output (tail):\n" + "\n".join(self.diagnostic_tail))
            raise EncodingFailureException(
                f"FFmpeg failed with non-zero exit code: {return_code}"
                + (f" ({last_line})" if last_line else ""),
                exit_code=return_code,
            )
        if not job.output_path.exists():
            raise OutputMissingException(
                f"FFmpeg exited successfully but the output file is missing: {job.output_path}"
            )

    def _cancel(self, job: ConversionJob):
        logger.info(f"Cancellation requested. Stopping FFmpeg for {job.input_path.name}.")
        self._release_process(job)
        self._remove_partial_output(job.output_path)
        raise JobCancelledException("Conversion cancelled by user")

    @staticmethod
    def _release_process(job: ConversionJob):
        process = job.process
        if process is None:
            return
        if process.poll() is None:
            process.kill()
            process.wait()
        if process.stderr is not None and not process.stderr.closed:
            process.stderr.close()

    @staticmethod
    def _remove_partial_output(output_path: Optional[Path]):
        if output_path is None:
            return
        try:
            output_path.unlink(missing_ok=True)
            logger.debug(f"Removed partial output file: {output_path}")
        except OSError as e:
            logger.error(f"Could not delete partial output file {output_path}: {e}")

    def _log_progress(self, event: ProgressEvent):
        if event.current_time_seconds - self._last_logged_time < PROGRESS_LOG_INTERVAL_SECONDS:
            return
        self._last_logged_time = event.current_time_seconds
        logger.debug(
            f"Progress: {event.percent:.1f}% "
            f"({format_seconds(event.current_time_seconds)} / {format_seconds(event.total_time_seconds)})"
        )
