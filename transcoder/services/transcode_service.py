"""
The request surface used by the desktop glue layer.

`TranscodeService` runs conversion jobs on a dedicated worker thread so that
the blocking FFmpeg wait never stalls the caller. Jobs are executed one at a
time; the caller gets a future (or can `await convert(...)`) and receives
progress through a callback.
"""
import asyncio
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from loguru import logger

from ..domain.exceptions import InvalidOptionsException
from ..domain.job import JobOutcome
from ..domain.media import VideoInfo, probe_video
from ..domain.options import ConversionOptions
from ..utils.module_updater import Modules
from .cancellation import CANCELLATION_SIGNAL, CancellationSignal
from .job_supervisor import CompletionCallback, JobSupervisor, ProgressCallback, notify_callback

OptionsLike = Union[ConversionOptions, Mapping[str, Any]]


class TranscodeService:
    """
    Accepts conversion requests and cancellation requests.

    Args:
        executable: FFmpeg executable to use. Resolved per job when None.
        cancellation: The signal shared with the supervisors. Defaults to the
                      process-wide `CANCELLATION_SIGNAL`.
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        cancellation: CancellationSignal = CANCELLATION_SIGNAL,
    ):
        self.executable = executable
        self.cancellation = cancellation
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="transcode-worker")
        self._current_future: Optional[Future] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "TranscodeService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._current_future is not None and not self._current_future.done()

    def submit(
        self,
        input_path: Union[str, Path],
        options: OptionsLike,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> "Future[JobOutcome]":
        """
        Queues a conversion on the worker thread.

        `options` may be a `ConversionOptions` or a request payload accepted by
        `ConversionOptions.from_dict`. An invalid payload does not raise; the
        returned future resolves to a failed outcome instead.

        Returns:
            A future resolving to the job's `JobOutcome`.
        """
        try:
            if not isinstance(options, ConversionOptions):
                options = ConversionOptions.from_dict(options)
        except InvalidOptionsException as e:
            logger.error(f"Rejected conversion request for {input_path}: {e}")
            outcome = JobOutcome.failed(e)
            notify_callback(on_complete, outcome)
            future: Future = Future()
            future.set_result(outcome)
            return future

        supervisor = JobSupervisor(self.executable, self.cancellation)
        future = self._executor.submit(supervisor.run, Path(input_path), options, on_progress, on_complete)
        with self._lock:
            self._current_future = future
        return future

    async def convert(
        self,
        input_path: Union[str, Path],
        options: OptionsLike,
        on_progress: Optional[ProgressCallback] = None,
    ) -> JobOutcome:
        """
        Runs a conversion and awaits its terminal outcome.

        Progress callbacks are scheduled on the caller's event loop rather than
        called from the worker thread.
        """
        loop = asyncio.get_running_loop()
        forward_progress = None
        if on_progress is not None:
            def forward_progress(event):
                loop.call_soon_threadsafe(on_progress, event)

        future = self.submit(input_path, options, forward_progress)
        return await asyncio.wrap_future(future)

    def cancel(self) -> bool:
        """
        Requests cancellation of the job in flight.

        Returns:
            True if a job was running or queued when the request was made.
        """
        busy = self.is_busy
        self.cancellation.set()
        if busy:
            logger.info("Cancellation requested for the running conversion.")
        else:
            logger.debug("Cancellation requested, but no conversion is running.")
        return busy

    def get_video_info(self, input_path: Union[str, Path]) -> VideoInfo:
        """Returns basic information about a video file using ffprobe."""
        ffprobe_cmd = Modules.find_executable("ffprobe") or "ffprobe"
        return probe_video(Path(input_path), ffprobe_cmd)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
