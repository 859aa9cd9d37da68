"""
Services Package for the Transcoder.

- **Command Builder (`command_builder`)**: maps `ConversionOptions` and an
  input path to FFmpeg arguments. Pure functions only.
- **Progress Parser (`progress_parser`)**: scrapes duration and position from
  FFmpeg's stderr and produces `ProgressEvent`s.
- **Cancellation Channel (`cancellation`)**: the shared cancellation flag.
- **Job Supervisor (`job_supervisor`)**: runs one job end to end and turns
  every failure into a `JobOutcome`.
- **Transcode Service (`transcode_service`)**: the request surface; runs jobs
  on a worker thread and exposes submit / convert / cancel.
"""
from .cancellation import CANCELLATION_SIGNAL, CancellationSignal
from .job_supervisor import JobSupervisor
from .progress_parser import ProgressParser
from .transcode_service import TranscodeService

__all__ = [
    "CANCELLATION_SIGNAL",
    "CancellationSignal",
    "JobSupervisor",
    "ProgressParser",
    "TranscodeService",
]
