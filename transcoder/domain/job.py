"""
Data models for a single conversion job: its running state, the progress
events it emits and the terminal outcome handed back to the caller.
"""
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.common import (
    JOB_STATUS_CANCELLED,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_IDLE,
)


@dataclass(frozen=True)
class ProgressEvent:
    """A progress reading taken from the encoder's diagnostic output."""

    current_time_seconds: float
    total_time_seconds: float
    percent: float


class ConversionJob:
    """
    The state of one conversion job while it is being supervised.

    A job is created when a conversion is requested and discarded once the
    encoder process has exited or been killed. Only the `JobSupervisor` that
    created it reads or writes it.

    Attributes:
        input_path (Path): The source video.
        output_path (Optional[Path]): Where the encoder writes its output. Set
                                      once the command has been built.
        args (List[str]): The encoder arguments, without the executable.
        process (Optional[subprocess.Popen]): The running encoder process.
        current_time_seconds (float): Last position reported by the encoder.
        total_time_seconds (float): Input duration reported by the encoder.
        status (str): One of the JOB_STATUS_* constants.
    """

    def __init__(self, input_path: Path):
        self.input_path = Path(input_path)
        self.output_path: Optional[Path] = None
        self.args: List[str] = []
        self.process: Optional[subprocess.Popen] = None
        self.current_time_seconds: float = 0.0
        self.total_time_seconds: float = 0.0
        self.status: str = JOB_STATUS_IDLE

    def __repr__(self) -> str:
        return f"ConversionJob(input_path={self.input_path!s}, status={self.status})"


@dataclass(frozen=True)
class JobOutcome:
    """
    The terminal result of a job: completed with an output path, failed with
    a reason, or cancelled.

    Attributes:
        status: JOB_STATUS_COMPLETED, JOB_STATUS_FAILED or JOB_STATUS_CANCELLED.
        output_path: The produced file, for completed jobs.
        error_kind: Name of the exception type that ended a failed job.
        message: Human readable reason for a failure or cancellation.
        exit_code: The encoder's exit status, when one is known.
    """

    status: str
    output_path: Optional[Path] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    exit_code: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == JOB_STATUS_COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == JOB_STATUS_CANCELLED

    @classmethod
    def completed(cls, output_path: Path) -> "JobOutcome":
        return cls(status=JOB_STATUS_COMPLETED, output_path=output_path)

    @classmethod
    def failed(cls, error: Exception, exit_code: Optional[int] = None) -> "JobOutcome":
        return cls(
            status=JOB_STATUS_FAILED,
            error_kind=type(error).__name__,
            message=str(error),
            exit_code=exit_code,
        )

    @classmethod
    def cancelled_by_user(cls, message: str = "Conversion cancelled by user") -> "JobOutcome":
        return cls(status=JOB_STATUS_CANCELLED, error_kind="JobCancelledException", message=message)

    def to_dict(self) -> Dict[str, Any]:
        """Renders the outcome in the shape the desktop front end expects."""
        if self.succeeded:
            return {"success": True, "filePath": str(self.output_path)}
        result: Dict[str, Any] = {
            "success": False,
            "cancelled": self.cancelled,
            "error": self.message,
        }
        if self.exit_code is not None:
            result["exitCode"] = self.exit_code
        return result
