"""
Defines custom exception types for the Transcoder.

These exceptions make the failure modes of a conversion job explicit. The job
supervisor catches all of them at its boundary and turns them into a single
terminal `JobOutcome`, so none of them ever escapes to crash the caller.

All custom exceptions inherit from the base `TranscoderException`.
"""
from typing import Optional


class TranscoderException(Exception):
    """Base class for all custom exceptions in the Transcoder."""

    pass


class InvalidOptionsException(TranscoderException):
    """
    Raised when a conversion options payload cannot be turned into a valid
    `ConversionOptions` (e.g. a negative width or a non-numeric quality).
    """

    pass


# --- Job Errors ---
class PrerequisiteMissingException(TranscoderException):
    """
    Raised when the FFmpeg executable cannot be located or updated.

    This is checked before any subprocess is spawned.
    """

    pass


class InvalidPathException(TranscoderException):
    """
    Raised when the input path lacks a parent directory or a file stem, so no
    output path can be derived from it.
    """

    pass


class SpawnFailureException(TranscoderException):
    """Raised when the operating system refuses to start the encoder process."""

    pass


class EncodingFailureException(TranscoderException):
    """
    Raised when the encoder exits with a non-zero status.

    Attributes:
        exit_code: The encoder's exit status, if one was reported.
    """

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class OutputMissingException(TranscoderException):
    """
    Raised when the encoder reports success but the expected output file is
    not on disk.

    Kept separate from `EncodingFailureException` so that callers can tell a
    genuine encoder error from an unusual filesystem condition.
    """

    pass


class JobCancelledException(TranscoderException):
    """
    Raised inside the supervisor when a cancellation request was observed.

    This is a control flow signal rather than an error: it is reported to the
    caller as a distinct "cancelled" outcome.
    """

    pass


# --- Media Probe Errors ---
class MediaProbeException(TranscoderException):
    """Raised when ffprobe cannot read a media file."""

    pass
