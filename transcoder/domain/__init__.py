"""
This package contains the core domain models of the Transcoder.

Modules:
    exceptions.py: The error taxonomy for conversion jobs. Every failure a job
                   can run into has its own exception type so that callers
                   can tell, for example, a missing encoder from an encoder
                   that exited with an error.
    options.py: `ConversionOptions` and friends, the validated description of
                what a caller wants the output to look like.
    job.py: `ConversionJob` (the state of one running job), `ProgressEvent`
            and `JobOutcome`, the terminal result handed back to callers.
    media.py: `probe_video`, a thin wrapper around `ffprobe` for reading basic
              information about a video file.
"""
