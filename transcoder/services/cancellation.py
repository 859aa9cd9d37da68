"""
The cancellation channel shared between callers and the job supervisor.

Only one conversion runs at a time, so a single process-wide flag is enough:
it is cleared when a job starts, set by a user's cancel request and checked
by the supervisor after every line of encoder output.
"""
import threading


class CancellationSignal:
    """
    A cooperative cancellation flag.

    Backed by `threading.Event`, so it can be set from the caller's thread
    while the worker thread polls it. A late observation only delays the
    cancellation; it never corrupts the job.
    """

    def __init__(self):
        self._event = threading.Event()

    def set(self):
        self._event.set()

    def clear(self):
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationSignal(is_set={self.is_set()})"


# The process-wide signal used by default by `JobSupervisor` and `TranscodeService`.
CANCELLATION_SIGNAL = CancellationSignal()
