"""
Turns FFmpeg's human-readable stderr output into progress readings.

FFmpeg has no structured progress on stderr; it prints a header that
contains ``Duration: HH:MM:SS.ms,`` for each input, followed by status lines
such as ``frame=  120 fps= 30 ... time=00:00:04.00 bitrate=...``. The parser
scrapes those two tokens. Lines it does not understand are skipped, so a
change in FFmpeg's output degrades to "0% until done" instead of failing the
job.
"""
import re
from typing import BinaryIO, Iterable, Iterator, Optional

from ..domain.job import ProgressEvent

DURATION_LABEL = "Duration:"
TIME_LABEL = "time="
LINE_BREAK = re.compile(rb"[\r\n]")


def iter_lines(stream: BinaryIO, chunk_size: int = 4096) -> Iterator[str]:
    """
    Yields decoded lines from a binary stream as soon as each one is complete.

    Both ``\\r`` and ``\\n`` end a line; FFmpeg terminates each status line
    with a bare ``\\r``. Empty lines are dropped and undecodable bytes are
    replaced.
    """
    pending = b""
    while True:
        chunk = stream.read1(chunk_size)
        if not chunk:
            break
        *lines, pending = LINE_BREAK.split(pending + chunk)
        for line in lines:
            if line:
                yield line.decode("utf-8", errors="replace")
    if pending:
        yield pending.decode("utf-8", errors="replace")


def parse_timestamp(token: str) -> Optional[float]:
    """
    Converts an ``HH:MM:SS[.ms]`` token to seconds.

    Returns None if the token does not have at least three colon-separated
    numeric parts (e.g. ``N/A`` or a line cut in half).
    """
    parts = token.strip().split(":")
    if len(parts) < 3:
        return None
    try:
        hours = float(parts[0])
        minutes = float(parts[1])
        seconds = float(parts[2])
    except ValueError:
        return None
    return hours * 3600 + minutes * 60 + seconds


def _token_after(line: str, label: str, terminator: Optional[str] = None) -> str:
    token = line.split(label, 1)[1].lstrip()
    if terminator is not None:
        token = token.split(terminator, 1)[0]
    # The token ends at the next whitespace (e.g. "time=00:00:01.00 bitrate=...").
    return token.split(None, 1)[0] if token.strip() else ""


class ProgressParser:
    """
    Incremental parser for one job's diagnostic stream.

    Feed it the encoder's stderr one line at a time. It keeps the total
    duration (from the first ``Duration:`` line; later ones, e.g. from a
    second input, are ignored) and the current position (from every
    ``time=`` token). A parser is not reusable across jobs.
    """

    def __init__(self):
        self.total_time_seconds: float = 0.0
        self.current_time_seconds: float = 0.0
        self._duration_seen = False

    @property
    def percent(self) -> float:
        if self.total_time_seconds <= 0:
            return 0.0
        percent = self.current_time_seconds / self.total_time_seconds * 100
        return max(0.0, min(100.0, percent))

    def feed(self, line: str) -> Optional[ProgressEvent]:
        """
        Parses one line of diagnostic output.

        Returns:
            A `ProgressEvent` if the line carried a new current time, else None.
        """
        if not self._duration_seen and DURATION_LABEL in line:
            duration = parse_timestamp(_token_after(line, DURATION_LABEL, terminator=","))
            if duration is not None:
                self.total_time_seconds = duration
                self._duration_seen = True

        if TIME_LABEL in line:
            current = parse_timestamp(_token_after(line, TIME_LABEL))
            if current is not None:
                self.current_time_seconds = current
                return self.snapshot()
        return None

    def snapshot(self) -> ProgressEvent:
        return ProgressEvent(
            current_time_seconds=self.current_time_seconds,
            total_time_seconds=self.total_time_seconds,
            percent=self.percent,
        )

    def events(self, lines: Iterable[str]) -> Iterator[ProgressEvent]:
        """Lazily yields a `ProgressEvent` for every line that updates the current time."""
        for line in lines:
            event = self.feed(line)
            if event is not None:
                yield event
