"""Tests for scraping progress out of FFmpeg's stderr."""

import io

import pytest

from transcoder.services.progress_parser import ProgressParser, iter_lines, parse_timestamp

DURATION_LINE = "  Duration: 00:01:30.00, start: 0.000000, bitrate: 2345 kb/s"


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("00:01:30.00", 90.0),
            ("01:00:00", 3600.0),
            ("00:00:04.50", 4.5),
            ("10:20:30.25", 37230.25),
        ],
    )
    def test_parses_valid_tokens(self, token: str, expected: float) -> None:
        assert parse_timestamp(token) == pytest.approx(expected)

    @pytest.mark.parametrize("token", ["", "N/A", "01:30", "00:xx:10", "12.5"])
    def test_rejects_malformed_tokens(self, token: str) -> None:
        assert parse_timestamp(token) is None


class TestProgressParser:
    def test_duration_then_time_gives_percent(self) -> None:
        parser = ProgressParser()
        assert parser.feed("Duration: 00:01:30.00, start: 0.0") is None
        event = parser.feed("frame=1 time=00:00:45.00 bitrate=1000kbits/s")

        assert event is not None
        assert event.total_time_seconds == pytest.approx(90.0)
        assert event.current_time_seconds == pytest.approx(45.0)
        assert event.percent == pytest.approx(50.0)

    def test_time_before_duration_reports_zero_percent(self) -> None:
        parser = ProgressParser()
        event = parser.feed("frame=10 fps=0.0 q=0.0 size=0kB time=00:00:12.00 bitrate=N/A speed=0x")

        assert event is not None
        assert event.current_time_seconds == pytest.approx(12.0)
        assert event.total_time_seconds == 0.0
        assert event.percent == 0.0

    def test_first_duration_wins(self) -> None:
        parser = ProgressParser()
        parser.feed(DURATION_LINE)
        parser.feed("  Duration: 00:00:10.00, start: 0.000000, bitrate: 1 kb/s")
        assert parser.total_time_seconds == pytest.approx(90.0)

    def test_unparseable_duration_does_not_block_later_one(self) -> None:
        parser = ProgressParser()
        parser.feed("  Duration: N/A, bitrate: N/A")
        parser.feed(DURATION_LINE)
        assert parser.total_time_seconds == pytest.approx(90.0)

    def test_percent_is_clamped_to_100(self) -> None:
        parser = ProgressParser()
        parser.feed(DURATION_LINE)
        event = parser.feed("time=00:02:00.00")
        assert event.percent == 100.0

    def test_negative_time_is_clamped_to_0(self) -> None:
        parser = ProgressParser()
        parser.feed(DURATION_LINE)
        event = parser.feed("size=0kB time=-577014:32:22.77 bitrate=N/A")
        assert event.percent == 0.0

    @pytest.mark.parametrize(
        "line",
        [
            "frame=0 fps=0.0 q=0.0 size=0kB time=N/A bitrate=N/A",
            "frame=0 time=",
            "frame=0 time=00:01",
            "Stream #0:0: Video: h264",
            "",
        ],
    )
    def test_malformed_lines_are_skipped(self, line: str) -> None:
        parser = ProgressParser()
        parser.feed(DURATION_LINE)
        parser.feed("time=00:00:30.00")

        assert parser.feed(line) is None
        assert parser.current_time_seconds == pytest.approx(30.0)

    def test_time_with_padding_after_label(self) -> None:
        parser = ProgressParser()
        event = parser.feed("size=  1024kB time= 00:00:05.00 bitrate=1677.7kbits/s")
        assert event.current_time_seconds == pytest.approx(5.0)

    def test_events_yields_only_time_updates_in_order(self) -> None:
        lines = [
            "ffmpeg version 6.1",
            DURATION_LINE,
            "Stream mapping:",
            "frame=  30 time=00:00:09.00 bitrate=1.0kbits/s",
            "frame=  60 time=00:00:18.00 bitrate=1.0kbits/s",
            "frame=  90 time=00:00:45.00 bitrate=1.0kbits/s",
            "video:1kB audio:1kB",
        ]
        events = list(ProgressParser().events(lines))

        assert [e.current_time_seconds for e in events] == pytest.approx([9.0, 18.0, 45.0])
        assert [e.percent for e in events] == pytest.approx([10.0, 20.0, 50.0])

    def test_events_is_lazy(self) -> None:
        consumed = []

        def lines():
            for line in (DURATION_LINE, "time=00:00:09.00", "time=00:00:18.00"):
                consumed.append(line)
                yield line

        iterator = ProgressParser().events(lines())
        first = next(iterator)

        assert first.current_time_seconds == pytest.approx(9.0)
        assert len(consumed) == 2


class TestIterLines:
    def test_splits_on_carriage_return_and_newline(self) -> None:
        stream = io.BytesIO(
            b"  Duration: 00:00:40.00, start: 0.0\n"
            b"frame=1 time=00:00:10.00\r"
            b"frame=2 time=00:00:20.00\r\n"
        )
        assert list(iter_lines(stream)) == [
            "  Duration: 00:00:40.00, start: 0.0",
            "frame=1 time=00:00:10.00",
            "frame=2 time=00:00:20.00",
        ]

    def test_joins_lines_split_across_reads(self) -> None:
        stream = io.BytesIO(b"time=00:00:01.00\rtime=00:00:02.00\rlast line without break")
        assert list(iter_lines(stream, chunk_size=5)) == [
            "time=00:00:01.00",
            "time=00:00:02.00",
            "last line without break",
        ]

    def test_replaces_undecodable_bytes(self) -> None:
        stream = io.BytesIO("Input #0, from 'café.mov':\n".encode("utf-8") + b"bad \xff byte\n")
        assert list(iter_lines(stream)) == ["Input #0, from 'café.mov':", "bad \ufffd byte"]

    def test_yields_status_line_before_stream_ends(self) -> None:
        class StalledStream:
            def __init__(self) -> None:
                self.chunks = [b"Duration: 00:00:40.00,\n", b"time=00:00:10.00\r"]

            def read1(self, _size: int) -> bytes:
                if not self.chunks:
                    raise AssertionError("read past the first status line")
                return self.chunks.pop(0)

        lines = iter_lines(StalledStream())
        assert next(lines) == "Duration: 00:00:40.00,"
        assert next(lines) == "time=00:00:10.00"
