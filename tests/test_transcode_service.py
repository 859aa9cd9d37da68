"""Tests for the TranscodeService request surface."""

import threading

import pytest

from transcoder.config.common import JOB_STATUS_FAILED
from transcoder.domain.media import VideoInfo
from transcoder.domain.options import ConversionOptions
from transcoder.services.transcode_service import TranscodeService


@pytest.fixture
def service(fake_ffmpeg, signal):
    svc = TranscodeService(executable=fake_ffmpeg, cancellation=signal)
    yield svc
    svc.shutdown(wait=True)


class TestSubmit:
    def test_resolves_future_with_outcome(self, service, input_video) -> None:
        outcome = service.submit(input_video, ConversionOptions()).result(timeout=30)
        assert outcome.succeeded
        assert outcome.output_path == input_video.with_suffix(".mp4")
        assert not service.is_busy

    def test_accepts_request_payload(self, service, input_video) -> None:
        payload = {"format": "webm", "codec": "libvpx-vp9", "audioCodec": "libopus", "quality": 480}
        outcome = service.submit(str(input_video), payload).result(timeout=30)
        assert outcome.output_path == input_video.with_suffix(".webm")

    def test_invalid_payload_resolves_to_failure(self, service, input_video) -> None:
        completed = []
        future = service.submit(input_video, {"resolution": {"width": -5}}, on_complete=completed.append)

        outcome = future.result(timeout=1)
        assert outcome.status == JOB_STATUS_FAILED
        assert outcome.error_kind == "InvalidOptionsException"
        assert completed == [outcome]

    def test_invalid_payload_with_failing_completion_callback_does_not_raise(self, service, input_video) -> None:
        def broken(_outcome):
            raise RuntimeError("ui went away")

        future = service.submit(input_video, {"quality": "high"}, on_complete=broken)

        outcome = future.result(timeout=1)
        assert outcome.status == JOB_STATUS_FAILED
        assert outcome.error_kind == "InvalidOptionsException"

    def test_job_runs_on_worker_thread(self, service, input_video) -> None:
        threads = set()
        service.submit(
            input_video,
            ConversionOptions(),
            on_progress=lambda _e: threads.add(threading.current_thread().name),
        ).result(timeout=30)

        assert threads
        assert all(name.startswith("transcode-worker") for name in threads)


class TestCancel:
    def test_cancel_without_job_reports_idle(self, service, signal) -> None:
        assert service.cancel() is False
        assert signal.is_set()

    def test_cancel_running_job(self, service, input_video, monkeypatch) -> None:
        monkeypatch.setenv("FAKE_FFMPEG_STEPS", "500")
        monkeypatch.setenv("FAKE_FFMPEG_DELAY", "0.02")
        first_progress = threading.Event()

        future = service.submit(input_video, ConversionOptions(), on_progress=lambda _e: first_progress.set())
        assert first_progress.wait(timeout=30)
        assert service.is_busy
        assert service.cancel() is True

        outcome = future.result(timeout=30)
        assert outcome.cancelled
        assert not input_video.with_suffix(".mp4").exists()

    def test_next_job_starts_with_cleared_signal(self, service, input_video, signal) -> None:
        service.cancel()
        outcome = service.submit(input_video, ConversionOptions()).result(timeout=30)
        assert outcome.succeeded
        assert not signal.is_set()


class TestConvert:
    async def test_awaits_terminal_outcome(self, service, input_video) -> None:
        events = []
        outcome = await service.convert(input_video, ConversionOptions(), on_progress=events.append)

        assert outcome.succeeded
        assert [e.percent for e in events] == pytest.approx([25.0, 50.0, 75.0, 100.0])

    async def test_progress_is_delivered_on_event_loop_thread(self, service, input_video) -> None:
        loop_thread = threading.current_thread()
        seen_threads = []

        await service.convert(
            input_video,
            ConversionOptions(),
            on_progress=lambda _e: seen_threads.append(threading.current_thread()),
        )

        assert seen_threads
        assert all(thread is loop_thread for thread in seen_threads)


def test_get_video_info_uses_probe(service, monkeypatch, input_video) -> None:
    calls = []

    def fake_probe(path, ffprobe_cmd):
        calls.append((path, ffprobe_cmd))
        return VideoInfo(format="mov,mp4", duration=12.5, width=640, height=360)

    monkeypatch.setattr("transcoder.services.transcode_service.probe_video", fake_probe)
    monkeypatch.setattr("transcoder.services.transcode_service.Modules.find_executable", lambda _tool: "/opt/ffprobe")

    info = service.get_video_info(str(input_video))

    assert info.width == 640
    assert calls == [(input_video, "/opt/ffprobe")]
