import sys
from pathlib import Path

import pytest

from transcoder.services.cancellation import CancellationSignal

# Stands in for ffmpeg: writes an ffmpeg-like header and '\r'-terminated
# status lines to stderr, optionally creates the output file (last argument)
# and exits with the requested status. FAKE_FFMPEG_HOLD_AFTER_FIRST stalls it
# after the first status line.
FAKE_FFMPEG_SOURCE = """#!{python}
import os
import sys
import time
from pathlib import Path

output = Path(sys.argv[-1])
steps = int(os.environ.get("FAKE_FFMPEG_STEPS", "4"))
delay = float(os.environ.get("FAKE_FFMPEG_DELAY", "0"))
exit_code = int(os.environ.get("FAKE_FFMPEG_EXIT", "0"))
write_output = os.environ.get("FAKE_FFMPEG_WRITE_OUTPUT", "1") == "1"
args_log = os.environ.get("FAKE_FFMPEG_ARGS_LOG")
hold_after_first = float(os.environ.get("FAKE_FFMPEG_HOLD_AFTER_FIRST", "0"))

if args_log:
    Path(args_log).write_text("\\n".join(sys.argv[1:]), encoding="utf-8")

sys.stderr.write("Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'input.mp4':\\n")
sys.stderr.write("  Duration: 00:00:40.00, start: 0.000000, bitrate: 1000 kb/s\\n")
sys.stderr.flush()

if write_output:
    output.write_bytes(b"encoded")

for i in range(1, steps + 1):
    sys.stderr.write(
        f"frame={{i * 300}} fps=30 q=28.0 size=256kB time=00:00:{{i * 10:02d}}.00 bitrate=500kbits/s speed=1x\\r"
    )
    sys.stderr.flush()
    time.sleep(hold_after_first if i == 1 else delay)

sys.stderr.write("\\n")
sys.exit(exit_code)
"""


@pytest.fixture
def fake_ffmpeg(tmp_path: Path) -> str:
    script = tmp_path / "fake_ffmpeg"
    script.write_text(FAKE_FFMPEG_SOURCE.format(python=sys.executable), encoding="utf-8")
    script.chmod(0o755)
    return str(script)


@pytest.fixture
def input_video(tmp_path: Path) -> Path:
    video_dir = tmp_path / "videos"
    video_dir.mkdir()
    video = video_dir / "holiday.mov"
    video.write_bytes(b"fake video")
    return video


@pytest.fixture
def signal() -> CancellationSignal:
    return CancellationSignal()
