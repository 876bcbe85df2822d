"""Capture of rendered frames to PNG screenshots.

Each frame the application announces its capturable regions ("sources") with
:meth:`Recorder.frame`. When a screenshot is pending or recording is on, the
selected source's pixels are read back, flipped to top-down row order and kept
until :meth:`Recorder.update` writes them out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from PIL import Image

__all__ = [
    "CaptureMode",
    "RecSource",
    "Recorder",
    "clamp_rect",
    "flip_rows",
    "next_screenshot_path",
    "MAX_SOURCES",
    "FILENAME_SIZE",
]

MAX_SOURCES = 8
FILENAME_SIZE = 64
_BPP = 4

PixelReader = Callable[[int, int, int, int], bytes]


class CaptureMode(IntEnum):
    """What the recorder produces."""

    SCREENSHOT = 0
    GIF = 1


@dataclass(frozen=True)
class RecSource:
    """A named region offered for capture this frame."""

    name: str
    w: int
    h: int


def clamp_rect(x: int, y: int, w: int, h: int, res_x: int, res_y: int) -> Tuple[int, int, int, int]:
    """Clamp a rectangle so that it lies inside a ``res_x`` by ``res_y`` surface."""
    x = max(0, min(res_x - 1, x))
    y = max(0, min(res_y - 1, y))
    w = min(res_x - x, w)
    h = min(res_y - y, h)
    return x, y, w, h


def flip_rows(pixels: bytes, width: int, height: int, bpp: int = _BPP) -> bytes:
    """Return the image with its rows in reverse order."""
    stride = width * bpp
    if width < 0 or height < 0 or bpp <= 0 or len(pixels) != stride * height:
        raise ValueError(
            f"expected {stride * height} bytes for {width}x{height}x{bpp}, got {len(pixels)}"
        )
    rows = [pixels[r * stride : (r + 1) * stride] for r in range(height)]
    return b"".join(reversed(rows))


def next_screenshot_path(directory: Union[str, Path], stem: str) -> Path:
    """First free path among ``stem.png``, ``stem_00.png``, ``stem_01.png``, ..."""
    directory = Path(directory)
    candidate = directory / f"{stem}.png"
    suffix = 0
    while candidate.exists():
        candidate = directory / f"{stem}_{suffix:02d}.png"
        suffix += 1
    return candidate


class Recorder:
    """Collects capture sources each frame and writes screenshots on request."""

    def __init__(self, screenshot_dir: Union[str, Path] = "screenshots") -> None:
        self.screenshot_dir = Path(screenshot_dir)
        self.ui_enabled = True
        self.filename = "capture"
        self.recording = False
        self.mode = CaptureMode.SCREENSHOT
        self.source_idx = 0
        self.sources: List[RecSource] = []
        self.recorded_frames = 0
        self._snap = False
        self._frame: Optional[bytes] = None
        self._frame_size = (0, 0)
        self._frame_valid = False

    def frame(
        self,
        name: str,
        x: int,
        y: int,
        w: int,
        h: int,
        res_x: int,
        res_y: int,
        read_pixels: PixelReader,
    ) -> None:
        """Offer a region for capture; reads it back if it is the selected one.

        ``read_pixels(x, y, w, h)`` returns RGBA bytes in bottom-up row order.
        """
        if len(self.sources) >= MAX_SOURCES:
            return
        x, y, w, h = clamp_rect(x, y, w, h, res_x, res_y)
        index = len(self.sources)
        self.sources.append(RecSource(name, w, h))
        if (self.recording or self._snap) and self.source_idx == index and w > 0 and h > 0:
            pixels = read_pixels(x, y, w, h)
            self._frame = flip_rows(bytes(pixels), w, h, _BPP)
            self._frame_size = (w, h)
            self._frame_valid = True

    def end_ui(self) -> None:
        """Finish the frame's source list; sources are announced afresh each frame."""
        self.sources.clear()

    def snap(self) -> None:
        """Request a screenshot of the selected source on the next update."""
        self.mode = CaptureMode.SCREENSHOT
        self._snap = True

    def start(self) -> None:
        """Start recording the selected source."""
        self.mode = CaptureMode.GIF
        self.recording = True
        self.recorded_frames = 0
        self._frame_valid = False

    def stop(self) -> None:
        """Stop recording."""
        self.recording = False

    def update(self) -> Optional[Path]:
        """Consume the captured frame; return the screenshot path if one was written."""
        written: Optional[Path] = None
        if self.recording and self._frame_valid:
            self.recorded_frames += 1
        if self._snap and self._frame_valid and self._frame is not None:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)
            written = next_screenshot_path(self.screenshot_dir, self.filename)
            Image.frombytes("RGBA", self._frame_size, self._frame).save(written)
            self._snap = False
        self._frame_valid = False
        return written

    def set_filename(self, name: str) -> None:
        """Set the stem used for output files."""
        if len(name) >= FILENAME_SIZE:
            raise ValueError(f"file name is too long (max {FILENAME_SIZE - 1} characters)")
        self.filename = name

    def toggle_ui(self) -> None:
        """Show or hide the recorder panel."""
        self.ui_enabled = not self.ui_enabled