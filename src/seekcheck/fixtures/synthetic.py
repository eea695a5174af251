"""Synthetic test media whose frames carry their own index in pixel colour."""

from __future__ import annotations

from bisect import bisect_right
from fractions import Fraction
from pathlib import Path

import av
import numpy as np
from PIL import Image

from seekcheck.config.schema import ImageCheckConfig, SyntheticMediaConfig
from seekcheck.errors import SourceError
from seekcheck.harness.oracle import FRAME_ID_BITS
from seekcheck.player.engine import DecodedFrame, FrameSource
from seekcheck.player.session import StreamInfo, StreamSelection


MAX_FRAME_ID = (1 << (FRAME_ID_BITS * 3)) - 1
AUDIO_FRAME_SAMPLES = 1024
_NIBBLE = (1 << FRAME_ID_BITS) - 1
# Low nibble sits mid-range so small codec drift never flips the high nibble.
_LOW_NIBBLE_FILL = 1 << (FRAME_ID_BITS - 1)


def encode_frame_id(frame_id: int) -> tuple[int, int, int]:
    """Return the RGB colour painting `frame_id`; inverse of `decode_frame_id`."""

    if not 0 <= frame_id <= MAX_FRAME_ID:
        raise ValueError(f"frame id {frame_id} outside 0..{MAX_FRAME_ID}")
    r = frame_id >> (FRAME_ID_BITS * 2) & _NIBBLE
    g = frame_id >> FRAME_ID_BITS & _NIBBLE
    b = frame_id & _NIBBLE
    return tuple(nibble << FRAME_ID_BITS | _LOW_NIBBLE_FILL for nibble in (r, g, b))


def paint_frame(frame_id: int, width: int, height: int) -> np.ndarray:
    """Return an RGBA image filled with the colour of `frame_id`."""

    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = encode_frame_id(frame_id)
    rgba[..., 3] = 255
    return rgba


def _frame_count(config: SyntheticMediaConfig) -> int:
    count = int(round(config.duration * config.source_fps))
    if count - 1 > MAX_FRAME_ID:
        raise ValueError(
            f"{config.duration:f}s at {config.source_fps} fps needs {count} frame ids, "
            f"only {MAX_FRAME_ID + 1} fit in the pixel encoding"
        )
    return count


class SyntheticSource:
    """In-memory frame source with a keyframe every `gop` frames."""

    def __init__(self, frames: list[DecodedFrame], info: StreamInfo, gop: int = 1) -> None:
        if gop < 1:
            raise ValueError(f"gop must be >= 1, got {gop}")
        self._frames = frames
        self._timestamps = [frame.ts for frame in frames]
        self._info = info
        self._gop = gop
        self._pos = 0
        self.seeks: list[float] = []
        self.closed = False

    @classmethod
    def video(
        cls,
        config: SyntheticMediaConfig,
        selection: StreamSelection = StreamSelection.DEFAULT,
        gop: int = 12,
    ) -> SyntheticSource:
        count = _frame_count(config)
        info = StreamInfo(
            width=config.width,
            height=config.height,
            duration=count / config.source_fps,
            frame_rate=float(config.source_fps),
            sample_rate=config.audio_sample_rate if config.with_audio else None,
        )
        if selection is StreamSelection.AUDIO:
            if not config.with_audio:
                raise SourceError("synthetic media has no audio stream")
            period = AUDIO_FRAME_SAMPLES / config.audio_sample_rate
            total = int(config.duration * config.audio_sample_rate) // AUDIO_FRAME_SAMPLES
            silence = np.zeros((1, AUDIO_FRAME_SAMPLES), dtype=np.int16)
            frames = [
                DecodedFrame(ts=i * period, data=silence, duration=period) for i in range(total)
            ]
            return cls(frames, info, gop=1)

        frames = [
            DecodedFrame(
                ts=frame_id / config.source_fps,
                data=paint_frame(frame_id, config.width, config.height),
                width=config.width,
                height=config.height,
            )
            for frame_id in range(count)
        ]
        return cls(frames, info, gop=gop)

    @classmethod
    def still(cls, width: int, height: int) -> SyntheticSource:
        data = np.full((height, width, 4), 255, dtype=np.uint8)
        frame = DecodedFrame(ts=0.0, data=data, width=width, height=height)
        return cls([frame], StreamInfo(width=width, height=height, duration=0.0))

    def clone(self) -> SyntheticSource:
        """Return a rewound source sharing this one's decoded frames."""

        return SyntheticSource(self._frames, self._info, gop=self._gop)

    def info(self) -> StreamInfo:
        return self._info

    def seek(self, ts: float) -> None:
        self.seeks.append(ts)
        idx = max(bisect_right(self._timestamps, ts + 1e-9) - 1, 0)
        self._pos = idx - idx % self._gop

    def read(self) -> DecodedFrame | None:
        if self._pos >= len(self._frames):
            return None
        frame = self._frames[self._pos]
        self._pos += 1
        return frame

    def close(self) -> None:
        self.closed = True


class SyntheticLibrary:
    """Source opener serving synthetic media under fixed paths."""

    def __init__(
        self,
        media_path: str = "synthetic.mkv",
        image_path: str = "synthetic.jpg",
        media: SyntheticMediaConfig | None = None,
        image: ImageCheckConfig | None = None,
        gop: int = 12,
    ) -> None:
        self.media_path = media_path
        self.image_path = image_path
        self.media = media or SyntheticMediaConfig()
        self.image = image or ImageCheckConfig()
        self.gop = gop
        self.opened: list[SyntheticSource] = []
        self._decoded: dict[StreamSelection, SyntheticSource] = {}

    def __call__(self, path: str, selection: StreamSelection) -> FrameSource:
        if path == self.media_path:
            template = self._decoded.get(selection)
            if template is None:
                template = SyntheticSource.video(self.media, selection, gop=self.gop)
                self._decoded[selection] = template
            source = template.clone()
        elif path == self.image_path:
            source = SyntheticSource.still(self.image.width, self.image.height)
        else:
            raise SourceError(f"no such file: {path}")
        self.opened.append(source)
        return source


def write_test_video(path: Path, config: SyntheticMediaConfig) -> int:
    """Encode the synthetic clip losslessly; return the number of video frames."""

    count = _frame_count(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    with av.open(str(path), mode="w") as container:
        video = container.add_stream("ffv1", rate=config.source_fps)
        video.width = config.width
        video.height = config.height
        video.pix_fmt = "bgr0"
        video_tb = Fraction(1, config.source_fps)
        audio = _add_tone_stream(container, config) if config.with_audio else None

        for frame_id in range(count):
            frame = av.VideoFrame.from_ndarray(
                paint_frame(frame_id, config.width, config.height)[..., :3].copy(),
                format="rgb24",
            )
            frame.pts = frame_id
            frame.time_base = video_tb
            for packet in video.encode(frame):
                container.mux(packet)
        for packet in video.encode(None):
            container.mux(packet)

        if audio is not None:
            _write_tone(container, audio, config)
    return count


def _add_tone_stream(container, config: SyntheticMediaConfig):
    return container.add_stream("pcm_s16le", rate=config.audio_sample_rate, layout="mono")


def _write_tone(container, audio, config: SyntheticMediaConfig) -> None:
    rate = config.audio_sample_rate
    audio_tb = Fraction(1, rate)
    total = int(config.duration * rate)
    t = np.arange(total, dtype=np.float64) / rate
    samples = (np.sin(2.0 * np.pi * 440.0 * t) * 0.25 * 32767).astype(np.int16)

    for offset in range(0, total, AUDIO_FRAME_SAMPLES):
        chunk = samples[offset : offset + AUDIO_FRAME_SAMPLES]
        frame = av.AudioFrame.from_ndarray(chunk.reshape(1, -1), format="s16", layout="mono")
        frame.sample_rate = rate
        frame.pts = offset
        frame.time_base = audio_tb
        for packet in audio.encode(frame):
            container.mux(packet)
    for packet in audio.encode(None):
        container.mux(packet)


def write_test_image(path: Path, config: ImageCheckConfig) -> None:
    """Write a still image of the size the image check expects."""

    path.parent.mkdir(parents=True, exist_ok=True)
    gradient = np.linspace(0, 255, config.width, dtype=np.uint8)
    rgb = np.broadcast_to(gradient[None, :, None], (config.height, config.width, 3))
    Image.fromarray(np.ascontiguousarray(rgb)).save(path, format="JPEG", quality=90)
