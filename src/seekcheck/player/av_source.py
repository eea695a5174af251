"""PyAV-backed frame source used by the reference player."""

from __future__ import annotations

from collections.abc import Iterator
import logging

import av

from seekcheck.errors import SourceError
from seekcheck.observability.logging import get_logger, log_event
from seekcheck.player.engine import DecodedFrame
from seekcheck.player.session import StreamInfo, StreamSelection


_LOGGER = get_logger("seekcheck.player.av")


class AvSource:
    """Decode one stream of a container in presentation order."""

    def __init__(self, path: str, selection: StreamSelection = StreamSelection.DEFAULT) -> None:
        self.path = path
        self.selection = selection
        self._container = self._open()
        self._stream = self._select_stream()
        self._frames: Iterator = iter(())
        self._started = False

    def _open(self):
        try:
            return av.open(self.path)
        except (av.error.FFmpegError, OSError) as exc:
            raise SourceError(f"cannot open {self.path}: {exc}") from exc

    def _select_stream(self):
        if self.selection is StreamSelection.AUDIO:
            streams = self._container.streams.audio
        else:
            streams = self._container.streams.video
        if not streams:
            self._container.close()
            raise SourceError(f"{self.path} has no {self.selection.value} stream")
        return streams[0]

    def _duration(self) -> float:
        stream = self._stream
        if stream.duration is not None and stream.time_base is not None:
            return float(stream.duration * stream.time_base)
        if self._container.duration is not None:
            return self._container.duration / av.time_base
        return 0.0

    def info(self) -> StreamInfo:
        video = self._container.streams.video
        width = video[0].codec_context.width if video else 0
        height = video[0].codec_context.height if video else 0
        rate = video[0].average_rate if video else None
        audio = self._container.streams.audio
        return StreamInfo(
            width=width,
            height=height,
            duration=self._duration(),
            frame_rate=float(rate) if rate else None,
            sample_rate=audio[0].sample_rate if audio else None,
        )

    def _single_frame(self) -> bool:
        fmt = self._container.format.name
        if fmt == "image2" or fmt.endswith("_pipe"):
            return True
        rate = self._stream.average_rate if self.selection is StreamSelection.DEFAULT else None
        period = 1.0 / float(rate) if rate else 0.0
        return self._duration() <= period

    def _reopen(self) -> None:
        self._container.close()
        self._container = self._open()
        self._stream = self._select_stream()

    def seek(self, ts: float) -> None:
        if self._single_frame():
            # Stills hold one frame; image demuxers refuse to seek.
            self._reopen()
            self._frames = iter(())
            self._started = False
            return

        duration = self._duration()
        if duration > 0:
            ts = min(ts, duration)
        offset = int(ts / self._stream.time_base)
        try:
            self._container.seek(offset, stream=self._stream, backward=True, any_frame=False)
        except av.error.FFmpegError as exc:
            log_event(
                _LOGGER,
                "seek_fallback",
                level=logging.WARNING,
                media=self.path,
                target=ts,
                error=str(exc),
            )
            self._reopen()
        self._frames = iter(())
        self._started = False

    def read(self) -> DecodedFrame | None:
        if not self._started:
            self._frames = self._container.decode(self._stream)
            self._started = True
        try:
            for frame in self._frames:
                if frame.pts is None:
                    continue
                return self._convert(frame)
        except av.error.FFmpegError as exc:
            raise SourceError(f"decoding {self.path} failed: {exc}") from exc
        return None

    def _convert(self, frame) -> DecodedFrame:
        ts = float(frame.pts * frame.time_base)
        if self.selection is StreamSelection.AUDIO:
            return DecodedFrame(
                ts=ts,
                data=frame.to_ndarray(),
                duration=frame.samples / frame.sample_rate,
            )
        return DecodedFrame(
            ts=ts,
            data=frame.to_ndarray(format="rgba"),
            width=frame.width,
            height=frame.height,
        )

    def close(self) -> None:
        self._container.close()
