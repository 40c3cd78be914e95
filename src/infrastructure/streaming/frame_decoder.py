"""Incremental decoder for `event:` / `data:` frame streams.

The decoder is fed raw chunks (str or UTF-8 bytes) and returns the frames completed by
each chunk. It keeps everything after the last consumed `data:` line buffered, so an
`event:` line whose `data:` line is still in flight is picked up by a later feed.
"""

import codecs
import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

EVENT_PREFIX = "event:"
DATA_PREFIX = "data:"


@dataclass(frozen=True)
class Frame:
    """One decoded event + JSON payload pair."""

    event: str
    data: dict[str, Any]


def format_frame(event: str, data: dict[str, Any]) -> str:
    """Encode a frame the way the backend emits it."""
    return f"{EVENT_PREFIX} {event}\n{DATA_PREFIX} {json.dumps(data, ensure_ascii=False)}\n\n"


class FrameDecoder:
    """Line-scanning frame decoder with a single cursor over buffered text."""

    def __init__(self) -> None:
        """Create an empty decoder."""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.dropped = 0

    @property
    def pending(self) -> str:
        """Text received but not yet consumed."""
        return self._buffer

    def feed(self, chunk: str | bytes) -> list[Frame]:
        """Append a chunk and return every frame it completes."""
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk
        return self._scan(final=False)

    def flush(self) -> list[Frame]:
        """End of stream: treat the unterminated tail as a complete line."""
        self._buffer += self._utf8.decode(b"", final=True)
        frames = self._scan(final=True)
        if self._buffer.strip():
            logger.debug("Discarding incomplete frame at end of stream: %r", self._buffer[:200])
        self._buffer = ""
        return frames

    def reset(self) -> None:
        """Drop buffered text (start of a new stream)."""
        self._utf8.reset()
        self._buffer = ""
        self.dropped = 0

    def _scan(self, final: bool) -> list[Frame]:
        lines = self._buffer.split("\n")
        tail = "" if final else lines.pop()
        lines = [line.rstrip("\r") for line in lines]

        frames: list[Frame] = []
        consumed = len(lines)
        i = 0
        while i < len(lines):
            line = lines[i]
            if not line.startswith(EVENT_PREFIX):
                i += 1
                continue

            event = line[len(EVENT_PREFIX):].strip()
            j = i + 1
            while j < len(lines) and not lines[j].startswith(DATA_PREFIX):
                j += 1
            if j >= len(lines):
                # data line not received yet; resume from this event line next time
                consumed = i
                break

            frame = self._parse(event, lines[j][len(DATA_PREFIX):].strip())
            if frame is not None:
                frames.append(frame)
            i = j + 1

        rest = lines[consumed:]
        if not final:
            rest.append(tail)
        self._buffer = "\n".join(rest)
        return frames

    def _parse(self, event: str, payload: str) -> Frame | None:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            self.dropped += 1
            logger.warning("Dropping malformed '%s' frame: %s (payload=%r)", event, e, payload[:200])
            return None
        if not isinstance(data, dict):
            self.dropped += 1
            logger.warning("Dropping '%s' frame: payload is not an object (%r)", event, payload[:200])
            return None
        return Frame(event=event, data=data)
