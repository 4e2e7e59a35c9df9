"""Reader for CRLF-delimited JSON streams.

Streaming endpoints keep one HTTP response open and write one JSON document
per line, separated by ``\\r\\n``. Blank lines are keep-alive pings. Network
chunks do not respect line boundaries (or even UTF-8 character boundaries),
so :class:`StreamParser` buffers raw bytes and only parses complete lines.

Each complete line becomes a :class:`StreamEvent` whose ``kind`` is one of:

* ``"ping"`` -- an empty line;
* ``"event"`` -- a JSON object with an ``event`` member;
* ``"delete"`` -- a JSON object with a ``delete`` member;
* ``"friends"`` -- a JSON object with ``friends`` or ``friends_str``;
* ``"data"`` -- any other JSON document;
* ``"error"`` -- a line that is not valid JSON. The decoding exception is
  in ``error`` and the offending line in ``raw``.

Example::

    parser = StreamParser()
    parser.on("data", lambda event: print(event.data["text"]))
    for chunk in response.iter_bytes():
        parser.receive(chunk)
"""

from __future__ import annotations

import codecs
import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)

EventHandler = Callable[["StreamEvent"], None]


@dataclass
class StreamEvent:
    """One message read from the stream."""

    kind: str
    data: Any = None
    raw: str = ""
    error: Optional[Exception] = None


class StreamParser:
    """Incremental parser for a single streaming response.

    Handlers registered with :meth:`on` are called synchronously, in
    registration order, as lines complete. :meth:`receive` also returns the
    events it produced, so the parser can be used without handlers.

    Args:
        encoding: Text encoding of the stream.
    """

    DELIMITER = "\r\n"

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    @property
    def pending(self) -> str:
        """Text received after the last complete line."""
        return self._buffer

    def on(self, kind: str, handler: EventHandler) -> None:
        """Call *handler* for every event of *kind*.

        Besides the fixed kinds, the name carried in an ``event`` message
        (e.g. ``"favorite"``) can be subscribed to directly.
        """
        self._handlers[kind].append(handler)

    def receive(self, chunk: Union[bytes, str]) -> list[StreamEvent]:
        """Feed a chunk of the response body and return the completed events."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        events: list[StreamEvent] = []
        while True:
            index = self._buffer.find(self.DELIMITER)
            if index < 0:
                break
            line = self._buffer[:index]
            self._buffer = self._buffer[index + len(self.DELIMITER):]
            event = self._parse_line(line)
            events.append(event)
            self._dispatch(event)
        return events

    def close(self) -> str:
        """Flush the decoder and return any unterminated trailing text."""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        return remainder

    def _parse_line(self, line: str) -> StreamEvent:
        if not line:
            return StreamEvent(kind="ping")
        try:
            data = json.loads(line)
        except ValueError as exc:
            logger.debug("Unparseable stream line: %r", line)
            return StreamEvent(kind="error", raw=line, error=exc)
        return StreamEvent(kind=_classify(data), data=data, raw=line)

    def _dispatch(self, event: StreamEvent) -> None:
        if event.kind == "event":
            name = event.data.get("event")
            if isinstance(name, str) and name != "event":
                for handler in self._handlers.get(name, []):
                    handler(event)
        for handler in self._handlers.get(event.kind, []):
            handler(event)


def _classify(data: Any) -> str:
    if not isinstance(data, dict):
        return "data"
    if "event" in data:
        return "event"
    if "delete" in data:
        return "delete"
    if "friends" in data or "friends_str" in data:
        return "friends"
    return "data"
