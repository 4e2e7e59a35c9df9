"""Line-delimited JSON stream reading.

:class:`StreamParser` turns the raw byte chunks of a long-lived streaming
response into :class:`StreamEvent` objects. It has no dependency on the
signing engine; :meth:`oauthsign.client.SyncClient.stream` wires the two
together.
"""

from oauthsign.stream.parser import StreamEvent, StreamParser

__all__ = ["StreamEvent", "StreamParser"]
