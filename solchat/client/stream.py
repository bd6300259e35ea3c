from typing import AsyncIterator, Optional

import httpx

from ..core.wire import FrameDecoder
from ..types.events import WireEvent


async def iter_events(response: httpx.Response, decoder: Optional[FrameDecoder] = None) -> AsyncIterator[WireEvent]:
    """Decode a streaming ``text/event-stream`` response into wire events."""
    decoder = decoder or FrameDecoder()
    async for chunk in response.aiter_text():
        for event in decoder.feed(chunk):
            yield event
    for event in decoder.flush():
        yield event
