"""Clients for the asynchronous Read API.

- VisionReadClient: blocking, cancellable through a threading.Event
- AsyncVisionReadClient: asyncio, cancellable through task cancellation
"""

from vision_ocr.clients.assembler import assemble_response
from vision_ocr.clients.async_vision_client import (
    AsyncVisionReadClient,
    recognize_async,
)
from vision_ocr.clients.polling import PollingPolicy
from vision_ocr.clients.vision_client import (
    VisionReadClient,
    get_shared_client,
    recognize,
)

__all__ = [
    "AsyncVisionReadClient",
    "PollingPolicy",
    "VisionReadClient",
    "assemble_response",
    "get_shared_client",
    "recognize",
    "recognize_async",
]
