"""Messages passed from the capture overlay to the main actor.

The overlay produces exactly one message per gesture: either the
selected rectangle or a cancellation. Both travel over an
:class:`OverlayChannel` and are consumed once by the controller.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rapidreporter.domain.models import RegionSelection


class Selected(BaseModel):
    """The user finished a drag; carries the global selection."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["selected"] = "selected"
    selection: RegionSelection


class Cancelled(BaseModel):
    """The user dismissed the overlay without selecting."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cancelled"] = "cancelled"


# Discriminated union for overlay messages
OverlayMessage = Annotated[
    Union[Selected, Cancelled],
    Field(discriminator="kind"),
]

overlay_message_adapter: TypeAdapter[OverlayMessage] = TypeAdapter(OverlayMessage)


class OverlayChannel:
    """Single-consumer queue between the overlay and the main actor."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Selected | Cancelled] = asyncio.Queue()

    def send(self, message: Selected | Cancelled) -> None:
        self._queue.put_nowait(message)

    def send_json(self, payload: str | bytes) -> Selected | Cancelled:
        """Decode a message posted by an out-of-process overlay and queue it."""
        message = overlay_message_adapter.validate_json(payload)
        self.send(message)
        return message

    async def receive(self) -> Selected | Cancelled:
        return await self._queue.get()

    @property
    def pending(self) -> int:
        return self._queue.qsize()
