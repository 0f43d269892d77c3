from __future__ import annotations

import logging
from typing import Callable

from rentals.chat.client import ChatClient
from rentals.chat.stream import Transcript
from rentals.core.models import Notice


LOGGER = logging.getLogger(__name__)


class ChatBusyError(RuntimeError):
    pass


class ChatSession:
    """One assistant conversation; at most one reply streams at a time."""

    def __init__(self, client: ChatClient, transcript: Transcript | None = None) -> None:
        self.client = client
        self.transcript = transcript if transcript is not None else Transcript()
        self._streaming = False

    @property
    def is_streaming(self) -> bool:
        return self._streaming

    async def send(self, text: str, on_update: Callable[[str], None] | None = None) -> Notice | None:
        message = text.strip()
        if not message:
            return None
        if self._streaming:
            raise ChatBusyError("A reply is still streaming.")

        self._streaming = True
        self.transcript.append("user", message)
        try:
            await self.client.stream_reply(self.transcript, on_update=on_update)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Chat error: %s", exc)
            return Notice(title=str(exc) or "Failed to send message", variant="destructive")
        finally:
            self._streaming = False
        return None
