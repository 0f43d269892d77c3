from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from rentals.chat.stream import StreamAssembler, Transcript


LOGGER = logging.getLogger(__name__)


class ChatError(RuntimeError):
    pass


class ChatClient:
    """
    Posts the transcript to the chat edge function and streams the reply
    into it. No timeout unless one is configured; a hung request ends only
    when the transport fails.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def stream_reply(
        self,
        transcript: Transcript,
        on_update: Callable[[str], None] | None = None,
    ) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        body = {"messages": transcript.to_payload()}
        assembler = StreamAssembler(transcript)

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            async with client.stream("POST", self.url, json=body, headers=headers) as response:
                if not response.is_success:
                    await response.aread()
                    raise ChatError(_error_message(response))

                async for chunk in response.aiter_text():
                    for content in assembler.feed(chunk):
                        if on_update is not None:
                            on_update(content)
                    if assembler.done:
                        break
        assembler.close()
        LOGGER.debug("Chat reply complete chars=%s", len(assembler.content))
        return assembler.content


def _error_message(response: httpx.Response) -> str:
    fallback = f"Request failed with status {response.status_code}"
    try:
        payload: Any = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return fallback
