from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from rentals.core.models import ChatMessage


DATA_PREFIX = "data: "
COMMENT_PREFIX = ":"
DONE_SENTINEL = "[DONE]"

AWAITING_LINE = "awaiting_line"
DONE = "done"


@dataclass(slots=True)
class Transcript:
    messages: list[ChatMessage] = field(default_factory=list)

    def append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self.messages.append(message)
        return message

    def upsert_assistant(self, content: str) -> None:
        if self.messages and self.messages[-1].role == "assistant":
            self.messages[-1] = ChatMessage(role="assistant", content=content)
        else:
            self.messages.append(ChatMessage(role="assistant", content=content))

    @property
    def last(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def to_payload(self) -> list[dict[str, Any]]:
        return [message.to_payload() for message in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


@dataclass(slots=True)
class FrameBuffer:
    """
    Decoded text not yet consumed, read line by line through a cursor.

    `text[cursor:]` is the unread part. `line_start` marks where the last
    returned line began so `unread_line()` can put it back untouched.
    """

    text: str = ""
    cursor: int = 0
    line_start: int = 0

    def append(self, chunk: str) -> None:
        if self.cursor:
            self.text = self.text[self.cursor :]
            self.cursor = 0
            self.line_start = 0
        self.text += chunk

    def next_line(self) -> str | None:
        newline = self.text.find("\n", self.cursor)
        if newline == -1:
            return None
        self.line_start = self.cursor
        line = self.text[self.cursor : newline]
        self.cursor = newline + 1
        return line[:-1] if line.endswith("\r") else line

    def unread_line(self) -> None:
        self.cursor = self.line_start

    @property
    def pending(self) -> str:
        return self.text[self.cursor :]


class StreamAssembler:
    """
    Turns `data: {json}` frames of a chat completion stream into a live
    assistant entry at the end of a transcript.
    """

    def __init__(self, transcript: Transcript) -> None:
        self.transcript = transcript
        self.buffer = FrameBuffer()
        self.state = AWAITING_LINE  # awaiting_line | done
        self.content = ""

    @property
    def done(self) -> bool:
        return self.state == DONE

    def feed(self, chunk: str) -> list[str]:
        """Consume one decoded chunk; return the assistant content after each update."""
        if self.done:
            return []
        self.buffer.append(chunk)
        updates: list[str] = []
        while True:
            line = self.buffer.next_line()
            if line is None:
                break
            if line.startswith(COMMENT_PREFIX) or line.strip() == "":
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX) :].strip()
            if payload == DONE_SENTINEL:
                self.state = DONE
                break

            try:
                parsed = json.loads(payload)
            except ValueError:
                # Incomplete frame: keep it and wait for more text.
                self.buffer.unread_line()
                break

            delta = extract_delta(parsed)
            if delta:
                self.content += delta
                self.transcript.upsert_assistant(self.content)
                updates.append(self.content)
        return updates

    def close(self) -> None:
        # Residue without a trailing newline is dropped.
        self.buffer = FrameBuffer()
        self.state = DONE


def extract_delta(parsed: Any) -> str | None:
    if not isinstance(parsed, dict):
        return None
    choices = parsed.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    delta = first.get("delta") if isinstance(first, dict) else None
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) and content else None
