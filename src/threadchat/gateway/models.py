"""Data models for the messaging gateway.

These models define what a thread snapshot looks like, independent of the
backend that produced it. Every model is frozen: a fetched thread is replaced
wholesale on the next fetch, never patched in place.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageKind(str, Enum):
    """Coarse message classification used by the renderer."""

    TEXT = "text"    # Plain text, rendered verbatim
    OTHER = "other"  # Media, links, reactions, ... rendered as a placeholder


class Participant(BaseModel):
    """A member of one or more threads."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Backend identifier of the participant")
    display_name: str = Field(description="Name shown next to their messages")


class Account(BaseModel):
    """The logged-in account."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str


class Message(BaseModel):
    """A single message inside a thread."""

    model_config = ConfigDict(frozen=True)

    sender_id: str
    kind: MessageKind = MessageKind.TEXT
    item_type: str = Field(
        default="text",
        description="Backend item type, kept for the placeholder label"
    )
    text: str = ""
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def payload(self) -> str:
        """Text for text messages, a placeholder label for everything else."""
        if self.kind == MessageKind.TEXT:
            return self.text
        return f"[a non-text message of type {self.item_type}]"


class Thread(BaseModel):
    """A full snapshot of one conversation."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    messages: tuple[Message, ...] = ()
    participants: dict[str, Participant] = Field(default_factory=dict)

    def ordered_messages(self) -> list[Message]:
        """Messages in creation order (stable for equal timestamps)."""
        return sorted(self.messages, key=lambda m: m.created_at)

    def latest_message(self) -> Message | None:
        """Most recent message, or None for an empty thread."""
        ordered = self.ordered_messages()
        return ordered[-1] if ordered else None
