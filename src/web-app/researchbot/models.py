"""Wire models shared by the chat and share endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

PREVIEW_CHARS = 200


class Source(BaseModel):
    """A scraped page: extracted text plus its URL and optional title."""

    url: str
    content: str
    title: str | None = None

    def preview(self, length: int = PREVIEW_CHARS) -> str:
        """Return the first *length* characters of the content (UI snippet)."""
        return self.content[:length]


class Message(BaseModel):
    role: Literal["user", "ai"]
    content: str
    sources: list[Source] | None = None


class Conversation(BaseModel):
    """An ordered chat history plus the comma-separated URLs it is grounded on."""

    id: str = Field(min_length=1)
    messages: list[Message] = Field(default_factory=list)
    urls: str = ""


class ChatRequest(BaseModel):
    query: str = Field(min_length=1)
    urls: list[str]


class ChatResponse(BaseModel):
    answer: str
    sources: list[Source] = Field(default_factory=list)


class ShareResponse(BaseModel):
    success: bool = True
    id: str


class SharedConversationResponse(BaseModel):
    conversation: Conversation


class HealthResponse(BaseModel):
    status: str
    llm_configured: bool
    share_configured: bool
    rate_limit_configured: bool
