"""Result envelope returned by every tool handler."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextBlock(BaseModel):
    """A single text content block."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ResultEnvelope(BaseModel):
    """Uniform success-or-failure wrapper crossing back to the transport.

    Serialized as ``{"content": [{"type": "text", "text": ...}], "isError": bool}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: tuple[TextBlock, ...]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def ok(cls, text: str) -> ResultEnvelope:
        return cls(content=(TextBlock(text=text),), is_error=False)

    @classmethod
    def error(cls, text: str) -> ResultEnvelope:
        return cls(content=(TextBlock(text=text),), is_error=True)

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
