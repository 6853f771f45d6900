from pydantic import BaseModel, Field, field_validator

from ..chat.models import Message
from ..llm.models import HistoryItem


class ChatTurnRequest(BaseModel):
    """Incoming request payload for one chat turn."""

    messages: list[Message] = Field(
        default_factory=list,
        description="Visible conversation so far, oldest first.",
    )
    user_text: str = Field(..., description="New user input that needs a reply.")


class ChatTurnResponse(BaseModel):
    """The bot message to append to the conversation."""

    message: Message


class CompletionRelayRequest(BaseModel):
    """One completion attempt forwarded by a proxy client.

    Only the conversation travels over the wire; the persona instruction and
    sampling parameters are fixed by the service.
    """

    model: str = Field(..., min_length=1, description="Gemini model name.")
    history: list[HistoryItem] = Field(default_factory=list, description="Prior turns, oldest first.")
    user_text: str = Field(..., description="The new user turn.")

    @field_validator("user_text")
    @classmethod
    def _user_text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_text must not be empty")
        return v


class CompletionRelayResponse(BaseModel):
    text: str


class HealthResponse(BaseModel):
    status: str
    model: str
    fallback_model: str
    configured: bool
