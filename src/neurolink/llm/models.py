from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HistoryItem(BaseModel):
    """One transcript entry sent to the completion backend."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"] = Field(description="Author of the entry: 'user' or 'model'")
    parts: list[str] = Field(min_length=1, description="Ordered text fragments")

    @property
    def text(self) -> str:
        """All fragments joined with blank lines."""
        return "\n\n".join(self.parts)


class GenerationConfig(BaseModel):
    """Sampling parameters for a completion call."""

    model_config = ConfigDict(frozen=True)

    max_output_tokens: int = Field(default=120, ge=1, description="Maximum tokens to generate")
    temperature: float = Field(default=1.0, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: float = Field(default=1.0, ge=0.0, le=1.0, description="Nucleus sampling bound")
    top_k: int = Field(default=64, ge=1, description="Top-k sampling bound")


class CompletionRequest(BaseModel):
    """Everything a backend needs for one completion attempt."""

    model_config = ConfigDict(frozen=True)

    system_instruction: str = Field(description="Persona and safety instruction")
    history: list[HistoryItem] = Field(default_factory=list, description="Prior turns, oldest first")
    user_text: str = Field(description="The new user turn")
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @field_validator("user_text")
    @classmethod
    def _user_text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_text must not be empty")
        return v
