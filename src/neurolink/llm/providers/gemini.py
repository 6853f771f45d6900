"""Google Gemini completion backend.

Uses the official Google GenAI SDK for async completions.
Reference: https://github.com/googleapis/python-genai

Note: Gemini signals capacity problems with HTTP 503 ("The model is
overloaded"). This backend only translates that into BackendHTTPError;
retrying is left to the resilience policy.
"""

import logging
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..base import CompletionBackend
from ..errors import BackendHTTPError, ConfigurationError
from ..models import CompletionRequest

logger = logging.getLogger(__name__)

# Google API keys issued for the Generative Language API share this prefix
_API_KEY_PREFIX = "AIza"


class GeminiBackend(CompletionBackend):
    """Direct transport to the Gemini API.

    Hidden design decisions:
    - Google GenAI client initialization and API version
    - Conversion of history items into Gemini ``Content`` objects
    - Extraction of text from the first candidate
    """

    def __init__(
        self,
        api_key: str | None,
        api_version: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize Gemini backend.

        Args:
            api_key: Google AI API key
            api_version: API version to pin (e.g. "v1"); None uses the SDK default
            **client_kwargs: Additional kwargs for Client

        Raises:
            ConfigurationError: If the key is missing or blank
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "GOOGLE_API_KEY is not configured. Set GOOGLE_API_KEY in your "
                "environment (for example, .env) and restart."
            )
        if not api_key.startswith(_API_KEY_PREFIX):
            logger.warning("GOOGLE_API_KEY does not match the expected format")

        http_options = types.HttpOptions(api_version=api_version) if api_version else None
        self._client = genai.Client(api_key=api_key, http_options=http_options, **client_kwargs)

    @property
    def backend_type(self) -> str:
        return "gemini"

    def _convert_request(self, request: CompletionRequest) -> list[types.Content]:
        """Convert history plus the new turn into Gemini contents."""
        contents = [
            types.Content(
                role=item.role,
                parts=[types.Part(text=part) for part in item.parts]
            )
            for item in request.history
        ]
        contents.append(types.Content(role="user", parts=[types.Part(text=request.user_text)]))
        return contents

    def _build_config(self, request: CompletionRequest) -> types.GenerateContentConfig:
        generation = request.generation
        return types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            max_output_tokens=generation.max_output_tokens,
            temperature=generation.temperature,
            top_p=generation.top_p,
            top_k=generation.top_k,
        )

    def _extract_content(self, response) -> str:
        """Extract text from the first candidate, joining all its text parts.

        Args:
            response: Gemini GenerateContentResponse

        Returns:
            Text content or empty string
        """
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        # Fallback to response.text (may raise or return None)
        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def generate(self, request: CompletionRequest, model: str) -> str:
        """Generate a reply using Google Gemini.

        Args:
            request: Completion request
            model: Gemini model name

        Returns:
            Generated text (empty when the model returned no text)

        Raises:
            BackendHTTPError: If the API answered with an error status
        """
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=self._convert_request(request),
                config=self._build_config(request)
            )
        except genai_errors.APIError as e:
            detail = e.message or e.status or str(e)
            raise BackendHTTPError(e.code, detail) from e

        return self._extract_content(response)

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
