"""
Ollama LLM client used to draft admin replies.

Non-streaming generation only; the suggestion service needs a single
complete reply per request.
"""

import logging
import requests
from typing import Optional
from dataclasses import dataclass

from feedback_portal.config import OLLAMA_HOST, OLLAMA_MODEL, SUGGESTION_TIMEOUT
from feedback_portal.exceptions import SuggestionServiceError


logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from the LLM."""
    content: str
    model: str


class OllamaLLM:
    """
    Client for an Ollama text-generation server.

    Ollama must be running locally (or accessible via network).
    Install: https://ollama.ai
    """

    def __init__(
        self,
        host: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = SUGGESTION_TIMEOUT,
    ):
        """
        Initialize the Ollama client.

        Args:
            host: Ollama server URL (default: OLLAMA_HOST)
            model: Model name (default: OLLAMA_MODEL)
            timeout: Request timeout in seconds
        """
        self.host = (host if host is not None else OLLAMA_HOST).rstrip("/")
        self.model = model if model is not None else OLLAMA_MODEL
        self.timeout = timeout

        logger.debug(f"Ollama LLM initialized host={self.host} model={self.model}")

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.model)

    def _api_url(self, endpoint: str) -> str:
        """Build API URL."""
        return f"{self.host}/api/{endpoint}"

    def is_available(self) -> bool:
        """Check if Ollama server is available."""
        if not self.is_configured:
            return False
        try:
            response = requests.get(
                self._api_url("tags"),
                timeout=5,
            )
            return response.status_code == 200
        except requests.RequestException:
            return False

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt for context
            temperature: Sampling temperature (0-1)
            top_p: Nucleus sampling cutoff

        Returns:
            LLMResponse with generated content

        Raises:
            SuggestionServiceError: on missing configuration, transport
                failure or a malformed response body
        """
        if not self.is_configured:
            raise SuggestionServiceError("Ollama host or model is not configured")

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
            },
        }

        if system_prompt:
            payload["system"] = system_prompt

        if top_p is not None:
            payload["options"]["top_p"] = top_p

        try:
            response = requests.post(
                self._api_url("generate"),
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise SuggestionServiceError(f"Ollama request failed: {e}") from e
        except ValueError as e:
            raise SuggestionServiceError(f"Ollama returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SuggestionServiceError("Ollama returned an unexpected payload")

        return LLMResponse(
            content=data.get("response") or "",
            model=data.get("model", self.model),
        )
