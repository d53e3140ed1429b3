import logging
import time
from typing import Optional, Protocol

from google import genai

from noteally.ai.errors import GenerationFailed

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"


class GenerativeClient(Protocol):
    def generate(self, prompt: str) -> str: ...


class GeminiClient:
    """Client Gemini (google-genai), un modèle fixe par instance.

    Un seul essai par appel: toute erreur du fournisseur devient GenerationFailed.
    """

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Optional[genai.Client] = None):
        self.api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GenerationFailed("AI provider is not configured.", details={"missing": "GEMINI_API_KEY"})
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        client = self._get_client()
        started = time.time()
        try:
            response = client.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            log.warning("gemini_call_failed", extra={"model": self.model, "error": str(e)})
            raise GenerationFailed(details={"reason": str(e)}) from e

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise GenerationFailed("AI provider returned an empty response.", details={"model": self.model})

        log.info("gemini_call", extra={
            "model": self.model,
            "prompt_chars": len(prompt),
            "output_chars": len(text),
            "latency_ms": int((time.time() - started) * 1000),
        })
        return text
