import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from urllib.parse import urlparse

import requests

from noteally.ai.client import GenerativeClient, GeminiClient, DEFAULT_MODEL
from noteally.ai.errors import DownloadFailed, InvalidInput
from noteally.ai.pdf import extract_text, MIN_TEXT_CHARS
from noteally.ai.prompts import build_prompts, DEFAULT_TEXT_BUDGET
from noteally.common.logging import current_request_id

log = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]


@dataclass(frozen=True)
class SummarizerSettings:
    """Configuration explicite du pipeline, construite une fois au démarrage."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    text_budget: int = DEFAULT_TEXT_BUDGET
    min_text_chars: int = MIN_TEXT_CHARS
    download_timeout: float = 30.0
    max_download_bytes: int = 50 * 1024 * 1024
    # vide: tout hôte http(s) accepté
    allowed_hosts: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config) -> "SummarizerSettings":
        return cls(
            api_key=config.get("GEMINI_API_KEY", ""),
            model=config.get("GEMINI_MODEL", DEFAULT_MODEL),
            text_budget=int(config.get("AI_TEXT_BUDGET", DEFAULT_TEXT_BUDGET)),
            min_text_chars=int(config.get("AI_MIN_TEXT_CHARS", MIN_TEXT_CHARS)),
            download_timeout=float(config.get("AI_DOWNLOAD_TIMEOUT", 30.0)),
            max_download_bytes=int(config.get("AI_MAX_DOWNLOAD_BYTES", 50 * 1024 * 1024)),
            allowed_hosts=_allowed_hosts(config),
        )


def _allowed_hosts(config) -> Tuple[str, ...]:
    """AI_FETCH_ALLOWED_HOSTS (CSV) + les hôtes du stockage des notes, si la liste est activée."""
    raw = config.get("AI_FETCH_ALLOWED_HOSTS") or ""
    hosts = [h.strip().lower() for h in raw.split(",") if h.strip()]
    if not hosts:
        return ()
    public = urlparse(config.get("STORAGE_PUBLIC_BASE_URL") or "").hostname
    if public:
        hosts.append(public)
    bucket = config.get("AWS_S3_BUCKET")
    if bucket:
        hosts.append(f"{bucket}.s3.{config.get('AWS_REGION')}.amazonaws.com".lower())
    return tuple(dict.fromkeys(hosts))


@dataclass(frozen=True)
class SummaryResult:
    summary: str
    points: str

    def to_dict(self) -> dict:
        return {"summary": self.summary, "points": self.points}


def http_fetcher(timeout: float, max_bytes: int) -> Fetcher:
    """Téléchargement HTTP(S) en un seul essai, borné en taille."""
    def fetch(url: str) -> bytes:
        try:
            with requests.get(url, timeout=timeout, stream=True) as resp:
                if not resp.ok:
                    raise DownloadFailed(details={"status": resp.status_code})
                chunks, size = [], 0
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    size += len(chunk)
                    if size > max_bytes:
                        raise DownloadFailed("PDF is too large.", details={"max_bytes": max_bytes})
                    chunks.append(chunk)
                return b"".join(chunks)
        except requests.RequestException as e:
            raise DownloadFailed(details={"reason": str(e)}) from e
    return fetch


class Summarizer:
    """Orchestre téléchargement -> extraction -> prompts -> 2 appels au modèle.

    Tout ou rien: si un des deux appels échoue, aucun résultat partiel n'est renvoyé.
    """

    def __init__(self, settings: SummarizerSettings,
                 client: Optional[GenerativeClient] = None,
                 fetcher: Optional[Fetcher] = None):
        self.settings = settings
        self.client = client or GeminiClient(settings.api_key, settings.model)
        self.fetcher = fetcher or http_fetcher(settings.download_timeout, settings.max_download_bytes)

    def summarize_url(self, url: str) -> SummaryResult:
        if not url or not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise InvalidInput("No PDF URL provided.", details={"field": "pdfUrl"})
        host = (urlparse(url).hostname or "").lower()
        if self.settings.allowed_hosts and host not in self.settings.allowed_hosts:
            raise InvalidInput("PDF URL host is not allowed.", details={"field": "pdfUrl", "host": host})

        started = time.time()
        data = self.fetcher(url)
        log.info("pdf_downloaded", extra={
            "request_id": current_request_id(),
            "bytes": len(data),
            "latency_ms": int((time.time() - started) * 1000),
        })
        return self.summarize_bytes(data)

    def summarize_bytes(self, data: bytes) -> SummaryResult:
        rid = current_request_id()
        text = extract_text(data, min_chars=self.settings.min_text_chars)
        summary_prompt, points_prompt = build_prompts(text, self.settings.text_budget)
        log.info("summarize_start", extra={
            "request_id": rid,
            "text_chars": len(text),
            "truncated": len(text) > self.settings.text_budget,
        })

        # séquentiel, volontairement
        summary = self.client.generate(summary_prompt)
        points = self.client.generate(points_prompt)

        log.info("summarize_done", extra={"request_id": rid})
        return SummaryResult(summary=summary, points=points)
