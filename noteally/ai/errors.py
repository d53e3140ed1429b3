"""Erreurs du pipeline de résumé IA.

Chaque étape lève sa propre sous-classe d'ApiError; le handler JSON commun
les rend avec leur code et leur statut HTTP.
"""
from noteally.common.errors import ApiError


class InvalidInput(ApiError):
    def __init__(self, message="Missing or invalid input.", details=None):
        super().__init__(message, 400, "invalid_input", details)


class DownloadFailed(ApiError):
    def __init__(self, message="Failed to download PDF.", details=None):
        super().__init__(message, 400, "download_failed", details)


class UnreadablePdf(ApiError):
    def __init__(self, message="This PDF cannot be read.", details=None):
        super().__init__(message, 422, "unreadable_pdf", details)


class InsufficientText(ApiError):
    def __init__(self, message="Could not extract text or PDF is too short.", details=None):
        super().__init__(message, 422, "insufficient_text", details)


class GenerationFailed(ApiError):
    def __init__(self, message="AI generation failed.", details=None):
        super().__init__(message, 502, "generation_failed", details)
