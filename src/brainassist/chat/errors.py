"""Error taxonomy for failed sends.

Hides how raw provider exceptions map to user-facing explanations and to
the retry affordance. Classification is a case-insensitive substring match
over the exception's message, status and code, checked in a fixed order.
"""

import asyncio
from enum import Enum

from pydantic import BaseModel, ConfigDict

UNKNOWN_PREVIEW_LENGTH = 150


class ErrorKind(str, Enum):
    """Classified failure categories, in match priority order."""

    CONFIGURATION = "configuration"
    MODEL_UNAVAILABLE = "model_unavailable"
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    SERVER_OVERLOAD = "server_overload"
    INVALID_REQUEST = "invalid_request"
    SAFETY_BLOCKED = "safety_blocked"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class ErrorInfo(BaseModel):
    """User-facing classification of a failure."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    text: str
    retryable: bool

    @property
    def suppressed(self) -> bool:
        """Cancelled sends surface no error message."""
        return self.kind is ErrorKind.CANCELLED


class ChatError(Exception):
    """Base class for chat errors."""

    def is_retryable(self) -> bool:
        """Override in subclasses to control retry behavior."""
        return False


class ConfigurationError(ChatError):
    """No usable API credential (non-retryable)."""

    def __init__(self, message: str = "API_KEY environment variable is missing"):
        super().__init__(f"Configuration error: {message}")


_RULES: list[tuple[ErrorKind, tuple[str, ...], str, bool]] = [
    (
        ErrorKind.CONFIGURATION,
        ("api_key", "apikey", "api key", "403", "configuration error"),
        "Clé API manquante ou invalide. Veuillez vérifier votre configuration système.",
        False,
    ),
    (
        ErrorKind.MODEL_UNAVAILABLE,
        ("404", "not found"),
        "Le modèle d'IA demandé est introuvable. Cela peut arriver si le modèle est en preview ou déprécié.",
        False,
    ),
    (
        ErrorKind.NETWORK,
        (
            "fetch failed",
            "networkerror",
            "failed to fetch",
            "network request failed",
            "connecterror",
            "connection error",
            "connection refused",
            "connection reset",
            "timed out",
            "readtimeout",
            "connecttimeout",
        ),
        "Problème de connexion internet détecté. Veuillez vérifier votre réseau.",
        True,
    ),
    (
        ErrorKind.RATE_LIMITED,
        ("429", "quota", "exhausted", "too many requests"),
        "Le serveur est très sollicité (Quota dépassé). Veuillez patienter quelques instants avant de réessayer.",
        True,
    ),
    (
        ErrorKind.SERVER_OVERLOAD,
        ("500", "503", "internal server error", "service unavailable", "overloaded"),
        "Les serveurs de l'IA sont temporairement surchargés. Veuillez réessayer dans une minute.",
        True,
    ),
    (
        ErrorKind.INVALID_REQUEST,
        ("400", "invalid argument", "bad request"),
        "La requête est invalide (fichier trop lourd, format non supporté ou prompt vide).",
        False,
    ),
    (
        ErrorKind.SAFETY_BLOCKED,
        ("safety", "blocked", "harmful", "finish reason"),
        "La réponse a été interrompue ou bloquée par les filtres de sécurité. "
        "Essayez de reformuler votre demande de manière plus académique.",
        False,
    ),
    (
        ErrorKind.CANCELLED,
        ("abort",),
        "Génération interrompue.",
        True,
    ),
]

_BY_KIND = {kind: (text, retryable) for kind, _, text, retryable in _RULES}


def _info(kind: ErrorKind) -> ErrorInfo:
    text, retryable = _BY_KIND[kind]
    return ErrorInfo(kind=kind, text=text, retryable=retryable)


def _haystack(exc: BaseException) -> str:
    """Message plus any status/code attributes, lowercased."""
    pieces = [type(exc).__name__, str(exc)]
    for attr in ("status", "code", "status_text"):
        value = getattr(exc, attr, None)
        if value is not None:
            pieces.append(str(value))
    return " ".join(pieces).lower()


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map an exception to its user-facing classification.

    Args:
        exc: The exception raised while sending or streaming

    Returns:
        ErrorInfo with kind, localized explanation and retry flag
    """
    if isinstance(exc, ConfigurationError):
        return _info(ErrorKind.CONFIGURATION)
    if isinstance(exc, asyncio.CancelledError):
        return _info(ErrorKind.CANCELLED)
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return _info(ErrorKind.NETWORK)

    haystack = _haystack(exc)
    for kind, needles, text, retryable in _RULES:
        if any(needle in haystack for needle in needles):
            return ErrorInfo(kind=kind, text=text, retryable=retryable)

    message = str(exc) or type(exc).__name__
    return ErrorInfo(
        kind=ErrorKind.UNKNOWN,
        text=f"Une erreur inattendue est survenue : {message[:UNKNOWN_PREVIEW_LENGTH]}...",
        retryable=True,
    )
