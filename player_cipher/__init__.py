"""Player Cipher: resolve signed media format URLs from obfuscated player scripts."""

from .core.errors import EvaluationError, ExtractionError
from .models.format import FormatDescriptor
from .service import PlayerCipherService, get_fragments, get_service, resolve_batch, set_debug

__all__ = [
    "EvaluationError",
    "ExtractionError",
    "FormatDescriptor",
    "PlayerCipherService",
    "get_fragments",
    "get_service",
    "resolve_batch",
    "set_debug",
]
