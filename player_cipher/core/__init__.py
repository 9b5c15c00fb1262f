"""Core pipeline: player fetching, function extraction, caching and sandboxed execution."""

from .cache import ExtractionCache
from .diagnostics import PlayerDumpRecorder, get_dump_recorder, is_debug_enabled, set_debug
from .errors import EvaluationError, ExtractionError
from .extractor import ExtractedFunctions, extract, extract_functions
from .sandbox import SandboxEvaluator, build_program

__all__ = [
    "EvaluationError",
    "ExtractedFunctions",
    "ExtractionCache",
    "ExtractionError",
    "PlayerDumpRecorder",
    "SandboxEvaluator",
    "build_program",
    "extract",
    "extract_functions",
    "get_dump_recorder",
    "is_debug_enabled",
    "set_debug",
]
