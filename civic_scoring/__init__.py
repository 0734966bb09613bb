"""Needs-based policy scoring: impact scores, weight profiles, preference profiles and consensus."""

from civic_scoring.config import DEFAULT_CONFIG, EngineConfig
from civic_scoring.errors import ConfigurationError, RangeError, ScoringError

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "ConfigurationError",
    "RangeError",
    "ScoringError",
    "__version__",
]
