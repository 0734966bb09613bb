"""Typed errors raised by the scoring core.

The core never recovers from bad input: it either raises one of these or
returns an explicit ``None`` ("insufficient signal") that callers must branch on.
"""


class ScoringError(ValueError):
    """Base class for every error raised by the scoring core."""


class ConfigurationError(ScoringError):
    """Registry, catalog or configuration input that makes a score undefined.

    Examples: an ImpactScore with no need categories, a weight profile whose
    weights for the present categories total zero, an archetype file whose
    weights do not sum to 1.
    """


class RangeError(ScoringError):
    """A score outside [0, 10] or a rating outside {-2, -1, 0, 1, 2}."""
