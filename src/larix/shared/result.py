"""Performance metrics attached to parse results."""

from dataclasses import dataclass


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single parse run."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_generated: int = 0
    elements_created: int = 0
    max_depth: int = 0
