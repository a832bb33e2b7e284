"""
Data models for stored entries and orchestrator outcomes.
"""

from .summary import CacheEntry, CorrelationEntry
from .outcomes import (
    SummaryStatus,
    Complete,
    Processing,
    Pending,
    Unknown,
    GenerateOutcome,
    FetchOutcome,
)

__all__ = [
    'CacheEntry',
    'CorrelationEntry',
    'SummaryStatus',
    'Complete',
    'Processing',
    'Pending',
    'Unknown',
    'GenerateOutcome',
    'FetchOutcome',
]
