"""
Stored entity models: finished summaries and job correlation records.
"""
import json
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CacheEntry:
    """
    Finished, reusable summary for one fingerprint.

    Attributes:
        summaryText: Generated summary
        displayTitle: Headline shown alongside the summary
        providerTag: Model identifier that produced the summary
        completedAt: Unix timestamp in milliseconds when the summary was stored
    """
    summaryText: str
    displayTitle: str
    providerTag: str
    completedAt: int = 0

    def __post_init__(self):
        """Stamp completion time when not supplied."""
        if self.completedAt == 0:
            object.__setattr__(self, 'completedAt', int(time.time() * 1000))

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> 'CacheEntry':
        """
        Create CacheEntry from its stored JSON form.

        Raises:
            ValueError: If the stored value is not a cache entry
        """
        data = _load_object(raw)
        return cls(
            summaryText=str(data.get('summaryText', '')),
            displayTitle=str(data.get('displayTitle', '')),
            providerTag=str(data.get('providerTag', '')),
            completedAt=int(data.get('completedAt', 0)),
        )


@dataclass(frozen=True)
class CorrelationEntry:
    """
    Bridge from a provider job id back to the request that started it.

    Attributes:
        fingerprint: Content fingerprint being generated
        displayTitle: Headline to store with the finished summary
        normalizedUrl: Canonical URL to index once the summary is stored
        lockToken: Owner token of the dedup lock taken for this job
    """
    fingerprint: str
    displayTitle: str = ''
    normalizedUrl: Optional[str] = None
    lockToken: Optional[str] = None

    def __post_init__(self):
        """Validate field constraints."""
        if not self.fingerprint:
            raise ValueError("fingerprint cannot be empty")

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> 'CorrelationEntry':
        """
        Create CorrelationEntry from its stored JSON form.

        Raises:
            ValueError: If the stored value is not a correlation entry
        """
        data = _load_object(raw)
        return cls(
            fingerprint=str(data.get('fingerprint', '')),
            displayTitle=str(data.get('displayTitle') or ''),
            normalizedUrl=data.get('normalizedUrl') or None,
            lockToken=data.get('lockToken') or None,
        )


def _load_object(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"Stored value is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ValueError("Stored value is not a JSON object")
    return data
