"""
Outcomes returned by the request orchestrator.

Generate answers with Complete, Processing or Pending (errors are raised);
Fetch answers with Complete, Pending or Unknown.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .summary import CacheEntry


class SummaryStatus(str, Enum):
    """Status values reported to callers."""

    COMPLETE = 'complete'
    PROCESSING = 'processing'
    PENDING = 'pending'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class Complete:
    """A summary is stored for the fingerprint."""

    fingerprint: str
    entry: CacheEntry

    status = SummaryStatus.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'cached': True,
            'summary': self.entry.summaryText,
            'headline': self.entry.displayTitle,
            'completedAt': self.entry.completedAt,
            'fingerprint': self.fingerprint,
        }


@dataclass(frozen=True)
class Processing:
    """This request triggered generation."""

    fingerprint: str
    job_id: str

    status = SummaryStatus.PROCESSING

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'fingerprint': self.fingerprint,
            'jobId': self.job_id,
        }


@dataclass(frozen=True)
class Pending:
    """Another request holds the generation lock."""

    fingerprint: str

    status = SummaryStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'fingerprint': self.fingerprint,
        }


@dataclass(frozen=True)
class Unknown:
    """Nothing cached and nothing in flight."""

    fingerprint: Optional[str] = None

    status = SummaryStatus.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        body = {'status': self.status.value}
        if self.fingerprint:
            body['fingerprint'] = self.fingerprint
        return body


GenerateOutcome = Union[Complete, Processing, Pending]
FetchOutcome = Union[Complete, Pending, Unknown]
