"""
Content fingerprints used as cache and lock identity.
"""

import hashlib
import json

from ..config.settings import FINGERPRINT_TEXT_PREFIX_CHARS


def fingerprint(canonical_url: str, title: str = '', text_prefix: str = '') -> str:
    """
    Derive the content identity of an article.

    The identity covers the canonical URL, the trimmed title and the first
    300 characters of the trimmed text, serialized as compact JSON with a
    fixed key order and hashed with SHA-256. Text beyond the prefix is
    ignored so mirrors differing only in trailing content share one entry.

    Args:
        canonical_url: Normalized article URL
        title: Article headline
        text_prefix: Article text (truncated here)

    Returns:
        64-character lowercase hex digest
    """
    payload = json.dumps(
        {
            'url': canonical_url,
            'headline': (title or '').strip(),
            'snippet': (text_prefix or '').strip()[:FINGERPRINT_TEXT_PREFIX_CHARS],
        },
        separators=(',', ':'),
        ensure_ascii=False,
    )
    # lone surrogates survive json.loads; keep them hashable
    return hashlib.sha256(payload.encode('utf-8', 'surrogatepass')).hexdigest()
