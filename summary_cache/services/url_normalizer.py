"""
URL canonicalization for cache keys.

Best effort: two addresses for the same article usually normalize to the
same string, and content fingerprinting absorbs whatever divergence is left.
"""

import logging
import re
from urllib.parse import unquote_plus, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

TRACKING_PARAMS = frozenset([
    'utm_source',
    'utm_medium',
    'utm_campaign',
    'utm_term',
    'utm_content',
    'fbclid',
    'gclid',
    'ref',
    'source',
    'medium',
    'campaign',
    '_ga',
    '_gl',
    'mc_cid',
    'mc_eid',
    'igshid',
    'twclid',
])

DEFAULT_PORTS = {'http': 80, 'https': 443}

_MOBILE_HOST_PREFIX = re.compile(r'^m\.')
_MOBILE_HOST_INFIX = re.compile(r'\.m\.')
_MOBILE_PATH_SEGMENT = re.compile(r'/(?:mobile|m)/')


def _is_tracking_param(name: str) -> bool:
    return name in TRACKING_PARAMS or name.startswith('utm_')


def _strip_tracking_params(query: str) -> str:
    # kept pairs stay byte-for-byte as written
    kept = []
    for pair in query.split('&'):
        if not pair:
            continue
        name = unquote_plus(pair.split('=', 1)[0])
        if not _is_tracking_param(name):
            kept.append(pair)
    return '&'.join(kept)


def _desktop_host(host: str) -> str:
    host = _MOBILE_HOST_PREFIX.sub('', host)
    return _MOBILE_HOST_INFIX.sub('.', host)


def _desktop_path(path: str) -> str:
    # repeat until stable so '/m/mobile/x' collapses fully
    previous = None
    while previous != path:
        previous = path
        path = _MOBILE_PATH_SEGMENT.sub('/', path)
    return path


def normalize_url(raw_url: str) -> str:
    """
    Canonicalize a URL into a stable cache key.

    Lowercases the host, removes tracking query parameters, drops the
    fragment and a single trailing slash on non-root paths, and maps common
    mobile host/path conventions to their desktop form.

    Args:
        raw_url: URL as supplied by the client

    Returns:
        Canonical URL, or raw_url unchanged if it cannot be parsed
    """
    try:
        parts = urlsplit(raw_url.strip())
        host = parts.hostname
        port = parts.port
    except (AttributeError, ValueError) as e:
        logger.warning(f"URL normalization error for {raw_url!r}: {e}")
        return raw_url

    if not parts.scheme or not host:
        logger.warning(f"URL normalization skipped for {raw_url!r}: missing scheme or host")
        return raw_url

    scheme = parts.scheme.lower()
    host = _desktop_host(host.lower())
    if ':' in host:
        host = f'[{host}]'

    netloc = host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f'{host}:{port}'
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f'{userinfo}:{parts.password}'
        netloc = f'{userinfo}@{netloc}'

    path = _desktop_path(parts.path or '/')
    if len(path) > 1 and path.endswith('/'):
        path = path[:-1]

    query = _strip_tracking_params(parts.query)

    return urlunsplit((scheme, netloc, path, query, ''))
