"""
Summary services: normalization, fingerprinting, extraction, provider
submission, request orchestration and callback completion.
"""
from .url_normalizer import normalize_url
from .fingerprint import fingerprint
from .content_extractor import ContentExtractor, ExtractedContent, HtmlContentExtractor
from .inference_provider import InferenceProvider, ProviderJob, ReplicateClient, create_provider
from .summary_orchestrator import SummaryOrchestrator
from .completion_handler import CompletionHandler

__all__ = [
    'normalize_url',
    'fingerprint',
    'ContentExtractor',
    'ExtractedContent',
    'HtmlContentExtractor',
    'InferenceProvider',
    'ProviderJob',
    'ReplicateClient',
    'create_provider',
    'SummaryOrchestrator',
    'CompletionHandler',
]
