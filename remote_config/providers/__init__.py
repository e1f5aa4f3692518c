"""
Providers - pluggable strategies the client calls through narrow ports

- fetch.py - HTTP transport (httpx)
- cache.py - In-memory and file caches
- equality.py - Change detection
- transform.py - Raw payload to application configuration
- validation.py - Advisory validators
- log.py - Fallback logging for unset error callbacks
"""

from .base import (
    FetchProvider,
    CacheProvider,
    EqualityProvider,
    TransformProvider,
    ValidationProvider,
    LoggingProvider,
)
from .cache import MemoryCacheProvider, FileCacheProvider
from .equality import deep_equal, fingerprint_equal, compute_fingerprint
from .fetch import HttpFetchProvider
from .log import noop_log, logger_provider
from .transform import identity_transform, model_transform
from .validation import noop_validator, RequiredKeysValidator, ModelValidator

__all__ = [
    # Ports
    "FetchProvider",
    "CacheProvider",
    "EqualityProvider",
    "TransformProvider",
    "ValidationProvider",
    "LoggingProvider",
    # Defaults and bundled implementations
    "MemoryCacheProvider",
    "FileCacheProvider",
    "deep_equal",
    "fingerprint_equal",
    "compute_fingerprint",
    "HttpFetchProvider",
    "noop_log",
    "logger_provider",
    "identity_transform",
    "model_transform",
    "noop_validator",
    "RequiredKeysValidator",
    "ModelValidator",
]
