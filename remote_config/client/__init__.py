"""
Config Client - remote configuration with fallback, caching and polling

Responsibilities:
- Try endpoints in priority order (resolver.py)
- Validate, transform, compare and deliver configuration (pipeline.py)
- Re-fetch on an interval with pause/resume (polling.py)
- Wire everything and handle override mode (service.py)
"""

from .pipeline import ConfigurationPipeline
from .polling import PollingController, PollingState
from .resolver import EndpointResolver, ResolveResult
from .service import ConfigClient

__all__ = [
    "ConfigClient",
    "ConfigurationPipeline",
    "EndpointResolver",
    "PollingController",
    "PollingState",
    "ResolveResult",
]
