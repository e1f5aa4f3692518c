from typing import Any, Dict, List

import pytest


ENDPOINTS = [
    "https://endpoint.com/abcd/1.0.0-beta.json",
    "https://endpoint.com/abcd/default.json",
    "https://endpoint.com/default.json",
]

TEST_CONFIG = {"flag": True}


class FakeFetch:
    """In-memory fetch provider.

    - responses maps endpoint -> value, or -> exception instance to raise
    - endpoints not in responses raise ConnectionError
    - every call is recorded in order
    """

    def __init__(self, responses: Dict[str, Any] | None = None) -> None:
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[str] = []

    async def __call__(self, url: str) -> Any:
        self.calls.append(url)
        if url not in self.responses:
            raise ConnectionError(f"Not Found: {url}")
        value = self.responses[url]
        if isinstance(value, BaseException):
            raise value
        return value

    def respond_everywhere(self, value: Any) -> None:
        for endpoint in ENDPOINTS:
            self.responses[endpoint] = value


class RecordingCache:
    """Single slot cache that counts reads and writes."""

    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.reads = 0
        self.writes: List[Any] = []

    async def read(self) -> Any:
        self.reads += 1
        return self.value

    async def write(self, value: Any) -> None:
        self.writes.append(value)
        self.value = value


class Recorder:
    """Synchronous reporting callback that keeps its arguments."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)

    @property
    def count(self) -> int:
        return len(self.calls)


class EchoCallback:
    """Consumer callback returning the event configuration, like most apps do."""

    def __init__(self, result: Any = None, echo: bool = True) -> None:
        self.events: List[Any] = []
        self.result = result
        self.echo = echo

    async def __call__(self, event: Any) -> Any:
        self.events.append(event)
        if self.result is not None:
            return self.result
        return event.configuration if self.echo else None


@pytest.fixture
def fetch() -> FakeFetch:
    return FakeFetch()


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def callback() -> EchoCallback:
    return EchoCallback()


@pytest.fixture
def on_fetch_error() -> Recorder:
    return Recorder()


@pytest.fixture
def on_configuration_undefined() -> Recorder:
    return Recorder()


@pytest.fixture
def on_validation_error() -> Recorder:
    return Recorder()


@pytest.fixture
def options(fetch, cache, callback, on_fetch_error, on_configuration_undefined, on_validation_error):
    """Client options wired to the fakes, no polling."""
    return {
        "endpoints": list(ENDPOINTS),
        "callback": callback,
        "fetch": fetch,
        "cache": cache,
        "on_fetch_error": on_fetch_error,
        "on_configuration_undefined": on_configuration_undefined,
        "on_validation_error": on_validation_error,
    }
