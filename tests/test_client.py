"""
Tests for ConfigClient: options, cache serving, refresh, polling and override.
"""

import asyncio

import pytest
from pydantic import BaseModel

from conftest import ENDPOINTS, TEST_CONFIG, EchoCallback, FakeFetch, RecordingCache
from remote_config import (
    ClientOptions,
    ConfigClient,
    ConfigurationFailedError,
    ConfigurationStatus,
    OptionsError,
    PollingState,
)
from remote_config.providers.cache import FileCacheProvider, MemoryCacheProvider
from remote_config.providers.fetch import HttpFetchProvider
from remote_config.providers.transform import model_transform


async def wait_for(predicate, timeout=2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.005)
    await asyncio.wait_for(_poll(), timeout)


class TestClientOptions:

    def test_missing_endpoints(self, callback):
        for endpoints in (None, []):
            with pytest.raises(OptionsError, match="Missing endpoints") as exc_info:
                ConfigClient({"endpoints": endpoints, "callback": callback})
            assert exc_info.value.options.callback is callback

    def test_missing_callback(self):
        options = ClientOptions(endpoints=ENDPOINTS)
        with pytest.raises(OptionsError, match="Missing callback method") as exc_info:
            ConfigClient(options)
        assert exc_info.value.options is options
        assert not exc_info.value.recoverable

    def test_unknown_option(self, callback):
        with pytest.raises(OptionsError, match="Unknown option"):
            ConfigClient({"endpoints": ENDPOINTS, "callback": callback, "timeout": 3})

    def test_negative_interval(self, callback):
        with pytest.raises(OptionsError, match="non-negative"):
            ConfigClient({"endpoints": ENDPOINTS, "callback": callback, "interval": -1})

    def test_defaults(self, callback):
        client = ConfigClient({"endpoints": ENDPOINTS, "callback": callback})

        assert isinstance(client.cache, MemoryCacheProvider)
        assert isinstance(client.fetch, HttpFetchProvider)
        assert client.endpoints == tuple(ENDPOINTS)
        assert not client.loaded
        assert not client.polling.enabled


class TestClientWithoutPolling:

    @pytest.mark.asyncio
    async def test_first_endpoint(self, options, fetch, cache, callback):
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.error is None
        assert event.configuration == TEST_CONFIG
        assert event.status == ConfigurationStatus.LOADED
        assert event.endpoint == ENDPOINTS[0]
        assert fetch.calls == ENDPOINTS[:1]
        assert callback.events == [event]
        assert cache.reads == 2
        assert cache.writes == [TEST_CONFIG]

    @pytest.mark.asyncio
    async def test_fallback_to_third_endpoint(self, options, fetch, cache, on_fetch_error):
        fetch.responses[ENDPOINTS[2]] = TEST_CONFIG
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.status == ConfigurationStatus.LOADED
        assert event.endpoint == ENDPOINTS[2]
        assert fetch.calls == ENDPOINTS
        assert on_fetch_error.count == 2
        assert cache.writes == [TEST_CONFIG]

    @pytest.mark.asyncio
    async def test_undefined_configuration(self, options, fetch, on_fetch_error,
                                           on_configuration_undefined):
        fetch.respond_everywhere("")
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.status == ConfigurationStatus.ERROR
        assert on_configuration_undefined.count == 3
        assert on_fetch_error.count == 0

    @pytest.mark.asyncio
    async def test_all_endpoints_fail(self, options, fetch, cache, callback, on_fetch_error):
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.status == ConfigurationStatus.ERROR
        assert event.configuration is None
        assert isinstance(event.error, ConfigurationFailedError)
        assert event.error.endpoints == ENDPOINTS
        assert fetch.calls == ENDPOINTS
        assert on_fetch_error.count == 3
        assert cache.reads == 1
        assert cache.writes == []
        assert callback.events == []

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, options, fetch):
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        first = await client.get_configuration()
        second = await client.get_configuration()

        assert first.status == ConfigurationStatus.LOADED
        assert second.status == ConfigurationStatus.CACHED
        assert second.configuration == TEST_CONFIG
        assert second.endpoint is None
        assert len(fetch.calls) == 1

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cache(self, options, fetch, cache):
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        await client.get_configuration()
        event = await client.refresh()

        assert event.status == ConfigurationStatus.EQUAL
        assert len(fetch.calls) == 2
        assert cache.writes == [TEST_CONFIG, TEST_CONFIG]

    @pytest.mark.asyncio
    async def test_changed_configuration(self, options, fetch):
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)
        await client.refresh()

        fetch.respond_everywhere({"flag": False})
        event = await client.refresh()

        assert event.status == ConfigurationStatus.UPDATED
        assert event.configuration == {"flag": False}

    @pytest.mark.asyncio
    async def test_callback_override_is_cached(self, options, fetch, cache):
        alternate = {"flag": "alternate"}
        options["callback"] = EchoCallback(result=alternate)
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        event = await client.refresh()
        cached = await client.get_configuration()

        assert event.configuration == alternate
        assert cache.writes == [alternate]
        assert cached.configuration == alternate

    @pytest.mark.asyncio
    async def test_validation_error_reported(self, options, fetch, cache, on_validation_error):
        cause = ValueError("invalid")

        async def validator(config):
            raise cause

        options["validator"] = validator
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        event = await client.refresh()

        assert event.status == ConfigurationStatus.LOADED
        assert on_validation_error.calls == [(cause, TEST_CONFIG)]
        assert cache.writes == [TEST_CONFIG]

    @pytest.mark.asyncio
    async def test_callback_error_propagates(self, options, fetch):
        async def callback(event):
            raise RuntimeError("consumer bug")

        options["callback"] = callback
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        with pytest.raises(RuntimeError, match="consumer bug"):
            await client.get_configuration()

    @pytest.mark.asyncio
    async def test_log_is_fallback_for_reporting(self, callback):
        logged = []
        client = ConfigClient({
            "endpoints": ENDPOINTS,
            "callback": callback,
            "fetch": FakeFetch({ENDPOINTS[0]: "", ENDPOINTS[2]: TEST_CONFIG}),
            "cache": RecordingCache(),
            "log": lambda *args: logged.append(args),
        })

        await client.refresh()

        assert len(logged) == 2


class TestClientPolling:

    @pytest.mark.asyncio
    async def test_refresh_schedules_one_timer(self, options, fetch):
        options["interval"] = 5
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        await client.refresh()
        stats = client.polling.get_stats()

        assert stats["interval_s"] == 5
        assert stats["scheduled_count"] == 1
        assert client.polling.state == PollingState.SCHEDULED

        await client.close()

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, options, fetch):
        options["interval"] = 5
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)
        await client.refresh()

        client.pause()
        assert client.paused
        assert not client.polling.is_scheduled
        assert client.polling.get_stats()["scheduled_count"] == 1

        client.resume()
        await asyncio.sleep(0)
        assert client.polling.is_scheduled
        assert client.polling.get_stats()["scheduled_count"] == 2
        assert len(fetch.calls) == 1

        await client.close()

    @pytest.mark.asyncio
    async def test_paused_refresh_does_not_schedule(self, options, fetch):
        options["interval"] = 5
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        client.pause()
        await client.refresh()

        assert client.polling.state == PollingState.PAUSED
        assert client.polling.get_stats()["scheduled_count"] == 0

    @pytest.mark.asyncio
    async def test_timer_triggers_refresh_and_reschedules(self, options, fetch, callback):
        options["interval"] = 0.05
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)

        await client.refresh()
        await wait_for(lambda: client.polling.get_stats()["scheduled_count"] == 2)

        stats = client.polling.get_stats()
        assert stats["fired_count"] == 1
        assert len(fetch.calls) == 2
        assert [e.status for e in callback.events] == [
            ConfigurationStatus.LOADED,
            ConfigurationStatus.EQUAL,
        ]
        assert client.polling.is_scheduled

        await client.close()

    @pytest.mark.asyncio
    async def test_close_during_timer_refresh_stays_closed(self, options, callback):
        class GatedFetch(FakeFetch):
            """Blocks the second (timer driven) call until released"""

            def __init__(self, responses):
                super().__init__(responses)
                self.entered = asyncio.Event()
                self.release = asyncio.Event()

            async def __call__(self, url):
                if len(self.calls) == 1:
                    self.entered.set()
                    await self.release.wait()
                return await super().__call__(url)

        fetch = GatedFetch({ENDPOINTS[0]: TEST_CONFIG})
        options.update(fetch=fetch, interval=0.01)
        client = ConfigClient(options)

        await client.refresh()
        await asyncio.wait_for(fetch.entered.wait(), 2.0)

        await client.close()
        fetch.release.set()
        await wait_for(lambda: len(callback.events) == 2)
        await asyncio.sleep(0.05)

        assert not client.polling.is_scheduled
        assert client.polling.state == PollingState.STOPPED
        assert len(fetch.calls) == 2

    @pytest.mark.asyncio
    async def test_failure_stops_polling(self, options, fetch):
        options["interval"] = 5
        fetch.respond_everywhere(TEST_CONFIG)
        client = ConfigClient(options)
        await client.refresh()

        fetch.responses.clear()
        event = await client.refresh()

        assert event.status == ConfigurationStatus.ERROR
        assert not client.polling.is_scheduled
        assert client.polling.get_stats()["scheduled_count"] == 1

    @pytest.mark.asyncio
    async def test_cache_hit_leaves_timer_alone(self, options, fetch, cache):
        options["interval"] = 5
        cache.value = TEST_CONFIG
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.status == ConfigurationStatus.CACHED
        assert fetch.calls == []
        assert client.polling.get_stats()["scheduled_count"] == 0


class TestClientOverride:

    @pytest.mark.asyncio
    async def test_override_short_circuit(self, options, fetch, cache, callback):
        override = {"flag": "local"}
        options["override"] = override
        options["interval"] = 5
        client = ConfigClient(options)

        first = await client.get_configuration()
        second = await client.refresh()

        for event in (first, second):
            assert event.status == ConfigurationStatus.CACHED
            assert event.configuration == override
        assert len(callback.events) == 2
        assert fetch.calls == []
        assert cache.reads == 0
        assert cache.writes == []
        assert client.polling.get_stats()["scheduled_count"] == 0
        assert client.loaded

    @pytest.mark.asyncio
    async def test_override_callback_result(self, options):
        options["override"] = {"flag": "local"}
        options["callback"] = EchoCallback(result={"flag": "patched"})
        client = ConfigClient(options)

        event = await client.get_configuration()

        assert event.configuration == {"flag": "patched"}

    @pytest.mark.asyncio
    async def test_override_resume_does_not_poll(self, options):
        options["override"] = {"flag": "local"}
        options["interval"] = 5
        client = ConfigClient(options)

        client.pause()
        client.resume()

        assert not client.polling.is_scheduled


class TestClientStart:

    @pytest.mark.asyncio
    async def test_constructor_does_not_fetch(self, options, fetch):
        options["initialize"] = True
        fetch.respond_everywhere(TEST_CONFIG)

        client = ConfigClient(options)
        await asyncio.sleep(0)

        assert fetch.calls == []
        assert client.start() is not None

        await client.close()

    @pytest.mark.asyncio
    async def test_create_initializes(self, options, fetch, callback):
        options["initialize"] = True
        fetch.respond_everywhere(TEST_CONFIG)

        client = ConfigClient.create(options)
        event = await client.start()

        assert event.status == ConfigurationStatus.LOADED
        assert len(callback.events) == 1
        assert client.loaded

        await client.close()

    @pytest.mark.asyncio
    async def test_start_without_initialize(self, options, fetch):
        client = ConfigClient.create(options)

        assert client.start() is None
        assert fetch.calls == []

    @pytest.mark.asyncio
    async def test_context_manager_closes_fetch(self, callback):
        class ClosingFetch(FakeFetch):
            closed = False

            async def aclose(self):
                self.closed = True

        fetch = ClosingFetch({ENDPOINTS[0]: TEST_CONFIG})

        async with ConfigClient({
            "endpoints": ENDPOINTS,
            "callback": callback,
            "fetch": fetch,
            "interval": 5,
        }) as client:
            await client.refresh()
            assert client.polling.is_scheduled

        assert fetch.closed
        assert not client.polling.is_scheduled


class TestClientWithFileCache:

    @pytest.mark.asyncio
    async def test_model_configuration_round_trips_through_disk(self, options, fetch, callback, tmp_path):
        class Settings(BaseModel):
            flag: bool
            retries: int = 3

        fetch.respond_everywhere(TEST_CONFIG)
        options.update(transformer=model_transform(Settings), cache=FileCacheProvider(tmp_path))
        client = ConfigClient(options)

        first = await client.refresh()
        second = await client.refresh()

        assert first.status == ConfigurationStatus.LOADED
        assert second.status == ConfigurationStatus.EQUAL
        assert isinstance(second.configuration, Settings)

        restarted = ConfigClient({**options, "cache": FileCacheProvider(tmp_path)})
        cached = await restarted.get_configuration()

        assert cached.status == ConfigurationStatus.CACHED
        assert cached.configuration == {"flag": True, "retries": 3}
        assert len(fetch.calls) == 2
