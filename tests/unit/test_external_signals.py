"""Unit tests for the external signal collector."""

import pytest
from unittest.mock import AsyncMock

from pick_scanner.data.external import (
    COINGECKO_MARKETS_URL,
    DEFILLAMA_STABLECOINS_URL,
    FALLBACK_STABLECOINS,
    FEAR_GREED_URL,
    LUNARCRUSH_COINS_URL,
    WHALE_ALERT_URL,
    ExternalSignalCollector,
)
from pick_scanner.core.models import ExternalSignals


def _responder(responses):
    """Fake ``_get_json`` answering by URL; exceptions in the map are raised."""
    async def get_json(url, params=None, headers=None):
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response
    return AsyncMock(side_effect=get_json)


@pytest.fixture
def collector():
    return ExternalSignalCollector({"lunarcrush_key": "lc", "whale_alert_key": "wa"})


class TestStablecoins:
    @pytest.mark.asyncio
    async def test_merges_with_fallback(self, collector):
        collector._get_json = _responder({
            DEFILLAMA_STABLECOINS_URL: {"peggedAssets": [{"symbol": "USDe"}, {"symbol": "FRAX"}, {}]},
        })
        stablecoins = await collector.fetch_stablecoins()
        assert {"usde", "frax"} <= stablecoins
        assert FALLBACK_STABLECOINS <= stablecoins

    @pytest.mark.asyncio
    async def test_outage_uses_fallback(self, collector):
        collector._get_json = _responder({DEFILLAMA_STABLECOINS_URL: RuntimeError("HTTP 503")})
        assert await collector.fetch_stablecoins() == set(FALLBACK_STABLECOINS)


class TestUniverse:
    @pytest.mark.asyncio
    async def test_ranked_and_flagged(self, collector):
        collector._get_json = _responder({
            COINGECKO_MARKETS_URL: [{"symbol": "btc"}, {"symbol": "usdt"}, {"symbol": "eth"}, {"symbol": "btc"}],
        })
        universe = await collector.fetch_universe({"usdt"})
        assert [(a.symbol, a.is_stable) for a in universe] == [
            ("BTC", False), ("USDT", True), ("ETH", False),
        ]

    @pytest.mark.asyncio
    async def test_pages_requested(self):
        collector = ExternalSignalCollector({"universe_pages": 2, "universe_per_page": 1})
        collector._get_json = _responder({
            COINGECKO_MARKETS_URL: lambda params: [{"symbol": f"c{params['page']}"}],
        })
        universe = await collector.fetch_universe()
        assert [a.symbol for a in universe] == ["C1", "C2"]

    @pytest.mark.asyncio
    async def test_outage_returns_empty(self, collector):
        collector._get_json = _responder({COINGECKO_MARKETS_URL: RuntimeError("HTTP 429")})
        assert await collector.fetch_universe() == []


class TestFearGreed:
    @pytest.mark.asyncio
    async def test_parses_value(self, collector):
        collector._get_json = _responder({FEAR_GREED_URL: {"data": [{"value": "18"}]}})
        assert await collector.fetch_fear_greed_index() == 18

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"data": []}, {"data": [{"value": "140"}]}, RuntimeError("down")])
    async def test_unusable_is_none(self, collector, payload):
        collector._get_json = _responder({FEAR_GREED_URL: payload})
        assert await collector.fetch_fear_greed_index() is None


class TestKeyedFeeds:
    @pytest.mark.asyncio
    async def test_social_scores(self, collector):
        collector._get_json = _responder({
            LUNARCRUSH_COINS_URL: {"data": [
                {"symbol": "btc", "galaxy_score": 81},
                {"symbol": "eth", "galaxy_score": None},
            ]},
        })
        assert await collector.fetch_social_scores() == {"BTC": 81.0}
        _, kwargs = collector._get_json.call_args
        assert kwargs["headers"] == {"Authorization": "Bearer lc"}

    @pytest.mark.asyncio
    async def test_whale_transfers(self, collector):
        collector._get_json = _responder({
            WHALE_ALERT_URL: {"transactions": [
                {"symbol": "eth", "to": {"owner_type": "exchange"}},
                {"symbol": "btc", "to": {}},
            ]},
        })
        transfers = await collector.fetch_whale_transfers()
        assert [(t.symbol, t.destination_type) for t in transfers] == [("ETH", "exchange"), ("BTC", "unknown")]

    @pytest.mark.asyncio
    async def test_missing_keys_disable_feeds(self):
        collector = ExternalSignalCollector()
        collector._get_json = AsyncMock()
        assert await collector.fetch_social_scores() == {}
        assert await collector.fetch_whale_transfers() == []
        collector._get_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_outages_degrade_to_empty(self, collector):
        collector._get_json = _responder({
            LUNARCRUSH_COINS_URL: RuntimeError("HTTP 401"),
            WHALE_ALERT_URL: RuntimeError("HTTP 500"),
        })
        assert await collector.fetch_social_scores() == {}
        assert await collector.fetch_whale_transfers() == []


class TestCollect:
    @pytest.mark.asyncio
    async def test_snapshot(self, collector):
        collector._get_json = _responder({
            FEAR_GREED_URL: {"data": [{"value": "22"}]},
            LUNARCRUSH_COINS_URL: {"data": [{"symbol": "sol", "galaxy_score": 75}]},
            WHALE_ALERT_URL: {"transactions": []},
        })
        signals = await collector.collect({"USDT", "usdc"})
        assert signals.fear_greed_index == 22
        assert signals.social_score("SOL") == 75.0
        assert signals.whale_transfers == ()
        assert signals.is_stablecoin("USDT")
        assert signals.is_stablecoin("usdc")

    @pytest.mark.asyncio
    async def test_everything_down(self, collector):
        collector._get_json = AsyncMock(side_effect=RuntimeError("offline"))
        signals = await collector.collect()
        assert signals.fear_greed_index is None
        assert signals.social_scores == {}
        assert signals.stablecoins == FALLBACK_STABLECOINS


def test_snapshot_scores_are_read_only():
    signals = ExternalSignals(social_scores={"btc": 81})
    with pytest.raises(TypeError):
        signals.social_scores["BTC"] = 99.0
    assert signals.social_score("BTC") == 81.0
