"""Best-effort clients for the scan-wide external signals.

Every fetch degrades to a fallback value instead of raising, so an outage of
one provider only disables the evaluators that depend on it.
"""

from typing import Any, Dict, List, Optional, Set
import logging

import aiohttp

from ..core.enums import DestinationType
from ..core.models import ExternalSignals, UniverseAsset, WhaleTransfer

logger = logging.getLogger(__name__)

FALLBACK_STABLECOINS = frozenset({'usdt', 'usdc', 'dai', 'busd', 'fdusd', 'pyusd', 'usdg', 'rlusd'})

DEFILLAMA_STABLECOINS_URL = 'https://stablecoins.llama.fi/stablecoins'
COINGECKO_MARKETS_URL = 'https://api.coingecko.com/api/v3/coins/markets'
FEAR_GREED_URL = 'https://api.alternative.me/fng/'
LUNARCRUSH_COINS_URL = 'https://lunarcrush.com/api4/public/coins/list/v1'
WHALE_ALERT_URL = 'https://api.whale-alert.io/v1/transactions'


class ExternalSignalCollector:
    """Gathers stablecoins, universe, social, whale and fear/greed data."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.lunarcrush_key = self.config.get('lunarcrush_key') or ''
        self.whale_alert_key = self.config.get('whale_alert_key') or ''
        self.whale_min_value = self.config.get('whale_min_value', 500_000)
        self.universe_pages = self.config.get('universe_pages', 1)
        self.universe_per_page = self.config.get('universe_per_page', 100)
        self.timeout = self.config.get('timeout', 30)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        session = await self._get_session()
        async with session.get(url, params=params, headers=headers) as response:
            if response.status != 200:
                error_text = await response.text()
                raise RuntimeError(f"HTTP {response.status} from {url}: {error_text[:200]}")
            return await response.json(content_type=None)

    # ------------------------------------------------------------------
    # Individual feeds
    # ------------------------------------------------------------------

    async def fetch_stablecoins(self) -> Set[str]:
        """DefiLlama pegged assets merged into the fallback set."""
        stablecoins = set(FALLBACK_STABLECOINS)
        try:
            data = await self._get_json(DEFILLAMA_STABLECOINS_URL)
            stablecoins.update(
                asset['symbol'].lower() for asset in data.get('peggedAssets', []) if asset.get('symbol')
            )
            logger.info(f"Blacklisted {len(stablecoins)} stablecoins")
        except Exception as e:
            logger.warning(f"DefiLlama unavailable, using fallback stablecoin list: {e}")
        return stablecoins

    async def fetch_universe(self, stablecoins: Optional[Set[str]] = None) -> List[UniverseAsset]:
        """Market-cap ranked base assets with stablecoins flagged."""
        stablecoins = {s.lower() for s in (stablecoins or FALLBACK_STABLECOINS)}
        universe: List[UniverseAsset] = []
        seen: Set[str] = set()
        try:
            for page in range(1, self.universe_pages + 1):
                coins = await self._get_json(COINGECKO_MARKETS_URL, params={
                    'vs_currency': 'usd',
                    'order': 'market_cap_desc',
                    'per_page': self.universe_per_page,
                    'page': page,
                    'sparkline': 'false',
                })
                for coin in coins:
                    symbol = (coin.get('symbol') or '').upper()
                    if not symbol or symbol in seen:
                        continue
                    seen.add(symbol)
                    universe.append(UniverseAsset(symbol=symbol, is_stable=symbol.lower() in stablecoins))
            logger.info(f"Universe: {len(universe)} assets ({sum(a.is_stable for a in universe)} stable)")
        except Exception as e:
            logger.warning(f"CoinGecko unavailable, universe left to venue fallback: {e}")
            return []
        return universe

    async def fetch_fear_greed_index(self) -> Optional[int]:
        try:
            data = await self._get_json(FEAR_GREED_URL)
            value = int(data['data'][0]['value'])
            if not 0 <= value <= 100:
                raise ValueError(f"index {value} out of range")
            return value
        except Exception as e:
            logger.warning(f"Fear & greed index unavailable: {e}")
            return None

    async def fetch_social_scores(self) -> Dict[str, float]:
        """LunarCrush galaxy score per symbol."""
        if not self.lunarcrush_key:
            logger.info("No LunarCrush key configured, social scores disabled")
            return {}
        try:
            data = await self._get_json(
                LUNARCRUSH_COINS_URL,
                headers={'Authorization': f'Bearer {self.lunarcrush_key}'},
            )
            return {
                coin['symbol'].upper(): float(coin['galaxy_score'])
                for coin in data.get('data', [])
                if coin.get('symbol') and coin.get('galaxy_score') is not None
            }
        except Exception as e:
            logger.warning(f"LunarCrush unavailable: {e}")
            return {}

    async def fetch_whale_transfers(self) -> List[WhaleTransfer]:
        if not self.whale_alert_key:
            logger.info("No Whale Alert key configured, whale transfers disabled")
            return []
        try:
            data = await self._get_json(WHALE_ALERT_URL, params={
                'min_value': self.whale_min_value,
                'api_key': self.whale_alert_key,
            })
            return [
                WhaleTransfer(
                    symbol=tx['symbol'].upper(),
                    destination_type=(tx.get('to') or {}).get('owner_type') or DestinationType.UNKNOWN.value,
                )
                for tx in data.get('transactions') or []
                if tx.get('symbol')
            ]
        except Exception as e:
            logger.warning(f"Whale Alert unavailable: {e}")
            return []

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    async def collect(self, stablecoins: Optional[Set[str]] = None) -> ExternalSignals:
        """Build the immutable signals snapshot for one scan."""
        if stablecoins is None:
            stablecoins = await self.fetch_stablecoins()
        fear_index = await self.fetch_fear_greed_index()
        social = await self.fetch_social_scores()
        whales = await self.fetch_whale_transfers()

        signals = ExternalSignals(
            stablecoins=frozenset(stablecoins),
            social_scores=social,
            whale_transfers=tuple(whales),
            fear_greed_index=fear_index,
        )
        logger.info(
            f"External signals: fear={fear_index}, social={len(social)}, "
            f"whale_transfers={len(whales)}, stablecoins={len(stablecoins)}"
        )
        return signals
