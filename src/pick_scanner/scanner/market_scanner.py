"""Scanner that scores the asset universe and selects the top picks."""

import asyncio
import logging
from typing import Dict, List, Optional

from ..core.enums import Timeframe
from ..core.errors import InsufficientDataError
from ..core.models import AssetContext, ExternalSignals, Selection, UniverseAsset
from ..data.connector import MarketDataProvider, candles_to_frame
from ..signal.engine import ScoringEngine, create_default_scoring_engine
from .models import ScanReport
from .ranker import TOP_K, rank

logger = logging.getLogger(__name__)

# Naming conventions tried, in order, when mapping a base asset to a venue pair
PAIR_TEMPLATES = ("{base}/USDT", "{base}/USD", "X{base}/ZUSD", "{base}/XBT")


class PickScanner:
    """
    Scores every tradable asset of the universe once, one asset at a time,
    and ranks the results into a top-K selection.
    """

    def __init__(
        self,
        market_data: MarketDataProvider,
        engine: Optional[ScoringEngine] = None,
        config: Optional[Dict] = None,
    ):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults
        self.market_data = market_data
        self.engine = engine or create_default_scoring_engine()
        self._last_report: Optional[ScanReport] = None

    @staticmethod
    def _default_config() -> Dict:
        return {
            "top_k": TOP_K,
            # pause before each asset's fetches (venue rate limit)
            "request_delay_seconds": 0.2,
            # used only when the universe provider returned nothing
            "fallback_quote": "USDT",
            "fallback_limit": 100,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run_scan(self, universe: List[UniverseAsset], signals: ExternalSignals) -> Selection:
        """Score the universe and return the ranked top-K selection."""
        report = ScanReport()
        self._last_report = report

        try:
            tickers = await self.market_data.list_tickers()
        except Exception as e:
            logger.error(f"Ticker listing failed, nothing to scan: {e}")
            report.selection = Selection()
            return report.selection

        symbols = self._resolve_symbols(universe, signals, tickers, report)
        report.scanned = len(symbols)
        logger.info(f"Starting scan of {len(symbols)} assets")

        delay = self.config["request_delay_seconds"]
        for index, symbol in enumerate(symbols, start=1):
            if delay > 0:
                await asyncio.sleep(delay)

            try:
                context = await self._build_context(symbol, tickers[symbol])
                candidate = self.engine.score_asset(context, signals)
            except InsufficientDataError as e:
                report.skipped[symbol] = f"insufficient data: {e}"
                logger.warning(f"Skipping {symbol}: {e}")
                continue
            except Exception as e:
                report.skipped[symbol] = f"data error: {e}"
                logger.warning(f"Skipping {symbol}: {e}")
                continue

            report.candidates.append(candidate)
            logger.info(
                f"Scanning: [{index}/{len(symbols)}] | Symbol: {symbol} | Score: {candidate.score} | "
                f"Price: {candidate.baseline_price:.4f} | "
                f"Triggers: [{', '.join(t.label for t in candidate.triggers)}]"
            )

        report.selection = rank(report.candidates, self.config["top_k"])
        logger.info(f"Scan complete: {report.summary()}")
        return report.selection

    def get_last_report(self) -> Optional[ScanReport]:
        """Report of the most recent scan."""
        return self._last_report

    # ------------------------------------------------------------------
    # Universe -> venue pairs
    # ------------------------------------------------------------------

    def _resolve_symbols(
        self,
        universe: List[UniverseAsset],
        signals: ExternalSignals,
        tickers: Dict[str, float],
        report: ScanReport,
    ) -> List[str]:
        if not universe:
            quote = "/" + self.config["fallback_quote"]
            fallback = [
                s for s in tickers
                if s.endswith(quote) and not signals.is_stablecoin(s.split("/")[0])
            ]
            fallback = fallback[:self.config["fallback_limit"]]
            logger.warning(f"Empty universe, falling back to {len(fallback)} venue {quote} pairs")
            return fallback

        symbols: List[str] = []
        for asset in universe:
            if asset.is_stable or signals.is_stablecoin(asset.symbol):
                continue
            pair = self._discover_pair(asset.symbol, tickers)
            if pair is None:
                report.skipped[asset.symbol] = "not listed on venue"
                continue
            if pair not in symbols:
                symbols.append(pair)
        return symbols

    @staticmethod
    def _discover_pair(base: str, tickers: Dict[str, float]) -> Optional[str]:
        for template in PAIR_TEMPLATES:
            pair = template.format(base=base.upper())
            if pair in tickers:
                return pair
        return None

    # ------------------------------------------------------------------
    # Per-asset data
    # ------------------------------------------------------------------

    async def _build_context(self, symbol: str, price: float) -> AssetContext:
        hourly = await self.market_data.fetch_candles(symbol, Timeframe.HOURLY, self.engine.hourly_bars)
        if len(hourly) < self.engine.hourly_bars:
            raise InsufficientDataError(f"{symbol} hourly bars", self.engine.hourly_bars, len(hourly))
        daily = await self.market_data.fetch_candles(symbol, Timeframe.DAILY, self.engine.daily_bars)
        funding_rate = await self._fetch_funding_rate(symbol)

        return AssetContext(
            symbol=symbol,
            hourly=candles_to_frame(hourly),
            daily=candles_to_frame(daily),
            current_price=price,
            funding_rate=funding_rate,
        )

    async def _fetch_funding_rate(self, symbol: str) -> Optional[float]:
        try:
            return await self.market_data.fetch_funding_rate(symbol)
        except Exception as e:
            logger.debug(f"Funding rate unavailable for {symbol}: {e}")
            return None
