"""Core data models for the pick scanner."""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import DestinationType


class Candle(BaseModel):
    """Single fixed-interval OHLCV bar."""

    timestamp: int = Field(description="Bar open time (epoch milliseconds)")
    open: float = Field(description="Open price")
    high: float = Field(description="High price")
    low: float = Field(description="Low price")
    close: float = Field(description="Close price")
    volume: float = Field(default=0.0, description="Traded base volume")


class AssetContext(BaseModel):
    """Everything the evaluators need to know about one asset for one scan."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    symbol: str = Field(description="Venue pair, e.g. BTC/USDT")
    hourly: pd.DataFrame = Field(description="Hourly OHLCV bars, oldest first")
    daily: pd.DataFrame = Field(description="Daily OHLCV bars, oldest first")
    current_price: float = Field(description="Last traded price")
    funding_rate: Optional[float] = Field(
        default=None, description="Perpetual funding rate, None when unavailable"
    )

    @property
    def base_symbol(self) -> str:
        return self.symbol.split("/")[0].upper()


class WhaleTransfer(BaseModel):
    """Large-value transfer reported by the whale feed."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(description="Transferred asset symbol")
    destination_type: str = Field(
        default=DestinationType.UNKNOWN.value, description="Owner type of the receiving address"
    )


class ExternalSignals(BaseModel):
    """Scan-scoped context shared read-only by every asset."""

    model_config = ConfigDict(frozen=True)

    stablecoins: FrozenSet[str] = Field(default_factory=frozenset, description="Excluded symbols (lower case)")
    social_scores: Dict[str, float] = Field(default_factory=dict, description="Symbol -> galaxy score")
    whale_transfers: Tuple[WhaleTransfer, ...] = Field(default=(), description="Large transfers in the scan window")
    fear_greed_index: Optional[int] = Field(default=None, ge=0, le=100, description="Fear & greed index")

    @field_validator("stablecoins")
    @classmethod
    def _lower_stablecoins(cls, v):
        return frozenset(s.lower() for s in v)

    @field_validator("social_scores")
    @classmethod
    def _upper_social_keys(cls, v):
        return MappingProxyType({k.upper(): float(score) for k, score in v.items()})

    def is_stablecoin(self, symbol: str) -> bool:
        return symbol.lower() in self.stablecoins

    def social_score(self, symbol: str) -> Optional[float]:
        return self.social_scores.get(symbol.upper())

    def transfers_for(self, symbol: str) -> List[WhaleTransfer]:
        wanted = symbol.upper()
        return [t for t in self.whale_transfers if t.symbol.upper() == wanted]


class UniverseAsset(BaseModel):
    """Ranked base asset from the universe provider."""

    symbol: str = Field(description="Base asset symbol (upper case)")
    is_stable: bool = Field(default=False, description="Stable-value asset flag")


class Trigger(BaseModel):
    """A fired signal: its label and the points it contributed."""

    model_config = ConfigDict(frozen=True)

    label: str
    weight: int


class ScoredCandidate(BaseModel):
    """Scored asset with its ordered triggers and frozen baseline price."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(description="Venue pair")
    score: int = Field(description="Sum of triggered weights")
    triggers: List[Trigger] = Field(default_factory=list, description="Triggers in evaluation order")
    baseline_price: float = Field(description="Price observed at scoring time")

    @model_validator(mode="after")
    def _score_matches_triggers(self):
        expected = sum(t.weight for t in self.triggers)
        if self.score != expected:
            raise ValueError(f"score {self.score} does not match trigger weights ({expected})")
        return self

    @property
    def primary_trigger(self) -> Optional[str]:
        return self.triggers[0].label if self.triggers else None

    @property
    def secondary_trigger(self) -> Optional[str]:
        return self.triggers[1].label if len(self.triggers) > 1 else None


class Selection(BaseModel):
    """Top-K picks of one scan, persisted until the next scan replaces them."""

    model_config = ConfigDict(frozen=True)

    picks: List[ScoredCandidate] = Field(default_factory=list, description="Picks in rank order")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Scan time (UTC)"
    )

    @property
    def symbols(self) -> List[str]:
        return [p.symbol for p in self.picks]


class ReconciliationResult(BaseModel):
    """Outcome of one pick, or the reason it could not be measured."""

    symbol: str = Field(description="Venue pair")
    baseline_price: float = Field(description="Price frozen at selection time")
    current_price: Optional[float] = Field(default=None, description="Price at reconciliation time")
    percent_change: Optional[float] = Field(default=None, description="Signed % change vs baseline")
    target_met: bool = Field(default=False, description="Change reached the target threshold")
    error: Optional[str] = Field(default=None, description="Lookup failure, if any")

    @property
    def ok(self) -> bool:
        return self.error is None
