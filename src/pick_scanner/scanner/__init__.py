"""Universe scanning and top-K selection."""

from .market_scanner import PickScanner
from .models import ScanReport
from .ranker import TOP_K, rank

__all__ = ["PickScanner", "ScanReport", "TOP_K", "rank"]
