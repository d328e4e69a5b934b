"""Pick scanner application: scheduled scans, reconciliation and CLI."""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from dotenv import load_dotenv

load_dotenv()

from .core.errors import PersistenceError
from .core.models import ExternalSignals, ReconciliationResult, Selection, UniverseAsset
from .data.connector import CCXTMarketData, MarketDataProvider
from .data.external import ExternalSignalCollector
from .monitoring.health import CycleStatus, KeepAliveServer
from .notify.formatters import format_reconciliation, format_selection
from .notify.notifier import LogNotifier, NotificationDispatcher, Notifier, TelegramNotifier
from .scanner.market_scanner import PickScanner
from .tracking.reconciler import OutcomeReconciler
from .tracking.store import SelectionStore

logger = logging.getLogger(__name__)


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('pick_scanner.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )


class PickBot:
    """Runs the daily scan and the end-of-day reconciliation."""

    def __init__(
        self,
        config: Optional[Dict] = None,
        market_data: Optional[MarketDataProvider] = None,
        collector: Optional[ExternalSignalCollector] = None,
        store: Optional[SelectionStore] = None,
        notifiers: Optional[List[Notifier]] = None,
    ):
        """Initialize the bot; collaborators default to the live implementations."""
        defaults = self._default_config()
        if config:
            for key, val in config.items():
                if isinstance(val, dict) and key in defaults and isinstance(defaults[key], dict):
                    defaults[key].update(val)
                else:
                    defaults[key] = val
        self.config = defaults
        self.status = CycleStatus()
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._keep_alive: Optional[KeepAliveServer] = None
        self._stop_event: Optional[asyncio.Event] = None

        self._init_components(market_data, collector, store, notifiers)
        logger.info("Pick bot initialized")

    @staticmethod
    def _default_config() -> Dict:
        """Default configuration."""
        return {
            'exchange': {
                'name': 'kraken',
            },
            'scan': {
                'top_k': 5,
                'request_delay_seconds': 0.2,
                'fallback_quote': 'USDT',
                'fallback_limit': 100,
            },
            'reconcile': {
                'target_pct': 10.0,
            },
            'storage': {
                'path': 'master_picks.json',
            },
            'external': {
                'lunarcrush_key': '',
                'whale_alert_key': '',
                'whale_min_value': 500_000,
                'universe_pages': 1,
                'universe_per_page': 100,
                'timeout': 30,
            },
            'schedule': {
                'timezone': 'UTC',
                'scan_hour': 5,
                'scan_minute': 0,
                'report_hour': 23,
                'report_minute': 59,
                'scan_on_start': True,
            },
            'notify': {
                'telegram_token': '',
                'telegram_chat_ids': [],
            },
            'keep_alive': {
                'enabled': True,
                'port': 8080,
            },
        }

    def _init_components(self, market_data, collector, store, notifiers):
        exchange_config = self.config['exchange'].copy()
        exchange_name = exchange_config.pop('name')
        self.market_data = market_data or CCXTMarketData(exchange_name, exchange_config)

        self.collector = collector or ExternalSignalCollector(self.config['external'])
        self.scanner = PickScanner(self.market_data, config=self.config['scan'])
        self.store = store or SelectionStore(self.config['storage']['path'])
        self.reconciler = OutcomeReconciler(
            self.market_data.get_last_price,
            target_pct=self.config['reconcile']['target_pct'],
        )
        self.notifications = NotificationDispatcher(
            notifiers if notifiers is not None else self._build_notifiers()
        )

    def _build_notifiers(self) -> List[Notifier]:
        notifiers: List[Notifier] = [LogNotifier()]
        notify_cfg = self.config['notify']
        telegram = TelegramNotifier(notify_cfg.get('telegram_token', ''), notify_cfg.get('telegram_chat_ids', []))
        if telegram.enabled():
            notifiers.append(telegram)
        return notifiers

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run_scan(self, universe: List[UniverseAsset], signals: ExternalSignals) -> Selection:
        """
        Score the universe, persist the selection and announce it.

        Raises:
            PersistenceError: the selection could not be stored; the cycle
                is lost because reconciliation would read stale picks.
        """
        selection = await self.scanner.run_scan(universe, signals)
        report = self.scanner.get_last_report()
        summary = report.summary() if report else ""

        try:
            self.store.write(selection)
        except PersistenceError as e:
            logger.critical(f"Scan cycle aborted, selection not stored: {e}")
            self.status.record_scan(summary, error=str(e))
            raise

        self.status.record_scan(summary)
        if report and report.skipped:
            logger.info(f"Skipped {len(report.skipped)} assets: {', '.join(sorted(report.skipped))}")
        await self.notifications.publish(format_selection(selection))
        return selection

    async def run_scan_cycle(self) -> Selection:
        """Gather the external signals and universe, then run a scan."""
        logger.info("Initializing master scan...")
        stablecoins = await self.collector.fetch_stablecoins()
        universe = await self.collector.fetch_universe(stablecoins)
        signals = await self.collector.collect(stablecoins)
        return await self.run_scan(universe, signals)

    async def run_reconciliation(self, selection: Optional[Selection] = None) -> List[ReconciliationResult]:
        """Compare the stored (or given) picks with current prices."""
        if selection is None:
            selection = self.store.read()
        if selection is None:
            logger.info("No stored selection, nothing to reconcile")
            return []

        results = await self.reconciler.reconcile(selection)
        met = sum(1 for r in results if r.target_met)
        failed = sum(1 for r in results if not r.ok)
        self.status.record_reconciliation(f"picks={len(results)} target_met={met} failed={failed}")

        await self.notifications.publish(
            format_reconciliation(results, target_pct=self.config['reconcile']['target_pct'])
        )
        return results

    # ------------------------------------------------------------------
    # Scheduled operation
    # ------------------------------------------------------------------

    async def _scheduled_scan(self):
        try:
            await self.run_scan_cycle()
        except Exception as e:
            logger.error(f"Scheduled scan failed: {e}")

    async def _scheduled_reconciliation(self):
        try:
            await self.run_reconciliation()
        except Exception as e:
            logger.error(f"Scheduled reconciliation failed: {e}")

    def _build_scheduler(self) -> AsyncIOScheduler:
        schedule = self.config['schedule']
        scheduler = AsyncIOScheduler(timezone=ZoneInfo(schedule['timezone']))
        scheduler.add_job(
            self._scheduled_scan,
            trigger="cron",
            hour=schedule['scan_hour'],
            minute=schedule['scan_minute'],
            id="daily_scan",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=600,
        )
        scheduler.add_job(
            self._scheduled_reconciliation,
            trigger="cron",
            hour=schedule['report_hour'],
            minute=schedule['report_minute'],
            id="daily_reconciliation",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=600,
        )
        return scheduler

    async def start(self):
        """Run scheduled scans until a shutdown signal arrives."""
        logger.info("Starting pick bot...")
        self._stop_event = asyncio.Event()

        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._signal_handler, signum)
            except NotImplementedError:
                pass

        keep_alive_cfg = self.config['keep_alive']
        if keep_alive_cfg.get('enabled'):
            self._keep_alive = KeepAliveServer(self.status, port=int(keep_alive_cfg['port']))
            await self._keep_alive.start()

        self._scheduler = self._build_scheduler()
        self._scheduler.start()
        schedule = self.config['schedule']
        logger.info(
            f"Scheduled scan at {schedule['scan_hour']:02d}:{schedule['scan_minute']:02d} and report at "
            f"{schedule['report_hour']:02d}:{schedule['report_minute']:02d} ({schedule['timezone']})"
        )

        if schedule.get('scan_on_start'):
            await self._scheduled_scan()

        await self._stop_event.wait()

    async def stop(self):
        """Stop scheduler, keep-alive server and collaborators."""
        logger.info("Stopping pick bot...")
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        if self._keep_alive is not None:
            await self._keep_alive.stop()
        await self.notifications.close()
        await self.collector.close()
        await self.market_data.close()
        logger.info("Pick bot stopped")

    def _signal_handler(self, signum):
        logger.info(f"Received signal {signum}, shutting down...")
        if self._stop_event is not None:
            self._stop_event.set()

    def get_status(self) -> Dict:
        """Get bot status."""
        return {
            'running': self._scheduler is not None and self._scheduler.running,
            **self.status.to_dict(),
        }


def _config_from_env() -> Dict:
    """Build config dict from environment variables."""
    config: Dict = {}

    exchange_name = os.getenv('EXCHANGE_NAME', '').strip()
    if exchange_name:
        config['exchange'] = {'name': exchange_name}

    # Scan
    top_k = os.getenv('SCAN_TOP_K', '').strip()
    delay = os.getenv('SCAN_REQUEST_DELAY', '').strip()
    if top_k or delay:
        config['scan'] = {}
        if top_k:
            config['scan']['top_k'] = int(top_k)
        if delay:
            config['scan']['request_delay_seconds'] = float(delay)

    target_pct = os.getenv('SCAN_TARGET_PCT', '').strip()
    if target_pct:
        config['reconcile'] = {'target_pct': float(target_pct)}

    storage_file = os.getenv('STORAGE_FILE', '').strip()
    if storage_file:
        config['storage'] = {'path': storage_file}

    # External providers
    external: Dict = {}
    if os.getenv('LUNARCRUSH_KEY', '').strip():
        external['lunarcrush_key'] = os.getenv('LUNARCRUSH_KEY').strip()
    if os.getenv('WHALE_ALERT_KEY', '').strip():
        external['whale_alert_key'] = os.getenv('WHALE_ALERT_KEY').strip()
    pages = os.getenv('UNIVERSE_PAGES', '').strip()
    per_page = os.getenv('UNIVERSE_PER_PAGE', '').strip()
    if pages:
        external['universe_pages'] = int(pages)
    if per_page:
        external['universe_per_page'] = int(per_page)
    if external:
        config['external'] = external

    # Schedule
    schedule: Dict = {}
    for env_name, key in (
        ('SCAN_CRON_HOUR', 'scan_hour'),
        ('SCAN_CRON_MINUTE', 'scan_minute'),
        ('REPORT_CRON_HOUR', 'report_hour'),
        ('REPORT_CRON_MINUTE', 'report_minute'),
    ):
        raw = os.getenv(env_name, '').strip()
        if raw:
            schedule[key] = int(raw)
    tz_name = os.getenv('SCHEDULE_TIMEZONE', '').strip()
    if tz_name:
        schedule['timezone'] = tz_name
    if schedule:
        config['schedule'] = schedule

    # Notifications
    token = os.getenv('TELEGRAM_BOT_TOKEN', '').strip()
    chat_ids = os.getenv('TELEGRAM_CHAT_IDS', '').strip()
    if token or chat_ids:
        config['notify'] = {
            'telegram_token': token,
            'telegram_chat_ids': [c.strip() for c in chat_ids.split(',') if c.strip()],
        }

    # Keep-alive
    port = os.getenv('PORT', '').strip()
    keep_alive_raw = os.getenv('KEEP_ALIVE_ENABLED', '').strip().lower()
    if port or keep_alive_raw:
        config['keep_alive'] = {}
        if port:
            config['keep_alive']['port'] = int(port)
        if keep_alive_raw in ('0', 'false', 'no'):
            config['keep_alive']['enabled'] = False
        elif keep_alive_raw in ('1', 'true', 'yes'):
            config['keep_alive']['enabled'] = True

    return config


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Daily crypto pick scanner")
    parser.add_argument(
        "command", nargs="?", choices=("serve", "scan", "report"), default="serve",
        help="serve: scheduled scans (default); scan: one scan now; report: reconcile stored picks",
    )
    parser.add_argument("--log-level", default=os.getenv('LOG_LEVEL', 'INFO'))
    args = parser.parse_args(argv)

    _setup_logging(args.log_level)

    async def _run(config):
        bot = PickBot(config if config else None)
        try:
            if args.command == "scan":
                await bot.run_scan_cycle()
            elif args.command == "report":
                await bot.run_reconciliation()
            else:
                await bot.start()
        finally:
            await bot.stop()

    try:
        config = _config_from_env()
        asyncio.run(_run(config))
        return 0
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


def cli():
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
