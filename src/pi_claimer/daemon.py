"""Main daemon loop - scan, build, submit, report, repeat."""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from datetime import datetime, timezone

from stellar_sdk import Keypair

from pi_claimer.errors import LedgerQueryError, StaleSequenceError
from pi_claimer.interfaces.components import Scheduler
from pi_claimer.interfaces.ledger import LedgerService
from pi_claimer.interfaces.notifier import Notifier
from pi_claimer.keys import derive
from pi_claimer.models.config import ClaimerConfig
from pi_claimer.models.records import (
    ClaimableBalance,
    CycleReport,
    Outcome,
    Rejected,
    SponsoredClaim,
    Success,
    TransientFailure,
)
from pi_claimer.notify import messages
from pi_claimer.notify.telegram import TelegramNotifier
from pi_claimer.notify.throttle import AlertThrottle
from pi_claimer.scheduler import CycleScheduler
from pi_claimer.stellar.builder import SponsoredClaimBuilder
from pi_claimer.stellar.ledger import HorizonLedger
from pi_claimer.stellar.scanner import HorizonBalanceScanner
from pi_claimer.stellar.submitter import HorizonClaimSubmitter

log = logging.getLogger(__name__)


class ClaimDaemon:
    """Sponsored claim-and-send daemon.

    Each cycle scans the claimant's claimable balances and, one balance at a
    time, builds a sponsored claim, submits it once, and reports the outcome.
    Failures never stop the loop: the next cycle rediscovers whatever is
    still outstanding and rebuilds it from scratch.

    The two keypairs are passed in and held for the daemon's lifetime.
    """

    def __init__(
        self,
        cfg: ClaimerConfig,
        claimant: Keypair,
        sponsor: Keypair,
        ledger: LedgerService | None = None,
        notifier: Notifier | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._cfg = cfg
        self._claimant = claimant
        self._sponsor = sponsor
        self._destination = cfg.destination_address
        self._running = False
        self._stop_event: asyncio.Event | None = None
        self.cycles = 0

        # Core components
        self.ledger: LedgerService = ledger or HorizonLedger(cfg.horizon_url)
        self.scanner = HorizonBalanceScanner(self.ledger, cfg.page_size, cfg.skip_locked)
        self.builder = SponsoredClaimBuilder(
            self.ledger, cfg.network_passphrase, cfg.fee_multiplier, cfg.tx_timeout,
        )
        self.submitter = HorizonClaimSubmitter(self.ledger)
        self.scheduler: Scheduler = scheduler or CycleScheduler.from_config(cfg)

        # Notifications
        self.notifier: Notifier = notifier or TelegramNotifier(
            bot_token=cfg.notify.bot_token,
            chat_id=cfg.notify.chat_id,
            api_url=cfg.notify.api_url,
            timeout=cfg.notify.timeout,
        )
        self.throttle = AlertThrottle(cfg.notify.alert_window)

    @classmethod
    def from_config(cls, cfg: ClaimerConfig, **components) -> ClaimDaemon:
        """Derive both keypairs once and build a daemon. Raises InvalidPhrase."""
        claimant = derive(cfg.claimant_phrase, cfg.derivation_path, label="CLAIMANT_PHRASE")
        sponsor = derive(cfg.sponsor_phrase, cfg.derivation_path, label="SPONSOR_PHRASE")
        return cls(cfg, claimant, sponsor, **components)

    @property
    def claimant_address(self) -> str:
        return self._claimant.public_key

    @property
    def sponsor_address(self) -> str:
        return self._sponsor.public_key

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, max_cycles: int | None = None) -> None:
        """Run cycles until stop() is called (or ``max_cycles`` have run)."""
        log.info("Starting pi_claimer daemon")
        log.info("  Claimant:    %s", self.claimant_address)
        log.info("  Sponsor:     %s", self.sponsor_address)
        log.info("  Destination: %s", self._destination)
        log.info("  Horizon:     %s", self._cfg.horizon_url)
        log.info(
            "  Fee bid:     %dx base fee, schedule=%s delay=%.3fs",
            self._cfg.fee_multiplier, self._cfg.schedule.value, self._cfg.cycle_delay,
        )
        if not self.notifier.enabled:
            log.info("  Notifications disabled (no Telegram credentials)")

        self._running = True
        self._stop_event = asyncio.Event()
        await self._notify(messages.daemon_started(
            self.claimant_address, self.sponsor_address, self._destination,
        ))

        try:
            await self._main_loop(max_cycles)
        finally:
            self._running = False
            await self.notifier.close()
            await self.ledger.close()
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop after the current cycle."""
        log.info("Stop requested")
        self._running = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def _main_loop(self, max_cycles: int | None) -> None:
        while self._running:
            try:
                report = await self.run_cycle()
            except asyncio.CancelledError:
                log.info("Main loop cancelled")
                break
            except Exception as exc:
                log.error("Cycle error: %s", exc, exc_info=True)
                await self._notify(messages.transient_failure("Unexpected cycle error", str(exc)))
                report = CycleReport(started_at=_now(), aborted=str(exc))

            self.cycles += 1
            if max_cycles is not None and self.cycles >= max_cycles:
                break

            await self._wait(self.scheduler.next_delay(report))

    async def _wait(self, delay: float) -> None:
        """Sleep ``delay`` seconds, waking early if stop() is called."""
        if delay <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    # ── One cycle ──────────────────────────────────────────

    async def run_cycle(self) -> CycleReport:
        """Scan once and process every discovered balance in order."""
        report = CycleReport(started_at=_now())
        start = time.monotonic()
        try:
            await self._scan_and_claim(report)
        finally:
            report.duration_ms = int((time.monotonic() - start) * 1000)

        if report.found or report.aborted:
            log.info(
                "Cycle done: %d found, %d claimed, %d rejected, %d transient, "
                "%d stale, %d errors%s in %dms",
                report.found, report.claimed, report.rejected, report.transient,
                report.stale, report.errors,
                f" (aborted: {report.aborted})" if report.aborted else "",
                report.duration_ms,
            )
        else:
            log.debug("No claimable balances (%dms)", report.duration_ms)
        return report

    async def _scan_and_claim(self, report: CycleReport) -> None:
        try:
            balances = await self.scanner.scan(self.claimant_address)
        except LedgerQueryError as exc:
            log.warning("Balance scan failed: %s", exc)
            await self._abort(report, "Balance scan failed", exc)
            return

        report.found = len(balances)
        for balance in balances:
            log.info("Found claimable balance %s... (%s Pi)", balance.balance_id[:16], balance.amount)
            claim = await self._build(balance, report)
            if claim is None:
                if report.aborted:
                    return
                continue

            outcome = await self.submitter.submit(claim)
            await self._report(claim, outcome, report)
            if report.aborted:
                return

    async def _build(self, balance: ClaimableBalance, report: CycleReport) -> SponsoredClaim | None:
        """Build a claim, or record why not. Build-time query failures end the cycle."""
        try:
            return await self.builder.build(
                self._claimant, self._sponsor, balance, self._destination,
            )
        except StaleSequenceError as exc:
            report.stale += 1
            log.warning("Skipping %s... this cycle: %s", balance.balance_id[:16], exc)
        except LedgerQueryError as exc:
            log.warning("Building claim for %s... failed: %s", balance.balance_id[:16], exc)
            await self._abort(report, "Building claim failed", exc)
        except Exception as exc:
            report.errors += 1
            log.error("Building claim for %s... failed: %s", balance.balance_id[:16], exc, exc_info=True)
            await self._notify(messages.transient_failure("Building claim failed", str(exc)))
        return None

    async def _report(self, claim: SponsoredClaim, outcome: Outcome, report: CycleReport) -> None:
        report.outcomes.append(outcome)

        if isinstance(outcome, Success):
            report.claimed += 1
            self.builder.confirm(claim.sequence)
            await self._notify(messages.claim_succeeded(outcome, self._cfg.notify.explorer_url))

        elif isinstance(outcome, Rejected):
            report.rejected += 1
            await self._notify(messages.claim_rejected(outcome))

        elif isinstance(outcome, TransientFailure):
            report.transient += 1
            if outcome.rate_limited:
                # remaining balances wait for the next cycle
                report.rate_limited = True
                report.aborted = "rate limited"
                await self._alert_rate_limited("submission")
            else:
                await self._notify(messages.transient_failure("Submission not settled", outcome.cause))

    async def _abort(self, report: CycleReport, where: str, exc: LedgerQueryError) -> None:
        report.aborted = str(exc)
        if exc.rate_limited:
            report.rate_limited = True
            await self._alert_rate_limited(where.lower())
        else:
            await self._notify(messages.transient_failure(where, str(exc)))

    async def _alert_rate_limited(self, where: str) -> None:
        if self.throttle.allow():
            await self._notify(messages.rate_limited(where))
        else:
            log.debug("Rate-limit alert suppressed (%d in window)", self.throttle.suppressed)

    async def _notify(self, message: str) -> None:
        try:
            await self.notifier.notify(message)
        except Exception as exc:
            log.warning("Notifier raised: %s", exc)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def run_daemon(cfg: ClaimerConfig, max_cycles: int | None = None) -> None:
    """Entry point for running the daemon."""
    daemon = ClaimDaemon.from_config(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start(max_cycles=max_cycles)
