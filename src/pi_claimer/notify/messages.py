"""Operator-facing message text (Telegram Markdown)."""

from __future__ import annotations

from pi_claimer.models.records import Rejected, Success


def _short(value: str, n: int = 15) -> str:
    return f"{value[:n]}..." if len(value) > n else value


def claim_succeeded(outcome: Success, explorer_url: str) -> str:
    link = explorer_url.format(hash=outcome.tx_hash)
    return (
        "✅ *Claim & send succeeded (sponsored)*\n"
        f"*Amount:* {outcome.amount} Pi\n"
        f"*Tx hash:* [{_short(outcome.tx_hash)}]({link})"
    )


def claim_rejected(outcome: Rejected) -> str:
    lines = [
        "❌ *Claim rejected by the ledger*",
        f"*Balance:* `{_short(outcome.balance_id, 24)}`",
        f"*Result code:* `{outcome.result_code}`",
    ]
    if outcome.transaction_code and outcome.transaction_code != outcome.result_code:
        lines.append(f"*Transaction:* `{outcome.transaction_code}`")
    if outcome.operation_codes:
        lines.append(f"*Operations:* `{', '.join(outcome.operation_codes)}`")
    return "\n".join(lines)


def transient_failure(where: str, cause: str) -> str:
    return f"⚠️ *{where}*\n```\n{cause}\n```"


def rate_limited(where: str) -> str:
    return f"⏳ *Rate limited* during {where}, backing off"


def daemon_started(claimant: str, sponsor: str, destination: str) -> str:
    return (
        "🚀 *Pi claimer started*\n"
        f"*Claimant:* `{_short(claimant, 12)}`\n"
        f"*Sponsor:* `{_short(sponsor, 12)}`\n"
        f"*Destination:* `{_short(destination, 12)}`"
    )
