"""Plain-text renderings of selections and reconciliation results."""

from typing import List

from ..core.models import ReconciliationResult, Selection


def format_selection(selection: Selection, title: str = "UNIFIED MORNING TOP PICKS") -> str:
    """Table of picks with score and primary/secondary catalyst."""
    lines = [f"--- {title} ---"]
    if not selection.picks:
        lines.append("No assets scored this cycle.")
        return "\n".join(lines)

    rows = [("#", "Symbol", "Score", "Primary_Catalyst", "Secondary")]
    for i, pick in enumerate(selection.picks, start=1):
        rows.append((
            str(i),
            pick.symbol,
            str(pick.score),
            pick.primary_trigger or "None",
            pick.secondary_trigger or "None",
        ))
    widths = [max(len(row[col]) for row in rows) for col in range(len(rows[0]))]
    for row in rows:
        lines.append(" | ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
    return "\n".join(lines)


def format_result(result: ReconciliationResult, target_pct: float = 10.0) -> str:
    if not result.ok:
        return f"Error tracking {result.symbol}"
    line = (
        f"{result.symbol}: Started @ {result.baseline_price:.4f} -> Now @ {result.current_price:.4f} "
        f"| Change: {result.percent_change:+.2f}%"
    )
    if result.target_met:
        line += f" ✅ {target_pct:g}% TARGET MET"
    return line


def format_reconciliation(
    results: List[ReconciliationResult],
    target_pct: float = 10.0,
    title: str = "END OF DAY PERFORMANCE REPORT",
) -> str:
    lines = [f"--- {title} ---"]
    if not results:
        lines.append("No stored picks to track.")
    lines.extend(format_result(r, target_pct) for r in results)
    return "\n".join(lines)
