"""
Report Generator - Format results for human consumption.

Produces console output and CSV export for batch results and rankings.
"""

import csv
import io
from datetime import datetime
from typing import TextIO

from .batch import summarize_batch
from .models import MatchCandidate, MatchResult, MatchType


def _cut(text: str | None, width: int) -> str:
    return (text or "")[:width]


def format_console(results: list[MatchResult]) -> str:
    """
    Format batch results for console display.

    Rows needing review (ambiguous, not found) are listed first.

    Args:
        results: Batch match results to format

    Returns:
        Formatted string for console output
    """
    if not results:
        return "No pasted rows to report.\n"

    lines = []
    review = [r for r in results if r.match_type in (MatchType.AMBIGUOUS, MatchType.NOT_FOUND)]
    matched = [r for r in results if r.is_matched]

    if review:
        lines.append(f"\nNEEDS REVIEW ({len(review)})")
        lines.append("-" * 70)
        lines.append(f"{'PASTED DESCRIPTION':<40} {'RESULT':<28}")
        lines.append("-" * 70)
        for r in review:
            lines.append(f"{_cut(r.pasted.description, 40):<40} {r.label:<28}")

    if matched:
        lines.append(f"\nMATCHED ({len(matched)})")
        lines.append("-" * 70)
        lines.append(f"{'PASTED DESCRIPTION':<30} {'SYSTEM RECORD':<12} {'RESULT':<28}")
        lines.append("-" * 70)
        for r in matched:
            lines.append(f"{_cut(r.pasted.description, 30):<30} {_cut(r.matched.id, 12):<12} {r.label}")

    summary = summarize_batch(results)
    lines.append("\n" + "=" * 70)
    lines.append("SUMMARY")
    lines.append(f"  Total rows:     {summary['total']}")
    lines.append(f"  Perfect:        {summary['perfect']}")
    lines.append(f"  High:           {summary['high']}")
    lines.append(f"  Exact:          {summary['exact']}")
    lines.append(f"  By similarity:  {summary['similarity']}")
    lines.append(f"  Ambiguous:      {summary['ambiguous']}")
    lines.append(f"  Not found:      {summary['not_found']}")
    lines.append("=" * 70)

    return "\n".join(lines)


def format_candidates(candidates: list[MatchCandidate], limit: int = 10) -> str:
    """Format the top of a ranking, one candidate per line."""
    if not candidates:
        return "No registry candidates.\n"

    lines = [f"{'TAG':<12} {'SCORE':>6} {'BASE':>6} {'BONUS':>6}  DESCRIPTION", "-" * 70]
    for c in candidates[:limit]:
        description = " ".join(p for p in (c.record.description, c.record.species) if p)
        lines.append(
            f"{_cut(c.record.tag, 12):<12} {c.final_score:>6.3f} {c.base_score:>6.3f} "
            f"{c.bonus_score:>6.3f}  {_cut(description, 36)}"
        )
    return "\n".join(lines)


def export_csv(results: list[MatchResult], output: TextIO | None = None) -> str:
    """
    Export batch results to CSV format.

    Args:
        results: Batch match results to export
        output: Optional file handle to write to

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([
        "pasted_description",
        "pasted_location",
        "pasted_state",
        "pasted_tag",
        "match_type",
        "score",
        "system_id",
        "system_description",
        "system_location",
        "system_state",
    ])

    for result in results:
        pasted = result.pasted
        system = result.matched
        writer.writerow([
            pasted.description or "",
            pasted.location or "",
            pasted.state or "",
            pasted.tag or "",
            result.label,
            f"{result.score:.3f}" if result.score is not None else "",
            system.id if system else "",
            (system.description or "") if system else "",
            (system.location or "") if system else "",
            (system.state or "") if system else "",
        ])

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content


def generate_report_filename(unit: str | None = None, extension: str = "csv") -> str:
    """
    Generate a filename for the report.

    Args:
        unit: Optional unit name to include
        extension: File extension (default "csv")

    Returns:
        Filename like "reconcile_Escola_Central_2026-01-08.csv"
    """
    date_str = datetime.now().strftime("%Y-%m-%d")
    if unit:
        safe_unit = "_".join(unit.split())
        return f"reconcile_{safe_unit}_{date_str}.{extension}"
    return f"reconcile_{date_str}.{extension}"
