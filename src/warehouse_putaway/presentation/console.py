from __future__ import annotations

import io
import math
from typing import List, Sequence

from warehouse_putaway.inbound.candidate_matching import confidence_band
from warehouse_putaway.inbound.inbound_models import InboundCandidate
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.putaway.override_gate import GateSession
from warehouse_putaway.putaway.putaway_models import Candidate, SuggestionResult
from warehouse_putaway.presentation.messages import BADGE_LABELS, reason_message

MOVE_ANYWAY = "Move Anyway"
CANCEL = "Cancel"


def _format_table(rows: Sequence[Sequence[object]], headers: List[str], numeric: Sequence[int] = ()) -> str:
    """Fixed-width text table; columns listed in `numeric` are right aligned."""
    cells = [[str(v) for v in row] for row in rows]

    widths = [len(h) for h in headers]
    for row in cells:
        widths = [max(w, len(v)) for w, v in zip(widths, row)]

    def line(values):
        parts = [
            v.rjust(widths[i]) if i in numeric else v.ljust(widths[i])
            for i, v in enumerate(values)
        ]
        return "  ".join(parts).rstrip()

    out = [line(headers), "  ".join("-" * w for w in widths)]
    out.extend(line(row) for row in cells)
    return "\n".join(out) + "\n"


def _badges(c: Candidate) -> str:
    badges = [label for attr, label in BADGE_LABELS.items() if getattr(c, attr)]
    if not c.flag_compliant:
        badges.append("FLAG MISMATCH")
    return ", ".join(badges)


# ------------------------------------------------------------
# Put-away suggestions
# ------------------------------------------------------------

def render_suggestions(result: SuggestionResult) -> str:
    out = io.StringIO()

    print("=" * 80, file=out)
    print("PUT-AWAY LOCATION SUGGESTIONS", file=out)
    print("=" * 80, file=out)
    print(f"Items: {', '.join(result.request.item_ids)}", file=out)
    print(f"Required volume: {result.required_volume:.2f} cuft", file=out)
    print(f"Locations considered: {result.locations_considered}", file=out)
    print(file=out)

    if result.is_empty:
        print("No suggestions: there are no measured locations to place these items in.", file=out)
        return out.getvalue()

    if result.overflow:
        print("!" * 80, file=out)
        print("OVERFLOW: no location stays under 90% utilization for this volume.", file=out)
        print("Every option below needs an operator override.", file=out)
        print("!" * 80, file=out)
        print(file=out)

    rows = [
        (
            c.rank + 1,
            c.location_code,
            f"{c.available_cuft:.2f}",
            f"{c.utilization_pct:.1f}%",
            f"{c.projected_utilization_pct:.1f}%" if math.isfinite(c.projected_utilization_pct) else "N/A",
            "yes" if c.flag_compliant else "NO",
            _badges(c),
        )
        for c in result.candidates
    ]
    print(
        _format_table(
            rows,
            ["#", "location", "available_cuft", "utilization", "after_move", "compliant", "badges"],
            numeric=(0, 2, 3, 4),
        ),
        end="",
        file=out,
    )

    if result.mixed_source_batch:
        print(file=out)
        print("Note: this batch comes from more than one source location.", file=out)

    return out.getvalue()


def render_data_unavailable(error: DataUnavailable) -> str:
    lines = [
        "DATA UNAVAILABLE",
        "-" * 30,
        f"Data could not be loaded: {error}",
        "Nothing was suggested. Refresh (run the command again) once the data source is reachable.",
    ]
    return "\n".join(lines) + "\n"


def render_override_prompt(session: GateSession) -> str:
    evaluation = session.evaluation
    context = dict(
        location=session.destination.code,
        projected_pct=evaluation.projected_utilization_pct,
        available=session.destination.available_cuft,
        required=session.request.required_volume,
    )

    lines: List[str] = []
    lines.append("=" * 60)
    lines.append(f"OVERRIDE REQUIRED - move to {session.destination.code}")
    lines.append("=" * 60)
    for reason in session.blocking_reasons:
        lines.append(f"  * {reason_message(reason, **context)}")
    for reason in session.notes:
        lines.append(f"  {reason_message(reason, **context)}")
    lines.append("")
    lines.append(f"[M] {MOVE_ANYWAY}    [C] {CANCEL}")
    return "\n".join(lines) + "\n"


# ------------------------------------------------------------
# Inbound candidates
# ------------------------------------------------------------

def render_inbound_candidates(dock_intake_id: str, candidates: Sequence[InboundCandidate]) -> str:
    out = io.StringIO()
    print(f"Dock intake {dock_intake_id}: expected shipment candidates", file=out)
    print(file=out)

    if not candidates:
        print("No matching manifests or expected shipments.", file=out)
        return out.getvalue()

    rows = [
        (
            i + 1,
            c.shipment.shipment_number,
            c.shipment.inbound_kind,
            c.shipment.account_name or c.shipment.account_id or "",
            c.shipment.vendor_name or "",
            c.shipment.expected_pieces if c.shipment.expected_pieces is not None else "",
            c.confidence_score,
            confidence_band(c.confidence_score).value,
            c.confidence_label,
            c.match_tier,
        )
        for i, c in enumerate(candidates)
    ]
    print(
        _format_table(
            rows,
            ["#", "shipment", "kind", "account", "vendor", "pieces", "score", "band", "match", "tier"],
            numeric=(0, 5, 6),
        ),
        end="",
        file=out,
    )
    return out.getvalue()
