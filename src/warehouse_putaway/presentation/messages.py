# src/warehouse_putaway/presentation/messages.py
"""
Override reason -> operator-facing text.

The engine only emits OverrideReason tags; wording lives here.
Templates take: location, projected_pct, available, required.
"""

from typing import Dict

from warehouse_putaway.putaway.putaway_models import OverrideReason

REASON_MESSAGES: Dict[OverrideReason, str] = {
    OverrideReason.OVER_UTILIZATION: (
        "{location} would be {projected_pct:.1f}% full after this move (limit 90%)."
    ),
    OverrideReason.FLAG_MISMATCH: (
        "{location} does not support every handling flag required by these items."
    ),
    OverrideReason.OVERFLOW: (
        "{location} has {available:.2f} cuft free but {required:.2f} cuft is needed."
    ),
    OverrideReason.MIXED_SOURCE_BATCH: (
        "Note: this batch is coming from more than one source location."
    ),
}

BADGE_LABELS: Dict[str, str] = {
    "best_fit": "BEST FIT",
    "account_cluster": "ACCOUNT",
    "sku_or_vendor_match": "SKU/VENDOR",
    "group_match": "GROUP",
    "overflow": "OVERFLOW",
}


def reason_message(reason: OverrideReason, **context) -> str:
    return REASON_MESSAGES[reason].format(**context)
