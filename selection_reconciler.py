"""
Keeps condition selectors consistent with the current output catalog.

Subject selectors offer the price fields followed by the catalog; value
selectors offer the catalog alone. After the candidates are rewritten, a
previously chosen id survives if it is still offered, otherwise the selector
falls back to its first candidate.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from condition_list import Condition
from output_catalog import PRICE_FIELDS, OutputRef

logger = logging.getLogger(__name__)


def subject_candidates(catalog: Sequence[OutputRef]) -> List[OutputRef]:
    return PRICE_FIELDS + list(catalog)


def value_candidates(catalog: Sequence[OutputRef]) -> List[OutputRef]:
    return list(catalog)


def reconcile_selection(current: Optional[str], candidates: Sequence[OutputRef]) -> Optional[str]:
    """Return ``current`` if it is still a candidate, else the first candidate id (``None`` if empty)."""
    if current is not None and any(option.id == current for option in candidates):
        return current
    return candidates[0].id if candidates else None


def reconcile_conditions(conditions: Iterable[Condition], catalog: Sequence[OutputRef]) -> int:
    """
    Apply the rewritten candidate sets to every row's subject and
    value-indicator selector. Returns the number of selections that changed.
    """
    subjects = subject_candidates(catalog)
    values = value_candidates(catalog)
    repaired = 0

    for idx, condition in enumerate(conditions):
        subject = reconcile_selection(condition.subject, subjects)
        if subject != condition.subject:
            logger.debug("condition %d subject %s -> %s", idx, condition.subject, subject)
            condition.subject = subject
            repaired += 1

        value_ref = reconcile_selection(condition.value_ref, values)
        if value_ref != condition.value_ref:
            logger.debug("condition %d value %s -> %s", idx, condition.value_ref, value_ref)
            condition.value_ref = value_ref
            repaired += 1

    return repaired
