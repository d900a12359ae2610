"""
Derivation of the addressable signal outputs of an indicator set.
"""

from __future__ import annotations

from typing import List, Sequence

from pydantic import BaseModel, ConfigDict

from indicator_registry import outputs_for
from indicator_set import indicator_labels
from indicators import Indicator


class OutputRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str


PRICE_CLOSE = OutputRef(id="Price_Close", label="Price (Close)")
PRICE_OPEN = OutputRef(id="Price_Open", label="Price (Open)")

# Valid as condition subjects only, never as a compared indicator value.
PRICE_FIELDS: List[OutputRef] = [PRICE_CLOSE, PRICE_OPEN]


def derive_output_catalog(instances: Sequence[Indicator]) -> List[OutputRef]:
    """
    Expand every instance into one OutputRef per output it exposes.

    Instance order is preserved and, within an instance, the order the
    registry declares its outputs in. Single-output kinds yield ``K_n`` /
    ``K #n``; multi-output kinds yield ``K_n_{suffix}`` / ``K #n (suffix)``.
    """
    catalog: List[OutputRef] = []
    for instance, label in zip(instances, indicator_labels(instances)):
        name = f"{instance.kind} #{label.rpartition('_')[2]}"
        for suffix in outputs_for(instance.kind):
            if suffix:
                catalog.append(OutputRef(id=f"{label}_{suffix}", label=f"{name} ({suffix})"))
            else:
                catalog.append(OutputRef(id=label, label=name))
    return catalog
