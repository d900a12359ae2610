"""
Ordered collection of indicator instances with positional identity.

The n-th instance of kind K is ``K_n`` (1-based, counted only among instances
of the same kind). Labels are recomputed from order on every call, so
removing an earlier instance renumbers every later instance of its kind.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Union

from indicator_registry import IndicatorKind, resolve_kind
from indicators import Indicator, new_indicator, set_parameter


def indicator_labels(instances: Sequence[Indicator]) -> List[str]:
    counts: Dict[str, int] = {}
    labels = []
    for instance in instances:
        counts[instance.kind] = counts.get(instance.kind, 0) + 1
        labels.append(f"{instance.kind}_{counts[instance.kind]}")
    return labels


class IndicatorSet:
    def __init__(self, instances: Sequence[Indicator] = ()):
        self._instances: List[Indicator] = list(instances)

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[Indicator]:
        return iter(self._instances)

    def __getitem__(self, index: int) -> Indicator:
        return self._instances[index]

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._instances)

    def add(self, kind: Union[IndicatorKind, str]) -> None:
        self._instances.append(new_indicator(kind))

    def remove(self, index: int) -> None:
        if self._in_range(index):
            del self._instances[index]

    def set_parameter(self, index: int, name: str, value: Union[int, float]) -> None:
        set_parameter(self._instances[index], name, value)

    def change_kind(self, index: int, kind: Union[IndicatorKind, str]) -> None:
        """Replace the instance at ``index`` with a fresh one of ``kind``."""
        if resolve_kind(kind).value == self._instances[index].kind:
            return
        self._instances[index] = new_indicator(kind)

    def label_of(self, index: int) -> str:
        if not self._in_range(index):
            raise IndexError(f"indicator index {index} out of range")
        return indicator_labels(self._instances)[index]

    def labels(self) -> List[str]:
        return indicator_labels(self._instances)

    def snapshot(self) -> List[Indicator]:
        return list(self._instances)
