"""
Strategy builder session.

Receives the discrete edit events of the strategy form and keeps the
indicator set, the output catalog and both condition lists consistent. Every
indicator event re-derives the catalog and reconciles all condition selectors
before it returns, so selectors never expose an id the catalog lacks.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Union

from condition_list import (
    EDITABLE_FIELDS,
    Condition,
    ConditionList,
    ConditionListKind,
    ValueKind,
)
from indicator_registry import IndicatorKind, parameters_for
from indicator_set import IndicatorSet
from indicators import Indicator
from output_catalog import OutputRef, derive_output_catalog
from selection_reconciler import (
    reconcile_conditions,
    reconcile_selection,
    subject_candidates,
    value_candidates,
)
from strategy_prompt_compiler import RiskParameters, StrategyMetadata, compile_strategy_prompt

logger = logging.getLogger(__name__)


class StrategyBuilder:
    def __init__(self):
        self.indicators = IndicatorSet()
        self.entry_conditions = ConditionList(ConditionListKind.ENTRY)
        self.exit_conditions = ConditionList(ConditionListKind.EXIT)
        self._catalog: List[OutputRef] = []

    @classmethod
    def with_starter_rows(cls) -> "StrategyBuilder":
        """A builder opened the way the form opens: one RSI and one entry condition."""
        builder = cls()
        builder.indicator_added(IndicatorKind.RSI)
        builder.condition_added(ConditionListKind.ENTRY)
        return builder

    @classmethod
    def from_form(
        cls,
        indicators: Sequence[Indicator],
        entry_conditions: Sequence[Condition] = (),
        exit_conditions: Sequence[Condition] = (),
    ) -> "StrategyBuilder":
        """
        Replay a submitted form as edit events.

        Indicators are added first so every condition reference can be
        resolved against the complete catalog. Raises ValueError if a
        condition references an output the indicators do not expose, if an
        indicator-valued condition names no value output, or if the first
        condition of a list carries a connective.
        """
        builder = cls()
        for idx, indicator in enumerate(indicators):
            builder.indicator_added(indicator.kind)
            for spec in parameters_for(indicator.kind):
                builder.indicator_parameter_changed(idx, spec.name, getattr(indicator, spec.field))

        for which, conditions in (
            (ConditionListKind.ENTRY, entry_conditions),
            (ConditionListKind.EXIT, exit_conditions),
        ):
            for idx, condition in enumerate(conditions):
                section = f"{which.value}_conditions[{idx}]"
                if idx == 0 and condition.connective is not None:
                    raise ValueError(f"{section}.connective must be omitted on the first condition")
                if condition.value_kind == ValueKind.INDICATOR and condition.value_ref is None:
                    raise ValueError(f"{section}.value_ref is required for an indicator value")
                builder.condition_added(which)
                builder.condition_field_changed(which, idx, "subject", condition.subject)
                builder.condition_field_changed(which, idx, "operator", condition.operator)
                builder.condition_field_changed(which, idx, "value_kind", condition.value_kind)
                builder.condition_field_changed(which, idx, "value", condition.value)
                if condition.value_ref is not None:
                    builder.condition_field_changed(which, idx, "value_ref", condition.value_ref)
                if idx > 0 and condition.connective is not None:
                    builder.condition_field_changed(which, idx, "connective", condition.connective)
        return builder

    # ── Derived state ──────────────────────────────────────────────

    @property
    def catalog(self) -> List[OutputRef]:
        return list(self._catalog)

    def subject_options(self) -> List[OutputRef]:
        return subject_candidates(self._catalog)

    def value_options(self) -> List[OutputRef]:
        return value_candidates(self._catalog)

    def condition_list(self, which: Union[ConditionListKind, str]) -> ConditionList:
        if ConditionListKind(which) == ConditionListKind.ENTRY:
            return self.entry_conditions
        return self.exit_conditions

    def _refresh(self) -> None:
        self._catalog = derive_output_catalog(self.indicators.snapshot())
        changed = reconcile_conditions(self.entry_conditions, self._catalog)
        changed += reconcile_conditions(self.exit_conditions, self._catalog)
        if changed:
            logger.debug("Reconciled %d condition selections against %d outputs", changed, len(self._catalog))

    # ── Indicator events ───────────────────────────────────────────

    def indicator_added(self, kind: Union[IndicatorKind, str]) -> None:
        self.indicators.add(kind)
        self._refresh()

    def indicator_removed(self, index: int) -> None:
        self.indicators.remove(index)
        self._refresh()

    def indicator_parameter_changed(self, index: int, name: str, value: Union[int, float]) -> None:
        self.indicators.set_parameter(index, name, value)
        self._refresh()

    def indicator_kind_changed(self, index: int, kind: Union[IndicatorKind, str]) -> None:
        self.indicators.change_kind(index, kind)
        self._refresh()

    # ── Condition events ───────────────────────────────────────────

    def condition_added(
        self,
        which: Union[ConditionListKind, str],
        after_index: Optional[int] = None,
    ) -> int:
        condition = Condition(
            subject=reconcile_selection(None, self.subject_options()),
            value_ref=reconcile_selection(None, self.value_options()),
        )
        return self.condition_list(which).add(condition, after_index=after_index)

    def condition_removed(self, which: Union[ConditionListKind, str], index: int) -> None:
        self.condition_list(which).remove(index)

    def condition_field_changed(
        self,
        which: Union[ConditionListKind, str],
        index: int,
        field: str,
        value: Any,
    ) -> None:
        conditions = self.condition_list(which)
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown condition field {field!r}; must be one of: {list(EDITABLE_FIELDS)}")
        conditions.require_index(index)

        if field == "connective":
            conditions.set_connective(index, value)
            return

        if field == "subject":
            self._require_option(value, self.subject_options(), field)
        elif field == "value_ref":
            self._require_option(value, self.value_options(), field)

        setattr(conditions[index], field, value)

    @staticmethod
    def _require_option(value: Any, options: Sequence[OutputRef], field: str) -> None:
        if not any(option.id == value for option in options):
            raise ValueError(f"{field} {value!r} is not among the current options: {[o.id for o in options]}")

    # ── Compilation ────────────────────────────────────────────────

    def compile(self, metadata: StrategyMetadata, risk: RiskParameters) -> str:
        return compile_strategy_prompt(
            self.indicators.snapshot(),
            list(self.entry_conditions),
            list(self.exit_conditions),
            risk,
            metadata,
        )
