"""
Compiles the strategy builder state into the Expert Advisor request prompt.

Sections always appear in a fixed order separated by blank lines; an empty
indicator set or condition list renders an explicit ``- None`` line rather
than dropping its section.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Union

from pydantic import BaseModel, ConfigDict

from condition_list import Condition, ValueKind
from ea_prompts import (
    CLOSING_INSTRUCTION,
    ENTRY_CONDITIONS_HEADING,
    EXIT_CONDITIONS_HEADING,
    STRATEGY_PREAMBLE,
)
from indicator_set import indicator_labels
from indicators import Indicator, parameter_values
from output_catalog import derive_output_catalog
from selection_reconciler import subject_candidates, value_candidates

CONDITION_INDENT = "    "


class StrategyMetadata(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    symbol: str
    timeframe: str


class RiskParameters(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    stop_loss: str
    take_profit: str
    lot_size: str


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _indicator_lines(indicators: Sequence[Indicator]) -> List[str]:
    if not indicators:
        return ["- None"]
    lines = []
    for indicator, label in zip(indicators, indicator_labels(indicators)):
        params = ", ".join(f"{name}={format_number(value)}" for name, value in parameter_values(indicator))
        lines.append(f"- {label}: {params}")
    return lines


def _condition_lines(
    conditions: Sequence[Condition],
    subject_labels: Dict[str, str],
    value_labels: Dict[str, str],
    section: str,
) -> List[str]:
    if not conditions:
        return [f"{CONDITION_INDENT}- None"]

    lines = []
    for idx, condition in enumerate(conditions):
        if condition.subject not in subject_labels:
            raise ValueError(f"{section}[{idx}].subject references unknown output {condition.subject!r}")

        if condition.value_kind == ValueKind.LITERAL:
            value = format_number(condition.value)
        elif condition.value_ref in value_labels:
            value = value_labels[condition.value_ref]
        else:
            raise ValueError(f"{section}[{idx}].value_ref references unknown output {condition.value_ref!r}")

        if idx > 0 and condition.connective is None:
            raise ValueError(f"{section}[{idx}].connective is required")
        prefix = f"{condition.connective.value} " if idx > 0 else ""
        lines.append(
            f"{CONDITION_INDENT}- {prefix}{subject_labels[condition.subject]} {condition.operator} {value}"
        )
    return lines


def compile_strategy_prompt(
    indicators: Sequence[Indicator],
    entry_conditions: Sequence[Condition],
    exit_conditions: Sequence[Condition],
    risk: RiskParameters,
    metadata: StrategyMetadata,
) -> str:
    """
    Render the full prompt. Pure: identical inputs always produce identical text.

    Raises ValueError if a condition references an output that the indicator
    set does not expose, or if a non-first condition has no connective.
    """
    indicators = list(indicators)
    catalog = derive_output_catalog(indicators)
    subject_labels = {ref.id: ref.label for ref in subject_candidates(catalog)}
    value_labels = {ref.id: ref.label for ref in value_candidates(catalog)}

    sections = [
        STRATEGY_PREAMBLE,
        "\n".join([
            f"**Expert Advisor Name:** {metadata.name}",
            f"**Symbol:** {metadata.symbol}",
            f"**Timeframe:** {metadata.timeframe}",
        ]),
        "\n".join(["**Indicators:**"] + _indicator_lines(indicators)),
        "\n".join(
            [ENTRY_CONDITIONS_HEADING]
            + _condition_lines(list(entry_conditions), subject_labels, value_labels, "entry_conditions")
        ),
        "\n".join(
            [EXIT_CONDITIONS_HEADING]
            + _condition_lines(list(exit_conditions), subject_labels, value_labels, "exit_conditions")
        ),
        "\n".join([
            "**Risk Management:**",
            f"- Stop Loss: {risk.stop_loss} pips",
            f"- Take Profit: {risk.take_profit} pips",
            f"- Lot Size: {risk.lot_size}",
        ]),
        CLOSING_INSTRUCTION,
    ]
    return "\n\n".join(sections)
