"""
Validation utilities for submitted strategy builder forms.
"""

from __future__ import annotations

from typing import Any, Dict, List, Set, Tuple

from condition_list import OPERATORS, Connective, ValueKind
from indicator_registry import IndicatorKind, parameters_for
from indicators import new_indicator
from output_catalog import PRICE_FIELDS, derive_output_catalog

METADATA_FIELDS = ("name", "symbol", "timeframe")
RISK_FIELDS = ("stop_loss", "take_profit", "lot_size")
CONDITION_SECTIONS = ("entry_conditions", "exit_conditions")
INDICATOR_KINDS = {kind.value for kind in IndicatorKind}
VALUE_KINDS = {kind.value for kind in ValueKind}
CONNECTIVES = {connective.value for connective in Connective}


def _is_dict(value: Any) -> bool:
    return isinstance(value, dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _add_error(errors: List[Dict[str, str]], path: str, message: str) -> None:
    errors.append({"path": path, "message": message})


def _validate_text_fields(section: Any, name: str, fields: Tuple[str, ...], errors: List[Dict[str, str]]) -> None:
    if not _is_dict(section):
        _add_error(errors, name, "must be an object")
        return
    for field in fields:
        value = section.get(field)
        if _is_number(value):
            continue
        if not isinstance(value, str) or not value.strip():
            _add_error(errors, f"{name}.{field}", "must be a non-empty string")


def _validate_indicators(indicators: Any, errors: List[Dict[str, str]]) -> Tuple[Set[str], Set[str]]:
    """Validate indicator rows. Returns (subject ids, value ids) the rows expose."""
    price_ids = {ref.id for ref in PRICE_FIELDS}
    if not isinstance(indicators, list):
        _add_error(errors, "indicators", "must be a list")
        return price_ids, set()

    kinds: List[str] = []
    for idx, indicator in enumerate(indicators):
        path = f"indicators[{idx}]"
        if not _is_dict(indicator):
            _add_error(errors, path, "must be an object")
            continue
        kind = indicator.get("kind")
        if kind not in INDICATOR_KINDS:
            _add_error(errors, f"{path}.kind", f"must be one of: {sorted(INDICATOR_KINDS)}")
            continue

        for spec in parameters_for(kind):
            if spec.field in indicator and not _is_number(indicator[spec.field]):
                _add_error(errors, f"{path}.{spec.field}", "must be a number")
            elif isinstance(spec.default, int) and _is_number(indicator.get(spec.field)):
                if not float(indicator[spec.field]).is_integer():
                    _add_error(errors, f"{path}.{spec.field}", "must be an integer")
        kinds.append(kind)

    # Ids depend only on kind order, so default instances expose the same catalog.
    value_ids = {ref.id for ref in derive_output_catalog([new_indicator(kind) for kind in kinds])}
    return price_ids | value_ids, value_ids


def _validate_conditions(
    conditions: Any,
    name: str,
    subject_ids: Set[str],
    value_ids: Set[str],
    errors: List[Dict[str, str]],
) -> None:
    if conditions is None:
        return
    if not isinstance(conditions, list):
        _add_error(errors, name, "must be a list")
        return

    for idx, condition in enumerate(conditions):
        path = f"{name}[{idx}]"
        if not _is_dict(condition):
            _add_error(errors, path, "must be an object")
            continue

        if condition.get("subject", "Price_Close") not in subject_ids:
            _add_error(errors, f"{path}.subject", f"references unknown output {condition.get('subject')!r}")

        if condition.get("operator", ">") not in OPERATORS:
            _add_error(errors, f"{path}.operator", f"must be one of: {list(OPERATORS)}")

        value_kind = condition.get("value_kind", ValueKind.LITERAL.value)
        if value_kind not in VALUE_KINDS:
            _add_error(errors, f"{path}.value_kind", f"must be one of: {sorted(VALUE_KINDS)}")
        elif value_kind == ValueKind.LITERAL.value:
            if "value" in condition and not _is_number(condition["value"]):
                _add_error(errors, f"{path}.value", "must be a number")
        elif condition.get("value_ref") not in value_ids:
            _add_error(errors, f"{path}.value_ref", f"references unknown output {condition.get('value_ref')!r}")

        connective = condition.get("connective")
        if idx == 0 and connective is not None:
            _add_error(errors, f"{path}.connective", "must be omitted on the first condition")
        elif idx > 0 and connective is not None and connective not in CONNECTIVES:
            _add_error(errors, f"{path}.connective", f"must be one of: {sorted(CONNECTIVES)}")


def validate_strategy_form(form: Any) -> Tuple[bool, List[Dict[str, str]]]:
    errors: List[Dict[str, str]] = []

    if not _is_dict(form):
        return False, [{"path": "root", "message": "strategy form must be an object"}]

    _validate_text_fields(form.get("metadata"), "metadata", METADATA_FIELDS, errors)
    _validate_text_fields(form.get("risk"), "risk", RISK_FIELDS, errors)

    subject_ids, value_ids = _validate_indicators(form.get("indicators", []), errors)
    for section in CONDITION_SECTIONS:
        _validate_conditions(form.get(section), section, subject_ids, value_ids, errors)

    return len(errors) == 0, errors


def assert_valid_strategy_form(form: Dict[str, Any]) -> Dict[str, Any]:
    valid, errors = validate_strategy_form(form)
    if not valid:
        detail = "; ".join([f"{item['path']}: {item['message']}" for item in errors])
        raise ValueError(f"Invalid strategy form: {detail}")
    return form
