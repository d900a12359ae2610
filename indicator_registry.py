"""
Static table of the indicators the strategy builder supports.

Each kind declares its configurable parameters (display name, model field,
default) in the order they are rendered, and the named outputs it exposes to
condition selectors. Single-output kinds expose one unnamed output ("").
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, NamedTuple, Union


class IndicatorKind(str, Enum):
    RSI = "RSI"
    SMA = "SMA"
    EMA = "EMA"
    MACD = "MACD"
    BOLLINGER_BANDS = "BollingerBands"
    STOCHASTIC = "Stochastic"


class ParameterSpec(NamedTuple):
    name: str
    field: str
    default: Union[int, float]


_REGISTRY: Dict[IndicatorKind, Dict[str, Any]] = {
    IndicatorKind.RSI: {
        "parameters": (ParameterSpec("Period", "period", 14),),
        "outputs": ("",),
    },
    IndicatorKind.SMA: {
        "parameters": (ParameterSpec("Period", "period", 50),),
        "outputs": ("",),
    },
    IndicatorKind.EMA: {
        "parameters": (ParameterSpec("Period", "period", 50),),
        "outputs": ("",),
    },
    IndicatorKind.MACD: {
        "parameters": (
            ParameterSpec("Fast", "fast", 12),
            ParameterSpec("Slow", "slow", 26),
            ParameterSpec("Signal", "signal", 9),
        ),
        "outputs": ("Main", "Signal"),
    },
    IndicatorKind.BOLLINGER_BANDS: {
        "parameters": (
            ParameterSpec("Period", "period", 20),
            ParameterSpec("Deviation", "deviation", 2.0),
        ),
        "outputs": ("Upper", "Middle", "Lower"),
    },
    IndicatorKind.STOCHASTIC: {
        "parameters": (
            ParameterSpec("%K", "k_period", 5),
            ParameterSpec("%D", "d_period", 3),
            ParameterSpec("Slowing", "slowing", 3),
        ),
        "outputs": ("Main", "Signal"),
    },
}


def resolve_kind(kind: Union[IndicatorKind, str]) -> IndicatorKind:
    try:
        return IndicatorKind(kind)
    except ValueError:
        raise ValueError(
            f"Unknown indicator kind {kind!r}; must be one of: {[k.value for k in IndicatorKind]}"
        ) from None


def parameters_for(kind: Union[IndicatorKind, str]) -> List[ParameterSpec]:
    return list(_REGISTRY[resolve_kind(kind)]["parameters"])


def outputs_for(kind: Union[IndicatorKind, str]) -> List[str]:
    return list(_REGISTRY[resolve_kind(kind)]["outputs"])


def output_count(kind: Union[IndicatorKind, str]) -> int:
    return len(_REGISTRY[resolve_kind(kind)]["outputs"])


def find_parameter(kind: Union[IndicatorKind, str], name: str) -> ParameterSpec:
    """Look up a parameter by display name (e.g. "Period", "%K")."""
    for spec in _REGISTRY[resolve_kind(kind)]["parameters"]:
        if spec.name == name:
            return spec
    raise ValueError(f"{resolve_kind(kind).value} has no parameter named {name!r}")


def registry_snapshot() -> List[Dict[str, Any]]:
    """JSON-friendly listing of every supported kind, in declaration order."""
    return [
        {
            "kind": kind.value,
            "parameters": [
                {"name": spec.name, "field": spec.field, "default": spec.default}
                for spec in entry["parameters"]
            ],
            "outputs": list(entry["outputs"]),
        }
        for kind, entry in _REGISTRY.items()
    ]
