"""
Indicator instances as a pydantic tagged union keyed by ``kind``.

Every variant carries its own named parameter fields. Instances hold no
identity; labels such as ``RSI_1`` are derived from collection order by
``indicator_set.indicator_labels``.
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from indicator_registry import IndicatorKind, find_parameter, parameters_for, resolve_kind


def _default(kind: IndicatorKind, field: str):
    for spec in parameters_for(kind):
        if spec.field == field:
            return spec.default
    raise ValueError(f"{kind.value} has no field {field!r}")


class _IndicatorBase(BaseModel):
    model_config = ConfigDict(validate_assignment=True)


class RSIIndicator(_IndicatorBase):
    kind: Literal["RSI"] = "RSI"
    period: int = _default(IndicatorKind.RSI, "period")


class SMAIndicator(_IndicatorBase):
    kind: Literal["SMA"] = "SMA"
    period: int = _default(IndicatorKind.SMA, "period")


class EMAIndicator(_IndicatorBase):
    kind: Literal["EMA"] = "EMA"
    period: int = _default(IndicatorKind.EMA, "period")


class MACDIndicator(_IndicatorBase):
    kind: Literal["MACD"] = "MACD"
    fast: int = _default(IndicatorKind.MACD, "fast")
    slow: int = _default(IndicatorKind.MACD, "slow")
    signal: int = _default(IndicatorKind.MACD, "signal")


class BollingerBandsIndicator(_IndicatorBase):
    kind: Literal["BollingerBands"] = "BollingerBands"
    period: int = _default(IndicatorKind.BOLLINGER_BANDS, "period")
    deviation: float = _default(IndicatorKind.BOLLINGER_BANDS, "deviation")


class StochasticIndicator(_IndicatorBase):
    kind: Literal["Stochastic"] = "Stochastic"
    k_period: int = _default(IndicatorKind.STOCHASTIC, "k_period")
    d_period: int = _default(IndicatorKind.STOCHASTIC, "d_period")
    slowing: int = _default(IndicatorKind.STOCHASTIC, "slowing")


Indicator = Annotated[
    Union[
        RSIIndicator,
        SMAIndicator,
        EMAIndicator,
        MACDIndicator,
        BollingerBandsIndicator,
        StochasticIndicator,
    ],
    Field(discriminator="kind"),
]

INDICATOR_MODELS: Dict[IndicatorKind, Type[_IndicatorBase]] = {
    IndicatorKind.RSI: RSIIndicator,
    IndicatorKind.SMA: SMAIndicator,
    IndicatorKind.EMA: EMAIndicator,
    IndicatorKind.MACD: MACDIndicator,
    IndicatorKind.BOLLINGER_BANDS: BollingerBandsIndicator,
    IndicatorKind.STOCHASTIC: StochasticIndicator,
}


def new_indicator(kind: Union[IndicatorKind, str]) -> Indicator:
    """Create an instance of ``kind`` populated with registry defaults."""
    return INDICATOR_MODELS[resolve_kind(kind)]()


def parameter_values(indicator: Indicator) -> List[Tuple[str, Union[int, float]]]:
    """(display name, current value) pairs in declaration order."""
    return [(spec.name, getattr(indicator, spec.field)) for spec in parameters_for(indicator.kind)]


def set_parameter(indicator: Indicator, name: str, value: Union[int, float]) -> None:
    # Range checks are left to the caller; zero and negative values are accepted.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Parameter {name!r} must be numeric, got {value!r}")
    spec = find_parameter(indicator.kind, name)
    setattr(indicator, spec.field, value)
