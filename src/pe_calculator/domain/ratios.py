"""Domain models for derived values."""

from dataclasses import dataclass
from enum import StrEnum


class RatioKind(StrEnum):
    """Tag of a P:E ratio result."""

    FINITE = "finite"
    UNDEFINED = "undefined"
    INFINITE = "infinite"


@dataclass(frozen=True)
class Ratio:
    """Protein to energy ratio; value is set only for finite ratios."""

    kind: RatioKind
    value: float | None = None

    @classmethod
    def finite(cls, value: float) -> "Ratio":
        return cls(kind=RatioKind.FINITE, value=value)

    @classmethod
    def undefined(cls) -> "Ratio":
        return cls(kind=RatioKind.UNDEFINED)

    @classmethod
    def infinite(cls) -> "Ratio":
        return cls(kind=RatioKind.INFINITE)

    @property
    def is_finite(self) -> bool:
        return self.kind is RatioKind.FINITE


@dataclass(frozen=True)
class DerivedValues:
    """Values computed from one entry or from the aggregate."""

    net_carb_g: float
    energy_g: float
    ratio: Ratio
