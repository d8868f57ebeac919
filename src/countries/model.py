from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


# Attributes an edit may change; the three ISO codes are fixed at creation.
MUTABLE_FIELDS = ("short_name", "full_name", "population", "square")


@dataclass
class Country:
    short_name: str
    full_name: str
    iso_alpha2: str
    iso_alpha3: str
    iso_numeric: str
    population: int
    square: float

    @property
    def codes(self) -> tuple[str, str, str]:
        return (self.iso_alpha2, self.iso_alpha3, self.iso_numeric)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
