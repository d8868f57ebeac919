"""
Pydantic models for the country JSON payloads.

Wire names are camelCase (shortName, isoAlpha2, ...); Python attributes are
snake_case and line up with src.countries.model.Country.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.countries.model import Country


class CountryBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CountryIn(CountryBase):
    short_name: str = Field(alias="shortName")
    full_name: str = Field(alias="fullName")
    iso_alpha2: str = Field(alias="isoAlpha2")
    iso_alpha3: str = Field(alias="isoAlpha3")
    iso_numeric: str = Field(alias="isoNumeric")
    population: int
    square: float = Field(allow_inf_nan=False)

    def to_country(self) -> Country:
        return Country(**self.model_dump())


class CountryPatch(CountryBase):
    """Mutable fields only; code keys in the body are dropped."""

    short_name: str | None = Field(default=None, alias="shortName")
    full_name: str | None = Field(default=None, alias="fullName")
    population: int | None = None
    square: float | None = Field(default=None, allow_inf_nan=False)


class CountryOut(CountryBase):
    short_name: str = Field(serialization_alias="shortName")
    full_name: str = Field(serialization_alias="fullName")
    iso_alpha2: str = Field(serialization_alias="isoAlpha2")
    iso_alpha3: str = Field(serialization_alias="isoAlpha3")
    iso_numeric: str = Field(serialization_alias="isoNumeric")
    population: int
    square: float

    @classmethod
    def from_country(cls, country: Country) -> "CountryOut":
        return cls(**country.to_dict())
