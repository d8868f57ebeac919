from __future__ import annotations

from dataclasses import replace

import pytest

from src.countries.codes import code_column
from src.countries.errors import CountryConflict, CountryNotFound
from src.countries.model import Country
from src.countries.scenarios import CountryScenarios


class InMemoryCountryRepository:
    """List-backed stand-in for CountryStorage; keeps insertion order like ORDER BY id."""

    def __init__(self, rows: list[Country] | None = None) -> None:
        self.rows: list[Country] = [replace(r) for r in rows or []]

    def _matching(self, code: str) -> list[Country]:
        return [r for r in self.rows if code in r.codes]

    def get_all(self) -> list[Country]:
        return [replace(r) for r in self.rows]

    def get(self, code: str) -> Country | None:
        column = code_column(code)
        if column is None:
            return None
        for r in self.rows:
            if getattr(r, column) == code:
                return replace(r)
        return None

    def store(self, country: Country) -> None:
        for r in self.rows:
            if (
                r.iso_alpha2 == country.iso_alpha2
                or r.iso_alpha3 == country.iso_alpha3
                or r.iso_numeric == country.iso_numeric
            ):
                raise CountryConflict()
        self.rows.append(replace(country))

    def update(self, code: str, country: Country) -> Country:
        matches = self._matching(code)
        if not matches:
            raise CountryNotFound(f"country with code {code} not found")
        for r in matches:
            r.short_name = country.short_name
            r.full_name = country.full_name
            r.population = country.population
            r.square = country.square
        return replace(matches[0])

    def delete(self, code: str) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if code not in r.codes]
        return before - len(self.rows)


def make_country(**overrides) -> Country:
    fields = {
        "short_name": "Russia",
        "full_name": "Russian Federation",
        "iso_alpha2": "RU",
        "iso_alpha3": "RUS",
        "iso_numeric": "643",
        "population": 146_150_789,
        "square": 17_125_191.0,
    }
    fields.update(overrides)
    return Country(**fields)


@pytest.fixture
def repository() -> InMemoryCountryRepository:
    return InMemoryCountryRepository(
        [
            make_country(),
            make_country(
                short_name="France",
                full_name="French Republic",
                iso_alpha2="FR",
                iso_alpha3="FRA",
                iso_numeric="250",
                population=68_042_591,
                square=643_801.0,
            ),
        ]
    )


@pytest.fixture
def scenarios(repository: InMemoryCountryRepository) -> CountryScenarios:
    return CountryScenarios(repository)


@pytest.fixture
def country_factory():
    return make_country
