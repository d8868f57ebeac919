from __future__ import annotations

from dataclasses import replace
import math
from typing import Any

from src.countries.codes import ALPHA2_PATTERN, ALPHA3_PATTERN, NUMERIC_PATTERN, is_valid_code
from src.countries.errors import CountryError, CountryNotFound, InvalidCountryCode, InvalidCountryData
from src.countries.model import MUTABLE_FIELDS, Country
from src.countries.storage import CountryStorage
from src.utils.logging import get_logger


logger = get_logger(component="country_scenarios")


def _check_names(country: Country) -> None:
    if not country.short_name or not country.full_name:
        raise InvalidCountryData("country names must not be empty")


def _check_amounts(country: Country) -> None:
    if not math.isfinite(country.square):
        raise InvalidCountryData("square must be a finite number")
    if country.population < 0 or country.square < 0:
        raise InvalidCountryData("population and square must not be negative")


def _check_codes(country: Country) -> None:
    if not (
        ALPHA2_PATTERN.fullmatch(country.iso_alpha2 or "")
        and ALPHA3_PATTERN.fullmatch(country.iso_alpha3 or "")
        and NUMERIC_PATTERN.fullmatch(country.iso_numeric or "")
    ):
        raise InvalidCountryCode(
            "isoAlpha2 must be 2 uppercase letters, isoAlpha3 3 uppercase letters, isoNumeric 3 digits"
        )


class CountryScenarios:
    """
    Business rules around the countries repository.

    `repository` is anything with the CountryStorage surface (get_all, get,
    store, update, delete); tests pass an in-memory one.
    """

    def __init__(self, repository: CountryStorage) -> None:
        self._repo = repository

    def list_all(self) -> list[Country]:
        return self._repo.get_all()

    def get(self, code: str) -> Country:
        country = self._repo.get(code)
        if country is None:
            # Shape is only judged after a miss: well-formed but absent is a 404, garbage is a 400.
            if is_valid_code(code):
                raise CountryNotFound(f"country with code {code} not found")
            raise InvalidCountryCode(f"invalid country code: {code}")
        return country

    def store(self, country: Country) -> None:
        try:
            _check_names(country)
            _check_codes(country)
            _check_amounts(country)
            self._repo.store(country)
        except CountryError as e:
            logger.warning("country_store_rejected", kind=e.kind.value, iso_alpha2=country.iso_alpha2, reason=e.message)
            raise
        logger.info("country_stored", iso_alpha2=country.iso_alpha2, iso_alpha3=country.iso_alpha3)

    def edit(self, code: str, country: Country) -> Country:
        """Replace the mutable fields of the country at `code`. Codes in `country` are ignored."""
        try:
            _check_names(country)
            _check_amounts(country)
            updated = self._repo.update(code, country)
        except CountryError as e:
            logger.warning("country_edit_rejected", kind=e.kind.value, code=code, reason=e.message)
            raise
        logger.info("country_updated", code=code)
        return updated

    def patch(self, code: str, changes: dict[str, Any]) -> Country:
        """Overlay the mutable fields present in `changes` onto the stored country."""
        current = self.get(code)
        overlay = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS and v is not None}
        return self.edit(code, replace(current, **overlay))

    def delete(self, code: str) -> None:
        if not is_valid_code(code):
            logger.warning("country_delete_rejected", kind=InvalidCountryCode.kind.value, code=code)
            raise InvalidCountryCode(f"invalid country code: {code}")
        if self._repo.get(code) is None:
            logger.warning("country_delete_rejected", kind=CountryNotFound.kind.value, code=code)
            raise CountryNotFound(f"country with code {code} not found")
        deleted = self._repo.delete(code)
        logger.info("country_deleted", code=code, rows=deleted)
