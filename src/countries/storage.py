from __future__ import annotations

from typing import Any

from src.countries.codes import code_column
from src.countries.errors import CountryConflict, CountryNotFound
from src.countries.model import Country
from src.utils.db import Database
from src.utils.logging import get_logger


logger = get_logger(component="country_storage")


# Column order here is the row layout _row_to_country expects.
COUNTRY_COLUMNS = "short_name, full_name, iso_alpha2, iso_alpha3, iso_numeric, population, square"

SELECT_ALL_QUERY = f"SELECT {COUNTRY_COLUMNS} FROM countries_t ORDER BY id"

SELECT_BY_COLUMN_QUERY = {
    "iso_alpha2": f"SELECT {COUNTRY_COLUMNS} FROM countries_t WHERE iso_alpha2 = %s LIMIT 1",
    "iso_alpha3": f"SELECT {COUNTRY_COLUMNS} FROM countries_t WHERE iso_alpha3 = %s LIMIT 1",
    "iso_numeric": f"SELECT {COUNTRY_COLUMNS} FROM countries_t WHERE iso_numeric = %s LIMIT 1",
}

EXISTS_QUERY = """
SELECT COUNT(*)
FROM countries_t
WHERE iso_alpha2 = %(iso_alpha2)s
   OR iso_alpha3 = %(iso_alpha3)s
   OR iso_numeric = %(iso_numeric)s
"""

INSERT_QUERY = """
INSERT INTO countries_t (short_name, full_name, iso_alpha2, iso_alpha3, iso_numeric, population, square)
VALUES (%(short_name)s, %(full_name)s, %(iso_alpha2)s, %(iso_alpha3)s, %(iso_numeric)s, %(population)s, %(square)s)
"""

UPDATE_QUERY = f"""
UPDATE countries_t
SET short_name = %(short_name)s,
    full_name = %(full_name)s,
    population = %(population)s,
    square = %(square)s
WHERE iso_alpha2 = %(code)s
   OR iso_alpha3 = %(code)s
   OR iso_numeric = %(code)s
RETURNING {COUNTRY_COLUMNS}
"""

DELETE_QUERY = """
DELETE FROM countries_t
WHERE iso_alpha2 = %(code)s
   OR iso_alpha3 = %(code)s
   OR iso_numeric = %(code)s
"""


def _row_to_country(row: tuple[Any, ...]) -> Country:
    short_name, full_name, iso_alpha2, iso_alpha3, iso_numeric, population, square = row
    return Country(
        short_name=short_name,
        full_name=full_name,
        iso_alpha2=iso_alpha2,
        iso_alpha3=iso_alpha3,
        iso_numeric=iso_numeric,
        population=int(population),
        square=float(square),
    )


def _code_params(country: Country) -> dict[str, str]:
    return {
        "iso_alpha2": country.iso_alpha2,
        "iso_alpha3": country.iso_alpha3,
        "iso_numeric": country.iso_numeric,
    }


def _has_code_clash(cur: Any, country: Country) -> bool:
    cur.execute(EXISTS_QUERY, _code_params(country))
    row = cur.fetchone()
    return bool(row and row[0] > 0)


class CountryStorage:
    """countries_t access through parameterized SQL."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def _fetchone(self, sql_text: str, params: Any) -> tuple[Any, ...] | None:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql_text, params)
                return cur.fetchone()

    def _fetchall(self, sql_text: str, params: Any) -> list[tuple[Any, ...]]:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql_text, params)
                return cur.fetchall()

    def _get_by(self, column: str, value: str) -> Country | None:
        row = self._fetchone(SELECT_BY_COLUMN_QUERY[column], (value,))
        return _row_to_country(row) if row else None

    def get_all(self) -> list[Country]:
        return [_row_to_country(r) for r in self._fetchall(SELECT_ALL_QUERY, ())]

    def get_by_iso_alpha2(self, iso_alpha2: str) -> Country | None:
        return self._get_by("iso_alpha2", iso_alpha2)

    def get_by_iso_alpha3(self, iso_alpha3: str) -> Country | None:
        return self._get_by("iso_alpha3", iso_alpha3)

    def get_by_iso_numeric(self, iso_numeric: str) -> Country | None:
        return self._get_by("iso_numeric", iso_numeric)

    def get(self, code: str) -> Country | None:
        """Look a country up by whichever code form `code` looks like; None if absent."""
        column = code_column(code)
        if column is None:
            return None
        return self._get_by(column, code)

    def store(self, country: Country) -> None:
        # No unique constraint backs this check; concurrent inserts of the same codes can both pass.
        with self._db.transaction() as conn:
            with conn.cursor() as cur:
                if _has_code_clash(cur, country):
                    raise CountryConflict(
                        f"country with code {country.iso_alpha2}/{country.iso_alpha3}/{country.iso_numeric} already exists"
                    )
                cur.execute(INSERT_QUERY, country.to_dict())
        logger.debug("country_inserted", iso_alpha2=country.iso_alpha2)

    def update(self, code: str, country: Country) -> Country:
        """Overwrite the mutable fields of the row matching `code`; returns the stored row."""
        params = {
            "short_name": country.short_name,
            "full_name": country.full_name,
            "population": country.population,
            "square": country.square,
            "code": code,
        }
        with self._db.transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(UPDATE_QUERY, params)
                row = cur.fetchone()
        if row is None:
            raise CountryNotFound(f"country with code {code} not found")
        return _row_to_country(row)

    def delete(self, code: str) -> int:
        """Delete rows matching `code` in any column; returns how many went away."""
        with self._db.transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(DELETE_QUERY, {"code": code})
                deleted = cur.rowcount
        return int(deleted or 0)
