"""Country name to ISO 3166-1 alpha-2 lookup."""

from __future__ import annotations

import functools

import pycountry

from ...errors import CountryNotFound

# Names spreadsheets commonly use that are not pycountry names.
COUNTRY_ALIASES: dict[str, str] = {
    "uk": "GB",
    "u.k.": "GB",
    "great britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "wales": "GB",
    "northern ireland": "GB",
    "usa": "US",
    "u.s.a.": "US",
    "u.s.": "US",
    "america": "US",
    "united states of america": "US",
    "south korea": "KR",
    "north korea": "KP",
    "russia": "RU",
    "vietnam": "VN",
    "iran": "IR",
    "syria": "SY",
    "laos": "LA",
    "bolivia": "BO",
    "venezuela": "VE",
    "tanzania": "TZ",
    "moldova": "MD",
    "czech republic": "CZ",
    "ivory coast": "CI",
    "macau": "MO",
    "taiwan": "TW",
    "palestine": "PS",
    "brunei": "BN",
    "cape verde": "CV",
    "swaziland": "SZ",
    "turkey": "TR",
}


@functools.lru_cache(maxsize=1)
def country_name_table() -> dict[str, str]:
    """Lower-cased name -> alpha-2 code, built once from pycountry plus aliases."""

    table: dict[str, str] = {}
    for country in pycountry.countries:
        for attribute in ("name", "official_name", "common_name", "alpha_3"):
            value = getattr(country, attribute, None)
            if value:
                table.setdefault(value.strip().lower(), country.alpha_2)
    for alias, code in COUNTRY_ALIASES.items():
        table.setdefault(alias, code)
    return table


def resolve_country_code(name: str) -> str:
    """Resolve a country name to its alpha-2 code (case-insensitive exact match).

    Raises:
        CountryNotFound: If the name is not in the lookup table.
    """

    key = " ".join(str(name).split()).lower()
    code = country_name_table().get(key)
    if code is None:
        raise CountryNotFound(f"Unknown country '{name}'")
    return code
