from __future__ import annotations

from typing import Optional

DEFAULT_REGION = "US"

COUNTRY_TO_REGION: dict[str, str] = {
    "US": "US",
    "USA": "US",
    "UNITED_STATES": "US",
    "CANADA": "US",
    "CA": "US",
    "MEXICO": "US",
    "MX": "US",
    "BRAZIL": "US",
    "BR": "US",
    "GERMANY": "EU",
    "FRANCE": "EU",
    "UK": "EU",
    "UNITED_KINGDOM": "EU",
    "IRELAND": "EU",
    "FR": "EU",
    "DE": "EU",
    "IE": "EU",
    "GB": "EU",
    "INDIA": "APAC",
    "JAPAN": "APAC",
    "SINGAPORE": "APAC",
    "AUSTRALIA": "APAC",
    "IN": "APAC",
    "JP": "APAC",
    "SG": "APAC",
    "AU": "APAC",
    "CN": "APAC",
    "CHINA": "APAC",
    "HK": "APAC",
    "HONG_KONG": "APAC",
    "ZA": "APAC",
    "SOUTH_AFRICA": "APAC",
}


def region_from_country(country: Optional[str]) -> str:
    if not country:
        return DEFAULT_REGION
    normalized = "_".join(country.strip().upper().split())
    return COUNTRY_TO_REGION.get(normalized, DEFAULT_REGION)
