"""
Static region catalogs for each store.
"""
from typing import Optional

GOOGLE_PLAY_REGIONS = (
    "ru", "us", "gb", "de", "fr", "it", "es", "jp", "kr",
    "au", "ca", "br", "mx", "in", "tr", "pl", "nl", "se", "no",
)

# Scraped when no region is requested; Google Play pagination is slow, so only the main markets
GOOGLE_PLAY_PRIMARY_REGIONS = ("us", "ru", "gb", "de", "fr")

APP_STORE_REGIONS = (
    "ru", "us", "gb", "de", "fr", "it", "es", "jp", "kr", "cn",
    "au", "ca", "br", "mx", "in", "tr", "pl", "nl", "se", "no",
)

REGION_LANGUAGES = {
    "ru": "ru",
    "us": "en",
    "gb": "en",
    "de": "de",
    "fr": "fr",
    "it": "it",
    "es": "es",
    "jp": "ja",
    "kr": "ko",
    "cn": "zh-cn",
    "au": "en",
    "ca": "en",
    "br": "pt-br",
    "mx": "es",
    "in": "en",
    "tr": "tr",
    "pl": "pl",
    "nl": "nl",
    "se": "sv",
    "no": "no",
}

DEFAULT_LANGUAGE = "en"


def region_to_language(region: Optional[str]) -> str:
    """Language code to request for a region; unmapped regions get English."""
    if not region:
        return DEFAULT_LANGUAGE
    return REGION_LANGUAGES.get(region.lower(), DEFAULT_LANGUAGE)
