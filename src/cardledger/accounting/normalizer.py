"""Card identity normalization: pure functions, no DB dependency.

Raw attributes from scans, sales, imports and price feeds disagree on
spelling (``"english"`` vs ``"EN"``, ``True`` vs ``"foil"``, ``"123/360"`` vs
``"123"``). Everything is folded into a ``NormalizedKey`` whose fingerprint
identifies one physical card variant.
"""

import re
import time

from cardledger.domain.enums import Finish, Language
from cardledger.domain.models.identity import NormalizedKey

DEFAULT_LANG = Language.EN.value

LANGUAGE_ALIASES: dict[str, str] = {
    "ENGLISH": "EN",
    "GERMAN": "DE",
    "DEUTSCH": "DE",
    "FRENCH": "FR",
    "ITALIAN": "IT",
    "SPANISH": "ES",
    "JAPANESE": "JA",
    "JP": "JA",
    "KOREAN": "KO",
    "PORTUGUESE": "PT",
    "RUSSIAN": "RU",
    "CHINESE": "ZH",
    "HEBREW": "HE",
    "LATIN": "LA",
    "GREEK": "GR",
    "ARABIC": "AR",
}

_KNOWN_LANGS = {lang.value for lang in Language}
_DENOMINATOR = re.compile(r"/\d+$")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def map_finish(raw: str | bool | None) -> Finish:
    """Booleans map to foil/nonfoil; text containing "etched" wins over "foil"."""
    if raw is None:
        return Finish.NONFOIL
    if isinstance(raw, bool):
        return Finish.FOIL if raw else Finish.NONFOIL
    text = raw.strip().lower()
    if "etched" in text:
        return Finish.ETCHED
    if "non" in text:
        return Finish.NONFOIL
    if "foil" in text:
        return Finish.FOIL
    return Finish.NONFOIL


def normalize_lang(raw: str | None) -> str:
    """Upper-case two-letter code; unknown or missing values fall back to EN."""
    if not raw:
        return DEFAULT_LANG
    text = raw.strip().upper()
    if text in _KNOWN_LANGS:
        return text
    return LANGUAGE_ALIASES.get(text, DEFAULT_LANG)


def normalize_number(raw: str | None) -> str | None:
    """Trim and lower-case a collector number, dropping a "/360" style denominator."""
    if raw is None:
        return None
    number = _DENOMINATOR.sub("", str(raw).strip().lower())
    return number or None


def normalize_set_code(raw: str | None) -> str | None:
    if raw is None:
        return None
    code = raw.strip().upper()
    return code or None


def slugify_name(name: str) -> str:
    return _NON_SLUG.sub("-", name.strip().lower()).strip("-")


def normalize_fingerprint(
    card_id: str | None = None,
    set_code: str | None = None,
    number: str | None = None,
    name: str | None = None,
    lang: str | None = None,
    finish: str | bool | None = None,
) -> NormalizedKey:
    """Build the canonical identity for a card. Total: never raises.

    Fingerprint priority: set+number, then slugified name, then a
    clock-based "unknown" key that never collides with another card.
    """
    code = normalize_set_code(set_code)
    num = normalize_number(number)
    language = normalize_lang(lang)
    fin = map_finish(finish)
    clean_name = name.strip() if name and name.strip() else None
    slug = slugify_name(clean_name) if clean_name else ""

    if code and num:
        fingerprint = f"{code}:{num}:{language}:{fin.value}"
    elif slug:
        fingerprint = f"name:{slug}:{language}:{fin.value}"
    else:
        fingerprint = f"unknown:{time.time_ns()}:{language}:{fin.value}"

    return NormalizedKey(
        card_id=card_id.strip() if card_id and card_id.strip() else None,
        set_code=code,
        number=num,
        lang=language,
        finish=fin,
        name=clean_name,
        fingerprint=fingerprint,
    )
