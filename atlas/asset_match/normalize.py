"""
Text normalization helpers shared by scoring and matching.
"""

import re
import unicodedata
from typing import Optional


VALID_STATES = ("Novo", "Bom", "Regular", "Avariado")
DEFAULT_STATE = "Regular"

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NUMERIC_TAG = re.compile(r"^0?\d+(\.0)?$")
_DONATION_PREFIX = "doacao"


def normalize_text(text: Optional[str]) -> str:
    """
    Fold accents and case, trim surrounding whitespace.

    None and non-string values are accepted; None becomes "".
    """
    if text is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text))
    return _COMBINING_MARKS.sub("", decomposed).strip().lower()


def normalize_tag(tag) -> str:
    """
    Normalize a registry tag for lookups.

    Spreadsheet exports turn numeric tags into "0123" or "123.0";
    both normalize to "123". Alphanumeric tags are only trimmed.
    """
    if tag is None:
        return ""
    value = str(tag).strip()
    if not value:
        return ""
    if _NUMERIC_TAG.match(value):
        return str(int(float(value)))
    return value


def parse_state_and_origin(text: Optional[str]) -> tuple[str, str]:
    """
    Split a free-text condition cell into (state, donation origin).

    Examples:
        "Bom"                      -> ("Bom", "")
        "Novo (Doação Prefeitura)" -> ("Novo", "Prefeitura")
        "Avariado - doacao APM"    -> ("Avariado", "APM")
        ""                         -> ("Regular", "")
    """
    raw = (text or "").strip()
    if not raw:
        return DEFAULT_STATE, ""

    folded = normalize_text(raw)
    for state in VALID_STATES:
        if not folded.startswith(normalize_text(state)):
            continue

        rest = raw[len(state):].strip()
        if (rest.startswith("(") and rest.endswith(")")) or (rest.startswith("[") and rest.endswith("]")):
            rest = rest[1:-1].strip()
        elif rest.startswith("-"):
            rest = rest[1:].strip()

        origin = ""
        if rest and normalize_text(rest).startswith(_DONATION_PREFIX):
            origin = rest[len(_DONATION_PREFIX):].strip()
        return state, origin

    return DEFAULT_STATE, ""
