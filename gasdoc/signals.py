"""
Deterministic signal detection over document text.

Finds platform/field codes, page titles, terminology and vendor names in
English and Thai text and returns them as a DocumentSignals bundle. This
is the default signal source of the classifier; an LLM-backed source can
produce the same bundle from a PDF.
"""

import re
from typing import Union

from .schemas import DocumentSignals, Language

# Letters and digits on either side mean we are inside a longer code.
# Thai letters are allowed as neighbours ("แหล่งC5").
_L = r"(?<![A-Za-z0-9])"
_R = r"(?![A-Za-z0-9])"

# Canonical platform name -> pattern. Order is irrelevant; output order
# follows first appearance in the text.
PLATFORM_PATTERNS = {
    "G1": re.compile(_L + r"G1(?:\s*/\s*61)?" + _R),
    "G2": re.compile(_L + r"G2(?:\s*/\s*61)?" + _R),
    "G12": re.compile(_L + r"G12(?:\s*/\s*48)?" + _R),
    "Arthit": re.compile(r"arthit", re.IGNORECASE),
    "C5": re.compile(_L + r"C5" + _R),
    "G4/48": re.compile(_L + r"G4\s*[/-]\s*48" + _R),
    "B8/32": re.compile(_L + r"B8\s*/\s*32" + _R),
    "Benchamas": re.compile(r"benchamas|เบญจมาศ", re.IGNORECASE),
    "Pailin": re.compile(r"pailin|ไพลิน", re.IGNORECASE),
    "JDA A-18": re.compile(_L + r"JDA[\s-]*A[\s-]*18" + _R, re.IGNORECASE),
    "JDA B-17": re.compile(_L + r"JDA[\s-]*B[\s-]*17" + _R, re.IGNORECASE),
}

SUPPLY_GROUP = ("G1", "G2", "G12")
SINGLE_FIELD = "Arthit"
DUAL_FIELD = ("C5", "G4/48")
SINGLE_PLATFORM_GROUP = ("B8/32", "Benchamas", "Pailin")

# (flag, key term reported, pattern)
TERM_PATTERNS = [
    ("has_statement_of_account", "Statement of Account",
     re.compile(r"statement\s+of\s+account", re.IGNORECASE)),
    ("has_operator_statement", "Operator's Statement",
     re.compile(r"operator\s*['’`]?\s*s\s+statement", re.IGNORECASE)),
    ("has_statement_number", "Statement No.",
     re.compile(r"statement\s+no\.?\s*\d{1,2}\s*-\s*\d{1,2}\s*/\s*\d{4}", re.IGNORECASE)),
    ("has_total_sale_volume", "Total Sale Volume",
     re.compile(r"total\s+sales?\s+volume", re.IGNORECASE)),
    ("has_ctep_sale_volume", "CTEP Sale Volume",
     re.compile(r"ctep\s+sales?\s+volume", re.IGNORECASE)),
    ("has_heat_quantity_section", "Heat Quantity",
     re.compile(r"heat\s+quantity|ปริมาณความร้อน", re.IGNORECASE)),
    ("has_accounting_data", "Accounting Total",
     re.compile(r"จำนวนเงินรวม|invoice\s+register|g\s*/?\s*l\s+account", re.IGNORECASE)),
    ("has_invoice_term", "ใบแจ้งหนี้",
     re.compile(r"ใบแจ้งหนี้")),
]

_VENDOR_HEADER = re.compile(r"vendor|supplier|ผู้ขาย", re.IGNORECASE)
_INVOICE_NO_HEADER = re.compile(r"invoice\s*(no\.?|number|#)|เลขที่ใบแจ้งหนี้", re.IGNORECASE)

_COMPANY_EN = re.compile(
    r"\b([A-Z][\w&'.-]*(?:[ \t]+(?:and|of|&|[A-Z][\w&'.-]*)){0,5}?)[ \t]*,?[ \t]+"
    r"(Co\.?,?[ \t]*Ltd\.?|Company[ \t]+Limited|Public[ \t]+Company[ \t]+Limited"
    r"|Limited|Ltd\.?|Inc\.?|Corporation|Corp\.?|PLC|Pte\.?[ \t]*Ltd\.?)(?![A-Za-z])"
)
_COMPANY_TH = re.compile(r"บริษัท\s*([^\s\d]+(?:\s[^\s\d]+){0,3}?)\s*จำกัด")

_THAI_CHAR = re.compile(r"[\u0e00-\u0e7f]")
_LATIN_CHAR = re.compile(r"[A-Za-z]")


def decode_content(content: Union[bytes, bytearray, str, None]) -> str:
    """Best-effort text view of a document buffer. Never raises."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8", errors="ignore")
    return ""


def detect_language(text: str) -> Language:
    thai = len(_THAI_CHAR.findall(text))
    latin = len(_LATIN_CHAR.findall(text))
    if thai == 0:
        return Language.ENGLISH
    if latin == 0:
        return Language.THAI
    share = thai / (thai + latin)
    if share >= 0.8:
        return Language.THAI
    if share <= 0.2:
        return Language.ENGLISH
    return Language.MIXED


def find_platforms(text: str) -> list[str]:
    """Platform codes present in the text, ordered by first appearance."""
    positions = []
    for name, pattern in PLATFORM_PATTERNS.items():
        match = pattern.search(text)
        if match:
            positions.append((match.start(), name))
    return [name for _, name in sorted(positions)]


def find_vendor_names(text: str) -> list[str]:
    """Distinct company names, compared case-insensitively."""
    seen = {}
    for match in _COMPANY_EN.finditer(text):
        name = " ".join(match.group(0).split()).rstrip(",")
        seen.setdefault(name.lower(), name)
    for match in _COMPANY_TH.finditer(text):
        name = " ".join(match.group(0).split())
        seen.setdefault(name.lower(), name)
    return list(seen.values())


class TextSignalDetector:
    """
    Detects classification signals from document text with regular expressions.

    Usage:
        detector = TextSignalDetector()
        signals = detector.detect_signals(b"Statement of Account ... Arthit ...")
        signals.platforms  # ["Arthit"]
    """

    def detect_signals(self, content, timeout=None) -> DocumentSignals:
        text = decode_content(content)
        if not text.strip():
            return DocumentSignals()

        platforms = find_platforms(text)
        flags = {}
        key_terms = []
        for flag, term, pattern in TERM_PATTERNS:
            found = bool(pattern.search(text))
            flags[flag] = found
            if found:
                key_terms.append(term)

        flags["has_vendor_invoice_table"] = bool(
            _VENDOR_HEADER.search(text) and _INVOICE_NO_HEADER.search(text)
        )
        if flags["has_vendor_invoice_table"]:
            key_terms.append("Vendor Invoice Table")

        return DocumentSignals(
            platforms=platforms,
            vendor_names=find_vendor_names(text),
            language=detect_language(text),
            key_terms_found=key_terms + platforms,
            **flags,
        )
