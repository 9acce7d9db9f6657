"""
Extract mutual fund holdings from a Consolidated Account Statement (CAS) PDF.

A CAS groups schemes by AMC and folio. For each scheme it prints the scheme
name with its ISIN, the transactions, and a closing line such as:

    Closing Unit Balance: 1,234.567  NAV on 15-Oct-2024: INR 102.3456  Market Value on 15-Oct-2024: INR 1,26,345.67

Usage:
  1. text = extract_text(pdf_path)
  2. holdings = parse_holdings_from_text(text)
  3. Create Collateral rows from the holdings (see api/collaterals.py).
"""
from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import pdfplumber

from models.enums import MutualFundCategory

_NUMBER = r"[\d,]+(?:\.\d+)?"
_CURRENCY = r"(?:INR|Rs\.?|₹)?\s*"

AMC_RE = re.compile(r"^\s*(?P<amc>[A-Za-z0-9&.' ]+?Mutual Fund)\s*$", re.IGNORECASE)
FOLIO_RE = re.compile(r"Folio\s*No\.?\s*[:.]?\s*(?P<folio>[A-Za-z0-9/]+(?:\s*/\s*[A-Za-z0-9]+)?)", re.IGNORECASE)
SCHEME_RE = re.compile(
    r"^\s*(?:[A-Z0-9]{2,10}-)?(?P<scheme>.+?)\s*[-(]*\s*ISIN\s*:\s*(?P<isin>IN[A-Z0-9]{10})",
    re.IGNORECASE,
)
CLOSING_RE = re.compile(rf"Closing\s+Unit\s+Balance\s*:\s*(?P<units>{_NUMBER})", re.IGNORECASE)
NAV_RE = re.compile(
    rf"NAV\s+on\s+(?P<date>\d{{1,2}}-[A-Za-z]{{3}}-\d{{4}})\s*:\s*{_CURRENCY}(?P<nav>{_NUMBER})",
    re.IGNORECASE,
)
VALUE_RE = re.compile(rf"Market\s+Value\s+on\s+[^:]+:\s*{_CURRENCY}(?P<value>{_NUMBER})", re.IGNORECASE)

# Checked in order; first match wins, EQUITY otherwise
_CATEGORY_KEYWORDS: list[tuple[MutualFundCategory, tuple[str, ...]]] = [
    (MutualFundCategory.LIQUID, ("liquid", "overnight", "money market")),
    (MutualFundCategory.HYBRID, ("hybrid", "balanced", "arbitrage", "multi asset", "equity savings")),
    (MutualFundCategory.DEBT, (
        "debt", "bond", "gilt", "income", "duration", "corporate", "credit risk",
        "banking & psu", "banking and psu", "treasury", "floater", "fixed maturity",
    )),
]


def extract_text(pdf_path: str | Path, password: Optional[str] = None) -> str:
    """Extract all text from a PDF file. CAS files are usually protected with the holder's PAN."""
    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(str(path))
    text_parts: list[str] = []
    with pdfplumber.open(path, password=password) as pdf:
        for page in pdf.pages:
            t = page.extract_text()
            if t:
                text_parts.append(t)
    return "\n\n".join(text_parts)


def _parse_number(raw: str) -> float:
    return float(raw.replace(",", ""))


def _parse_date(raw: str) -> Optional[date]:
    try:
        return datetime.strptime(raw, "%d-%b-%Y").date()
    except ValueError:
        return None


def infer_category(scheme_name: str) -> MutualFundCategory:
    name = scheme_name.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in name for k in keywords):
            return category
    return MutualFundCategory.EQUITY


def _clean_scheme_name(raw: str) -> str:
    name = re.sub(r"\s+", " ", raw).strip(" -(")
    return name


def parse_holdings_from_text(text: str) -> list[dict[str, Any]]:
    """
    Walk the statement line by line, tracking the current AMC, folio and
    scheme; emit one holding per closing balance with non-zero units.
    """
    holdings: list[dict[str, Any]] = []
    amc: Optional[str] = None
    folio: Optional[str] = None
    scheme: Optional[str] = None
    isin: Optional[str] = None

    for line in text.splitlines():
        if not line.strip():
            continue
        m = AMC_RE.match(line)
        if m:
            amc = re.sub(r"\s+", " ", m.group("amc")).strip()
            continue
        m = FOLIO_RE.search(line)
        if m:
            folio = re.sub(r"\s+", "", m.group("folio"))
        m = SCHEME_RE.match(line)
        if m:
            scheme = _clean_scheme_name(m.group("scheme"))
            isin = m.group("isin").upper()
            continue
        m = CLOSING_RE.search(line)
        if not m or scheme is None:
            continue

        units = _parse_number(m.group("units"))
        nav_match = NAV_RE.search(line)
        value_match = VALUE_RE.search(line)
        if units <= 0 or nav_match is None:
            scheme = isin = None
            continue
        nav = _parse_number(nav_match.group("nav"))
        value = _parse_number(value_match.group("value")) if value_match else round(units * nav, 2)
        holdings.append({
            "scheme_name": scheme,
            "isin": isin,
            "folio_number": folio or "UNKNOWN",
            "amc_name": amc,
            "category": infer_category(scheme).value,
            "units": units,
            "nav": nav,
            "current_value": value,
            "valuation_date": _parse_date(nav_match.group("date")),
        })
        scheme = isin = None

    return holdings


def parse_holdings_from_pdf(pdf_path: str | Path, password: Optional[str] = None) -> list[dict[str, Any]]:
    return parse_holdings_from_text(extract_text(pdf_path, password=password))
