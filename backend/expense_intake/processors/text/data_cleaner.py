"""
Data Cleaner: turn extracted receipt fields into values the expense form accepts.

The extractor keeps dates exactly as matched because receipt date formats are
ambiguous. The form needs ISO dates, so this module makes the day-first
reading that Indian receipts use and falls back to the raw text when that fails.
"""
import logging
import re
from datetime import date
from typing import Dict, Optional

from ..core.structures import OCRExtractionResult

logger = logging.getLogger(__name__)

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


def _full_year(year: str) -> int:
    # Assume 20XX for two-digit years
    value = int(year)
    return 2000 + value if len(year) == 2 else value


def normalize_receipt_date(date_str: Optional[str]) -> Optional[date]:
    """
    Read a matched receipt date.

    Handles cases like:
    - "20/01/2024", "20-01-24" -> 2024-01-20 (day first)
    - "20 Jan 2024", "5 March, 24" -> 2024-01-20, 2024-03-05
    - "2024-01-20" -> 2024-01-20

    Args:
        date_str: Date text as matched by the extractor

    Returns:
        date, or None if the text is not a valid calendar date
    """
    if not date_str:
        return None
    text = date_str.replace("\n", " ").strip()

    try:
        # Pattern 1: YYYY-MM-DD or YYYY/MM/DD
        match = re.fullmatch(r'(\d{4})[-/](\d{1,2})[-/](\d{1,2})', text)
        if match:
            year, month, day = match.groups()
            return date(int(year), int(month), int(day))

        # Pattern 2: DD-MM-YYYY, DD/MM/YY
        match = re.fullmatch(r'(\d{1,2})[-/](\d{1,2})[-/](\d{2}|\d{4})', text)
        if match:
            day, month, year = match.groups()
            return date(_full_year(year), int(month), int(day))

        # Pattern 3: DD Month YYYY
        match = re.fullmatch(r'(\d{1,2})\s+([a-z]{3})[a-z]*\.?,?\s+(\d{2}|\d{4})', text, re.IGNORECASE)
        if match:
            day, month_name, year = match.groups()
            month = _MONTHS.get(month_name.lower())
            if month:
                return date(_full_year(year), month, int(day))
    except ValueError as e:
        logger.warning(f"Invalid calendar date '{text}': {e}")
        return None

    logger.warning(f"Could not parse date: {text}")
    return None


def build_form_prefill(extraction: OCRExtractionResult) -> Dict[str, str]:
    """
    Values the receipt panel applies to the expense form.

    - amount: decimal string in major units
    - date: ISO date when it can be read day-first, else the matched text
    - merchant / description: the merchant, or the first item line as description

    Args:
        extraction: Result from the receipt field extractor

    Returns:
        Dict of form field name to string value; fields not found are omitted
    """
    form_data: Dict[str, str] = {}

    if extraction.amount is not None:
        form_data["amount"] = str(extraction.amount.to_decimal())

    if extraction.date:
        parsed = normalize_receipt_date(extraction.date)
        form_data["date"] = parsed.isoformat() if parsed else extraction.date

    if extraction.merchant:
        form_data["merchant"] = extraction.merchant
        form_data["description"] = extraction.merchant
    elif extraction.items:
        form_data["description"] = extraction.items[0]

    return form_data
