"""
Receipt Field Extractor: turn recognized receipt text into candidate form fields.

Each field has an ordered list of named pattern templates, most specific
first. The first template whose capture passes the field's acceptance check
wins and later templates are not tried. Fields that cannot be found are left
out; finding nothing is not an error.

Patterns:
- Amount:   "Total: ₹1,250.00" -> "1,250 Rs" -> "₹ 1250"; must be 0 < amount < 10,000,000
- Date:     "20/01/2024" | "20 Jan 2024" | "2024-01-20", kept as matched text
- Merchant: "Store: Big Bazaar" -> first capitalized line; 4-49 characters
- Items:    body lines with a digit or ₹, without total/amount/date/merchant/store,
            6-99 characters, first 10 in document order
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Pattern, Tuple
import logging
import re

from ...config import IntakeSettings, resolve_settings
from ...models import RecognitionOutput
from ..core.money import Money
from ..core.structures import OCRExtractionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternTemplate:
    """A named regular expression whose first group is the captured value."""
    name: str
    pattern: Pattern

    def search(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        return match.group(1) if match else None


_NUMBER = r'(\d[\d,]*(?:\.\d{2})?)'
_CURRENCY = r'(?:₹|\brs\b\.?|\binr\b)'

AMOUNT_TEMPLATES: Tuple[PatternTemplate, ...] = (
    PatternTemplate(
        "labelled_amount",
        re.compile(r'(?:\b(?:total|amount)\b|' + _CURRENCY + r')\s*:?\s*' + _CURRENCY + r'?\s*' + _NUMBER, re.IGNORECASE),
    ),
    PatternTemplate(
        "amount_then_currency",
        re.compile(_NUMBER + r'\s*' + _CURRENCY, re.IGNORECASE),
    ),
    PatternTemplate(
        "rupee_prefixed",
        re.compile(r'₹\s*' + _NUMBER),
    ),
)

_MONTHS = r'(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*'

DATE_TEMPLATES: Tuple[PatternTemplate, ...] = (
    PatternTemplate("numeric_day_first", re.compile(r'\b(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})\b')),
    PatternTemplate("day_month_name_year", re.compile(r'\b(\d{1,2}\s+' + _MONTHS + r'\.?,?\s+\d{2,4})\b', re.IGNORECASE)),
    PatternTemplate("iso_date", re.compile(r'\b(\d{4}[-/]\d{1,2}[-/]\d{1,2})\b')),
)

MERCHANT_TEMPLATES: Tuple[PatternTemplate, ...] = (
    PatternTemplate(
        "labelled_merchant",
        re.compile(r'\b(?:from|at|merchant|store)\b[ \t]*:?[ \t]*([A-Za-z&][A-Za-z &]*)', re.IGNORECASE),
    ),
    PatternTemplate(
        "capitalized_line",
        re.compile(r'^[ \t]*([A-Z][A-Za-z &]*)[ \t]*$', re.MULTILINE),
    ),
)

MERCHANT_MIN_LENGTH = 4
MERCHANT_MAX_LENGTH = 49
ITEM_MIN_LENGTH = 6
ITEM_MAX_LENGTH = 99
_ITEM_MARKER = re.compile(r'[\d₹]')
_ITEM_EXCLUDE = re.compile(r'total|amount|date|merchant|store', re.IGNORECASE)


def _parse_amount(captured: str, currency: str, ceiling: Decimal) -> Optional[Money]:
    """Strip thousands separators and apply the sanity band 0 < amount < ceiling."""
    try:
        value = Decimal(captured.replace(",", ""))
    except InvalidOperation:
        return None
    if not (Decimal(0) < value < ceiling):
        logger.debug(f"Amount {value} outside sanity band (0, {ceiling}), rejected")
        return None
    return Money.from_decimal(value, currency)


def extract_amount(text: str, settings: Optional[IntakeSettings] = None) -> Tuple[Optional[Money], Optional[str]]:
    """
    Find the expense amount.

    Returns:
        Tuple of (amount, template name), or (None, None)
    """
    settings = resolve_settings(settings)
    for template in AMOUNT_TEMPLATES:
        captured = template.search(text)
        if captured is None:
            continue
        amount = _parse_amount(captured, settings.currency_code, settings.amount_sanity_ceiling)
        if amount is not None:
            return amount, template.name
    return None, None


def extract_date(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Find a date; the matched text is returned as-is (day/month order is ambiguous)."""
    for template in DATE_TEMPLATES:
        captured = template.search(text)
        if captured:
            return captured.strip(), template.name
    return None, None


def extract_merchant(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Find the merchant name, accepting only 4-49 character captures."""
    for template in MERCHANT_TEMPLATES:
        captured = template.search(text)
        if captured is None:
            continue
        name = captured.strip()
        if MERCHANT_MIN_LENGTH <= len(name) <= MERCHANT_MAX_LENGTH:
            return name, template.name
        logger.debug(f"Merchant capture '{name[:60]}' from {template.name} has bad length {len(name)}")
    return None, None


def extract_items(text: str, limit: int = 10) -> List[str]:
    """Body lines that look like purchased items, in document order."""
    items: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if not _ITEM_MARKER.search(line):
            continue
        if _ITEM_EXCLUDE.search(line):
            continue
        if not (ITEM_MIN_LENGTH <= len(line) <= ITEM_MAX_LENGTH):
            continue
        items.append(line)
        if len(items) >= limit:
            break
    return items


def extract_fields(raw_text: str, settings: Optional[IntakeSettings] = None) -> Dict[str, Any]:
    """
    Text-to-fields transform without confidence handling.

    Returns:
        Dict holding only the fields that were found (amount, date, merchant, items)
    """
    return extract(raw_text, settings=settings).fields()


def extract(
    raw_text: str,
    confidence: Optional[float] = None,
    settings: Optional[IntakeSettings] = None,
) -> OCRExtractionResult:
    """
    Parse recognized receipt text into candidate fields.

    Args:
        raw_text: Text returned by the recognition engine
        confidence: Recognition confidence, 0-100; None when unknown, which is never flagged
        settings: Currency, sanity ceiling, item limit and confidence threshold

    Returns:
        OCRExtractionResult; ``low_confidence`` marks fields that need manual verification
    """
    settings = resolve_settings(settings)
    text = (raw_text or "").strip()
    matched: Dict[str, str] = {}

    amount, amount_template = extract_amount(text, settings)
    if amount_template:
        matched["amount"] = amount_template

    date_text, date_template = extract_date(text)
    if date_template:
        matched["date"] = date_template

    merchant, merchant_template = extract_merchant(text)
    if merchant_template:
        matched["merchant"] = merchant_template

    items = extract_items(text, settings.max_item_lines)

    result = OCRExtractionResult(
        raw_text=text,
        confidence=confidence,
        amount=amount,
        date=date_text,
        merchant=merchant,
        items=tuple(items),
        low_confidence=confidence is not None and confidence < settings.low_confidence_threshold,
        matched_templates=matched,
    )

    if result.is_empty:
        logger.info("No receipt fields found, falling back to manual entry")
    else:
        logger.info(
            f"Extracted receipt fields {sorted(result.fields())} "
            f"(confidence {confidence}, templates {matched})"
        )
    if result.low_confidence:
        logger.warning(
            f"Recognition confidence {confidence:.1f} below {settings.low_confidence_threshold}, "
            f"extracted fields need manual verification"
        )
    return result


def extract_recognition(output: RecognitionOutput, settings: Optional[IntakeSettings] = None) -> OCRExtractionResult:
    """Convenience wrapper for the recognition collaborator's output shape."""
    return extract(output.raw_text, output.confidence, settings)
