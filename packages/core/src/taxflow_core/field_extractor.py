"""Heuristic extraction of tax year and total tax from Form 1040 text.

Form 1040 layout varies by year and by the software that produced the PDF,
so positional parsing is unreliable. Each field is instead extracted by an
ordered list of named strategies; every strategy is a pure function of the
text that returns a value or None, and the first value found wins.

Both extractions are best effort. Callers must treat None as "not found"
and report it, never substitute a default.
"""

import re
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, NamedTuple, Optional

import structlog

logger = structlog.get_logger()

# Sanity bound for a total tax amount read off a return.
MAX_TAX_AMOUNT = 100_000_000


class Strategy(NamedTuple):
    """A named extraction step."""
    name: str
    extract: Callable[..., Optional[int]]


# =============================================================================
# TAX YEAR
# =============================================================================

# "Form 1040 (2023)", "Form 1040-SR 2022"
FORM_YEAR_PATTERN = re.compile(r'Form\s+1040[^\d]*(\d{4})', re.IGNORECASE)
# "For the year Jan. 1-Dec. 31, 2023" does not match; "for calendar year 2023" does
CALENDAR_YEAR_PATTERN = re.compile(
    r'(?:for|calendar)\s+(?:the\s+)?year\s+(\d{4})', re.IGNORECASE
)
FALLBACK_YEAR_PATTERN = re.compile(r'20(?:19|2[0-4])')
FALLBACK_WINDOW = 1000


def year_from_form_header(text: str) -> Optional[int]:
    match = FORM_YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def year_from_calendar_phrase(text: str) -> Optional[int]:
    match = CALENDAR_YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def most_frequent_year(text: str) -> Optional[int]:
    """Most common year among 2019-2024 near the top of the document.

    Ties go to the year that appears first.
    """
    counts = Counter(FALLBACK_YEAR_PATTERN.findall(text[:FALLBACK_WINDOW]))
    if not counts:
        return None
    # Counter keeps first-seen order and max() returns the first maximum.
    return int(max(counts, key=counts.__getitem__))


YEAR_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("form_header", year_from_form_header),
    Strategy("calendar_year", year_from_calendar_phrase),
    Strategy("frequent_year", most_frequent_year),
)


def extract_year(text: str) -> Optional[int]:
    """Extract the tax year, or None if no strategy finds one.

    The result is not range checked.
    """
    for strategy in YEAR_STRATEGIES:
        year = strategy.extract(text)
        if year is not None:
            logger.debug("year_extracted", strategy=strategy.name, year=year)
            return year
    return None


# =============================================================================
# TOTAL TAX
# =============================================================================

LINE_24_PATTERN = re.compile(r'(?:line\s*)?24\b', re.IGNORECASE)
TOTAL_TAX_PATTERN = re.compile(r'total\s*tax', re.IGNORECASE)
# Other "total tax" lines on the return and its schedules.
EXCLUDED_TAX_PATTERN = re.compile(
    r'estimated|additional|self-employment', re.IGNORECASE
)
# A line reference, as opposed to the "24" inside "$1,024" or "24,500".
LINE_NUMBER_TOKEN = re.compile(r'(?<![\d$,])(?:line\s*)?24(?![\d,.])', re.IGNORECASE)

MONEY_PATTERNS = (
    re.compile(r'\$?(\d[\d,]*(?:\.\d{1,2})?)'),  # $12,345.67, 12,345, 12345
    re.compile(r'(?<![\d,.])(\d+)(?![\d,.])'),  # whole digit runs, never part of a rejected amount
)

# The label line plus the two lines after it.
WINDOW_LINES = 3
# The start of the next numbered form line, e.g. "25a Form(s) W-2" or "25 Federal".
NEXT_FORM_LINE = re.compile(r'^\s*\d{1,2}(?:[a-z]\b|\s+[a-z])', re.IGNORECASE)
# Keeps amounts on neighbouring lines from fusing once whitespace is removed.
LINE_SEPARATOR = "|"


def _parse_amount(value: str) -> Optional[Decimal]:
    cleaned = value.replace(",", "")
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def extract_dollar_amount(
    text: str,
    max_amount: int = MAX_TAX_AMOUNT,
) -> Optional[int]:
    """Find the first plausible dollar amount in ``text``.

    Whitespace is removed first so that "12 345" reads as 12345. Formatted
    amounts are tried before bare digit runs; candidates outside
    [0, max_amount] are skipped.

    Returns:
        Amount rounded half-up to whole dollars, or None
    """
    clean_text = re.sub(r'\s+', '', text)

    for pattern in MONEY_PATTERNS:
        for match in pattern.finditer(clean_text):
            amount = _parse_amount(match.group(1))
            if amount is None or amount < 0 or amount > max_amount:
                continue
            return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return None


def _amount_near_label(
    lines: list[str],
    index: int,
    max_amount: int,
    drop_line_number: bool = False,
) -> Optional[int]:
    """Search the label line (after the label) and the following lines,
    stopping at the next numbered form line."""
    line = lines[index]
    label = TOTAL_TAX_PATTERN.search(line)
    tail = line[label.end():]

    # The printed form repeats the line number in the amount column:
    # "24 ... This is your total tax . . . 24 11,205".
    if drop_line_number:
        tail = LINE_NUMBER_TOKEN.sub(" ", tail, count=1)

    following = []
    for next_line in lines[index + 1:index + WINDOW_LINES]:
        if NEXT_FORM_LINE.match(next_line):
            break
        following.append(next_line)

    window = LINE_SEPARATOR.join([tail, *following])
    return extract_dollar_amount(window, max_amount=max_amount)


def tax_from_line_24(text: str, max_amount: int = MAX_TAX_AMOUNT) -> Optional[int]:
    """Amount on the line labelled both "24" and "Total tax"."""
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if LINE_24_PATTERN.search(line) and TOTAL_TAX_PATTERN.search(line):
            amount = _amount_near_label(lines, i, max_amount, drop_line_number=True)
            if amount is not None:
                return amount
    return None


def tax_from_total_tax_label(
    text: str,
    max_amount: int = MAX_TAX_AMOUNT,
) -> Optional[int]:
    """Amount on any "Total tax" line that is not an estimated,
    additional or self-employment tax line."""
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if TOTAL_TAX_PATTERN.search(line) and not EXCLUDED_TAX_PATTERN.search(line):
            amount = _amount_near_label(lines, i, max_amount)
            if amount is not None:
                return amount
    return None


INCOME_TAX_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("line_24_total_tax", tax_from_line_24),
    Strategy("total_tax_label", tax_from_total_tax_label),
)


def extract_income_tax(
    text: str,
    max_amount: int = MAX_TAX_AMOUNT,
) -> Optional[int]:
    """Extract total federal income tax (Form 1040 line 24), or None."""
    for strategy in INCOME_TAX_STRATEGIES:
        amount = strategy.extract(text, max_amount=max_amount)
        if amount is not None:
            logger.debug("income_tax_extracted", strategy=strategy.name, amount=amount)
            return amount
    return None


__all__ = [
    "MAX_TAX_AMOUNT",
    "Strategy",
    "YEAR_STRATEGIES",
    "INCOME_TAX_STRATEGIES",
    "extract_year",
    "extract_income_tax",
    "extract_dollar_amount",
    "year_from_form_header",
    "year_from_calendar_phrase",
    "most_frequent_year",
    "tax_from_line_24",
    "tax_from_total_tax_label",
]
