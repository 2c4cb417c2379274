"""Statement text extraction.

Turns a source document into an ordered stream of normalized lines and
pulls statement metadata (account number, statement period, opening
balance) out of the extracted text.
"""

import io
import re
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

import pdfplumber
import structlog

from bankledger.domain.entities import ParsingContext, RawLine
from bankledger.utils.amount_parser import AMOUNT_TOKEN_PATTERN, parse_amount
from bankledger.utils.date_parser import parse_date

logger = structlog.get_logger(__name__)

Document = Union[bytes, str, Path]

PDF_MAGIC = b"%PDF"

HEADER_FOOTER_MARKERS = (
    "page",
    "statement no",
    "vat reg",
    "po box",
    "these fees include",
    "opening balance",
    "closing balance",
    "brought forward",
    "carried forward",
)

TRANSACTION_KEYWORDS = (
    "payment",
    "fee",
    "charge",
    "deposit",
    "withdrawal",
    "debit",
    "credit",
    "atm",
    "eft",
    "salary",
    "interest",
    "dividend",
    "transfer",
    "purchase",
    "refund",
    "##",
)

# Leading date token of a statement line.
DATE_TOKEN_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}/\d{1,2}(?:/\d{2,4})?"
    r"|\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*(?:\s+\d{4})?)"
    r"(?=\s)",
    re.IGNORECASE,
)

ACCOUNT_NUMBER_PATTERNS = (
    re.compile(r"Account\s+Number\s*:\s*([0-9][0-9\- ]*[0-9])", re.IGNORECASE),
    re.compile(r"Account\s*#\s*:\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"Account:\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"Acc\s+No\s*:\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"\b([0-9]{4}-?[0-9]{4}-?[0-9]{4}-?[0-9]{4})\b"),
)

_PERIOD_DATE = r"\d{1,2}/\d{1,2}/\d{4}|\d{1,2}\s+[A-Za-z]+\s+\d{4}|\d{4}-\d{2}-\d{2}"

STATEMENT_PERIOD_PATTERNS = (
    re.compile(rf"Statement\s+Period\s*:\s*((?:{_PERIOD_DATE})\s*to\s*(?:{_PERIOD_DATE}))", re.IGNORECASE),
    re.compile(rf"Period\s*:\s*((?:{_PERIOD_DATE})\s*to\s*(?:{_PERIOD_DATE}))", re.IGNORECASE),
    re.compile(rf"From\s*((?:{_PERIOD_DATE})\s*to\s*(?:{_PERIOD_DATE}))", re.IGNORECASE),
    re.compile(rf"((?:{_PERIOD_DATE})\s*to\s*(?:{_PERIOD_DATE}))", re.IGNORECASE),
)

OPENING_BALANCE_PATTERN = re.compile(
    r"(?:Opening\s+Balance|Balance\s+Brought\s+Forward|Brought\s+Forward)\D*?"
    r"(" + AMOUNT_TOKEN_PATTERN.pattern + r")",
    re.IGNORECASE,
)


def normalize_line(text: str) -> str:
    """Collapse internal whitespace and strip the line."""
    return re.sub(r"\s+", " ", text).strip()


def is_header_footer(text: str) -> bool:
    """Return True if the line carries a known header/footer marker."""
    lowered = text.lower()
    return any(marker in lowered for marker in HEADER_FOOTER_MARKERS)


class TextExtractor:
    """Extract ordered lines and metadata from bank statement documents."""

    def extract_lines(self, document: Document) -> Iterator[RawLine]:
        """Yield normalized lines of a document in original order.

        PDF bytes (or a ``.pdf`` path) are read page by page with pdfplumber;
        anything else is treated as plain text. The generator is lazy and
        cannot be restarted; call again on the source to re-read it.

        Args:
            document: PDF bytes, plain text, or a path to either

        Yields:
            RawLine for every non-empty line
        """
        for page_number, page_text in self._iter_pages(document):
            line_number = 0
            for text in page_text.splitlines():
                text = normalize_line(text)
                if not text:
                    continue
                line_number += 1
                yield RawLine(
                    text=text,
                    page_number=page_number,
                    line_number=line_number,
                    is_header_footer=is_header_footer(text),
                )

    def _iter_pages(self, document: Document) -> Iterator[tuple[int, str]]:
        if isinstance(document, Path):
            if document.suffix.lower() == ".pdf":
                yield from self._iter_pdf_pages(document.read_bytes(), str(document))
            else:
                yield 1, document.read_text(encoding="utf-8-sig")
        elif isinstance(document, bytes):
            if document.lstrip().startswith(PDF_MAGIC):
                yield from self._iter_pdf_pages(document, "<bytes>")
            else:
                yield 1, document.decode("utf-8-sig")
        elif isinstance(document, str):
            yield 1, document
        else:
            raise TypeError(f"Unsupported document type: {type(document).__name__}")

    def _iter_pdf_pages(self, data: bytes, label: str) -> Iterator[tuple[int, str]]:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            logger.debug("pdf_opened", source=label, pages=len(pdf.pages))
            for page_number, page in enumerate(pdf.pages, start=1):
                yield page_number, page.extract_text() or ""

    def is_transaction_line(self, line: Union[RawLine, str, None]) -> bool:
        """Structural check for lines that may hold a transaction.

        A candidate carries an amount token, no header/footer marker, and
        either a leading date token or transaction vocabulary. False
        positives are expected; parsers decide with ``can_parse``.
        """
        if line is None:
            return False
        if isinstance(line, RawLine):
            if line.is_header_footer:
                return False
            text = line.text
        else:
            text = normalize_line(line)
            if not text or is_header_footer(text):
                return False

        if not AMOUNT_TOKEN_PATTERN.search(text):
            return False

        if DATE_TOKEN_PATTERN.match(text):
            return True
        lowered = text.lower()
        return any(keyword in lowered for keyword in TRANSACTION_KEYWORDS)

    def extract_account_number(self, lines: Iterable[Union[RawLine, str]]) -> Optional[str]:
        """Return the first account number found in the lines, if any."""
        for text in _texts(lines):
            for pattern in ACCOUNT_NUMBER_PATTERNS:
                match = pattern.search(text)
                if match:
                    return match.group(1).strip()
        return None

    def extract_statement_period(self, lines: Iterable[Union[RawLine, str]]) -> Optional[str]:
        """Return the raw statement period text (e.g. '01 Jan 2024 to 31 Jan 2024')."""
        for text in _texts(lines):
            for pattern in STATEMENT_PERIOD_PATTERNS:
                match = pattern.search(text)
                if match:
                    return match.group(1).strip()
        return None

    def parse_statement_period(self, period: Optional[str]) -> Optional[tuple[date, date]]:
        """Split a statement period string into its start and end dates."""
        if not period:
            return None
        parts = re.split(r"\s*\bto\b\s*", period, maxsplit=1, flags=re.IGNORECASE)
        if len(parts) != 2:
            return None
        try:
            start = parse_date(parts[0], dayfirst=True)
            end = parse_date(parts[1], dayfirst=True)
        except ValueError:
            logger.debug("statement_period_unparsed", period=period)
            return None
        if end < start:
            return None
        return start, end

    def extract_opening_balance(self, lines: Iterable[Union[RawLine, str]]) -> Optional[Decimal]:
        """Return the opening/brought-forward balance, if the statement prints one."""
        for text in _texts(lines):
            match = OPENING_BALANCE_PATTERN.search(text)
            if match:
                try:
                    return parse_amount(match.group(1))
                except ValueError:
                    continue
        return None

    def build_context(
        self,
        lines: Iterable[Union[RawLine, str]],
        source_file: Optional[str] = None,
        default_date: Optional[date] = None,
    ) -> ParsingContext:
        """Create the parsing context for a fully extracted document.

        The statement date is the end of the printed statement period, or
        ``default_date`` when the period is missing or unreadable.
        """
        lines = list(lines)
        statement_period = self.extract_statement_period(lines)
        bounds = self.parse_statement_period(statement_period)
        statement_date = bounds[1] if bounds else default_date
        return ParsingContext(
            statement_date=statement_date,
            account_number=self.extract_account_number(lines),
            statement_period=statement_period,
            source_file=source_file,
        )


def _texts(lines: Iterable[Union[RawLine, str]]) -> Iterator[str]:
    for line in lines:
        if isinstance(line, RawLine):
            yield line.text
        elif line:
            yield line
