"""Statement line parsers.

Each parser is a strategy with two methods: ``can_parse`` claims lines it
understands and ``parse`` turns a claimed line into one or more
ParsedTransaction records. ``StatementParser`` runs an ordered list of
strategies over a document; the first strategy that claims a line handles
it exclusively.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence, Union

import structlog

from bankledger.domain.entities import (
    ParsedTransaction,
    ParsingContext,
    RawLine,
    TransactionKind,
)
from bankledger.domain.errors import ParseError, ValidationError, unparseable_line
from bankledger.domain.text_extractor import DATE_TOKEN_PATTERN, TextExtractor
from bankledger.utils.amount_parser import (
    AMOUNT_TOKEN_PATTERN,
    find_amount_tokens,
    is_outflow_token,
    parse_amount,
)
from bankledger.utils.date_parser import parse_statement_date

logger = structlog.get_logger(__name__)

SPLIT_TOLERANCE = Decimal("0.01")

CREDIT_PATTERN = re.compile(
    r"\b(?:CREDIT|DEPOSIT|PAYMENT\s+FROM|TRANSFER\s+FROM|RECEIVED|SALARY|"
    r"INTEREST|DIVIDEND|REFUND|REVERSAL)\b",
    re.IGNORECASE,
)

FEE_WORD_PATTERN = re.compile(r"\bFEES?\b", re.IGNORECASE)
FEE_MARKER = "##"

HEADER_WORDS = (
    "date",
    "details",
    "detail",
    "description",
    "amount",
    "debit",
    "debits",
    "credit",
    "credits",
    "balance",
    "reference",
    "fee",
    "fees",
)

# Column headers are printed in title case; uppercase words such as
# "BALANCE ENQUIRY FEE" belong to transaction descriptions.
_HEADER_WORD_PATTERN = re.compile(r"\b(?:Fee|Fees|Debits|Credits|Date|Balance)\b")

# Primary movement followed by an embedded fee on the same physical line,
# e.g. "PAYMENT TO VENDOR 750.50- FEE-ELECTRONIC PAYMENT 8.90-".
MULTI_TRANSACTION_PATTERN = re.compile(
    r"^(?P<description>.+?)\s+"
    r"(?P<amount>" + AMOUNT_TOKEN_PATTERN.pattern + r")\s+"
    r"(?P<fee_description>(?:##\s*)?FEES?\b.*?)\s*"
    r"(?P<fee_amount>" + AMOUNT_TOKEN_PATTERN.pattern + r")"
    r"\s*(?:##)?\s*$",
    re.IGNORECASE,
)

_TRAILING_AMOUNT = re.compile(
    r"\s*(?:##\s*)?(?:" + AMOUNT_TOKEN_PATTERN.pattern + r")\s*(?:##)?\s*$"
)


class TransactionParser(Protocol):
    """Line-parsing strategy."""

    def can_parse(self, line: str, context: ParsingContext) -> bool:
        ...

    def parse(self, line: str, context: ParsingContext) -> list[ParsedTransaction]:
        ...


def split_date(line: str, context: ParsingContext) -> tuple[date, str]:
    """Split an optional leading date token off a line.

    Returns:
        Tuple of (transaction date, remaining text). Lines without a date
        token take the statement date from the context.

    Raises:
        ParseError: If the leading token looks like a date but is invalid
    """
    match = DATE_TOKEN_PATTERN.match(line)
    if not match:
        return context.statement_date, line
    token = match.group("date")
    try:
        day = parse_statement_date(token, context.statement_date)
    except ValueError as e:
        raise ParseError(unparseable_line(line, str(e)), line=line)
    return day, line[match.end():].strip()


def strip_trailing_amount(text: str) -> str:
    """Remove the trailing amount token and fee markers from a description."""
    return _TRAILING_AMOUNT.sub("", text).strip()


def is_table_header(line: str) -> bool:
    """Return True for column-header rows such as 'Date Details Fee Debits'."""
    if len(_HEADER_WORD_PATTERN.findall(line)) >= 2:
        return True
    words = line.strip().lower().split()
    return bool(words) and all(word in HEADER_WORDS for word in words)


def _amount(token: str, line: str) -> Decimal:
    try:
        return parse_amount(token)
    except ValueError as e:
        raise ParseError(unparseable_line(line, str(e)), line=line)


def _require(line: Optional[str], context: Optional[ParsingContext]) -> None:
    if line is None:
        raise ValidationError("Cannot parse a missing line")
    if context is None:
        raise ValidationError("Cannot parse without a parsing context")


class MultiTransactionParser:
    """Split a line holding a primary transaction and its embedded fee.

    The primary movement is a DEBIT when printed with an outflow sign and a
    CREDIT otherwise; the embedded fee is always a FEE.

    The two parts must account for every amount token on the line, so a line
    with a further amount inside the primary description (e.g.
    "REFUND 20.00 ORDER 100.00- FEE 5.00-") is a ParseError.
    """

    def can_parse(self, line: str, context: ParsingContext) -> bool:
        if not line:
            return False
        _, body = _safe_split_date(line, context)
        return MULTI_TRANSACTION_PATTERN.match(body) is not None

    def parse(self, line: str, context: ParsingContext) -> list[ParsedTransaction]:
        _require(line, context)
        day, body = split_date(line, context)
        match = MULTI_TRANSACTION_PATTERN.match(body)
        if match is None:
            raise ParseError(unparseable_line(line, "not a multi-transaction line"), line=line)

        amount_token = match.group("amount")
        fee_token = match.group("fee_amount")
        primary_amount = abs(_amount(amount_token, line))
        fee_amount = abs(_amount(fee_token, line))
        kind = TransactionKind.DEBIT if is_outflow_token(amount_token) else TransactionKind.CREDIT

        fee_description = match.group("fee_description").replace(FEE_MARKER, "")
        fee_description = fee_description.strip(" :-") or "FEE"
        if not fee_description.upper().startswith("FEE"):
            fee_description = f"FEE {fee_description}"

        transactions = [
            ParsedTransaction.create(
                date=day,
                description=match.group("description"),
                amount=primary_amount,
                kind=kind,
                source_line=line,
                context=context,
            ),
            ParsedTransaction.create(
                date=day,
                description=fee_description,
                amount=fee_amount,
                kind=TransactionKind.FEE,
                source_line=line,
                context=context,
            ),
        ]

        line_total = sum(abs(_amount(token, line)) for token in find_amount_tokens(body))
        split_total = sum(txn.amount for txn in transactions)
        if abs(line_total - split_total) > SPLIT_TOLERANCE:
            raise ParseError(
                unparseable_line(
                    line, f"split total {split_total} does not match line total {line_total}"
                ),
                line=line,
            )
        return transactions


class ServiceFeeParser:
    """Parse bank service fee lines (marked with '##' or the word FEE)."""

    def can_parse(self, line: str, context: ParsingContext) -> bool:
        if not line:
            return False
        has_marker = FEE_MARKER in line or FEE_WORD_PATTERN.search(line) is not None
        if not has_marker or is_table_header(line):
            return False
        return _TRAILING_AMOUNT.search(line) is not None

    def parse(self, line: str, context: ParsingContext) -> list[ParsedTransaction]:
        _require(line, context)
        day, body = split_date(line, context)
        tokens = find_amount_tokens(body)
        if not tokens:
            raise ParseError(unparseable_line(line, "no fee amount"), line=line)
        amount = abs(_amount(tokens[-1], line))
        description = strip_trailing_amount(body).replace(FEE_MARKER, "").strip() or "SERVICE FEE"
        return [
            ParsedTransaction.create(
                date=day,
                description=description,
                amount=amount,
                kind=TransactionKind.FEE,
                source_line=line,
                context=context,
            )
        ]


class CreditTransactionParser:
    """Parse deposits and incoming transfers carrying a single positive amount."""

    def can_parse(self, line: str, context: ParsingContext) -> bool:
        if not line or FEE_MARKER in line or FEE_WORD_PATTERN.search(line):
            return False
        if not CREDIT_PATTERN.search(line):
            return False
        tokens = find_amount_tokens(line)
        return len(tokens) == 1 and not is_outflow_token(tokens[0])

    def parse(self, line: str, context: ParsingContext) -> list[ParsedTransaction]:
        _require(line, context)
        day, body = split_date(line, context)
        tokens = find_amount_tokens(body)
        if len(tokens) != 1:
            raise ParseError(unparseable_line(line, "expected a single amount"), line=line)
        return [
            ParsedTransaction.create(
                date=day,
                description=strip_trailing_amount(body),
                amount=abs(_amount(tokens[0], line)),
                kind=TransactionKind.CREDIT,
                source_line=line,
                context=context,
            )
        ]


class DebitTransactionParser:
    """Parse ordinary outgoing payments carrying a single outflow amount."""

    def can_parse(self, line: str, context: ParsingContext) -> bool:
        if not line:
            return False
        tokens = find_amount_tokens(line)
        return len(tokens) == 1 and is_outflow_token(tokens[0])

    def parse(self, line: str, context: ParsingContext) -> list[ParsedTransaction]:
        _require(line, context)
        day, body = split_date(line, context)
        tokens = find_amount_tokens(body)
        if len(tokens) != 1:
            raise ParseError(unparseable_line(line, "expected a single amount"), line=line)
        return [
            ParsedTransaction.create(
                date=day,
                description=strip_trailing_amount(body),
                amount=abs(_amount(tokens[0], line)),
                kind=TransactionKind.DEBIT,
                source_line=line,
                context=context,
            )
        ]


def _safe_split_date(line: str, context: ParsingContext) -> tuple[Optional[date], str]:
    if context is None:
        return None, line
    try:
        return split_date(line, context)
    except ParseError:
        return None, line


# Priority order. Multi-transaction lines come first since a simpler
# parser would otherwise claim them.
DEFAULT_PARSERS: tuple = (
    MultiTransactionParser(),
    ServiceFeeParser(),
    CreditTransactionParser(),
    DebitTransactionParser(),
)


@dataclass
class ParseOutcome:
    """Transactions and diagnostics from parsing one document's lines."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    transaction_lines: int = 0
    unmatched_lines: list[RawLine] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched_lines)


class StatementParser:
    """Run parser strategies over the lines of a statement."""

    def __init__(
        self,
        parsers: Optional[Sequence[TransactionParser]] = None,
        extractor: Optional[TextExtractor] = None,
    ):
        """Initialize statement parser.

        Args:
            parsers: Strategies in priority order (defaults to DEFAULT_PARSERS)
            extractor: Text extractor used to pre-filter transaction lines
        """
        self.parsers = list(parsers if parsers is not None else DEFAULT_PARSERS)
        self.extractor = extractor or TextExtractor()

    def select_parser(self, line: str, context: ParsingContext) -> Optional[TransactionParser]:
        """Return the first strategy that claims the line, or None."""
        for parser in self.parsers:
            if parser.can_parse(line, context):
                return parser
        return None

    def parse_line(self, line: str, context: ParsingContext) -> Optional[list[ParsedTransaction]]:
        """Parse a single line with the first claiming strategy.

        Returns:
            Parsed transactions, or None if no strategy claims the line

        Raises:
            ParseError: If the claiming strategy fails on the line
            ValidationError: If line or context is missing
        """
        _require(line, context)
        parser = self.select_parser(line, context)
        if parser is None:
            return None
        return parser.parse(line, context)

    def parse_lines(
        self, lines: Iterable[Union[RawLine, str]], context: ParsingContext
    ) -> ParseOutcome:
        """Parse every transaction line of a document.

        Lines no strategy claims are dropped and counted; a line whose
        strategy fails is recorded as an error and skipped. A missing
        context or line aborts the whole document.
        """
        if context is None:
            raise ValidationError("Cannot parse without a parsing context")

        outcome = ParseOutcome()
        for index, line in enumerate(lines, start=1):
            if line is None:
                raise ValidationError(f"Line {index} is missing")
            raw = line if isinstance(line, RawLine) else RawLine(
                text=line, page_number=1, line_number=index
            )
            if not self.extractor.is_transaction_line(raw):
                continue
            outcome.transaction_lines += 1

            try:
                parsed = self.parse_line(raw.text, context)
            except ParseError as e:
                logger.warning(
                    "line_parse_failed",
                    page=raw.page_number,
                    line=raw.line_number,
                    error=str(e),
                )
                outcome.errors.append(
                    f"Page {raw.page_number}, line {raw.line_number}: {e}"
                )
                continue

            if parsed is None:
                logger.debug(
                    "line_unmatched", page=raw.page_number, line=raw.line_number, text=raw.text
                )
                outcome.unmatched_lines.append(raw)
                continue
            outcome.transactions.extend(parsed)

        logger.info(
            "statement_lines_parsed",
            source=context.source_file,
            transactions=len(outcome.transactions),
            unmatched=outcome.unmatched_count,
            errors=len(outcome.errors),
        )
        return outcome
