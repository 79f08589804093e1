"""CNAB line decoder and file-content parser.

``decode_line`` turns one fixed-width line into a ``CNABRecord`` or a list of
errors; malformed input is an expected outcome, never an exception.
``parse_content`` applies it to every line of a file and aggregates the
results. Nothing here performs I/O.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, time
from typing import BinaryIO, Optional

from cnabit.domain.entities import CNABRecord
from cnabit.domain import cnab_layout as layout

logger = logging.getLogger(__name__)

EMPTY_FILE_ERROR = "File is empty. At least one transaction line is required."

# Only CR, LF and CRLF end a line; other control characters stay in the line.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class LineResult:
    """Outcome of decoding a single line."""

    line_number: int
    record: Optional[CNABRecord] = None
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.record is not None and not self.errors


@dataclass(frozen=True)
class ParseResult:
    """Aggregated outcome of decoding a whole file.

    ``records`` holds the lines that decoded cleanly even when other lines
    failed; callers must check ``is_valid`` before using them.
    """

    records: tuple[CNABRecord, ...] = ()
    errors: tuple[str, ...] = ()
    line_count: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors and bool(self.records)

    @property
    def valid_line_count(self) -> int:
        return len(self.records)


@dataclass
class _LineErrors:
    line_number: int
    messages: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.messages.append(f"Line {self.line_number}: {message}")


def _parse_date(raw: str) -> Optional[date]:
    if len(raw) != 8 or not raw.isascii() or not raw.isdigit():
        return None
    try:
        return date(int(raw[0:4]), int(raw[4:6]), int(raw[6:8]))
    except ValueError:
        return None


def _parse_time(raw: str) -> Optional[time]:
    if len(raw) != 6 or not raw.isascii() or not raw.isdigit():
        return None
    hours, minutes, seconds = int(raw[0:2]), int(raw[2:4]), int(raw[4:6])
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return time(hours, minutes, seconds)


def _check_text(errors: _LineErrors, value: str, label: str) -> None:
    """Report an empty or unsafe text field."""
    if not value:
        errors.add(f"{label} is required and cannot be empty.")
    elif not layout.is_safe_value(value):
        errors.add(f"{label} contains unsafe characters.")


def decode_line(line: str, line_number: int, today: Optional[date] = None) -> LineResult:
    """Decode one CNAB line.

    All field errors of a line are collected together. A wrong line length is
    the exception: it is reported alone and no field is looked at.

    Args:
        line: Line text without its terminator
        line_number: 1-based position of the line in its file
        today: Reference date for the year range check (defaults to today)

    Returns:
        LineResult holding either the record or the errors
    """
    errors = _LineErrors(line_number)

    if len(line) != layout.LINE_LENGTH:
        errors.add(f"Invalid length {len(line)}. Expected {layout.LINE_LENGTH} characters.")
        return LineResult(line_number=line_number, errors=tuple(errors.messages))

    position = layout.first_non_ascii(line)
    if position is not None:
        errors.add(f"Non-ASCII character at position {position}.")

    raw_type = layout.TYPE_FIELD.extract(line)
    type_code = int(raw_type) if raw_type.isascii() and raw_type.isdigit() else 0
    if not layout.MIN_TYPE_CODE <= type_code <= layout.MAX_TYPE_CODE:
        errors.add(f"Invalid transaction type '{raw_type}'. Must be a digit 1-9.")

    raw_date = layout.DATE_FIELD.extract(line)
    txn_date = _parse_date(raw_date)
    if txn_date is None:
        errors.add(f"Invalid date format '{raw_date}'. Expected YYYYMMDD.")
    elif not layout.MIN_YEAR <= txn_date.year <= layout.max_year(today):
        errors.add(
            f"Transaction date {txn_date.isoformat()} is out of range "
            f"({layout.MIN_YEAR}-{layout.max_year(today)})."
        )

    raw_amount = layout.AMOUNT_FIELD.extract(line)
    amount = int(raw_amount) if raw_amount.isascii() and raw_amount.isdigit() else None
    if amount is None:
        errors.add(f"Invalid amount format '{raw_amount}'. Must be numeric.")
    elif amount <= 0:
        errors.add(f"Amount must be positive (greater than 0 cents), found {amount}.")

    cpf = layout.CPF_FIELD.extract(line).strip()
    if not layout.is_valid_cpf(cpf):
        errors.add(f"Invalid CPF format '{cpf}'. Must be exactly 11 digits.")

    card = layout.CARD_FIELD.extract(line).strip()
    if not layout.is_valid_card(card):
        errors.add(
            f"Invalid card format '{card}'. Must be {layout.CARD_LENGTH} alphanumeric or '*' characters."
        )
    elif not layout.is_safe_value(card):
        errors.add("Card contains unsafe characters.")

    raw_time = layout.TIME_FIELD.extract(line)
    txn_time = _parse_time(raw_time)
    if txn_time is None:
        errors.add(f"Invalid time format '{raw_time}'. Expected HHMMSS.")

    owner_name = layout.OWNER_FIELD.extract(line).strip()
    _check_text(errors, owner_name, "Store owner name")

    store_name = layout.STORE_FIELD.extract(line).strip()
    _check_text(errors, store_name, "Store name")

    if errors.messages:
        return LineResult(line_number=line_number, errors=tuple(errors.messages))

    record = CNABRecord(
        line_number=line_number,
        type_code=type_code,
        date=txn_date,
        amount=amount,
        cpf=cpf,
        card=card,
        time=txn_time,
        owner_name=owner_name,
        store_name=store_name,
    )
    return LineResult(line_number=line_number, record=record)


def parse_content(data: bytes, today: Optional[date] = None) -> ParseResult:
    """Decode every line of a CNAB file.

    The file is valid only if every line decodes; a single bad line
    invalidates the whole file, and all line errors are reported in order.

    Args:
        data: Raw file content
        today: Reference date forwarded to the line decoder

    Returns:
        ParseResult with records on success or the collected errors
    """
    # Bytes above 0x7F become U+FFFD and are reported by decode_line.
    text = data.decode("ascii", errors="replace")
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()

    if not lines:
        return ParseResult(errors=(EMPTY_FILE_ERROR,), line_count=0)

    records: list[CNABRecord] = []
    errors: list[str] = []
    for line_number, line in enumerate(lines, start=1):
        result = decode_line(line, line_number, today=today)
        if result.is_valid:
            records.append(result.record)
        else:
            errors.extend(result.errors)

    logger.debug("Decoded %d lines: %d valid, %d errors", len(lines), len(records), len(errors))

    return ParseResult(records=tuple(records), errors=tuple(errors), line_count=len(lines))


def parse_stream(stream: BinaryIO, today: Optional[date] = None) -> ParseResult:
    """Read a binary stream to the end and parse its content."""
    return parse_content(stream.read(), today=today)
