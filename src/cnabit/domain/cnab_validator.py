"""Business-rule validation of decoded CNAB records.

The decoder guards ingestion; this validator re-checks a record no matter
where it came from (freshly decoded, rebuilt from storage, hand-made in a
test). Both read their limits from ``cnab_layout`` so they agree on what a
valid record is.
"""

from datetime import date
from typing import Iterable, Optional

from cnabit.domain.entities import CNABRecord
from cnabit.domain import cnab_layout as layout


def _check_name(errors: list[str], prefix: str, value: str, label: str, max_length: int) -> None:
    if not value or not value.strip():
        errors.append(f"{prefix}{label} is required and cannot be empty.")
    elif len(value) > max_length:
        errors.append(
            f"{prefix}{label} exceeds maximum length ({max_length} chars, found {len(value)})."
        )
    elif not layout.is_safe_value(value):
        errors.append(f"{prefix}{label} contains unsafe characters.")


def validate_record(
    record: CNABRecord, line_number: Optional[int] = None, today: Optional[date] = None
) -> list[str]:
    """Validate a record against every business rule.

    Checks are never short-circuited between fields, so the caller gets the
    complete list of violations.

    Args:
        record: Record to validate
        line_number: Line number used in messages (defaults to record.line_number)
        today: Reference date for the year range check

    Returns:
        List of error messages, empty when the record is valid
    """
    number = record.line_number if line_number is None else line_number
    prefix = f"Line {number}: "
    errors: list[str] = []

    if not layout.MIN_TYPE_CODE <= record.type_code <= layout.MAX_TYPE_CODE:
        errors.append(f"{prefix}Invalid transaction type {record.type_code}. Must be 1-9.")

    upper_year = layout.max_year(today)
    if not layout.MIN_YEAR <= record.date.year <= upper_year:
        errors.append(
            f"{prefix}Transaction date {record.date.isoformat()} is out of range "
            f"({layout.MIN_YEAR}-{upper_year})."
        )

    if record.amount <= 0:
        errors.append(f"{prefix}Amount must be positive (greater than 0 cents), found {record.amount}.")

    if not record.cpf or not record.cpf.strip():
        errors.append(f"{prefix}CPF is required and cannot be empty.")
    elif not layout.is_valid_cpf(record.cpf):
        errors.append(f"{prefix}Invalid CPF format '{record.cpf}'. Must be exactly 11 digits.")

    if not record.card or not record.card.strip():
        errors.append(f"{prefix}Card number is required and cannot be empty.")
    elif len(record.card) != layout.CARD_LENGTH:
        errors.append(
            f"{prefix}Invalid card format '{record.card}'. Must be exactly {layout.CARD_LENGTH} characters."
        )
    elif not layout.is_valid_card(record.card):
        errors.append(f"{prefix}Card format invalid. Must contain only alphanumeric or asterisks (*).")
    elif not layout.is_safe_value(record.card):
        errors.append(f"{prefix}Card contains unsafe characters.")

    _check_name(errors, prefix, record.owner_name, "Store owner name", layout.MAX_OWNER_NAME_LENGTH)
    _check_name(errors, prefix, record.store_name, "Store name", layout.MAX_STORE_NAME_LENGTH)

    return errors


def validate_records(records: Iterable[CNABRecord], today: Optional[date] = None) -> list[str]:
    """Validate many records, concatenating their errors in input order."""
    errors: list[str] = []
    for record in records:
        errors.extend(validate_record(record, today=today))
    return errors
