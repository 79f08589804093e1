"""CNAB fixed-width layout and the field rules shared by parser and validator.

Each detail line is exactly 80 characters of 7-bit text:

    ===========  ======  ======  ==========================
    Field        Offset  Length  Format
    ===========  ======  ======  ==========================
    type         0       1       digit 1-9
    date         1       8       YYYYMMDD
    amount       9       10      digits, minor units
    cpf          19      11      11 digits
    card         30      12      alphanumeric or '*'
    time         42      6       HHMMSS
    owner name   48      14      text
    store name   62      19      text (cut short by the line end)
    ===========  ======  ======  ==========================
"""

import re
from dataclasses import dataclass
from datetime import date

LINE_LENGTH = 80

MIN_YEAR = 1900
MIN_TYPE_CODE = 1
MAX_TYPE_CODE = 9
CPF_LENGTH = 11
CARD_LENGTH = 12
MAX_OWNER_NAME_LENGTH = 14
MAX_STORE_NAME_LENGTH = 19


@dataclass(frozen=True)
class FieldSpec:
    """Position of a field within a CNAB line."""

    name: str
    offset: int
    length: int

    def extract(self, line: str) -> str:
        return line[self.offset:self.offset + self.length]


TYPE_FIELD = FieldSpec("type", 0, 1)
DATE_FIELD = FieldSpec("date", 1, 8)
AMOUNT_FIELD = FieldSpec("amount", 9, 10)
CPF_FIELD = FieldSpec("cpf", 19, CPF_LENGTH)
CARD_FIELD = FieldSpec("card", 30, CARD_LENGTH)
TIME_FIELD = FieldSpec("time", 42, 6)
OWNER_FIELD = FieldSpec("owner_name", 48, MAX_OWNER_NAME_LENGTH)
STORE_FIELD = FieldSpec("store_name", 62, MAX_STORE_NAME_LENGTH)

_UNSAFE_SEQUENCES = (
    ";", "--", "/*", "*/", "XP_", "SP_",
    "'", '"', "\\",
    "<", ">", "&",
    "|", "$", "`",
)
_SQL_KEYWORDS = ("SELECT", "INSERT", "UPDATE", "DELETE", "DROP", "UNION", "EXEC")

_CARD_PATTERN = re.compile(r"^[A-Za-z0-9*]+$")


def max_year(today: date | None = None) -> int:
    """Latest transaction year accepted (next calendar year)."""
    return (today or date.today()).year + 1


def is_safe_value(value: str) -> bool:
    """Check a text field against SQL, shell and markup injection vectors.

    Persistence always uses bound parameters; this filter rejects suspicious
    settlement data at the door regardless.
    """
    if not value:
        return True
    upper_value = value.upper()
    if any(seq in upper_value for seq in _UNSAFE_SEQUENCES):
        return False
    return not any(keyword in upper_value for keyword in _SQL_KEYWORDS)


def is_valid_cpf(value: str) -> bool:
    return len(value) == CPF_LENGTH and value.isascii() and value.isdigit()


def is_valid_card(value: str) -> bool:
    return len(value) == CARD_LENGTH and value.isascii() and bool(_CARD_PATTERN.match(value))


def first_non_ascii(line: str) -> int | None:
    """Return the 1-based position of the first non-ASCII character, if any."""
    for index, char in enumerate(line):
        if ord(char) > 127:
            return index + 1
    return None
