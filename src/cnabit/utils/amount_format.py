"""Amount formatting utilities."""

from decimal import Decimal


def cents_to_decimal(amount: int) -> Decimal:
    """Convert an amount in centavos to reais."""
    return Decimal(amount) / Decimal(100)


def format_brl(amount: int) -> str:
    """Format an amount in centavos as Brazilian reais.

    Examples:
        123456 -> "R$ 1.234,56"
        -1500 -> "-R$ 15,00"
    """
    sign = "-" if amount < 0 else ""
    reais, centavos = divmod(abs(amount), 100)
    grouped = f"{reais:,}".replace(",", ".")
    return f"{sign}R$ {grouped},{centavos:02d}"
