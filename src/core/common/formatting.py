from decimal import ROUND_HALF_UP, Decimal, localcontext


def round_half_up(value: Decimal, places: int) -> Decimal:
    """Round to a fixed number of places without hitting the context precision limit."""
    value = Decimal(value)
    if not value.is_finite():
        return value
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    """Render a currency amount as `$1,234.56`."""
    quantized = round_half_up(value, 2)
    if quantized < 0:
        return f"-${quantized.copy_abs():,.2f}"
    return f"${quantized:,.2f}"


def format_percent(value: Decimal) -> str:
    """Render a percentage as `21.0%`."""
    return f"{round_half_up(value, 1):.1f}%"


def format_price(value: Decimal) -> str:
    return f"{round_half_up(value, 2):.2f}"
