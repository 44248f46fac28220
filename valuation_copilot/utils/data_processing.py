import re

_NUMBER_PATTERN = re.compile(r"(\d+(\.\d+)?)")


def safe_float(value, default=0.0):
    if value is None:
        return default
    try:
        if isinstance(value, (list, tuple)):
            value = value[0] if value else default
        str_value = str(value).replace("$", "").replace(",", "").strip()
        return float(str_value) if str_value else default
    except (ValueError, TypeError):
        return default


def extract_number(text):
    """Pull the first amount out of free text, honouring a million/thousand suffix.

    "50k" -> 50000.0, "2.5 million" -> 2500000.0, no digits -> None. The
    suffix test looks at the whole text, not just the characters after the
    number, and only the first number in the text is used.
    """
    lowered = text.lower()
    match = _NUMBER_PATTERN.search(lowered)
    if not match:
        return None

    value = float(match.group(1))
    if "m" in lowered or "million" in lowered:
        value *= 1_000_000
    elif "k" in lowered or "thousand" in lowered:
        value *= 1_000
    return value


def format_currency(value):
    if value != value or value in (float("inf"), float("-inf")):
        return "n/a"
    sign = "-" if value < 0 else ""
    value = abs(value)
    if float(value).is_integer():
        return f"{sign}${value:,.0f}"
    return f"{sign}${value:,.2f}"


def format_compact(value):
    """Short form for chart axes, e.g. $12.5M."""
    if abs(value) >= 1_000_000:
        return f"${value / 1_000_000:,.1f}M"
    if abs(value) >= 1_000:
        return f"${value / 1_000:,.0f}k"
    return format_currency(value)
