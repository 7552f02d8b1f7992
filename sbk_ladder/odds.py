import math
import re

ODDS_PATTERN = re.compile(r"^[+-]\d+$")


def is_valid_odds(odds: str) -> bool:
    """True for American odds written as a sign followed by digits (e.g. '+150', '-110')."""
    return bool(ODDS_PATTERN.match(str(odds).strip()))


def calculate_profit(stake: float, odds: str) -> float:
    """
    Calculate the profit of a winning wager at American odds.

    Formula:
        +N  =>  profit = stake * (N / 100)
        -N  =>  profit = stake / (N / 100)

    Malformed odds (missing sign, empty, non-numeric or non-positive
    magnitude) yield 0.0 instead of raising.

    Returns:
        Profit rounded to 2 decimal places.
    """
    trimmed = str(odds).strip()
    if len(trimmed) < 2:
        return 0.0

    sign = trimmed[0]
    try:
        magnitude = float(trimmed[1:])
    except ValueError:
        return 0.0

    if not math.isfinite(magnitude) or magnitude <= 0:
        return 0.0

    if sign == "+":
        profit = stake * (magnitude / 100)
    elif sign == "-":
        profit = stake / (magnitude / 100)
    else:
        return 0.0

    return round(profit, 2)


def format_currency(value: float) -> str:
    return f"${float(value):.2f}"
