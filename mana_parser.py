"""
MTG Deck Statistics Engine - Mana Cost Parser
=============================================

Turns a Scryfall-style mana cost string such as "{2}{W}{U/B}" into a list
of typed symbols, and counts the colored pips they contribute.

Symbol kinds:
- colored:    {W} {U} {B} {R} {G}
- hybrid:     {U/B}, {2/W}        (one pip for each colored half)
- phyrexian:  {W/P}, {G/U/P}      (still counts toward its color)
- generic:    {0} {1} {12} ...    (converted cost only)
- variable:   {X} {Y} {Z}         (zero pips, zero cost)
- colorless:  {C}

Anything else ({S}, {HW}, {∞}, typos, future symbols) is skipped. Catalog
data is free-form, so the parser never raises.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from config import WUBRG


SYMBOL_PATTERN = re.compile(r"\{([^}]*)\}")

COLORED = "colored"
HYBRID = "hybrid"
PHYREXIAN = "phyrexian"
GENERIC = "generic"
VARIABLE = "variable"
COLORLESS = "colorless"

VARIABLE_TOKENS = {"X", "Y", "Z"}


@dataclass(frozen=True)
class ManaSymbol:
    """A single symbol from a mana cost."""
    kind: str
    colors: Tuple[str, ...] = ()
    amount: int = 0
    raw: str = ""


def _parse_token(token: str):
    """Parse the inside of one {...} group. Returns None for unknown tokens."""
    token = token.strip().upper()
    if not token:
        return None

    if token in WUBRG:
        return ManaSymbol(COLORED, (token,), 0, token)

    if token.isdigit():
        return ManaSymbol(GENERIC, (), int(token), token)

    if token in VARIABLE_TOKENS:
        return ManaSymbol(VARIABLE, (), 0, token)

    if token == "C":
        return ManaSymbol(COLORLESS, (), 0, token)

    if "/" in token:
        parts = [part for part in token.split("/") if part]
        colors = tuple(part for part in parts if part in WUBRG)
        amounts = [int(part) for part in parts if part.isdigit()]

        if "P" in parts and colors:
            return ManaSymbol(PHYREXIAN, colors, 0, token)
        if colors:
            return ManaSymbol(HYBRID, colors, amounts[0] if amounts else 0, token)

    return None


def parse_mana_cost(mana_cost: str) -> List[ManaSymbol]:
    """
    Parse a mana cost string into an ordered list of symbols.

    Args:
        mana_cost: Raw cost such as "{2}{W}{U/B}". None or "" is allowed.

    Returns:
        List of ManaSymbol, in the order they appear. Unrecognized tokens
        are dropped.

    Example:
        >>> [s.kind for s in parse_mana_cost("{2}{W}{U/B}")]
        ['generic', 'colored', 'hybrid']
    """
    if not mana_cost:
        return []

    symbols = []
    for token in SYMBOL_PATTERN.findall(str(mana_cost)):
        symbol = _parse_token(token)
        if symbol is not None:
            symbols.append(symbol)
    return symbols


def count_pips(symbols: List[ManaSymbol]) -> Dict[str, int]:
    """
    Count colored pips per color.

    Hybrid and Phyrexian symbols add a pip to EACH of their colors, so
    {U/B} counts as one blue and one black pip.
    """
    pips = {color: 0 for color in WUBRG}
    for symbol in symbols:
        if symbol.kind in (COLORED, HYBRID, PHYREXIAN):
            for color in symbol.colors:
                pips[color] += 1
    return pips


def converted_cost(symbols: List[ManaSymbol]) -> int:
    """Mana value of a parsed cost. X counts as zero."""
    total = 0
    for symbol in symbols:
        if symbol.kind == GENERIC:
            total += symbol.amount
        elif symbol.kind == HYBRID:
            # {2/W} is worth 2, {U/B} is worth 1
            total += max(1, symbol.amount)
        elif symbol.kind in (COLORED, PHYREXIAN, COLORLESS):
            total += 1
    return total


def pips_for_cost(mana_cost: str) -> Dict[str, int]:
    """Shortcut: parse a cost string and count its pips."""
    return count_pips(parse_mana_cost(mana_cost))
