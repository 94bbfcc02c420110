"""
MTG Deck Statistics Engine - Card and Deck Models
=================================================

Explicit types for the card records the deck builder hands us.

Card records arrive as loosely-typed dicts (Scryfall JSON plus a quantity).
Card.from_dict() is the single place where they are checked: missing text
becomes "", bad quantities become 1, a missing cmc is recomputed from the
mana cost. Everything downstream can then rely on the fields being present.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import WUBRG
from mana_parser import converted_cost, parse_mana_cost


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    """Return the first non-None value among several key spellings."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_colors(value: Any) -> Tuple[str, ...]:
    """Normalize a color list to an ordered tuple drawn from WUBRG."""
    if not value:
        return ()
    if isinstance(value, str):
        value = list(value)
    found = {str(color).strip().upper() for color in value}
    return tuple(color for color in WUBRG if color in found)


def _as_quantity(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1


def _as_cmc(value: Any, mana_cost: str) -> float:
    try:
        cmc = float(value)
    except (TypeError, ValueError):
        cmc = math.nan
    if not math.isfinite(cmc):
        return float(converted_cost(parse_mana_cost(mana_cost)))
    return cmc if cmc >= 0 else 0.0


@dataclass(frozen=True)
class Card:
    """
    One card record in a deck.

    Attributes:
        id: Unique id within the deck (falls back to the name).
        name: Display name, "Front // Back" for double-faced cards.
        mana_cost: Raw mana cost, e.g. "{2}{W}{U/B}". Empty for lands.
        cmc: Converted mana cost (mana value).
        type_line: e.g. "Legendary Creature — Elf Druid".
        oracle_text: Rules text, may be empty.
        colors: Colors of the card itself.
        color_identity: Commander color identity.
        quantity: Number of physical copies (basic lands can exceed 1).
    """
    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    colors: Tuple[str, ...] = ()
    color_identity: Tuple[str, ...] = ()
    quantity: int = 1

    @property
    def is_land(self) -> bool:
        return "land" in self.type_line.lower()

    @property
    def is_creature(self) -> bool:
        return "creature" in self.type_line.lower()

    @property
    def front_face_name(self) -> str:
        return self.name.split(" // ")[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """
        Build a Card from a plain record, accepting both snake_case
        (Scryfall) and camelCase key spellings.

        Raises:
            ValueError: If the record is not a dict
        """
        if not isinstance(data, dict):
            raise ValueError(f"Card record must be an object, got {type(data).__name__}")

        name = _as_text(data.get("name")).strip()
        mana_cost = _as_text(_first_present(data, "mana_cost", "manaCost"))
        oracle_text = _as_text(_first_present(data, "oracle_text", "oracleText"))

        # Double-faced cards keep their text on the faces
        faces = [face for face in data.get("card_faces") or [] if isinstance(face, dict)]
        if faces and (not oracle_text or not mana_cost):
            if not oracle_text:
                oracle_text = "\n".join(
                    _as_text(face.get("oracle_text")) for face in faces
                    if face.get("oracle_text")
                )
            if not mana_cost:
                mana_cost = _as_text(faces[0].get("mana_cost"))

        colors = _as_colors(data.get("colors"))
        color_identity = _as_colors(_first_present(data, "color_identity", "colorIdentity"))

        return cls(
            id=_as_text(data.get("id")) or name,
            name=name,
            mana_cost=mana_cost,
            cmc=_as_cmc(_first_present(data, "cmc", "convertedManaCost"), mana_cost),
            type_line=_as_text(_first_present(data, "type_line", "typeLine")),
            oracle_text=oracle_text,
            colors=colors,
            color_identity=color_identity or colors,
            quantity=_as_quantity(data.get("quantity", 1)),
        )


def count_cards_with_quantity(cards: Iterable[Card]) -> int:
    """
    Count total cards in a list, respecting quantities.

    10x Island stored as one record with quantity=10 counts as 10, not 1.
    """
    return sum(card.quantity for card in cards)


@dataclass(frozen=True)
class Deck:
    """
    A deck snapshot: optional commander plus the library.

    Built fresh by the caller for each analysis; the engine never mutates it.
    """
    cards: Tuple[Card, ...] = field(default_factory=tuple)
    commander: Optional[Card] = None

    def all_cards(self) -> List[Card]:
        """Commander (if any) followed by the library."""
        if self.commander is None:
            return list(self.cards)
        return [self.commander, *self.cards]

    def library_cards(self) -> List[Card]:
        return list(self.cards)

    def size(self, include_commander: bool = True) -> int:
        total = count_cards_with_quantity(self.cards)
        if include_commander and self.commander is not None:
            total += self.commander.quantity
        return total

    @classmethod
    def from_cards(cls, cards: Iterable[Card], commander: Optional[Card] = None) -> "Deck":
        """
        Build a deck, merging records that share an id.

        Card ids must be unique inside a deck; a repeated id is treated as
        more copies of the same card.
        """
        merged: Dict[str, Card] = {}
        for card in cards:
            existing = merged.get(card.id)
            if existing is None:
                merged[card.id] = card
            else:
                merged[card.id] = replace(existing, quantity=existing.quantity + card.quantity)
        return cls(cards=tuple(merged.values()), commander=commander)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deck":
        """Build a deck from {"commander": {...} or None, "cards": [...]}."""
        commander_data = data.get("commander")
        commander = Card.from_dict(commander_data) if isinstance(commander_data, dict) else None
        # Entries that are not card objects (None, bare names) are skipped
        cards = [Card.from_dict(card) for card in data.get("cards") or [] if isinstance(card, dict)]
        return cls.from_cards(cards, commander)
