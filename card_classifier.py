"""
MTG Deck Statistics Engine - Card Classifier
============================================

Derives everything we need to know about a single card:
- Which colors of mana it produces (for color-source counts)
- Which colored pips its cost requires
- Its primary card type
- Which functional buckets it belongs to (ramp, card draw, tutors, ...)

Buckets are NOT exclusive - a card like "Search your library for a basic
land card... then draw a card" is both ramp and card draw.

All checks are simple phrase matches on lower-cased text. They are
heuristics: good enough for deck statistics, not a rules engine.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from card_models import Card
from config import DEFAULT_RULES, WUBRG, ClassificationRules
from mana_parser import COLORLESS, COLORED, parse_mana_cost, pips_for_cost


# "Add {G}", "Add {C}{C}", "Add {R} or {G}", "Add {W}, {U}, or {B}"
ADD_MANA_PATTERN = re.compile(r"\badd\s+((?:\{[^}]+\}(?:,?\s*(?:or\s+)?)?)+)")

SOURCE_ORDER = WUBRG + ("C",)

# Bucket names
RAMP = "ramp"
CARD_DRAW = "card_draw"
MASS_LAND_DESTRUCTION = "mass_land_destruction"
EXTRA_TURN = "extra_turn"
TUTOR = "tutor"
POTENTIAL_COMBO = "potential_combo"
REMOVAL = "removal"
PROTECTION = "protection"
INTERACTION = "interaction"
FAST_MANA = "fast_mana"
COMBAT_WIN = "combat_win"
ALTERNATIVE_WIN = "alternative_win"

BUCKET_NAMES = (
    RAMP,
    CARD_DRAW,
    MASS_LAND_DESTRUCTION,
    EXTRA_TURN,
    TUTOR,
    POTENTIAL_COMBO,
    REMOVAL,
    PROTECTION,
    INTERACTION,
    FAST_MANA,
    COMBAT_WIN,
    ALTERNATIVE_WIN,
)


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(phrase in text for phrase in phrases)


@dataclass(frozen=True)
class CardClassification:
    """Everything the classifier derived for one card."""
    card: Card
    primary_type: str
    produced_colors: Tuple[str, ...]
    pips: Dict[str, int] = field(default_factory=dict)
    buckets: FrozenSet[str] = frozenset()

    @property
    def quantity(self) -> int:
        return self.card.quantity

    def in_bucket(self, bucket: str) -> bool:
        return bucket in self.buckets


class CardClassifier:
    """
    Classifies single cards using a set of read-only keyword tables.

    The rules are injected so tests (or a different format) can use their
    own tables:

        classifier = CardClassifier(ClassificationRules(tutor=("tutor",)))
    """

    def __init__(self, rules: ClassificationRules = DEFAULT_RULES):
        self.rules = rules

    # ------------------------------------------------------------------
    # Mana production
    # ------------------------------------------------------------------

    def mana_producing_colors(self, card: Card) -> Tuple[str, ...]:
        """
        Work out which colors of mana a card can produce.

        1. Basic lands: read the land types off the type line.
        2. Otherwise: every "add {..}" clause in the rules text.
        3. Lands with no explicit clause (Command Tower, fetch lands):
           fall back to the card's color identity.

        Returns:
            Tuple of colors in WUBRGC order ("C" = colorless). May be empty.
        """
        type_line = card.type_line.lower()
        produced: Set[str] = set()

        if "basic" in type_line:
            for land_type, color in self.rules.basic_land_types:
                if land_type in type_line:
                    produced.add(color)
            return tuple(color for color in SOURCE_ORDER if color in produced)

        text = card.oracle_text.lower()
        for match in ADD_MANA_PATTERN.finditer(text):
            for symbol in parse_mana_cost(match.group(1)):
                if symbol.kind == COLORED:
                    produced.update(symbol.colors)
                elif symbol.kind == COLORLESS:
                    produced.add("C")

        if not produced and card.is_land:
            produced.update(card.color_identity)

        return tuple(color for color in SOURCE_ORDER if color in produced)

    def pip_contribution(self, card: Card) -> Dict[str, int]:
        """Colored pips in the card's mana cost (one copy)."""
        return pips_for_cost(card.mana_cost)

    # ------------------------------------------------------------------
    # Types and buckets
    # ------------------------------------------------------------------

    def primary_type(self, card: Card) -> str:
        """First matching type in priority order, else "Other"."""
        type_line = card.type_line.lower()
        for card_type in self.rules.type_priority:
            if card_type.lower() in type_line:
                return card_type
        return "Other"

    def is_ramp(self, card: Card) -> bool:
        if card.is_land:
            return False
        text = card.oracle_text.lower()
        if _contains_any(text, self.rules.ramp):
            return True
        # Mana dorks phrased unusually ("Add X mana in any combination...")
        return card.is_creature and "add" in text and "mana" in text

    def is_card_draw(self, card: Card) -> bool:
        return _contains_any(card.oracle_text.lower(), self.rules.card_draw)

    def is_mass_land_destruction(self, card: Card) -> bool:
        text = card.oracle_text.lower()
        if _contains_any(text, self.rules.mass_land_destruction):
            return True
        return "destroy all" in text and "land" in text

    def is_extra_turn(self, card: Card) -> bool:
        return _contains_any(card.oracle_text.lower(), self.rules.extra_turn)

    def is_tutor(self, card: Card) -> bool:
        return _contains_any(card.oracle_text.lower(), self.rules.tutor)

    def is_potential_combo(self, card: Card) -> bool:
        """Approximate: flags likely combo pieces, does not verify combos."""
        return _contains_any(card.oracle_text.lower(), self.rules.potential_combo)

    def functional_buckets(self, card: Card) -> FrozenSet[str]:
        """
        All functional buckets this card belongs to.

        Each predicate is independent, so the result can hold zero, one or
        several bucket names.
        """
        text = card.oracle_text.lower()
        name = card.name.lower()
        buckets = set()

        if self.is_ramp(card):
            buckets.add(RAMP)
        if self.is_card_draw(card):
            buckets.add(CARD_DRAW)
        if self.is_mass_land_destruction(card):
            buckets.add(MASS_LAND_DESTRUCTION)
        if self.is_extra_turn(card):
            buckets.add(EXTRA_TURN)
        if self.is_tutor(card):
            buckets.add(TUTOR)
        if self.is_potential_combo(card):
            buckets.add(POTENTIAL_COMBO)
        if _contains_any(text, self.rules.removal):
            buckets.add(REMOVAL)
        if _contains_any(text, self.rules.protection):
            buckets.add(PROTECTION)
        if _contains_any(text, self.rules.interaction):
            buckets.add(INTERACTION)
        if _contains_any(name, self.rules.fast_mana_names):
            buckets.add(FAST_MANA)
        if card.is_creature and _contains_any(text, self.rules.combat_win):
            buckets.add(COMBAT_WIN)
        if _contains_any(text, self.rules.alternative_win):
            buckets.add(ALTERNATIVE_WIN)

        return frozenset(buckets)

    # ------------------------------------------------------------------
    # Game Changers
    # ------------------------------------------------------------------

    @staticmethod
    def is_game_changer(card: Card, game_changers: FrozenSet[str]) -> bool:
        """
        Check a card against a lower-cased Game Changers set.

        Double-faced cards match on either the full name or the front face
        ("Tergrid, God of Fright // Tergrid's Lantern").
        """
        name = card.name.lower()
        if name in game_changers:
            return True
        return " // " in name and card.front_face_name.lower() in game_changers

    def classify(self, card: Card) -> CardClassification:
        return CardClassification(
            card=card,
            primary_type=self.primary_type(card),
            produced_colors=self.mana_producing_colors(card),
            pips=self.pip_contribution(card),
            buckets=self.functional_buckets(card),
        )

    def classify_all(self, cards: Iterable[Card]) -> List[CardClassification]:
        return [self.classify(card) for card in cards]
