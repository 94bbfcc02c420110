"""
MTG Deck Statistics Engine - Bracket Classifier
===============================================

Assigns a deck to one of the five Commander brackets.

The rules form an ordered decision list - the FIRST matching rule wins:

    1. Exhibition  no MLD, no extra turns, no combo pieces, no Game
                   Changers, at most 2 tutors
    2. Core        same, with at most 4 tutors
    3. Upgraded    no MLD, no extra turns, at most 3 Game Changers
    4. Optimized   more than 3 Game Changers
    5. CEDH        everything else

Reordering these rules changes results (e.g. a deck with one extra turn
spell and 2 Game Changers falls through 1-4 and lands in 5), so the order
must be kept as is.

Combo detection is coarse: any card mentioning
"infinite", "untap" or "create a copy" counts as a potential combo piece.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from card_classifier import CardClassifier
from card_models import Card
from config import (
    BRACKET1_MAX_TUTORS, BRACKET2_MAX_TUTORS, BRACKET3_MAX_GAME_CHANGERS,
    BRACKET_DEFINITIONS, GAME_CHANGERS,
)


@dataclass(frozen=True)
class BracketResult:
    """Outcome of a bracket classification. Recomputed on every call."""
    bracket: int
    name: str
    description: str
    game_changer_count: int
    tutor_count: int
    potential_combo_count: int
    has_mld: bool
    has_extra_turns: bool
    game_changers: Tuple[str, ...] = ()
    reasoning: Tuple[str, ...] = ()

    @property
    def no_mld(self) -> bool:
        return not self.has_mld

    @property
    def no_extra_turns(self) -> bool:
        return not self.has_extra_turns

    @property
    def no_infinite_combo(self) -> bool:
        return self.potential_combo_count == 0

    @property
    def no_game_changers(self) -> bool:
        return self.game_changer_count == 0

    @property
    def few_tutors(self) -> bool:
        return self.tutor_count <= BRACKET1_MAX_TUTORS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bracket": self.bracket,
            "name": self.name,
            "description": self.description,
            "game_changer_count": self.game_changer_count,
            "game_changers": list(self.game_changers),
            "tutor_count": self.tutor_count,
            "potential_combo_count": self.potential_combo_count,
            "has_mld": self.has_mld,
            "has_extra_turns": self.has_extra_turns,
            "restrictions": {
                "no_mld": self.no_mld,
                "no_extra_turns": self.no_extra_turns,
                "no_infinite_combo": self.no_infinite_combo,
                "no_game_changers": self.no_game_changers,
                "few_tutors": self.few_tutors,
            },
            "reasoning": list(self.reasoning),
        }


def decide_bracket(
    has_mld: bool,
    has_extra_turns: bool,
    potential_combo_count: int,
    game_changer_count: int,
    tutor_count: int,
) -> Tuple[int, List[str]]:
    """
    Run the bracket decision list.

    Returns:
        Tuple of (bracket number, reasoning lines)
    """
    reasoning = []
    casual = not has_mld and not has_extra_turns

    if has_mld:
        reasoning.append("Mass land destruction present")
    if has_extra_turns:
        reasoning.append("Extra turn effects present")

    if casual and potential_combo_count == 0 and game_changer_count == 0:
        if tutor_count <= BRACKET1_MAX_TUTORS:
            reasoning.append(
                f"No Game Changers, no combo pieces, {tutor_count} tutor(s) "
                f"(≤{BRACKET1_MAX_TUTORS})"
            )
            return 1, reasoning
        if tutor_count <= BRACKET2_MAX_TUTORS:
            reasoning.append(
                f"No Game Changers, no combo pieces, {tutor_count} tutors "
                f"(≤{BRACKET2_MAX_TUTORS})"
            )
            return 2, reasoning

    if casual and game_changer_count <= BRACKET3_MAX_GAME_CHANGERS:
        reasoning.append(
            f"{game_changer_count} Game Changer(s) (≤{BRACKET3_MAX_GAME_CHANGERS}), "
            f"{potential_combo_count} potential combo piece(s), {tutor_count} tutor(s)"
        )
        return 3, reasoning

    if game_changer_count > BRACKET3_MAX_GAME_CHANGERS:
        reasoning.append(
            f"{game_changer_count} Game Changers (more than {BRACKET3_MAX_GAME_CHANGERS})"
        )
        return 4, reasoning

    reasoning.append("Restricted strategies with few Game Changers - no lower bracket fits")
    return 5, reasoning


class BracketClassifier:
    """
    Computes the bracket for a list of cards (commander included).

    Counts are per card record, not per copy: 10 Islands are one entry.
    """

    def __init__(
        self,
        classifier: Optional[CardClassifier] = None,
        game_changers: Optional[Iterable[str]] = None,
    ):
        self.classifier = classifier or CardClassifier()
        names = GAME_CHANGERS if game_changers is None else game_changers
        self.game_changers: FrozenSet[str] = frozenset(name.lower() for name in names)

    def find_game_changers(self, cards: Iterable[Card]) -> List[str]:
        """Names of Game Changers in the deck, deduplicated, in deck order."""
        found = []
        seen = set()
        for card in cards:
            if not self.classifier.is_game_changer(card, self.game_changers):
                continue
            key = card.name.lower()
            if key not in seen:
                seen.add(key)
                found.append(card.name)
        return found

    def classify(self, cards: Iterable[Card]) -> BracketResult:
        cards = list(cards)
        classifier = self.classifier

        game_changers = self.find_game_changers(cards)
        tutor_count = sum(1 for card in cards if classifier.is_tutor(card))
        combo_count = sum(1 for card in cards if classifier.is_potential_combo(card))
        has_mld = any(classifier.is_mass_land_destruction(card) for card in cards)
        has_extra_turns = any(classifier.is_extra_turn(card) for card in cards)

        bracket, reasoning = decide_bracket(
            has_mld=has_mld,
            has_extra_turns=has_extra_turns,
            potential_combo_count=combo_count,
            game_changer_count=len(game_changers),
            tutor_count=tutor_count,
        )
        definition = BRACKET_DEFINITIONS[bracket]

        return BracketResult(
            bracket=bracket,
            name=definition["name"],
            description=definition["description"],
            game_changer_count=len(game_changers),
            tutor_count=tutor_count,
            potential_combo_count=combo_count,
            has_mld=has_mld,
            has_extra_turns=has_extra_turns,
            game_changers=tuple(game_changers),
            reasoning=tuple(reasoning),
        )
