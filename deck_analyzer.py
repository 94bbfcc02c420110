"""
MTG Deck Statistics Engine - Deck Analysis Engine
=================================================

This module ties the pieces together: give it a deck snapshot and it
returns every statistic the deck page shows.

It computes:
- Mana curve, card types and card colors
- Mana sources and colored pip requirements
- Functional buckets (ramp, draw, tutors, removal, ...)
- The Commander bracket, with the Game Changers found
- Singleton legality warnings

Analysis is synchronous and has no side effects. Opening-hand odds are a
separate, asynchronous job - see mulligan_simulator.MulliganWorker.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from bracket_classifier import BracketClassifier, BracketResult
from card_classifier import CardClassifier
from card_models import Card, Deck
from config import (
    BASIC_LAND_NAMES, DEFAULT_RULES, LIMITED_COPIES_CARDS,
    UNLIMITED_COPIES_CARDS, ClassificationRules,
)
from deck_aggregator import DeckAggregator


@dataclass
class DeckAnalysis:
    """
    Container for all the analysis results of a deck.

    This dataclass holds everything we learn about a deck,
    making it easy to pass around and display.
    """
    # Basic deck info
    commander: str
    total_cards: int

    # Curve and composition (library only)
    mana_curve: Dict[str, int]
    average_cmc: float
    type_breakdown: Dict[str, int]
    color_distribution: Dict[str, int]

    # Mana base (commander included)
    color_sources: Dict[str, int]
    pip_requirements: Dict[str, int]

    # Functional roles (commander included)
    functional_buckets: Dict[str, int]
    power_level: int

    # Bracket
    bracket_result: BracketResult

    recommendations: List[str] = field(default_factory=list)
    balance_suggestions: List[str] = field(default_factory=list)

    # Legality warnings (illegal duplicates)
    legality_warnings: List[str] = field(default_factory=list)

    @property
    def suggested_bracket(self) -> int:
        return self.bracket_result.bracket

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commander": self.commander,
            "total_cards": self.total_cards,
            "mana_curve": dict(self.mana_curve),
            "average_cmc": self.average_cmc,
            "type_breakdown": dict(self.type_breakdown),
            "color_distribution": dict(self.color_distribution),
            "color_sources": dict(self.color_sources),
            "pip_requirements": dict(self.pip_requirements),
            "functional_buckets": dict(self.functional_buckets),
            "power_level": self.power_level,
            "bracket_result": self.bracket_result.to_dict(),
            "recommendations": list(self.recommendations),
            "balance_suggestions": list(self.balance_suggestions),
            "legality_warnings": list(self.legality_warnings),
        }


class DeckAnalyzer:
    """
    Analyzes Commander decks.

    The keyword tables and the Game Changers list are passed in, so the
    analyzer holds no mutable global state and one instance can serve
    every request.
    """

    def __init__(
        self,
        rules: ClassificationRules = DEFAULT_RULES,
        game_changers: Optional[Iterable[str]] = None,
        verbose: bool = False,
    ):
        """
        Args:
            rules: Keyword tables for card classification
            game_changers: Game Changer names. None uses the curated list
                from config (see scryfall_client.load_game_changers to
                refresh it).
            verbose: Print progress lines while analyzing
        """
        self.classifier = CardClassifier(rules)
        self.aggregator = DeckAggregator(self.classifier)
        self.bracket_classifier = BracketClassifier(self.classifier, game_changers)
        self.verbose = verbose

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def _validate_card_quantities(self, cards: Iterable[Card]) -> List[str]:
        """
        Check for illegal duplicate cards in Commander.

        Commander is singleton format - only 1 copy of each card allowed,
        with exceptions for:
        - Basic lands (unlimited)
        - "Any number" cards like Relentless Rats (unlimited)
        - Special cases like Seven Dwarves (up to 7) and Nazgûl (up to 9)

        Returns:
            List of warning strings for illegal duplicates
        """
        warnings = []

        for card in cards:
            name_lower = card.name.lower()
            quantity = card.quantity

            if quantity <= 1:
                continue  # No issue

            if name_lower in BASIC_LAND_NAMES or name_lower in UNLIMITED_COPIES_CARDS:
                continue

            if name_lower in LIMITED_COPIES_CARDS:
                limit = LIMITED_COPIES_CARDS[name_lower]
                if quantity > limit:
                    warnings.append(
                        f"⚠️ ILLEGAL: {quantity}x {card.name} (max {limit} allowed)"
                    )
                continue

            warnings.append(
                f"⚠️ ILLEGAL: {quantity}x {card.name} (Commander is singleton - only 1 copy allowed)"
            )

        return warnings

    def analyze(self, deck: Deck) -> DeckAnalysis:
        """
        Perform a complete analysis of a Commander deck.

        Args:
            deck: Deck snapshot (commander optional)

        Returns:
            DeckAnalysis object with all computed metrics
        """
        self._log("\n🔮 Starting deck analysis...")

        legality_warnings = self._validate_card_quantities(deck.all_cards())
        if legality_warnings:
            self._log(f"  ⚠️ Found {len(legality_warnings)} legality issue(s):")
            for warning in legality_warnings:
                self._log(f"      {warning}")

        self._log("  📊 Aggregating deck statistics...")
        stats = self.aggregator.aggregate(deck)

        self._log("  🔍 Checking bracket restrictions...")
        bracket_result = self.bracket_classifier.classify(deck.all_cards())

        self._log(f"  🎯 Analysis complete! Suggested bracket: {bracket_result.bracket}")

        return DeckAnalysis(
            commander=deck.commander.name if deck.commander else "Unknown",
            total_cards=deck.size(),
            mana_curve=stats.mana_curve,
            average_cmc=stats.average_cmc,
            type_breakdown=stats.type_breakdown,
            color_distribution=stats.color_distribution,
            color_sources=stats.color_sources,
            pip_requirements=stats.pip_requirements,
            functional_buckets=stats.functional_buckets,
            power_level=stats.power_level,
            bracket_result=bracket_result,
            recommendations=stats.recommendations,
            balance_suggestions=stats.balance_suggestions,
            legality_warnings=legality_warnings,
        )


def analyze(deck: Union[Deck, Dict[str, Any]]) -> DeckAnalysis:
    """Analyze a Deck (or a plain {"commander": ..., "cards": [...]} dict)."""
    if not isinstance(deck, Deck):
        deck = Deck.from_dict(deck)
    return DeckAnalyzer().analyze(deck)
