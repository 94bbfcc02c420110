"""
MTG Deck Statistics Engine - Deck Aggregator
============================================

Folds per-card classifications into deck-level statistics:
- Mana curve (non-land cards by mana value, 7+ grouped)
- Card type breakdown
- Color sources (how many cards produce each color)
- Colored pip requirements
- Functional bucket totals (ramp, card draw, tutors, ...)
- Average mana value, a rough 1-10 power level, and build suggestions

Everything is weighted by quantity and has no side effects, so it is safe to
re-run on every deck edit.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from card_classifier import (
    BUCKET_NAMES, CARD_DRAW, FAST_MANA, INTERACTION, POTENTIAL_COMBO,
    PROTECTION, RAMP, TUTOR, CardClassifier,
)
from card_models import Card, Deck
from config import CARD_TYPE_PRIORITY, WUBRG


CURVE_KEYS = ("0", "1", "2", "3", "4", "5", "6", "7+")


@dataclass
class DeckStatistics:
    """Deck-level numbers produced by DeckAggregator.aggregate()."""
    mana_curve: Dict[str, int]
    type_breakdown: Dict[str, int]
    color_distribution: Dict[str, int]
    color_sources: Dict[str, int]
    pip_requirements: Dict[str, int]
    functional_buckets: Dict[str, int]
    average_cmc: float
    power_level: int
    recommendations: List[str] = field(default_factory=list)
    balance_suggestions: List[str] = field(default_factory=list)


class DeckAggregator:
    """
    Computes deck statistics from a list of cards.

    Which cards feed which number follows the deck page:
    - curve, types, card colors, average mana value: the library only
    - color sources, pips, functional buckets, power level: library + commander
    """

    def __init__(self, classifier: Optional[CardClassifier] = None):
        self.classifier = classifier or CardClassifier()

    # ------------------------------------------------------------------
    # Curve and types
    # ------------------------------------------------------------------

    def mana_curve(self, cards: Iterable[Card]) -> Dict[str, int]:
        """
        Count non-land cards by mana value.

        Returns:
            Dict with keys "0".."6" and "7+", always all present.
        """
        curve = {key: 0 for key in CURVE_KEYS}
        for card in cards:
            if card.is_land:
                continue
            cmc = int(math.floor(card.cmc))
            key = "7+" if cmc >= 7 else str(max(cmc, 0))
            curve[key] += card.quantity
        return curve

    def type_breakdown(self, cards: Iterable[Card]) -> Dict[str, int]:
        """Count cards by their primary type (Creature wins over Artifact, etc.)."""
        breakdown = {card_type: 0 for card_type in CARD_TYPE_PRIORITY}
        breakdown["Other"] = 0
        for card in cards:
            primary = self.classifier.primary_type(card)
            breakdown[primary] = breakdown.get(primary, 0) + card.quantity
        return breakdown

    def average_cmc(self, cards: Iterable[Card]) -> float:
        """Average mana value of non-land cards, 2 decimals (0 if none)."""
        total_cmc = 0.0
        nonland_count = 0
        for card in cards:
            if card.is_land:
                continue
            total_cmc += card.cmc * card.quantity
            nonland_count += card.quantity

        if nonland_count == 0:
            return 0.0
        return round(total_cmc / nonland_count, 2)

    def overall_cmc(self, cards: Iterable[Card]) -> Optional[float]:
        """
        Average mana value over every card, lands included (None if empty).

        This is the curve figure the power level is scored on; it runs
        lower than average_cmc since lands count as 0.
        """
        total_cmc = 0.0
        total_cards = 0
        for card in cards:
            total_cmc += card.cmc * card.quantity
            total_cards += card.quantity

        if total_cards == 0:
            return None
        return total_cmc / total_cards

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def color_distribution(self, cards: Iterable[Card]) -> Dict[str, int]:
        """Count cards by their own colors; colorless cards go to "Colorless"."""
        distribution = {color: 0 for color in WUBRG}
        distribution["Colorless"] = 0
        for card in cards:
            if not card.colors:
                distribution["Colorless"] += card.quantity
                continue
            for color in card.colors:
                distribution[color] += card.quantity
        return distribution

    def color_sources(self, cards: Iterable[Card]) -> Dict[str, int]:
        """
        Count mana sources per color.

        "Multi" counts sources producing two or more of W/U/B/R/G. A land
        tapping for {C} or {G} is a green and colorless source but not multi.
        """
        sources = {color: 0 for color in WUBRG}
        sources["C"] = 0
        sources["Multi"] = 0

        for card in cards:
            produced = self.classifier.mana_producing_colors(card)
            for color in produced:
                sources[color] += card.quantity
            if sum(1 for color in produced if color in WUBRG) >= 2:
                sources["Multi"] += card.quantity

        return sources

    def pip_requirements(self, cards: Iterable[Card]) -> Dict[str, int]:
        """Total colored pips across all mana costs."""
        pips = {color: 0 for color in WUBRG}
        for card in cards:
            for color, count in self.classifier.pip_contribution(card).items():
                pips[color] += count * card.quantity
        return pips

    # ------------------------------------------------------------------
    # Functional buckets
    # ------------------------------------------------------------------

    def functional_buckets(self, cards: Iterable[Card]) -> Dict[str, int]:
        """Sum of quantities per functional bucket; a card can hit several."""
        totals = {bucket: 0 for bucket in BUCKET_NAMES}
        for card in cards:
            for bucket in self.classifier.functional_buckets(card):
                totals[bucket] += card.quantity
        return totals

    @staticmethod
    def power_level(buckets: Dict[str, int], average_cmc: Optional[float]) -> int:
        """
        Rough 1-10 power estimate from bucket counts and curve.

        Starts at 5; fast mana, tutors, interaction and a low curve push it
        up, a high curve pulls it down. average_cmc is the all-cards figure
        from overall_cmc(); None (empty deck) leaves the curve out.
        """
        score = 5.0
        score += buckets.get(FAST_MANA, 0) * 0.5
        score += buckets.get(TUTOR, 0) * 0.3
        score += min(buckets.get(INTERACTION, 0) * 0.2, 1)

        if average_cmc is not None:
            if average_cmc <= 2.5:
                score += 1
            elif average_cmc >= 4:
                score -= 1

        if buckets.get(POTENTIAL_COMBO, 0) > 3:
            score += 1

        return max(1, min(10, int(math.floor(score + 0.5))))

    @staticmethod
    def recommendations(buckets: Dict[str, int]) -> List[str]:
        """Suggestions for categories the deck is light on."""
        recommendations = []

        if buckets.get(RAMP, 0) < 10:
            recommendations.append(
                "Consider adding more ramp spells to accelerate your mana development"
            )
        if buckets.get(CARD_DRAW, 0) < 10:
            recommendations.append(
                "Add more card draw to improve consistency and maintain hand advantage"
            )
        if buckets.get(INTERACTION, 0) < 8:
            recommendations.append(
                "Include more interaction pieces to control your opponents' threats"
            )
        if buckets.get(PROTECTION, 0) < 3:
            recommendations.append(
                "Add protection pieces to keep your key permanents safe"
            )

        return recommendations

    @staticmethod
    def balance_suggestions(buckets: Dict[str, int]) -> List[str]:
        """Warnings for categories that may be too strong for a casual table."""
        suggestions = []

        if buckets.get(FAST_MANA, 0) > 5:
            suggestions.append(
                "High concentration of fast mana might make the deck too explosive for casual pods"
            )
        if buckets.get(TUTOR, 0) > 5:
            suggestions.append(
                "Consider reducing tutors for more variance and casual-friendly gameplay"
            )
        if buckets.get(POTENTIAL_COMBO, 0) > 3:
            suggestions.append(
                "Multiple combo pieces detected - ensure your playgroup is comfortable with combo strategies"
            )

        return suggestions

    # ------------------------------------------------------------------
    # Everything at once
    # ------------------------------------------------------------------

    def aggregate(self, deck: Deck) -> DeckStatistics:
        library = deck.library_cards()
        everything = deck.all_cards()

        buckets = self.functional_buckets(everything)
        average = self.average_cmc(library)

        return DeckStatistics(
            mana_curve=self.mana_curve(library),
            type_breakdown=self.type_breakdown(library),
            color_distribution=self.color_distribution(library),
            color_sources=self.color_sources(everything),
            pip_requirements=self.pip_requirements(everything),
            functional_buckets=buckets,
            average_cmc=average,
            power_level=self.power_level(buckets, self.overall_cmc(everything)),
            recommendations=self.recommendations(buckets),
            balance_suggestions=self.balance_suggestions(buckets),
        )
