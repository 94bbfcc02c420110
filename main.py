#!/usr/bin/env python3
"""
MTG Deck Statistics Engine
==========================

A tool to analyze a Commander deck: mana curve, color sources, functional
roles, the WotC bracket, and opening-hand land odds.

Usage:
    python main.py [deck.json]

    deck.json holds a deck snapshot:
        {"commander": {...card...}, "cards": [{...card..., "quantity": 1}, ...]}

    If no file is provided, the program will ask for a path.

Requirements:
    pip install requests python-dotenv

Environment Variables (or a .env file):
    MULLIGAN_TRIAL_COUNT       - default number of simulated hands
    MULLIGAN_TARGET_LANDS      - default "at least N lands" target
    MULLIGAN_MAX_TRIALS        - upper bound on a single simulation
    MULLIGAN_MAX_DECK_SIZE     - upper bound on cards in the simulation pool
    INCLUDE_COMMANDER_IN_POOL  - draw hands from library + commander (default true)
"""

import json
import sys
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load .env before importing config, which reads the environment at import time
load_dotenv(override=True)

from card_classifier import BUCKET_NAMES  # noqa: E402
from card_models import Deck  # noqa: E402
from config import (  # noqa: E402
    BRACKET3_MAX_GAME_CHANGERS, HAND_SIZE, INCLUDE_COMMANDER_IN_POOL,
    MULLIGAN_MAX_TRIALS, MULLIGAN_TARGET_LANDS, MULLIGAN_TRIAL_COUNT,
)
from deck_analyzer import DeckAnalysis, DeckAnalyzer  # noqa: E402
from mulligan_simulator import (  # noqa: E402
    MulliganWorker, SimulationError, SimulationRequest, simulation_pool,
)
from scryfall_client import load_game_changers  # noqa: E402


# =============================================================================
# Display Functions
# =============================================================================

def print_banner():
    """Print the app banner."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║        ⚔️  MTG Commander Deck Statistics  ⚔️                   ║
║                                                               ║
║    Mana curve, color sources, bracket and                     ║
║    opening-hand odds for your Commander deck                  ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
""")


def print_section_header(title: str):
    """Print a formatted section header."""
    print("\n" + "═" * 64)
    print(f"  {title}".center(64))
    print("═" * 64)


def print_bar_chart(counts: dict, width: int = 20):
    """Print one bar per key, scaled to the largest value."""
    max_count = max(counts.values()) if counts else 0
    for label, count in counts.items():
        bar_length = int((count / max_count) * width) if max_count else 0
        print(f"    {label:>9} │ {'█' * bar_length} ({count})")


def print_menu(analysis: Optional[DeckAnalysis] = None):
    """Print the main menu."""
    print("\n" + "─" * 50)
    print("  📋 MAIN MENU")
    print("─" * 50)

    if analysis:
        print(f"  Current deck: {analysis.commander} (Bracket {analysis.suggested_bracket})")
        print(f"  Cards: {analysis.total_cards}")
        print("─" * 50)
        print("  1. 📊 View deck analysis summary")
        print("  2. 🎲 Simulate opening hands")
        print("  3. 📋 Refresh Game Changers from Scryfall")
        print("  4. 📂 Load a different deck")
        print("  5. 🚪 Exit")
    else:
        print("  No deck loaded")
        print("─" * 50)
        print("  1. 📂 Load a deck")
        print("  2. 🚪 Exit")

    print("─" * 50)


def print_analysis_results(analysis: DeckAnalysis):
    """
    Print the analysis results in a formatted way.
    """
    bracket = analysis.bracket_result

    # Header with commander
    print_section_header(f"📋 ANALYSIS: {analysis.commander}")

    # Bracket result (big and prominent)
    print(f"""
       SUGGESTED BRACKET: {bracket.bracket}
       "{bracket.name}" - {bracket.description}
    """)

    if bracket.reasoning:
        print("  Reasoning:")
        for reason in bracket.reasoning:
            print(f"    • {reason}")

    # Legality warnings (if any)
    if analysis.legality_warnings:
        print_section_header("⚠️  LEGALITY WARNINGS")
        for warning in analysis.legality_warnings:
            print(f"    {warning}")

    # Game Changers
    print_section_header("🃏 GAME CHANGERS FOUND")
    if bracket.game_changers:
        for name in bracket.game_changers:
            print(f"    ⚡ {name}")
        print(f"\n  Total: {bracket.game_changer_count} Game Changer(s)")

        if bracket.game_changer_count <= BRACKET3_MAX_GAME_CHANGERS:
            print(f"  → This is within the {BRACKET3_MAX_GAME_CHANGERS}-card limit for Bracket 3")
        else:
            print(f"  → This exceeds the {BRACKET3_MAX_GAME_CHANGERS}-card limit, requiring Bracket 4+")
    else:
        print("    None found! ✓")

    # Restrictions checklist
    print_section_header("🔍 BRACKET RESTRICTIONS")
    checks = [
        ("No mass land destruction", bracket.no_mld),
        ("No extra turns", bracket.no_extra_turns),
        (f"No potential combo pieces ({bracket.potential_combo_count} found)", bracket.no_infinite_combo),
        ("No Game Changers", bracket.no_game_changers),
        (f"Few tutors ({bracket.tutor_count} found)", bracket.few_tutors),
    ]
    for label, passed in checks:
        print(f"    {'✅' if passed else '❌'} {label}")

    # Mana curve
    print_section_header("📈 MANA CURVE")
    print_bar_chart(analysis.mana_curve)
    print(f"\n  Average mana value: {analysis.average_cmc:.2f}")

    # Card composition summary
    print_section_header("📦 CARD COMPOSITION")
    for card_type, count in analysis.type_breakdown.items():
        if count:
            print(f"    {card_type + ':':<14} {count:3d}")

    # Mana base
    print_section_header("💧 MANA SOURCES vs. PIPS")
    print("    Color   Sources   Pips")
    for color in ("W", "U", "B", "R", "G"):
        sources = analysis.color_sources.get(color, 0)
        pips = analysis.pip_requirements.get(color, 0)
        if sources or pips:
            print(f"      {color}     {sources:5d}   {pips:5d}")
    print(f"      C     {analysis.color_sources.get('C', 0):5d}")
    print(f"    Multi   {analysis.color_sources.get('Multi', 0):5d}")

    # Functional roles
    print_section_header("🧰 FUNCTIONAL ROLES")
    for bucket in BUCKET_NAMES:
        label = bucket.replace("_", " ").capitalize()
        print(f"    {label + ':':<24} {analysis.functional_buckets.get(bucket, 0):3d}")
    print(f"\n  Estimated power level: {analysis.power_level}/10")

    if analysis.recommendations:
        print_section_header("💡 RECOMMENDATIONS")
        for recommendation in analysis.recommendations:
            print(f"    • {recommendation}")

    if analysis.balance_suggestions:
        print_section_header("⚖️  BALANCE")
        for suggestion in analysis.balance_suggestions:
            print(f"    • {suggestion}")


def print_simulation_result(result):
    """Print a SimulationResult (or the error it came back as)."""
    if isinstance(result, SimulationError):
        print(f"\n  ❌ {result.error}")
        return

    print_section_header(f"🎲 OPENING HANDS ({result.trial_count} simulated)")
    print(f"\n  Deck: {result.deck_size} cards, {result.land_count} lands")
    print(f"  Hands with {result.target_land_count}+ lands: {result.success_rate:.2f}%")
    print(f"  (exact odds: {result.expected_success_rate:.2f}%)\n")

    distribution = {
        f"{lands} lands": percent
        for lands, percent in result.land_count_distribution.items()
    }
    max_percent = max(distribution.values()) if distribution else 0
    for label, percent in distribution.items():
        bar_length = int((percent / max_percent) * 20) if max_percent else 0
        print(f"    {label:>9} │ {'█' * bar_length} {percent:.2f}%")


# =============================================================================
# Input Functions
# =============================================================================

def get_menu_choice(max_choice: int) -> int:
    """Get a valid menu choice from the user."""
    while True:
        try:
            choice = input("\n  Enter choice: ").strip()
            if not choice:
                continue
            num = int(choice)
            if 1 <= num <= max_choice:
                return num
            print(f"  Please enter a number between 1 and {max_choice}")
        except ValueError:
            print("  Please enter a valid number")


def get_int(prompt: str, default: int) -> int:
    """Prompt for an integer, using the default on empty or bad input."""
    response = input(f"\n  {prompt} (default {default}): ").strip()
    if not response:
        return default
    try:
        return int(response)
    except ValueError:
        print(f"  Invalid input, using {default}.")
        return default


def get_deck_path() -> Optional[str]:
    print("\n📂 Enter the path to a deck JSON file (or press Enter to cancel):")
    path = input("   > ").strip()
    return path or None


# =============================================================================
# Deck Loading
# =============================================================================

def load_deck_from_file(filename: str) -> Tuple[Optional[Deck], Optional[str]]:
    """
    Read a deck snapshot from a JSON file.

    Returns:
        Tuple of (Deck, error_message)
        If successful, error_message is None
        If failed, Deck is None
    """
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None, f"File not found: {filename}"
    except (OSError, json.JSONDecodeError) as e:
        return None, f"Error reading file: {e}"

    if not isinstance(data, dict):
        return None, "Deck file must contain a JSON object with 'commander' and 'cards'"

    deck = Deck.from_dict(data)
    print(f"   ✅ Loaded {deck.size()} cards")
    return deck, None


def load_deck_interactive(analyzer: DeckAnalyzer) -> Tuple[Optional[Deck], Optional[DeckAnalysis]]:
    """Ask for a deck file, load it and analyze it."""
    path = get_deck_path()
    if not path:
        return None, None

    deck, error = load_deck_from_file(path)
    if error:
        print(f"   ❌ {error}")
        return None, None

    print("\n" + "─" * 60)
    return deck, analyzer.analyze(deck)


# =============================================================================
# Menu Actions
# =============================================================================

def action_simulate(deck: Deck, worker: MulliganWorker):
    """Run a mulligan simulation for the loaded deck."""
    trial_count = get_int("Number of hands to simulate", MULLIGAN_TRIAL_COUNT)
    target = get_int(f"Minimum lands in a {HAND_SIZE}-card hand", MULLIGAN_TARGET_LANDS)

    if trial_count > MULLIGAN_MAX_TRIALS:
        print(f"  ⚠️  Capping simulation at {MULLIGAN_MAX_TRIALS} hands")
        trial_count = MULLIGAN_MAX_TRIALS

    if not worker.is_running:
        worker.start()

    request = SimulationRequest(
        deck_cards=tuple(simulation_pool(deck, INCLUDE_COMMANDER_IN_POOL)),
        trial_count=trial_count,
        target_land_count=target,
    )
    print_simulation_result(worker.run(request))


def action_refresh_game_changers(deck: Deck) -> Tuple[DeckAnalyzer, DeckAnalysis]:
    """Re-fetch the Game Changers list and re-run the analysis with it."""
    analyzer = DeckAnalyzer(game_changers=load_game_changers(verbose=True), verbose=True)
    return analyzer, analyzer.analyze(deck)


# =============================================================================
# Main Menu Loop
# =============================================================================

def run_menu_loop(worker: MulliganWorker, initial_deck: Optional[Deck] = None):
    """
    Run the main menu loop.

    Args:
        worker: Mulligan worker shared by every simulation this session
        initial_deck: Pre-loaded deck (optional)
    """
    analyzer = DeckAnalyzer(verbose=True)
    deck = initial_deck
    analysis = analyzer.analyze(deck) if deck else None

    if analysis:
        print_analysis_results(analysis)

    while True:
        print_menu(analysis)

        if analysis:
            choice = get_menu_choice(5)

            if choice == 1:
                print_analysis_results(analysis)
            elif choice == 2:
                action_simulate(deck, worker)
            elif choice == 3:
                analyzer, analysis = action_refresh_game_changers(deck)
                print_analysis_results(analysis)
            elif choice == 4:
                new_deck, new_analysis = load_deck_interactive(analyzer)
                if new_analysis:
                    deck, analysis = new_deck, new_analysis
                    print_analysis_results(analysis)
            elif choice == 5:
                print("\n  👋 Thanks for using the Deck Statistics tool!")
                print("     Remember: Brackets are guidelines for pregame discussion,")
                print("     not hard rules. Talk to your playgroup! 🎲\n")
                break
        else:
            choice = get_menu_choice(2)

            if choice == 1:
                new_deck, new_analysis = load_deck_interactive(analyzer)
                if new_analysis:
                    deck, analysis = new_deck, new_analysis
                    print_analysis_results(analysis)
            elif choice == 2:
                print("\n  👋 Goodbye!\n")
                break


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """
    Main entry point for the deck statistics tool.
    """
    print_banner()

    initial_deck = None

    # Check for command line argument (file path)
    if len(sys.argv) > 1:
        filename = sys.argv[1]
        print(f"📂 Reading deck from: {filename}")

        deck, error = load_deck_from_file(filename)

        if error:
            print(f"   ❌ {error}")
            print("   Continuing to interactive mode...\n")
        else:
            initial_deck = deck

    with MulliganWorker(verbose=True) as worker:
        run_menu_loop(worker, initial_deck)


if __name__ == "__main__":
    main()
