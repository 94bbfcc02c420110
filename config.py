"""
MTG Deck Statistics Engine - Configuration
==========================================

This file contains all the configuration constants used to analyze Commander
decks: the curated Game Changers list, the bracket definitions, the keyword
tables that drive functional classification, and the settings for the
opening-hand (mulligan) simulation.

BRACKET SUMMARY:
- Bracket 1 (Exhibition): Ultra-casual, themed decks. No Game Changers.
- Bracket 2 (Core): Precon-level power. No Game Changers.
- Bracket 3 (Upgraded): Stronger decks. Up to 3 Game Changers allowed.
- Bracket 4 (Optimized): High-power. More than 3 Game Changers.
- Bracket 5 (CEDH): Competitive. Full optimization.

The rule tables are immutable (tuples / frozensets). They are bundled into
a ClassificationRules object which the classifiers receive as a parameter,
so a test (or a caller) can swap in its own tables without touching this
module.
"""

import os
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple


# ============================================================================
# GAME CHANGERS LIST
# These are cards that "dramatically warp Commander games" - having any of these
# affects which bracket your deck falls into.
# ============================================================================
GAME_CHANGERS: Tuple[str, ...] = (
    # WHITE
    "Drannith Magistrate",
    "Enlightened Tutor",
    "Humility",
    "Serra's Sanctum",
    "Smothering Tithe",
    "Teferi's Protection",

    # BLUE
    "Consecrated Sphinx",
    "Cyclonic Rift",
    "Expropriate",
    "Fierce Guardianship",
    "Force of Will",
    "Gifts Ungiven",
    "Intuition",
    "Jin-Gitaxias, Core Augur",
    "Mystical Tutor",
    "Narset, Parter of Veils",
    "Rhystic Study",
    "Sway of the Stars",
    "Thassa's Oracle",
    "Urza, Lord High Artificer",

    # BLACK
    "Ad Nauseam",
    "Bolas's Citadel",
    "Braids, Cabal Minion",
    "Demonic Tutor",
    "Imperial Seal",
    "Necropotence",
    "Opposition Agent",
    "Orcish Bowmasters",
    "Tergrid, God of Fright",
    "Vampiric Tutor",

    # RED
    "Deflecting Swat",
    "Gamble",
    "Jeska's Will",
    "Underworld Breach",

    # GREEN
    "Crop Rotation",
    "Food Chain",
    "Gaea's Cradle",
    "Natural Order",
    "Seedborn Muse",
    "Survival of the Fittest",
    "Vorinclex, Voice of Hunger",
    "Worldly Tutor",

    # MULTICOLOR
    "Aura Shards",
    "Coalition Victory",
    "Grand Arbiter Augustin IV",
    "Kinnan, Bonder Prodigy",
    "Notion Thief",
    "Winota, Joiner of Forces",
    "Yuriko, the Tiger's Shadow",

    # COLORLESS/ARTIFACTS
    "Chrome Mox",
    "Grim Monolith",
    "Lion's Eye Diamond",
    "Mana Vault",
    "Mox Diamond",
    "Panoptic Mirror",
    "The One Ring",

    # LANDS
    "Ancient Tomb",
    "Field of the Dead",
    "Glacial Chasm",
    "Mishra's Workshop",
    "The Tabernacle at Pendrell Vale",
)

# ============================================================================
# BRACKET DEFINITIONS
# Name and short description shown for each bracket
# ============================================================================
BRACKET_DEFINITIONS: Dict[int, Dict[str, str]] = {
    1: {
        "name": "Exhibition",
        "description": "Your ultra-casual Commander deck.",
    },
    2: {
        "name": "Core",
        "description": "The average current preconstructed deck.",
    },
    3: {
        "name": "Upgraded",
        "description": "Beyond the strength of an average precon deck.",
    },
    4: {
        "name": "Optimized",
        "description": "High power Commander. It's time to go wild!",
    },
    5: {
        "name": "CEDH",
        "description": "High power with a very competitive and metagame focused mindset.",
    },
}

# Bracket thresholds used by the decision list
BRACKET1_MAX_TUTORS = 2
BRACKET2_MAX_TUTORS = 4
BRACKET3_MAX_GAME_CHANGERS = 3

# ============================================================================
# FUNCTIONAL CLASSIFICATION KEYWORDS
# Matched against lower-cased oracle text (or name, for fast mana)
# ============================================================================
RAMP_KEYWORDS = (
    "add {c}",
    "add {w}", "add {u}", "add {b}", "add {r}", "add {g}",
    "add one mana of any color",
    "search your library for a basic land card",
    "mana of any type",
    "treasure token",
    "search your library for up to two basic land cards",
)

DRAW_KEYWORDS = (
    "draw a card",
    "draw two cards",
    "draw three cards",
    "draw cards",
    "look at the top",
)

MASS_LAND_DESTRUCTION_KEYWORDS = (
    "destroy all lands",
    "destroy each land",
)

EXTRA_TURN_KEYWORDS = (
    "extra turn",
    "additional turn",
)

TUTOR_KEYWORDS = (
    "search your library",
)

# Coarse heuristic - these phrases often show up on combo pieces, but this is
# not a verified-combo detector
POTENTIAL_COMBO_KEYWORDS = (
    "infinite",
    "untap",
    "create a copy",
)

REMOVAL_KEYWORDS = (
    "destroy target",
    "exile target",
    "return target",
    "counter target",
    "sacrifice",
    "damage to target",
)

PROTECTION_KEYWORDS = (
    "hexproof",
    "indestructible",
    "protection from",
    "can't be countered",
    "regenerate",
    "ward",
)

INTERACTION_KEYWORDS = (
    "counter target spell",
    "destroy target",
    "exile target",
    "damage to target",
    "return target",
)

# Matched against the card NAME
FAST_MANA_NAME_KEYWORDS = (
    "dark ritual",
    "mana crypt",
    "sol ring",
    "mana vault",
    "chrome mox",
    "mox",
)

COMBAT_WIN_KEYWORDS = (
    "double strike",
    "trample",
    "infect",
)

ALTERNATIVE_WIN_KEYWORDS = (
    "you win the game",
    "player loses the game",
)

# Basic land type -> the color of mana it taps for
BASIC_LAND_TYPES = (
    ("plains", "W"),
    ("island", "U"),
    ("swamp", "B"),
    ("mountain", "R"),
    ("forest", "G"),
    ("wastes", "C"),
)

# Card type priority for the type breakdown. Order matters for multi-type
# cards: an Artifact Creature is counted as a Creature.
CARD_TYPE_PRIORITY = (
    "Creature",
    "Instant",
    "Sorcery",
    "Artifact",
    "Enchantment",
    "Planeswalker",
    "Land",
)

WUBRG = ("W", "U", "B", "R", "G")


@dataclass(frozen=True)
class ClassificationRules:
    """
    Read-only keyword tables handed to the card classifier.

    Every field is a tuple of lower-case phrases, so an instance can be
    shared freely between classifiers and threads.
    """
    ramp: Tuple[str, ...] = RAMP_KEYWORDS
    card_draw: Tuple[str, ...] = DRAW_KEYWORDS
    mass_land_destruction: Tuple[str, ...] = MASS_LAND_DESTRUCTION_KEYWORDS
    extra_turn: Tuple[str, ...] = EXTRA_TURN_KEYWORDS
    tutor: Tuple[str, ...] = TUTOR_KEYWORDS
    potential_combo: Tuple[str, ...] = POTENTIAL_COMBO_KEYWORDS
    removal: Tuple[str, ...] = REMOVAL_KEYWORDS
    protection: Tuple[str, ...] = PROTECTION_KEYWORDS
    interaction: Tuple[str, ...] = INTERACTION_KEYWORDS
    fast_mana_names: Tuple[str, ...] = FAST_MANA_NAME_KEYWORDS
    combat_win: Tuple[str, ...] = COMBAT_WIN_KEYWORDS
    alternative_win: Tuple[str, ...] = ALTERNATIVE_WIN_KEYWORDS
    basic_land_types: Tuple[Tuple[str, str], ...] = BASIC_LAND_TYPES
    type_priority: Tuple[str, ...] = CARD_TYPE_PRIORITY


DEFAULT_RULES = ClassificationRules()

# ============================================================================
# DECK LEGALITY (singleton exceptions)
# ============================================================================

# Cards that allow multiple copies in Commander (singleton exception)
UNLIMITED_COPIES_CARDS: FrozenSet[str] = frozenset({
    # These cards have "A deck can have any number of cards named ~"
    "relentless rats",
    "rat colony",
    "shadowborn apostle",
    "persistent petitioners",
    "dragon's approach",
    "slime against humanity",
    "hare apparent",
})

# Cards with specific copy limits (not singleton, but not unlimited)
LIMITED_COPIES_CARDS: Dict[str, int] = {
    "seven dwarves": 7,
    "nazgûl": 9,
}

# Basic land names (unlimited copies allowed)
BASIC_LAND_NAMES: FrozenSet[str] = frozenset({
    "plains", "island", "swamp", "mountain", "forest", "wastes",
    "snow-covered plains", "snow-covered island", "snow-covered swamp",
    "snow-covered mountain", "snow-covered forest", "snow-covered wastes",
})

# ============================================================================
# SCRYFALL API CONFIGURATION
# Only used to refresh the Game Changers list
# ============================================================================
SCRYFALL_API_BASE = "https://api.scryfall.com"
SCRYFALL_RATE_LIMIT_MS = 100  # Minimum ms between requests (10 requests/sec max)
SCRYFALL_TIMEOUT_SECONDS = 10


# ============================================================================
# MULLIGAN SIMULATION
# Defaults can be overridden from the environment (or a .env file)
# ============================================================================
def _env_int(name: str, default: int) -> int:
    """Read an integer setting, falling back to the default on bad values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"  ⚠️  Ignoring {name}={raw!r} (not an integer), using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean setting ("1", "true", "yes", "on" are true)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


HAND_SIZE = 7

MULLIGAN_TRIAL_COUNT = _env_int("MULLIGAN_TRIAL_COUNT", 10000)
MULLIGAN_TARGET_LANDS = _env_int("MULLIGAN_TARGET_LANDS", 2)
MULLIGAN_MAX_TRIALS = _env_int("MULLIGAN_MAX_TRIALS", 500000)
# Physical cards in the simulation pool; a Commander deck is 100
MULLIGAN_MAX_DECK_SIZE = _env_int("MULLIGAN_MAX_DECK_SIZE", 1000)

# The deck page has always sampled from library + commander (a 100-card pool
# for a 99-card library). Kept as the default; set to false to draw from the
# library only.
INCLUDE_COMMANDER_IN_POOL = _env_bool("INCLUDE_COMMANDER_IN_POOL", True)
