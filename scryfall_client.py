"""
MTG Deck Statistics Engine - Scryfall API Client
================================================

The deck engine itself never touches the network. This module is only used
to refresh the Game Changers list from Scryfall, which tracks the official
WotC list behind its 'is:gamechanger' search filter.

Key points about the Scryfall API:
- It's free to use but has rate limits (10 requests/second)
- All requests must include a User-Agent header
- Search results are paginated ("has_more" / "next_page")
"""

import time
from typing import Any, Dict, FrozenSet, List, Optional

import requests

from config import (
    GAME_CHANGERS, SCRYFALL_API_BASE, SCRYFALL_RATE_LIMIT_MS,
    SCRYFALL_TIMEOUT_SECONDS,
)


class ScryfallClient:
    """
    A simple client for the Scryfall API with rate limiting.

    This class handles:
    - Making API requests with proper headers
    - Rate limiting to avoid getting blocked
    - Following paginated search results
    """

    def __init__(self, session: Optional[requests.Session] = None, verbose: bool = False):
        # Track when we last made a request (for rate limiting)
        self._last_request_time = 0.0
        self.verbose = verbose

        # Session keeps connections alive for better performance
        self._session = session or requests.Session()

        # Scryfall requires a User-Agent header identifying your app
        self._session.headers.update({
            "User-Agent": "MTGDeckStatistics/1.0",
            "Accept": "application/json",
        })

    def _rate_limit(self):
        """
        Wait if necessary to respect Scryfall's rate limit.

        Scryfall allows ~10 requests per second. We track time between
        requests and sleep if we're going too fast.
        """
        now = time.time() * 1000
        elapsed = now - self._last_request_time

        if elapsed < SCRYFALL_RATE_LIMIT_MS:
            time.sleep((SCRYFALL_RATE_LIMIT_MS - elapsed) / 1000)

        self._last_request_time = time.time() * 1000

    def search_cards(self, query: str, unique: str = "cards") -> List[Dict[str, Any]]:
        """
        Search for cards using Scryfall's full search syntax.

        Args:
            query: Scryfall search query (e.g., "is:gamechanger")
            unique: How to handle duplicates ("cards", "art", "prints")

        Returns:
            List of matching cards

        Raises:
            requests.RequestException: On network errors or non-200 replies
        """
        self._rate_limit()

        all_cards = []
        next_page = f"{SCRYFALL_API_BASE}/cards/search"
        params = {"q": query, "unique": unique}

        # Scryfall paginates results, so we need to follow the pages
        while next_page:
            response = self._session.get(
                next_page, params=params, timeout=SCRYFALL_TIMEOUT_SECONDS
            )
            params = None  # Only use params on first request
            response.raise_for_status()

            data = response.json()
            all_cards.extend(data.get("data", []))

            if data.get("has_more"):
                next_page = data.get("next_page")
                self._rate_limit()
            else:
                next_page = None

        return all_cards

    def get_game_changers_list(self) -> List[str]:
        """
        Fetch the current official Game Changers list from Scryfall.

        Returns:
            List of card names on the Game Changers list
        """
        if self.verbose:
            print("📋 Fetching official Game Changers list from Scryfall...")

        cards = self.search_cards("is:gamechanger")
        return [card["name"] for card in cards if card.get("name")]


def load_game_changers(client: Optional[ScryfallClient] = None, verbose: bool = False) -> FrozenSet[str]:
    """
    Get the Game Changers list, preferring the live Scryfall copy.

    Falls back to the curated list in config when Scryfall can't be reached
    or returns nothing, so deck analysis never fails because of the network.
    """
    client = client or ScryfallClient(verbose=verbose)

    try:
        names = client.get_game_changers_list()
    except (requests.RequestException, ValueError) as e:
        if verbose:
            print(f"  ⚠️  Could not fetch Game Changers ({e}), using built-in list")
        return frozenset(GAME_CHANGERS)

    if not names:
        if verbose:
            print("  ⚠️  Scryfall returned no Game Changers, using built-in list")
        return frozenset(GAME_CHANGERS)

    if verbose:
        print(f"  ✅ Loaded {len(names)} Game Changers from Scryfall")
    return frozenset(names)
