"""
MTG Deck Statistics Engine - Mulligan Simulator
===============================================

Monte Carlo estimate of how many lands a 7-card opening hand contains.

For each trial we draw 7 distinct cards without replacement and count the
lands. After N trials we report:
- success_rate: % of hands with at least `target_land_count` lands
- land_count_distribution: % of hands with exactly 0, 1, ..., 7 lands

Both are rounded to 2 decimals independently, so the distribution can sum
to 99.99 or 100.01.

The trial loop can take a few seconds for large trial counts, so it runs in
a dedicated worker process (MulliganWorker). The caller sends one request
and gets back exactly one SimulationResult or one SimulationError - invalid
input is reported, never raised.

Example:
    with MulliganWorker() as worker:
        result = worker.run(SimulationRequest(cards, 10000, 3))

    # or, from async code
    result = await worker.simulate_mulligan(cards, 10000, 3)
"""

import asyncio
import multiprocessing
import random
import threading
from dataclasses import dataclass
from math import comb
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from card_models import Card, Deck, count_cards_with_quantity
from config import (
    HAND_SIZE, INCLUDE_COMMANDER_IN_POOL, MULLIGAN_MAX_DECK_SIZE, MULLIGAN_MAX_TRIALS,
)


# Error kinds
INVALID_REQUEST = "invalid_request"
WORKER_BUSY = "worker_busy"
WORKER_UNAVAILABLE = "worker_unavailable"

JOIN_TIMEOUT_SECONDS = 5


# =============================================================================
# Request / result types
# =============================================================================

@dataclass(frozen=True)
class SimulationRequest:
    """One simulation job. `seed` makes a run reproducible."""
    deck_cards: Tuple[Any, ...]
    trial_count: int
    target_land_count: int
    seed: Optional[int] = None

    def __post_init__(self):
        # Accept any iterable of cards; store it as a tuple so the request
        # stays hashable and immutable
        if not isinstance(self.deck_cards, tuple):
            object.__setattr__(self, "deck_cards", tuple(self.deck_cards or ()))


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a finished simulation. Percentages are 0-100, 2 decimals."""
    trial_count: int
    target_land_count: int
    success_rate: float
    land_count_distribution: Dict[int, float]
    deck_size: int
    land_count: int
    expected_success_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trial_count": self.trial_count,
            "target_land_count": self.target_land_count,
            "success_rate": self.success_rate,
            "land_count_distribution": dict(self.land_count_distribution),
            "deck_size": self.deck_size,
            "land_count": self.land_count,
            "expected_success_rate": self.expected_success_rate,
        }


@dataclass(frozen=True)
class SimulationError:
    """
    Structured failure, returned instead of raised.

    kind is one of:
    - "invalid_request": fix the input (empty deck, bad trial count, ...)
    - "worker_busy": another simulation is still running on this worker
    - "worker_unavailable": the worker is not running or died; retry
    """
    error: str
    kind: str = INVALID_REQUEST

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "kind": self.kind}


SimulationOutcome = Union[SimulationResult, SimulationError]


# =============================================================================
# Pure helpers (used both in-process and inside the worker)
# =============================================================================

def _as_cards(deck_cards: Iterable[Any]) -> List[Card]:
    """
    Accept Card objects or plain card dicts.

    Raises:
        ValueError: If an entry is neither (None, a bare card name, ...)
    """
    cards = []
    for card in deck_cards:
        cards.append(card if isinstance(card, Card) else Card.from_dict(card))
    return cards


def simulation_pool(deck: Deck, include_commander_in_pool: bool = INCLUDE_COMMANDER_IN_POOL) -> List[Card]:
    """
    The cards to sample opening hands from.

    A real Commander opening hand comes from the 99-card library. The deck
    page has always sampled from library + commander instead, so that stays
    the default; pass include_commander_in_pool=False for the library only.
    """
    if include_commander_in_pool:
        return deck.all_cards()
    return deck.library_cards()


def build_land_flags(cards: Iterable[Card]) -> List[bool]:
    """One True/False per physical card: a quantity-3 card adds 3 entries."""
    flags = []
    for card in cards:
        flags.extend([card.is_land] * card.quantity)
    return flags


def prepare_request(request: SimulationRequest) -> Tuple[Optional[List[bool]], Optional[SimulationError]]:
    """
    Validate a request and build its land flags.

    Returns:
        Tuple of (land_flags, error); exactly one of them is None
    """
    trial_count = request.trial_count
    if isinstance(trial_count, bool) or not isinstance(trial_count, int) or trial_count <= 0:
        return None, SimulationError(
            f"Number of simulations must be a positive whole number (got {trial_count!r})."
        )
    if trial_count > MULLIGAN_MAX_TRIALS:
        return None, SimulationError(
            f"Number of simulations is limited to {MULLIGAN_MAX_TRIALS} (got {trial_count})."
        )

    target = request.target_land_count
    if isinstance(target, bool) or not isinstance(target, int) or not 0 <= target <= HAND_SIZE:
        return None, SimulationError(
            f"Target land count must be between 0 and {HAND_SIZE} (got {target!r})."
        )

    if not request.deck_cards:
        return None, SimulationError("Deck is empty. Cannot run simulation.")

    try:
        cards = _as_cards(request.deck_cards)
    except ValueError as e:
        return None, SimulationError(f"Invalid card in deck: {e}.")

    deck_size = count_cards_with_quantity(cards)
    if deck_size < HAND_SIZE:
        return None, SimulationError(
            f"Deck has only {deck_size} cards. Need at least {HAND_SIZE} for an opening hand."
        )
    if deck_size > MULLIGAN_MAX_DECK_SIZE:
        return None, SimulationError(
            f"Deck has {deck_size} cards. Simulations are limited to {MULLIGAN_MAX_DECK_SIZE}."
        )

    return build_land_flags(cards), None


def validate_request(request: SimulationRequest) -> Optional[SimulationError]:
    """Return a SimulationError describing what is wrong, or None if valid."""
    return prepare_request(request)[1]


def run_trials(
    land_flags: Sequence[bool],
    trial_count: int,
    seed: Optional[int] = None,
    hand_size: int = HAND_SIZE,
) -> List[int]:
    """
    Draw `trial_count` hands and histogram their land counts.

    Each trial is a partial Fisher-Yates shuffle of the first `hand_size`
    positions: swap slot i with a random slot in [i, D). The array is not
    reset between trials - a partial shuffle of any arrangement still gives
    a uniform sample of distinct cards.

    Returns:
        List of length hand_size + 1; entry k = hands with exactly k lands.
    """
    rng = random.Random(seed)
    randrange = rng.randrange
    deck = list(land_flags)
    size = len(deck)
    histogram = [0] * (hand_size + 1)

    for _ in range(trial_count):
        lands = 0
        for i in range(hand_size):
            j = randrange(i, size)
            deck[i], deck[j] = deck[j], deck[i]
            if deck[i]:
                lands += 1
        histogram[lands] += 1

    return histogram


def hypergeometric_at_least(population: int, successes: int, draws: int, minimum: int) -> float:
    """
    Exact P(X >= minimum) when drawing `draws` cards without replacement
    from `population` cards of which `successes` are lands.
    """
    if draws > population or population <= 0:
        return 0.0
    total = comb(population, draws)
    probability = 0
    for k in range(max(minimum, 0), min(draws, successes) + 1):
        probability += comb(successes, k) * comb(population - successes, draws - k)
    return probability / total


def summarize(
    histogram: Sequence[int],
    trial_count: int,
    target_land_count: int,
    land_flags: Sequence[bool],
) -> SimulationResult:
    """Turn a raw histogram into percentages."""
    successes = sum(histogram[target_land_count:])
    distribution = {
        lands: round(100.0 * count / trial_count, 2)
        for lands, count in enumerate(histogram)
    }
    deck_size = len(land_flags)
    land_count = sum(1 for is_land in land_flags if is_land)

    return SimulationResult(
        trial_count=trial_count,
        target_land_count=target_land_count,
        success_rate=round(100.0 * successes / trial_count, 2),
        land_count_distribution=distribution,
        deck_size=deck_size,
        land_count=land_count,
        expected_success_rate=round(
            100.0 * hypergeometric_at_least(deck_size, land_count, HAND_SIZE, target_land_count), 2
        ),
    )


def run_simulation(request: SimulationRequest) -> SimulationOutcome:
    """Validate and run a simulation in the current process (blocking)."""
    land_flags, error = prepare_request(request)
    if error is not None:
        return error

    histogram = run_trials(land_flags, request.trial_count, request.seed)
    return summarize(histogram, request.trial_count, request.target_land_count, land_flags)


# =============================================================================
# Worker process
# =============================================================================

def _worker_main(conn) -> None:
    """
    Loop run inside the worker process.

    Receives (land_flags, trial_count, seed) tuples, replies with
    ("ok", histogram) or ("error", message). None means shut down.
    """
    while True:
        try:
            message = conn.recv()
        except (EOFError, OSError):
            break
        if message is None:
            break

        try:
            land_flags, trial_count, seed = message
            conn.send(("ok", run_trials(land_flags, trial_count, seed)))
        except Exception as e:
            conn.send(("error", f"{type(e).__name__}: {e}"))

    conn.close()


class MulliganWorker:
    """
    A long-lived worker process for mulligan simulations.

    - Create once, reuse for many requests, close() when done (or use it
      as a context manager).
    - One request at a time: a request that arrives while another is
      running gets a "worker_busy" error instead of waiting.
    - close() while a request is running kills the process; that request
      resolves to a "worker_unavailable" error.
    """

    def __init__(self, verbose: bool = False, mp_context=None):
        self.verbose = verbose
        self._mp = mp_context or multiprocessing.get_context()
        self._lock = threading.Lock()  # guards the fields below
        self._process = None
        self._conn = None
        self._in_flight = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._process is not None and self._process.is_alive()

    def start(self) -> "MulliganWorker":
        """Start the worker process (no-op if it is already running)."""
        with self._lock:
            if self._process is not None and self._process.is_alive():
                return self

            parent_conn, child_conn = self._mp.Pipe(duplex=True)
            process = self._mp.Process(
                target=_worker_main,
                args=(child_conn,),
                name="mulligan-simulator",
                daemon=True,
            )
            process.start()
            # Only the child keeps its end open, so a dead child means EOF here
            child_conn.close()

            self._process = process
            self._conn = parent_conn

        if self.verbose:
            print(f"  🎲 Mulligan simulator started (pid {process.pid})")
        return self

    def close(self) -> None:
        """
        Stop the worker process.

        An idle worker is asked to exit; a busy one is terminated, which
        aborts the running request.
        """
        with self._lock:
            process, conn = self._process, self._conn
            in_flight = self._in_flight
            self._process = None
            self._conn = None

        if process is None:
            return

        if in_flight:
            process.terminate()
        else:
            try:
                conn.send(None)
            except (OSError, ValueError):
                pass

        process.join(JOIN_TIMEOUT_SECONDS)
        if process.is_alive():
            process.terminate()
            process.join(JOIN_TIMEOUT_SECONDS)

        # A running request still holds the connection; it closes it when it
        # returns
        if not in_flight:
            conn.close()

        if self.verbose:
            print("  🛑 Mulligan simulator stopped")

    def __enter__(self) -> "MulliganWorker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def run(self, request: SimulationRequest) -> SimulationOutcome:
        """
        Run one simulation on the worker and wait for the result.

        Returns:
            SimulationResult, or SimulationError for invalid input, a busy
            worker, or a worker that is not running.
        """
        land_flags, error = prepare_request(request)
        if error is not None:
            return error

        with self._lock:
            if self._process is None or not self._process.is_alive():
                return SimulationError(
                    "Simulation worker is not running. Please try again.",
                    WORKER_UNAVAILABLE,
                )
            if self._in_flight:
                return SimulationError(
                    "A simulation is already running. Wait for it to finish.",
                    WORKER_BUSY,
                )
            self._in_flight = True
            conn = self._conn

        if self.verbose:
            print(f"  🎲 Simulating {request.trial_count} opening hands...")

        try:
            try:
                conn.send((land_flags, request.trial_count, request.seed))
                status, payload = conn.recv()
            except (EOFError, OSError) as e:
                return SimulationError(
                    f"Simulation worker stopped before finishing ({type(e).__name__}).",
                    WORKER_UNAVAILABLE,
                )
        finally:
            with self._lock:
                self._in_flight = False
                closed_meanwhile = self._conn is not conn
            if closed_meanwhile:
                conn.close()

        if status != "ok":
            return SimulationError(f"Simulation failed: {payload}", WORKER_UNAVAILABLE)

        result = summarize(payload, request.trial_count, request.target_land_count, land_flags)
        if self.verbose:
            print(f"  ✅ Success rate: {result.success_rate:.2f}%")
        return result

    async def simulate(self, request: SimulationRequest) -> SimulationOutcome:
        """Async version of run(); the event loop stays free while it waits."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run, request)

    async def simulate_mulligan(
        self,
        deck_cards: Iterable[Any],
        trial_count: int,
        target_land_count: int,
        seed: Optional[int] = None,
    ) -> SimulationOutcome:
        """
        Estimate opening-hand land odds for a list of cards.

        Args:
            deck_cards: Card objects or plain card dicts (with quantity)
            trial_count: Number of hands to draw
            target_land_count: Minimum lands for a hand to count as a success
            seed: Optional RNG seed for reproducible runs
        """
        request = SimulationRequest(
            deck_cards=tuple(deck_cards or ()),
            trial_count=trial_count,
            target_land_count=target_land_count,
            seed=seed,
        )
        return await self.simulate(request)
