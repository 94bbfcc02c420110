from card_classifier import CARD_DRAW, FAST_MANA, RAMP, TUTOR
from card_models import Card, Deck
from deck_aggregator import CURVE_KEYS, DeckAggregator


def make_card(name, type_line="Instant", oracle_text="", quantity=1, **kwargs):
    return Card(id=name, name=name, type_line=type_line, oracle_text=oracle_text,
                quantity=quantity, **kwargs)


def sample_deck():
    commander = make_card(
        "Selesnya Commander", "Legendary Creature — Elf",
        mana_cost="{1}{G}{W}", cmc=3, colors=("W", "G"),
    )
    cards = [
        make_card("Forest", "Basic Land — Forest", "({T}: Add {G}.)", quantity=10),
        make_card("Sol Ring", "Artifact", "{T}: Add {C}{C}.", mana_cost="{1}", cmc=1),
        make_card("Llanowar Elves", "Creature — Elf Druid", "{T}: Add {G}.",
                  mana_cost="{G}", cmc=1, colors=("G",)),
        make_card("Cultivate", "Sorcery",
                  "Search your library for up to two basic land cards, reveal those cards.",
                  mana_cost="{2}{G}", cmc=3, colors=("G",)),
        make_card("Big Spell", "Sorcery", "Each opponent loses 8 life.",
                  mana_cost="{6}{B}{B}", cmc=8, colors=("B",)),
    ]
    return Deck.from_cards(cards, commander)


aggregator = DeckAggregator()


def test_mana_curve_skips_lands_and_commander():
    deck = sample_deck()

    curve = aggregator.mana_curve(deck.library_cards())

    assert tuple(curve) == CURVE_KEYS
    assert curve == {"0": 0, "1": 2, "2": 0, "3": 1, "4": 0, "5": 0, "6": 0, "7+": 1}
    nonland = sum(card.quantity for card in deck.library_cards() if not card.is_land)
    assert sum(curve.values()) == nonland


def test_mana_curve_floors_fractional_costs():
    curve = aggregator.mana_curve([make_card("Little Girl", "Creature — Human", cmc=0.5)])

    assert curve["0"] == 1


def test_type_breakdown_uses_quantities():
    breakdown = aggregator.type_breakdown(sample_deck().library_cards())

    assert breakdown["Land"] == 10
    assert breakdown["Artifact"] == 1
    assert breakdown["Creature"] == 1
    assert breakdown["Sorcery"] == 2
    assert breakdown["Other"] == 0


def test_average_cmc():
    assert aggregator.average_cmc(sample_deck().library_cards()) == 3.25
    assert aggregator.average_cmc([make_card("Forest", "Basic Land — Forest")]) == 0.0
    assert aggregator.average_cmc([]) == 0.0


def test_color_distribution():
    distribution = aggregator.color_distribution(sample_deck().library_cards())

    assert distribution["G"] == 2
    assert distribution["B"] == 1
    assert distribution["Colorless"] == 11  # 10 Forests + Sol Ring


def test_color_sources_include_commander_and_quantities():
    sources = aggregator.color_sources(sample_deck().all_cards())

    assert sources["G"] == 11
    assert sources["C"] == 1
    assert sources["Multi"] == 0


def test_multi_counts_only_two_or_more_colors():
    cards = [
        make_card("Savannah", "Land — Forest Plains", "({T}: Add {G} or {W}.)", quantity=2),
        make_card("Eldrazi Temple-ish", "Land", "{T}: Add {C} or {G}."),
    ]

    sources = aggregator.color_sources(cards)

    assert sources["Multi"] == 2
    assert sources["G"] == 3
    assert sources["W"] == 2
    assert sources["C"] == 1


def test_pip_requirements_include_commander():
    pips = aggregator.pip_requirements(sample_deck().all_cards())

    assert pips == {"W": 1, "U": 0, "B": 2, "R": 0, "G": 3}


def test_functional_buckets_count_every_bucket_a_card_hits():
    card = make_card(
        "Explorer's Scope", "Sorcery",
        "Search your library for a basic land card, put it onto the battlefield. Draw a card.",
        quantity=2,
    )

    buckets = aggregator.functional_buckets([card])

    assert buckets[RAMP] == 2
    assert buckets[CARD_DRAW] == 2
    assert buckets[TUTOR] == 2


def test_power_level():
    assert DeckAggregator.power_level({}, 3.0) == 5
    assert DeckAggregator.power_level({}, 2.0) == 6
    assert DeckAggregator.power_level({}, 4.5) == 4
    assert DeckAggregator.power_level({FAST_MANA: 1}, 3.0) == 6  # 5.5 rounds up
    assert DeckAggregator.power_level({FAST_MANA: 20}, 2.0) == 10
    assert DeckAggregator.power_level({}, 4.0) >= 1


def test_recommendations_for_an_empty_deck():
    assert len(DeckAggregator.recommendations({})) == 4
    assert DeckAggregator.balance_suggestions({}) == []
    assert len(DeckAggregator.balance_suggestions({FAST_MANA: 6, TUTOR: 6})) == 2


def test_aggregate():
    stats = aggregator.aggregate(sample_deck())

    assert stats.mana_curve["7+"] == 1
    assert stats.color_sources["G"] == 11
    assert stats.pip_requirements["W"] == 1
    assert stats.average_cmc == 3.25
    assert stats.functional_buckets[RAMP] == 3  # Sol Ring, Llanowar Elves, Cultivate
    assert 1 <= stats.power_level <= 10


def test_overall_cmc_counts_lands_and_commander():
    deck = sample_deck()

    # (3 + 1 + 1 + 3 + 8) / 15 cards
    assert aggregator.overall_cmc(deck.all_cards()) == 16 / 15
    assert aggregator.overall_cmc([]) is None


def test_power_level_is_scored_on_the_all_cards_curve():
    commander = make_card("Bear Lord", "Legendary Creature — Bear", cmc=3)
    deck = Deck.from_cards(
        [
            make_card("Forest", "Basic Land — Forest", quantity=37),
            make_card("Filler", "Creature — Bear", cmc=3.3, quantity=62),
        ],
        commander,
    )

    stats = aggregator.aggregate(deck)

    # Spells alone average 3.3 (no curve bonus); over all 100 cards it is
    # (62 * 3.3 + 3) / 100, about 2.08, which earns +1
    assert stats.average_cmc == 3.3
    assert stats.power_level == 6


def test_empty_deck_power_level_ignores_the_curve():
    assert DeckAggregator.power_level({}, None) == 5
    assert aggregator.aggregate(Deck()).power_level == 5
