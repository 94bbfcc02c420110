from card_models import Card, Deck
from deck_analyzer import DeckAnalyzer, analyze


def card_dict(name, type_line="Instant", oracle_text="", quantity=1, **kwargs):
    data = {"name": name, "type_line": type_line, "oracle_text": oracle_text, "quantity": quantity}
    data.update(kwargs)
    return data


def sample_deck_dict():
    return {
        "commander": card_dict("Omnath, Locus of Mana", "Legendary Creature — Elemental",
                               mana_cost="{2}{G}", cmc=3, colors=["G"]),
        "cards": [
            card_dict("Forest", "Basic Land — Forest", quantity=40),
            card_dict("Llanowar Elves", "Creature — Elf Druid", "{T}: Add {G}.",
                      mana_cost="{G}", cmc=1, colors=["G"]),
            card_dict("Cyclonic Rift", "Instant", "Return target nonland permanent you don't control "
                      "to its owner's hand.", mana_cost="{1}{U}", cmc=2, colors=["U"]),
        ],
    }


def make_card(name, type_line="Instant", quantity=1):
    return Card(id=name, name=name, type_line=type_line, quantity=quantity)


def test_analyze_accepts_a_plain_dict():
    analysis = analyze(sample_deck_dict())

    assert analysis.commander == "Omnath, Locus of Mana"
    assert analysis.total_cards == 43
    assert analysis.mana_curve["1"] == 1
    assert analysis.mana_curve["2"] == 1
    assert analysis.color_sources["G"] == 41
    assert analysis.pip_requirements["G"] == 2
    assert analysis.bracket_result.bracket == 3
    assert analysis.bracket_result.game_changers == ("Cyclonic Rift",)
    assert analysis.suggested_bracket == 3
    assert analysis.legality_warnings == []


def test_analyze_accepts_a_deck():
    deck = Deck.from_dict(sample_deck_dict())

    assert analyze(deck).total_cards == 43


def test_deck_without_commander():
    analysis = analyze({"commander": None, "cards": [card_dict("Opt", oracle_text="Scry 1.")]})

    assert analysis.commander == "Unknown"
    assert analysis.total_cards == 1


def test_to_dict_is_plain_data():
    data = analyze(sample_deck_dict()).to_dict()

    assert data["bracket_result"]["bracket"] == 3
    assert data["mana_curve"]["7+"] == 0
    assert set(data) >= {
        "mana_curve", "color_distribution", "color_sources", "pip_requirements",
        "type_breakdown", "functional_buckets", "bracket_result", "average_cmc",
        "power_level", "recommendations", "balance_suggestions", "total_cards",
        "commander", "legality_warnings",
    }


def test_injected_game_changers():
    analysis = DeckAnalyzer(game_changers=["Llanowar Elves"]).analyze(Deck.from_dict(sample_deck_dict()))

    assert analysis.bracket_result.game_changers == ("Llanowar Elves",)


def test_singleton_violations_are_reported():
    analyzer = DeckAnalyzer()
    cards = [
        make_card("Sol Ring", "Artifact", quantity=2),
        make_card("Forest", "Basic Land — Forest", quantity=20),
        make_card("Relentless Rats", "Creature — Rat", quantity=30),
        make_card("Seven Dwarves", "Creature — Dwarf", quantity=8),
    ]

    warnings = analyzer.analyze(Deck.from_cards(cards)).legality_warnings

    assert len(warnings) == 2
    assert "2x Sol Ring" in warnings[0]
    assert "max 7" in warnings[1]


def test_limited_copies_within_limit_are_fine():
    analysis = DeckAnalyzer().analyze(
        Deck.from_cards([make_card("Seven Dwarves", "Creature — Dwarf", quantity=7)])
    )

    assert analysis.legality_warnings == []


def test_verbose_output(capsys):
    DeckAnalyzer(verbose=True).analyze(Deck.from_dict(sample_deck_dict()))

    out = capsys.readouterr().out
    assert "Starting deck analysis" in out
    assert "Suggested bracket: 3" in out


def test_quiet_by_default(capsys):
    DeckAnalyzer().analyze(Deck.from_dict(sample_deck_dict()))

    assert capsys.readouterr().out == ""


def test_bad_entries_are_skipped():
    analysis = analyze({
        "commander": "Omnath",
        "cards": [None, "Forest", card_dict("Opt", oracle_text="Scry 1.")],
    })

    assert analysis.commander == "Unknown"
    assert analysis.total_cards == 1


def test_infinite_cmc_uses_the_mana_cost():
    analysis = analyze({"cards": [
        {"name": "Big Spell", "type_line": "Sorcery", "mana_cost": "{7}{G}", "cmc": float("inf")},
    ]})

    assert analysis.mana_curve["7+"] == 1
    assert analysis.average_cmc == 8.0
