import json

import pytest

from card_models import Card, Deck, count_cards_with_quantity


def make_card(name, type_line="Instant", quantity=1, **kwargs):
    return Card(id=kwargs.pop("id", name), name=name, type_line=type_line,
                quantity=quantity, **kwargs)


def test_from_dict_reads_scryfall_keys():
    card = Card.from_dict({
        "id": "abc",
        "name": "Sol Ring",
        "mana_cost": "{1}",
        "cmc": 1.0,
        "type_line": "Artifact",
        "oracle_text": "{T}: Add {C}{C}.",
        "colors": [],
        "color_identity": [],
        "quantity": 1,
    })

    assert card.id == "abc"
    assert card.mana_cost == "{1}"
    assert card.cmc == 1.0
    assert card.type_line == "Artifact"
    assert card.oracle_text == "{T}: Add {C}{C}."
    assert card.colors == ()


def test_from_dict_reads_camel_case_keys():
    card = Card.from_dict({
        "name": "Cultivate",
        "manaCost": "{2}{G}",
        "convertedManaCost": 3,
        "typeLine": "Sorcery",
        "oracleText": "Search your library for up to two basic land cards.",
        "colorIdentity": ["G"],
    })

    assert card.mana_cost == "{2}{G}"
    assert card.cmc == 3.0
    assert card.type_line == "Sorcery"
    assert card.oracle_text.startswith("Search your library")
    assert card.color_identity == ("G",)


def test_missing_fields_degrade_to_defaults():
    card = Card.from_dict({"name": "Mystery"})

    assert card.id == "Mystery"
    assert card.mana_cost == ""
    assert card.oracle_text == ""
    assert card.type_line == ""
    assert card.cmc == 0.0
    assert card.quantity == 1


def test_missing_cmc_is_computed_from_mana_cost():
    card = Card.from_dict({"name": "Growth", "mana_cost": "{2}{G}{G}"})

    assert card.cmc == 4.0


def test_bad_quantities_become_one():
    assert Card.from_dict({"name": "A", "quantity": "abc"}).quantity == 1
    assert Card.from_dict({"name": "A", "quantity": 0}).quantity == 1
    assert Card.from_dict({"name": "A", "quantity": -3}).quantity == 1
    assert Card.from_dict({"name": "A", "quantity": "3"}).quantity == 3


def test_colors_are_ordered_and_identity_falls_back_to_colors():
    card = Card.from_dict({"name": "Selesnya Thing", "colors": ["G", "W"]})

    assert card.colors == ("W", "G")
    assert card.color_identity == ("W", "G")


def test_double_faced_card_text_comes_from_faces():
    card = Card.from_dict({
        "name": "Tergrid, God of Fright // Tergrid's Lantern",
        "type_line": "Legendary Creature — God // Legendary Artifact",
        "card_faces": [
            {"mana_cost": "{3}{B}{B}", "oracle_text": "Menace"},
            {"mana_cost": "{4}{B}", "oracle_text": "{T}: Target player loses 3 life."},
        ],
    })

    assert card.mana_cost == "{3}{B}{B}"
    assert "Menace" in card.oracle_text
    assert "loses 3 life" in card.oracle_text
    assert card.front_face_name == "Tergrid, God of Fright"


def test_type_helpers_are_case_insensitive():
    assert make_card("Forest", "Basic Land — Forest").is_land
    assert make_card("Odd", "LAND").is_land
    assert make_card("Elves", "Creature — Elf Druid").is_creature
    assert not make_card("Bolt", "Instant").is_land


def test_count_cards_with_quantity():
    cards = [make_card("Island", "Basic Land — Island", quantity=10), make_card("Opt")]

    assert count_cards_with_quantity(cards) == 11


def test_deck_size_and_order():
    commander = make_card("Omnath", "Legendary Creature — Elemental")
    deck = Deck.from_cards(
        [make_card("Forest", "Basic Land — Forest", quantity=35), make_card("Opt")],
        commander,
    )

    assert deck.size() == 37
    assert deck.size(include_commander=False) == 36
    assert deck.all_cards()[0] is commander
    assert len(deck.library_cards()) == 2


def test_repeated_ids_are_merged():
    deck = Deck.from_cards([
        make_card("Forest", "Basic Land — Forest", quantity=3),
        make_card("Forest", "Basic Land — Forest", quantity=2),
    ])

    assert len(deck.cards) == 1
    assert deck.cards[0].quantity == 5


def test_deck_from_dict():
    deck = Deck.from_dict({
        "commander": {"name": "Omnath", "type_line": "Legendary Creature"},
        "cards": [{"name": "Forest", "type_line": "Basic Land — Forest", "quantity": 30}],
    })

    assert deck.commander.name == "Omnath"
    assert deck.size() == 31

    no_commander = Deck.from_dict({"commander": None, "cards": []})
    assert no_commander.commander is None
    assert no_commander.size() == 0


def test_overflowing_numbers_degrade():
    card = Card.from_dict(json.loads(
        '{"name": "Huge", "mana_cost": "{2}{G}", "quantity": 1e999, "cmc": 1e999}'
    ))

    assert card.quantity == 1
    assert card.cmc == 3.0


def test_nan_cmc_falls_back_to_mana_cost():
    card = Card.from_dict(json.loads('{"name": "Odd", "mana_cost": "{1}{U}", "cmc": NaN}'))

    assert card.cmc == 2.0


def test_non_dict_card_record_is_rejected():
    with pytest.raises(ValueError):
        Card.from_dict(None)
    with pytest.raises(ValueError):
        Card.from_dict("Forest")


def test_deck_from_dict_skips_entries_that_are_not_cards():
    deck = Deck.from_dict({
        "commander": "Omnath",
        "cards": [None, "Forest", {"name": "Opt", "type_line": "Instant"}],
    })

    assert deck.commander is None
    assert [card.name for card in deck.cards] == ["Opt"]


def test_malformed_card_faces_are_ignored():
    card = Card.from_dict({"name": "Split", "card_faces": [None, {"oracle_text": "Draw a card."}]})

    assert card.oracle_text == "Draw a card."
