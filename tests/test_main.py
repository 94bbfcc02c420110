import json
from pathlib import Path

import main
from mulligan_simulator import SimulationError, run_simulation, SimulationRequest
from card_models import Card


def write_deck(tmp_path, data):
    path = tmp_path / "deck.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def sample_deck():
    return {
        "commander": {"name": "Omnath, Locus of Mana", "type_line": "Legendary Creature",
                      "mana_cost": "{2}{G}", "cmc": 3, "colors": ["G"]},
        "cards": [
            {"name": "Forest", "type_line": "Basic Land — Forest", "quantity": 38},
            {"name": "Llanowar Elves", "type_line": "Creature — Elf Druid",
             "oracle_text": "{T}: Add {G}.", "mana_cost": "{G}", "cmc": 1, "quantity": 1},
        ],
    }


def test_load_deck_from_file(tmp_path):
    deck, error = main.load_deck_from_file(write_deck(tmp_path, sample_deck()))

    assert error is None
    assert deck.size() == 40
    assert deck.commander.name == "Omnath, Locus of Mana"


def test_load_deck_missing_file(tmp_path):
    deck, error = main.load_deck_from_file(str(tmp_path / "nope.json"))

    assert deck is None
    assert error.startswith("File not found")


def test_load_deck_rejects_non_objects(tmp_path):
    deck, error = main.load_deck_from_file(write_deck(tmp_path, [1, 2, 3]))

    assert deck is None
    assert "JSON object" in error


def test_load_deck_rejects_bad_json(tmp_path):
    path = tmp_path / "deck.json"
    path.write_text("{not json", encoding="utf-8")

    deck, error = main.load_deck_from_file(str(path))

    assert deck is None
    assert error.startswith("Error reading file")


def test_print_analysis_results(tmp_path, capsys):
    deck, _ = main.load_deck_from_file(write_deck(tmp_path, sample_deck()))
    analysis = main.DeckAnalyzer().analyze(deck)

    main.print_analysis_results(analysis)

    out = capsys.readouterr().out
    assert "SUGGESTED BRACKET: 1" in out
    assert "MANA CURVE" in out
    assert "Omnath, Locus of Mana" in out


def test_print_simulation_result(capsys):
    cards = (Card(id="bolt", name="Bolt", type_line="Instant", quantity=99),)
    result = run_simulation(SimulationRequest(cards, 200, 0, seed=1))

    main.print_simulation_result(result)
    main.print_simulation_result(SimulationError("Deck is empty. Cannot run simulation."))

    out = capsys.readouterr().out
    assert "100.00%" in out
    assert "Deck is empty" in out


def test_menu_exit_without_deck(monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "2")

    main.run_menu_loop(main.MulliganWorker())

    assert "Goodbye" in capsys.readouterr().out


def test_bundled_sample_deck_is_legal():
    path = Path(__file__).resolve().parents[1] / "decks" / "sample_deck.json"

    deck, error = main.load_deck_from_file(str(path))
    analysis = main.DeckAnalyzer().analyze(deck)

    assert error is None
    assert analysis.total_cards == 100
    assert analysis.legality_warnings == []
