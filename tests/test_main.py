import numpy as np

import main
from player2048.board import Board


def feed(monkeypatch, keys):
    keys = iter(keys)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(keys))


def test_move_then_undo(monkeypatch, capsys):
    game = Board(seed=9)
    start = game.current_board()
    feed(monkeypatch, ["a", "u", "q"])
    main.play_interactive(game)
    assert np.array_equal(game.current_board(), start)
    assert game.current_score() == 0
    assert "Thanks for playing!" in capsys.readouterr().out


def test_invalid_key_and_empty_undo(monkeypatch, capsys):
    feed(monkeypatch, ["u", "x", "q"])
    main.play_interactive(Board(seed=1))
    out = capsys.readouterr().out
    assert "Nothing to undo!" in out
    assert "Invalid input!" in out


def test_game_over_ends_loop(monkeypatch, capsys):
    grid = [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [8, 4, 2, 4],
        [8, 16, 8, 0],
    ]
    game = Board.from_grid(grid)
    feed(monkeypatch, ["d", "n"])
    main.play_interactive(game)
    assert "Game Over!" in capsys.readouterr().out
    assert game.is_terminal()
