import numpy as np
import pytest

from player2048.board import Board, Direction, empty_cells, is_terminal, slide

CHECKERBOARD = [
    [2, 4, 2, 4],
    [4, 2, 4, 2],
    [2, 4, 2, 4],
    [4, 2, 4, 2],
]


def board_with_last_row(row):
    return Board.from_grid([[0] * 4, [0] * 4, [0] * 4, list(row)], seed=0)


def test_merge_pair_left():
    game = board_with_last_row([2, 2, 0, 0])
    moved, delta = game.apply_move(Direction.LEFT)
    assert moved
    assert delta == 4
    assert list(game.current_board()[3]) == [4, 0, 0, 0]
    assert game.current_score() == 4


def test_merge_across_gap_right():
    game = board_with_last_row([2, 0, 0, 2])
    moved, delta = game.apply_move(Direction.RIGHT)
    assert moved
    assert delta == 4
    assert list(game.current_board()[3]) == [0, 0, 0, 4]


def test_blocked_row_does_not_move():
    game = board_with_last_row([2, 4, 2, 4])
    before = game.current_board()
    moved, delta = game.apply_move(Direction.LEFT)
    assert not moved
    assert delta == 0
    assert np.array_equal(game.current_board(), before)
    assert game.current_score() == 0


@pytest.mark.parametrize("row, expected, delta", [
    ([2, 2, 2, 2], [4, 4, 0, 0], 8),
    ([4, 2, 2, 0], [4, 4, 0, 0], 4),
    ([2, 2, 4, 0], [4, 4, 0, 0], 4),
    ([4, 4, 8, 0], [8, 8, 0, 0], 8),
    ([0, 2, 0, 2], [4, 0, 0, 0], 4),
    ([2, 0, 4, 4], [2, 8, 0, 0], 8),
])
def test_each_tile_merges_at_most_once(row, expected, delta):
    outcome = slide(np.array([row, [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
    assert list(outcome.board[0]) == expected
    assert outcome.score_delta == delta


def test_vertical_moves():
    grid = np.zeros((4, 4), dtype=int)
    grid[:, 1] = [0, 2, 0, 2]
    up = slide(grid, Direction.UP)
    assert list(up.board[:, 1]) == [4, 0, 0, 0]
    down = slide(grid, Direction.DOWN)
    assert list(down.board[:, 1]) == [0, 0, 0, 4]
    assert up.score_delta == down.score_delta == 4


def test_slide_leaves_input_untouched():
    grid = np.array([[2, 2, 0, 0]] + [[0] * 4] * 3)
    copy = grid.copy()
    slide(grid, Direction.LEFT)
    assert np.array_equal(grid, copy)


@pytest.mark.parametrize("direction", list(Direction))
def test_merge_conserves_tile_sum(direction):
    game = Board(seed=11)
    for _ in range(30):
        game.move(Direction.UP)
        game.move(Direction.LEFT)
    board = game.current_board()
    outcome = slide(board, direction)
    assert outcome.board.sum() == board.sum()


def test_terminal_detection():
    assert is_terminal(np.array(CHECKERBOARD))
    assert Board.from_grid(CHECKERBOARD).is_terminal()

    pair = np.array(CHECKERBOARD)
    pair[2, 2] = 4
    assert not is_terminal(pair)

    column_pair = np.array(CHECKERBOARD)
    column_pair[1, 0] = 2
    assert not is_terminal(column_pair)

    with_gap = np.array(CHECKERBOARD)
    with_gap[0, 0] = 0
    assert not is_terminal(with_gap)


def test_no_direction_moves_terminal_board():
    for direction in Direction:
        assert not slide(np.array(CHECKERBOARD), direction).moved


def test_inject_on_full_board_is_noop():
    game = Board.from_grid(CHECKERBOARD)
    assert not game.inject_random_tile()
    assert np.array_equal(game.current_board(), np.array(CHECKERBOARD))


def test_inject_uses_pending_draws():
    grid = [row[:] for row in CHECKERBOARD]
    grid[0][1] = grid[2][2] = grid[3][3] = 0
    game = Board.from_grid(grid)
    # cell 5 % 3 == 2 -> third empty cell, value 95 % 100 >= 90 -> 4
    game.random.restore((5, 95))
    assert game.inject_random_tile()
    assert game.current_board()[3, 3] == 4
    game.random.restore((4, 42))
    assert game.inject_random_tile()
    assert game.current_board()[0, 1] == 2
    assert empty_cells(game.current_board()) == [(2, 2)]


def test_reset_places_two_tiles():
    game = Board(seed=3)
    game.apply_move(Direction.DOWN)
    game.reset()
    board = game.current_board()
    assert np.count_nonzero(board) == 2
    assert set(board[board != 0]) <= {2, 4}
    assert game.current_score() == 0
    assert len(game.empty_cells()) == 14


def test_same_seed_same_game():
    moves = [Direction.UP, Direction.LEFT, Direction.DOWN, Direction.RIGHT] * 10
    games = [Board(seed=42), Board(seed=42)]
    for game in games:
        for direction in moves:
            game.move(direction)
    assert np.array_equal(games[0].current_board(), games[1].current_board())
    assert games[0].current_score() == games[1].current_score()


@pytest.mark.parametrize("direction", list(Direction))
def test_undo_round_trip(direction):
    game = Board(seed=7)
    for _ in range(5):
        game.move(Direction.UP)
        game.move(Direction.RIGHT)
    board, score, pending = game.current_board(), game.current_score(), game.random.snapshot()

    game.move(direction)
    after = game.current_board()
    assert game.undo()

    assert np.array_equal(game.current_board(), board)
    assert game.current_score() == score
    assert game.random.snapshot()[:len(pending)] == pending

    # replaying the move drops the very same tile
    game.move(direction)
    assert np.array_equal(game.current_board(), after)


def test_repeated_undo_restores_same_state():
    game = Board(seed=5)
    game.move(Direction.UP)
    game.move(Direction.LEFT)
    game.undo()
    first = game.current_board()
    game.undo()
    assert np.array_equal(game.current_board(), first)


def test_undo_without_history():
    assert not Board(seed=1).undo()


def test_direction_parse():
    assert Direction.parse(" Up ") is Direction.UP
    assert Direction.parse("left") is Direction.LEFT
    with pytest.raises(ValueError):
        Direction.parse("sideways")


def test_has_won():
    grid = [[0] * 4 for _ in range(4)]
    grid[1][2] = 2048
    assert Board.from_grid(grid).has_won()
    assert not Board(seed=2).has_won()


def test_move_without_change_keeps_undo():
    game = Board.from_grid([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4], seed=0)
    # the new tile lands on the first empty cell, next to the merged four
    game.random.restore((0, 0))
    assert game.move(Direction.LEFT)
    assert list(game.current_board()[0]) == [4, 2, 0, 0]
    moved, _ = game.apply_move(Direction.UP)
    assert not moved
    assert game.undo()
    assert list(game.current_board()[0]) == [2, 2, 0, 0]
    assert np.count_nonzero(game.current_board()) == 2
    assert game.current_score() == 0
