import logging
from typing import Dict, List, Optional, Type

import numpy as np

from player2048.board import Direction, MoveOutcome, empty_cells, slide

logger = logging.getLogger(__name__)

DEFAULT_ORDER = [Direction.UP, Direction.LEFT, Direction.RIGHT, Direction.DOWN]

# Cells visited from the top-left corner, alternating direction on every row
SERPENTINE = [
    (0, 0), (0, 1), (0, 2), (0, 3),
    (1, 3), (1, 2), (1, 1), (1, 0),
    (2, 0), (2, 1), (2, 2), (2, 3),
    (3, 3), (3, 2), (3, 1), (3, 0),
]


class Strategy:
    name = None

    def preferred_order(self, board: np.ndarray) -> List[Direction]:
        return list(DEFAULT_ORDER)

    def score(self, board: np.ndarray, outcome: MoveOutcome) -> int:
        raise NotImplementedError


class GreedyStrategy(Strategy):
    """Move up, left, right or down, whatever works first."""

    name = "up"

    def score(self, board, outcome):
        return 1


class ScoreStrategy(Strategy):
    """Take the move with the biggest direct score gain."""

    name = "score"

    def score(self, board, outcome):
        # +1 so that a move without merges still beats no move at all
        return outcome.score_delta + 1


class LeftRightStrategy(ScoreStrategy):
    """
    Score gain plus a bonus for how well the current board already follows
    serpentine order: left to right on the first row, right to left on the
    second, and so on. The bonus is the same for every direction, so the
    ranking comes from the preferred order and the merge score.
    """

    name = "lr"

    def preferred_order(self, board):
        order = list(DEFAULT_ORDER)
        width = board.shape[1]
        for i, (row, col) in enumerate(SERPENTINE):
            value = board[row, col]
            last_in_row = i % width == width - 1
            if value and (last_in_row or value != board[SERPENTINE[i + 1]]):
                continue
            # first gap: an empty cell or two equal neighbours
            if (i // width) % 2 == 1:
                order[1], order[2] = Direction.RIGHT, Direction.LEFT
            if not value:
                order[0], order[1] = order[1], Direction.UP
            break
        return order

    def score(self, board, outcome):
        return super().score(board, outcome) + ordering_bonus(board)


def ordering_bonus(board: np.ndarray) -> int:
    """Sum of the cells that are not smaller than their serpentine predecessor."""
    bonus = 0
    for prev, cell in zip(SERPENTINE, SERPENTINE[1:]):
        if board[cell] >= board[prev]:
            bonus += int(board[cell])
    return bonus


STRATEGIES: Dict[str, Type[Strategy]] = {
    cls.name: cls for cls in (GreedyStrategy, ScoreStrategy, LeftRightStrategy)
}


def get_strategy(name: str) -> Strategy:
    """Look up a strategy by its command line name ('up', 'score' or 'lr')."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown strategy {name!r}. Must be one of {', '.join(STRATEGIES)}"
        ) from None


def choose_direction(board: np.ndarray, strategy: Strategy) -> Direction:
    """
    Pick the direction to play on `board`.

    A direction is only considered if it changes the board and leaves an
    empty cell for the next tile. When nothing qualifies UP is returned;
    the caller has to check for game over itself.
    """
    best: Optional[Direction] = None
    best_score = 0
    for direction in strategy.preferred_order(board):
        outcome = slide(board, direction)
        if not outcome.moved or not empty_cells(outcome.board):
            continue
        score = strategy.score(board, outcome)
        if score > best_score:
            best, best_score = direction, score

    if best is None:
        best = Direction.UP
    logger.debug("move %s", best.value)
    return best
