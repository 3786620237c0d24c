import logging
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from player2048 import config
from player2048.randomness import ReplayRandom

logger = logging.getLogger(__name__)


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, text: str) -> "Direction":
        """Map 'up', 'down', 'left' or 'right' to a Direction."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid direction {text!r}. Must be 'up', 'down', 'left', or 'right'"
            ) from None


# Number of counter-clockwise rotations that turn a move into a move to the left
_ROTATIONS = {
    Direction.LEFT: 0,
    Direction.UP: 1,
    Direction.RIGHT: 2,
    Direction.DOWN: 3,
}


class MoveOutcome(NamedTuple):
    board: np.ndarray
    moved: bool
    score_delta: int


def _slide_line(line: np.ndarray) -> int:
    """
    Push one line towards index 0 in place and return the merge score.

    Tiles are taken from the far end (index 0) onwards. Each one slides over
    empty cells and merges into the tile that stops it if both are equal,
    unless that tile is itself the result of a merge in this move.
    """
    score = 0
    merged = [False] * len(line)
    for src in range(1, len(line)):
        value = line[src]
        if not value:
            continue
        dst = src
        while dst > 0 and line[dst - 1] == 0:
            dst -= 1
        if dst > 0 and line[dst - 1] == value and not merged[dst - 1]:
            line[dst - 1] = value * 2
            line[src] = 0
            merged[dst - 1] = True
            score += int(value) * 2
        elif dst != src:
            line[dst] = value
            line[src] = 0
    return score


def slide(board: np.ndarray, direction: Direction) -> MoveOutcome:
    """Apply a move to a copy of `board`; the argument is never modified."""
    k = _ROTATIONS[direction]
    # Rotate so that every direction becomes a move to the left
    rotated = np.rot90(board, k=k).copy()
    score = 0
    for row in rotated:
        score += _slide_line(row)
    result = np.rot90(rotated, k=-k).copy()
    return MoveOutcome(result, not np.array_equal(board, result), score)


def empty_cells(board: np.ndarray) -> List[Tuple[int, int]]:
    """Row-major list of (row, col) positions holding no tile."""
    return [(int(r), int(c)) for r, c in zip(*np.where(board == 0))]


def is_terminal(board: np.ndarray) -> bool:
    """A full board where no two neighbours are equal."""
    if np.any(board == 0):
        return False
    if np.any(board[:, :-1] == board[:, 1:]):
        return False
    if np.any(board[:-1, :] == board[1:, :]):
        return False
    return True


class Board:
    """
    The game: a 4x4 grid, the score and the random source for new tiles.

    One level of undo is kept; every apply_move that changes the board replaces it.
    """

    def __init__(self, size: int = config.GRID_SIZE, seed: Optional[int] = None):
        self.size = size
        self.score = 0
        self.board = np.zeros((size, size), dtype=int)
        self.random = ReplayRandom(seed)
        self._backup = None
        self.reset(seed)

    @classmethod
    def from_grid(cls, grid, score: int = 0, seed: Optional[int] = None) -> "Board":
        """Create a game on an existing position instead of a fresh start."""
        game = cls(len(grid), seed)
        game.board = np.array(grid, dtype=int)
        game.score = score
        return game

    def reset(self, seed: Optional[int] = None) -> None:
        """Start a new game: empty board, zero score and two random tiles."""
        self.board = np.zeros((self.size, self.size), dtype=int)
        self.score = 0
        self.random.reseed(seed)
        self._backup = None
        self.random.reserve(2 * config.DRAWS_PER_TILE)
        self.inject_random_tile()
        self.inject_random_tile()
        logger.debug("New game started")

    def apply_move(self, direction: Direction) -> Tuple[bool, int]:
        """
        Move tiles in the given direction.
        Returns whether anything moved and the score gained by merges.
        The caller decides whether to drop a new tile afterwards.
        """
        self.random.reserve(config.DRAWS_PER_TILE)
        backup = (self.board.copy(), self.score, self.random.snapshot())

        outcome = slide(self.board, direction)
        if outcome.moved:
            # a move that changes nothing keeps the previous undo state
            self._backup = backup
            self.board = outcome.board
            self.score += outcome.score_delta
        return outcome.moved, outcome.score_delta

    def inject_random_tile(self) -> bool:
        """Add a new tile (2 or 4) to a random empty cell."""
        cells = empty_cells(self.board)
        if not cells:
            return False

        self.random.reserve(config.DRAWS_PER_TILE)
        row, col = cells[self.random.draw() % len(cells)]
        self.board[row, col] = 4 if self.random.draw() % 100 >= 100 - config.FOUR_PERCENT else 2
        return True

    def move(self, direction: Direction) -> bool:
        """Apply a move and drop a new tile if the board changed."""
        moved, _ = self.apply_move(direction)
        if moved:
            self.inject_random_tile()
        return moved

    def undo(self) -> bool:
        """Go back to the state before the last move. Returns False without history."""
        if self._backup is None:
            return False
        board, score, pending = self._backup
        self.board = board.copy()
        self.score = score
        self.random.restore(pending)
        return True

    def is_terminal(self) -> bool:
        """Check if no moves are possible."""
        return is_terminal(self.board)

    def empty_cells(self) -> List[Tuple[int, int]]:
        return empty_cells(self.board)

    def has_won(self) -> bool:
        """Check if the winning tile is present."""
        return bool(np.any(self.board >= config.WIN_TILE))

    def current_board(self) -> np.ndarray:
        """Return the current board state."""
        return self.board.copy()

    def current_score(self) -> int:
        """Return the current score."""
        return self.score
