import argparse
import logging
import sys
from typing import List, NamedTuple, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from player2048 import config
from player2048.board import Board, Direction
from player2048.remote import RemoteBoard, RemoteProtocolError
from player2048.strategy import Strategy, choose_direction, get_strategy

logger = logging.getLogger(__name__)


def print_board(board):
    """Pretty print the game board."""
    for row in board:
        print(' '.join(f'{int(cell):5d}' for cell in row))
    print()


class LocalGame:
    """Game session on an in-process board, same surface as RemoteBoard."""

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self.game = Board(seed=seed)

    def start(self) -> None:
        # Only the first game of a seeded run is reproducible on its own
        self.game.reset(self._seed)
        self._seed = None

    def move(self, direction: Direction) -> None:
        self.game.move(direction)

    def board(self) -> np.ndarray:
        return self.game.current_board()

    def score(self) -> int:
        return self.game.current_score()

    def game_over(self) -> bool:
        return self.game.is_terminal()

    def close(self) -> None:
        pass


class GameResult(NamedTuple):
    score: int
    board: np.ndarray
    moves: int


def play_game(session, strategy: Strategy, verbose: bool = False) -> GameResult:
    """Play one game from a fresh start until no move is left."""
    session.start()
    moves = 0
    while not session.game_over():
        board = session.board()
        direction = choose_direction(board, strategy)
        if verbose:
            print_board(board)
            print(f"move {direction.value}")
        session.move(direction)
        moves += 1

    return GameResult(session.score(), session.board(), moves)


def plot_metrics(scores, avg_scores, filename):
    """Plot and save playout scores"""
    fig, ax = plt.subplots(figsize=(10, 5))

    ax.plot(scores, label='Score', alpha=0.6)
    ax.plot(avg_scores, label='Average Score', linewidth=2)
    ax.set_title('Playout Scores')
    ax.set_xlabel('Playout')
    ax.set_ylabel('Score')
    ax.legend()
    ax.grid(True)

    plt.tight_layout()
    plt.savefig(filename)
    plt.close(fig)


def average_due(playouts: int, tries: Optional[int]) -> bool:
    """
    The average is printed whenever the number of games still to play is a
    multiple of the interval, counting an endless run as UNLIMITED_TRIES games.
    """
    remaining = (config.UNLIMITED_TRIES if tries is None else tries) - playouts
    return remaining % config.AVERAGE_INTERVAL == 0


def run(session, strategy: Strategy, tries: Optional[int] = 1, average: bool = False,
        verbose: bool = False, plot: Optional[str] = None) -> int:
    """
    Play `tries` games (forever when None) and report progress.
    Returns the process exit code.
    """
    highscore = 0
    playouts = 0
    total = 0
    scores: List[int] = []
    avg_scores: List[float] = []
    status = 0

    try:
        while tries is None or playouts < tries:
            result = play_game(session, strategy, verbose)
            playouts += 1
            total += result.score
            scores.append(result.score)
            avg_scores.append(total / playouts)

            if result.score > highscore:
                print(f"score {result.score} ({playouts})")
                print_board(result.board)
                highscore = result.score
            elif average and average_due(playouts, tries):
                print(f"avg.  {total // playouts}")
    except KeyboardInterrupt:
        logger.info("Interrupted after %d playouts", playouts)
    except RemoteProtocolError as e:
        logger.error("Remote game failed after %d playouts: %s", playouts, e)
        status = 1
    finally:
        session.close()

    if plot and scores:
        plot_metrics(scores, avg_scores, plot)
        logger.info("Saved score plot to %s", plot)

    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="2048 player")
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--up', dest='strategy', action='store_const', const='up',
                       help="Move up, left, right or down, whatever works (default)")
    group.add_argument('--score', dest='strategy', action='store_const', const='score',
                       help="Take the move with the biggest direct score gain")
    group.add_argument('--lr', dest='strategy', action='store_const', const='lr',
                       help="Score gain plus keeping tiles ordered left-right per row")
    parser.add_argument('--average', action='store_true',
                        help="Print the average score now and then")
    parser.add_argument('--highscore', action='store_true',
                        help="Keep playing until interrupted, printing each new high score")
    parser.add_argument('--server', metavar='HOST:PORT',
                        help="Play on a remote-control server instead of a local board")
    parser.add_argument('--seed', type=int,
                        help="Seed for the first local game")
    parser.add_argument('--plot', metavar='FILE',
                        help="Save a plot of all playout scores")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Print the board before every move")
    parser.set_defaults(strategy='up')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config.configure_logging(args.verbose)
    strategy = get_strategy(args.strategy)

    if args.server:
        try:
            session = RemoteBoard(*config.parse_address(args.server))
        except (RemoteProtocolError, ValueError) as e:
            logger.error("%s", e)
            return 1
    else:
        session = LocalGame(args.seed)

    return run(session, strategy, tries=None if args.highscore else 1,
               average=args.average, verbose=args.verbose, plot=args.plot)


if __name__ == "__main__":
    sys.exit(main())
