import argparse
import logging

from player2048 import config
from player2048.board import Board, Direction
from player2048.player import print_board
from player2048.remote import RemoteControlServer

logger = logging.getLogger(__name__)

# Convert WASD to directions
DIRECTION_KEYS = {
    'w': Direction.UP,
    's': Direction.DOWN,
    'a': Direction.LEFT,
    'd': Direction.RIGHT,
}


def play_interactive(game):
    print("Welcome to 2048!")
    print("Use 'w' (up), 's' (down), 'a' (left), 'd' (right) to move tiles")
    print("Press 'u' to undo, 'r' to restart, 'q' to quit\n")

    congratulated = False
    # Game loop
    while True:
        print_board(game.current_board())
        print(f"Score: {game.current_score()}\n")

        key = input("Enter your move: ").strip().lower()

        if key == 'q':
            print("Thanks for playing!")
            break

        if key == 'u':
            if not game.undo():
                print("Nothing to undo!")
            continue

        if key == 'r':
            game.reset()
            congratulated = False
            continue

        if key not in DIRECTION_KEYS:
            print("Invalid input! Use 'w', 'a', 's', 'd' to move, 'u' to undo, 'q' to quit")
            continue

        if not game.move(DIRECTION_KEYS[key]):
            print("Invalid move!")

        if game.has_won() and not congratulated:
            congratulated = True
            print(f"\nCongratulations! You've reached {config.WIN_TILE}!")
            choice = input("Continue playing? (y/n): ")
            if choice.lower() != 'y':
                break

        if game.is_terminal():
            print_board(game.current_board())
            print(f"Game Over! No more moves possible. Final score: {game.current_score()}")
            choice = input("Undo last move? (y/n): ")
            if choice.lower() != 'y' or not game.undo():
                break


def serve(game, address):
    host, port = config.parse_address(address)
    with RemoteControlServer((host, port), game) as server:
        logger.info("Remote control listening on %s:%d", host, port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down remote control")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal")
    parser.add_argument('--listen', metavar='HOST:PORT',
                        help="Serve the board over the remote-control protocol instead of reading keys")
    parser.add_argument('--seed', type=int,
                        help="Seed for the first game")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Log every remote command")
    args = parser.parse_args(argv)
    config.configure_logging(args.verbose)

    # Initialize the game
    game = Board(seed=args.seed)

    if args.listen:
        serve(game, args.listen)
    else:
        play_interactive(game)


if __name__ == "__main__":
    main()
