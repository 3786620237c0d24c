import logging
import re
import socket
import socketserver
import threading

import numpy as np

from player2048 import config
from player2048.board import Board, Direction

logger = logging.getLogger(__name__)

OK = "OK"

_BOARD_PATTERN = re.compile(r"\[((?:\[[0-9 ]*\] ?)+)\]")
_ROW_PATTERN = re.compile(r"\[([0-9 ]*)\]")


class RemoteProtocolError(Exception):
    """Raised when the remote side drops the connection or answers garbage."""


def format_board(board) -> str:
    """Render a board in bracket notation, first row first."""
    rows = " ".join("[" + " ".join(str(int(v)) for v in row) + "]" for row in board)
    return f"[{rows}]"


def parse_board(text: str, size: int = config.GRID_SIZE) -> np.ndarray:
    """Parse bracket notation back into a board array."""
    text = text.strip()
    match = _BOARD_PATTERN.fullmatch(text)
    if match is None:
        raise RemoteProtocolError(f"Malformed board: {text!r}")
    rows = _ROW_PATTERN.findall(match.group(1))
    values = [[int(v) for v in row.split()] for row in rows]
    if len(values) != size or any(len(row) != size for row in values):
        raise RemoteProtocolError(f"Malformed board: {text!r}")
    return np.array(values, dtype=int)


class CommandHandler:
    """
    Executes one line-protocol command against a game; callers serialise access.

    up | down | left | right   move, dropping a tile if it moved -> OK
    board                      [[v v v v] [v v v v] [v v v v] [v v v v]]
    score                      decimal score
    gameover                   1 or 0
    start                      new game -> OK
    """

    def __init__(self, game: Board):
        self.game = game

    def execute(self, line: str) -> str:
        command = line.strip().lower()
        if command in ("up", "down", "left", "right"):
            if self.game.move(Direction.parse(command)) and self.game.is_terminal():
                logger.info("Game over, score %d", self.game.current_score())
            return OK
        if command == "board":
            return format_board(self.game.current_board())
        if command == "score":
            return str(self.game.current_score())
        if command == "gameover":
            return "1" if self.game.is_terminal() else "0"
        if command == "start":
            self.game.reset()
            return OK
        return f"ERROR unknown command {command!r}"


class _RequestHandler(socketserver.StreamRequestHandler):
    def handle(self):
        peer = "%s:%d" % self.client_address[:2]
        logger.info("Remote control connection from %s", peer)
        for raw in self.rfile:
            line = raw.decode("utf-8", errors="replace")
            if not line.strip():
                continue
            with self.server.lock:
                response = self.server.commands.execute(line)
            logger.debug("%s: %s -> %s", peer, line.strip(), response)
            self.wfile.write((response + "\n").encode("utf-8"))
        logger.info("Remote control connection from %s closed", peer)


class RemoteControlServer(socketserver.ThreadingTCPServer):
    """Serves the remote-control protocol for one shared game."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, game: Board):
        super().__init__(address, _RequestHandler)
        self.commands = CommandHandler(game)
        self.lock = threading.Lock()


class RemoteBoard:
    """Client side of the protocol, usable wherever a local game session is."""

    def __init__(self, host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_PORT,
                 timeout: float = 10.0):
        try:
            self._sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise RemoteProtocolError(f"Cannot connect to {host}:{port}: {e}") from e
        self._file = self._sock.makefile("rw", encoding="utf-8", newline="\n")
        logger.debug("Connected to %s:%d", host, port)

    def _request(self, command: str) -> str:
        try:
            self._file.write(command + "\n")
            self._file.flush()
            response = self._file.readline()
        except OSError as e:
            raise RemoteProtocolError(f"Connection lost during {command!r}: {e}") from e
        if not response:
            raise RemoteProtocolError(f"Connection closed during {command!r}")
        response = response.strip()
        if response.startswith("ERROR"):
            raise RemoteProtocolError(response)
        return response

    def _expect_ok(self, command: str) -> None:
        response = self._request(command)
        if response != OK:
            raise RemoteProtocolError(f"Unexpected response to {command!r}: {response!r}")

    def start(self) -> None:
        self._expect_ok("start")

    def move(self, direction: Direction) -> None:
        self._expect_ok(direction.value)

    def board(self) -> np.ndarray:
        return parse_board(self._request("board"))

    def score(self) -> int:
        response = self._request("score")
        if not response.isdigit():
            raise RemoteProtocolError(f"Malformed score: {response!r}")
        return int(response)

    def game_over(self) -> bool:
        response = self._request("gameover")
        if response not in ("0", "1"):
            raise RemoteProtocolError(f"Malformed gameover answer: {response!r}")
        return response == "1"

    def close(self) -> None:
        self._file.close()
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
