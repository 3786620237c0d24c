import logging

# Board geometry
GRID_SIZE = 4

# Tile injection
FOUR_PERCENT = 10              # Chance (in percent) that a dropped tile is a 4
RAW_RANDOM_LIMIT = 2 ** 31     # Raw draws are integers in [0, RAW_RANDOM_LIMIT)
DRAWS_PER_TILE = 2             # One draw for the cell, one for the value

WIN_TILE = 2048                # Front end congratulates once this tile appears

# Remote control
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2048

# Player reporting
AVERAGE_INTERVAL = 16384       # Print the running average every N playouts
UNLIMITED_TRIES = 2 ** 32 - 1  # Length of a --highscore run

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose=False):
    """Set up root logging for the command line tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def parse_address(address, default_port=DEFAULT_PORT):
    """Split 'host:port' (or just 'host') into a (host, port) tuple."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address or DEFAULT_HOST, default_port
    if not port.isdigit():
        raise ValueError(f"Invalid port in address {address!r}")
    return host or DEFAULT_HOST, int(port)
