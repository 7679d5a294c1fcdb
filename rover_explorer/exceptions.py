"""
Errors raised by the rover explorer.

Cancellation of an exploration run is not an error and has no exception:
a canceled router simply returns the moves it made so far.
"""


class RoverError(Exception):
    """Base class for all rover explorer errors."""


class MapFormatError(RoverError, ValueError):
    """A map file (or map text) could not be read or written."""


class IllegalMoveError(RoverError):
    """The rover was asked to move onto a tile that is not explored land."""

    def __init__(self, direction, position):
        self.direction = direction
        self.position = position
        super().__init__(
            f"The rover cannot move {direction.name.lower()} from {position}."
        )


class InvalidTileStateError(RoverError):
    """A tile was asked to change into a state its type does not allow."""
