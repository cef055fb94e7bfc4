"""termail - browse a Gmail inbox from the terminal."""

__version__ = "0.1.0"
