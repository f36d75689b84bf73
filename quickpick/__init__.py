"""Generic item picker for the PyTPO shell."""

__version__ = "0.1.0"
