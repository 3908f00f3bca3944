"""TreeBot: a chess bot that deepens one cached game tree move over move."""

__version__ = "1.3.0"
