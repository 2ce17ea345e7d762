"""Portfolio tracker: holdings, transactions and live profit reporting."""

__version__ = "0.1.0"
