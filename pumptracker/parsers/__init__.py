"""Parsers for input data files."""

from .pump_data_parser import PumpDataParser

__all__ = [
    "PumpDataParser",
]
