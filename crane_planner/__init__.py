"""Crane placement planning: lift geometry, load-chart capacity and live scene markups."""

__version__ = "1.0.0"
