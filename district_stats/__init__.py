"""Gear capacity and usage statistics for nodes, districts and profiles."""

__version__ = "0.1.0"
