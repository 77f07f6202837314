"""Parking spot occupancy detection using a vision-language model."""

__version__ = "1.0.0"
