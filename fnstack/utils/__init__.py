"""Utility helpers shared across fnstack modules."""
