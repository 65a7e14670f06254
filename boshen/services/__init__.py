"""Calculation, caching, batch and regression services."""
