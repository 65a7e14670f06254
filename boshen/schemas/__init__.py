"""Pydantic schemas for the engine's in-process request and record surface.

This module exports all Pydantic schemas consumed or produced by the engine.
"""

from boshen.schemas.base import StrictBaseModel
from boshen.schemas.lines import CalculationRequest, ChartInterval, PredictionLineSchema

__all__ = [
    "StrictBaseModel",
    "CalculationRequest",
    "ChartInterval",
    "PredictionLineSchema",
]
