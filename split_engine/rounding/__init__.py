"""Rounding normalization package."""

from split_engine.rounding.normalizer import (
    NormalizationResult,
    RoundingNormalizer,
    round_units,
)

__all__ = ["NormalizationResult", "RoundingNormalizer", "round_units"]
