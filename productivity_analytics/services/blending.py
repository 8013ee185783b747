"""Conversion and blending of provider scores at the classification boundary"""
from typing import Optional

def normalize_provider_score(value: Optional[float], scale: float = 10) -> Optional[float]:
    """Convert a provider score on a 0..scale range to the internal 0-100 range"""
    if value is None:
        return None
    if scale <= 0:
        raise ValueError(f"Provider scale must be positive, got {scale}")
    return max(0.0, min(100.0, value / scale * 100))

def blend_scores(
    ai_score: Optional[float],
    computational_score: Optional[float],
    ai_weight: float = 0.6,
) -> Optional[float]:
    """Weighted average of a provider score and a computed score, both 0-100.

    Either side missing yields the other; both missing yields None.
    """
    if not 0.0 <= ai_weight <= 1.0:
        raise ValueError(f"ai_weight must be within 0..1, got {ai_weight}")
    if ai_score is None:
        return computational_score
    if computational_score is None:
        return ai_score
    return ai_score * ai_weight + computational_score * (1 - ai_weight)
