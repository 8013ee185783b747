import pytest
from productivity_analytics.services.blending import blend_scores, normalize_provider_score

@pytest.mark.parametrize("value,scale,expected", [
    (None, 10, None),
    (0, 10, 0),
    (7, 10, 70),
    (10, 10, 100),
    (12, 10, 100),
    (3, 5, 60),
])
def test_normalize_provider_score(value, scale, expected):
    result = normalize_provider_score(value, scale)
    assert result == (expected if expected is None else pytest.approx(expected))

def test_normalize_rejects_bad_scale():
    with pytest.raises(ValueError):
        normalize_provider_score(5, 0)

def test_blend_default_weight():
    assert abs(blend_scores(100, 50) - 80) < 1e-9

def test_blend_with_missing_side():
    assert blend_scores(None, 42) == 42
    assert blend_scores(70, None) == 70
    assert blend_scores(None, None) is None

@pytest.mark.parametrize("weight", [0.0, 0.25, 0.5, 0.75, 1.0])
def test_blend_is_monotonic_in_both_inputs(weight):
    """Raising either input never lowers the blend"""
    values = [0, 25, 50, 75, 100]
    for ai in values:
        for computed in values:
            blended = blend_scores(ai, computed, weight)
            assert 0 <= blended <= 100
            assert blend_scores(min(ai + 10, 100), computed, weight) >= blended
            assert blend_scores(ai, min(computed + 10, 100), weight) >= blended

def test_blend_rejects_bad_weight():
    with pytest.raises(ValueError):
        blend_scores(50, 50, 1.5)
