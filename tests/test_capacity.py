"""
Tests for capacity threshold evaluation.
"""

import pytest

from district_stats.capacity import CapacityAlert, check_capacity, evaluate_capacity, usage_pct
from district_stats.exceptions import UnknownProfileError
from district_stats.models import ProfileSummary


def profile(active: int, available: int, name: str = "small") -> ProfileSummary:
    return ProfileSummary(profile=name, total_active_gears=active, available_active_gears=available)


class TestUsagePct:
    """Test the usage percentage calculation."""

    def test_half_used(self) -> None:
        """Test equal active and available gears is exactly 50%."""
        assert usage_pct(profile(50, 50)) == 50.0

    def test_ratio_then_scale(self) -> None:
        """Test usage is the active share of capacity scaled to a percentage."""
        assert usage_pct(profile(1, 2)) == 1 / (2 + 1) * 100

    def test_exact_threshold_on_inexact_ratio(self) -> None:
        """Test a threshold computed the same way as usage still triggers."""
        threshold = 1 / (2 + 1) * 100

        assert evaluate_capacity({"small": profile(1, 2)}, "small", threshold).triggered

    def test_no_capacity(self) -> None:
        """Test a profile without gears or capacity reports zero."""
        assert usage_pct(profile(0, 0)) == 0.0

    def test_full(self) -> None:
        """Test a profile with nothing available is fully used."""
        assert usage_pct(profile(10, 0)) == 100.0


class TestEvaluateCapacity:
    """Test threshold comparison."""

    def test_threshold_inclusive(self) -> None:
        """Test reaching the threshold exactly triggers."""
        status = evaluate_capacity({"small": profile(50, 50)}, "small", 50)

        assert status.triggered
        assert status.usage_pct == 50.0
        assert status.profile == "small"

    def test_below_threshold(self) -> None:
        """Test usage just below the threshold does not trigger."""
        assert not evaluate_capacity({"small": profile(50, 50)}, "small", 50.01).triggered

    def test_unknown_profile(self) -> None:
        """Test evaluating a profile without a summary."""
        with pytest.raises(UnknownProfileError):
            evaluate_capacity({"small": profile(1, 1)}, "large", 50)


class TestCheckCapacity:
    """Test alert signalling."""

    def test_alert(self) -> None:
        """Test a triggered profile returns an alert carrying its usage."""
        alert = check_capacity({"small": profile(90, 10)}, "small", 85)

        assert alert == CapacityAlert(profile="small", usage_pct=90.0, threshold=85)

    def test_no_alert(self) -> None:
        """Test an untriggered profile returns nothing."""
        assert check_capacity({"small": profile(10, 90)}, "small", 85) is None
