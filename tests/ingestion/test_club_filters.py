import pytest

from app.ingestion.filters import ALLOWED_SPORT_TYPES, check_eligibility, compute_speed_kmh


def test_compute_speed_kmh():
    assert compute_speed_kmh(5000, 900) == pytest.approx(20.0)


def test_compute_speed_is_undefined_without_moving_time():
    assert compute_speed_kmh(5000, 0) is None


@pytest.mark.parametrize("sport_type", sorted(ALLOWED_SPORT_TYPES))
def test_allowed_sport_types_pass(make_activity, sport_type):
    result = check_eligibility(make_activity(sport_type=sport_type))

    assert result.eligible
    assert result.speed_kmh == pytest.approx(20.0)
    assert result.reason is None


@pytest.mark.parametrize("sport_type", ["Run", "Walk", "VirtualRide", "Swim", None])
def test_other_sport_types_are_rejected_regardless_of_speed(make_activity, sport_type):
    result = check_eligibility(make_activity(sport_type=sport_type))

    assert not result.eligible
    assert "sport_type" in result.reason


def test_zero_moving_time_is_rejected(make_activity):
    result = check_eligibility(make_activity(moving_time=0))

    assert not result.eligible
    assert result.speed_kmh is None
    assert "unrealistic speed" in result.reason


@pytest.mark.parametrize(
    ("distance", "eligible"),
    [
        (4990.0, False),  # 4.99 km/h
        (5000.0, True),  # 5.0 km/h
        (20000.0, True),
        (35000.0, True),  # 35.0 km/h
        (35010.0, False),  # 35.01 km/h
    ],
)
def test_speed_bounds_are_inclusive(make_activity, distance, eligible):
    # Over one hour of moving time, km/h equals km ridden.
    result = check_eligibility(make_activity(distance=distance, moving_time=3600))

    assert result.eligible is eligible


def test_exact_bounds_with_short_rides(make_activity):
    assert check_eligibility(make_activity(distance=1250.0, moving_time=900)).eligible  # 5.0 km/h
    assert check_eligibility(make_activity(distance=8750.0, moving_time=900)).eligible  # 35.0 km/h
