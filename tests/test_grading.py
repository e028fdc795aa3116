from datetime import datetime, timedelta

import pytest

from services.grading import (
    DUE_SOON, OVERDUE, UPCOMING,
    deadline_status, gpa_to_percentage, percentage_to_gpa, weighted_percentage
)
@pytest.mark.parametrize("percentage, gpa", [
    (100, 4.0),
    (90.01, 4.0),
    (90, 4.0),
    (89.99, 3.999),
    (85, 3.5),
    (80.01, 3.001),
    (80, 3.0),
    (79.99, 2.999),
    (75, 2.5),
    (70.01, 2.001),
    (70, 2.0),
    (69.99, 1.999),
    (60.01, 1.001),
    (60, 1.0),
    (59.99, 0.0),
    (0, 0.0),
])
def test_percentage_to_gpa(percentage, gpa):
    assert percentage_to_gpa(percentage) == pytest.approx(gpa)


@pytest.mark.parametrize("gpa, percentage", [
    (4.0, 100.0),
    (3.99, 89.9),
    (3.5, 85.0),
    (3.01, 80.1),
    (3.0, 80.0),
    (2.99, 79.9),
    (2.01, 70.1),
    (2.0, 70.0),
    (1.99, 69.9),
    (1.01, 60.1),
    (1.0, 60.0),
    (0.99, 0.0),
    (0.5, 0.0),
    (0.0, 0.0),
])
def test_gpa_to_percentage(gpa, percentage):
    assert gpa_to_percentage(gpa) == pytest.approx(percentage)


@pytest.mark.parametrize("percentage", [0, 60, 60.01, 65, 69.99, 70, 70.01, 80, 88, 89.99, 100])
def test_round_trip_outside_top_band(percentage):
    assert gpa_to_percentage(percentage_to_gpa(percentage)) == pytest.approx(percentage)


def test_top_band_collapses_to_full_marks():
    assert gpa_to_percentage(percentage_to_gpa(90)) == 100.0
    assert gpa_to_percentage(percentage_to_gpa(90.01)) == 100.0


def test_failing_band_collapses_to_zero():
    assert gpa_to_percentage(percentage_to_gpa(59.99)) == 0.0


@pytest.mark.parametrize("bad", [-0.01, -1, 100.01])
def test_percentage_out_of_range(bad):
    with pytest.raises(ValueError):
        percentage_to_gpa(bad)


@pytest.mark.parametrize("bad", [-0.1, -0.01, 4.01])
def test_gpa_out_of_range(bad):
    with pytest.raises(ValueError):
        gpa_to_percentage(bad)


def test_weighted_percentage_favours_larger_modules():
    percentage = weighted_percentage([(45, 50), (60, 100)])
    assert percentage == pytest.approx(70.0)
    assert percentage_to_gpa(percentage) == pytest.approx(2.0)


def test_weighted_percentage_counts_zero_marks():
    assert weighted_percentage([(0, 50), (50, 50)]) == pytest.approx(50.0)


def test_weighted_percentage_empty():
    assert weighted_percentage([]) == 0.0


NOW = datetime(2024, 1, 10, 12, 0, 0)


@pytest.mark.parametrize("deadline, status", [
    (NOW - timedelta(minutes=1), OVERDUE),
    (NOW, DUE_SOON),
    (NOW + timedelta(days=2), DUE_SOON),
    (NOW + timedelta(days=3), DUE_SOON),
    (NOW + timedelta(days=3, hours=1), UPCOMING),
    (NOW + timedelta(days=10), UPCOMING),
])
def test_deadline_status(deadline, status):
    assert deadline_status(deadline, NOW) == status


def test_deadline_status_custom_window():
    assert deadline_status(NOW + timedelta(days=5), NOW, due_soon_days=7) == DUE_SOON
