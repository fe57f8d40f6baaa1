"""Tests for biorhythm validators."""

from datetime import date, datetime

import pytest

from dreamwizard.services.biorhythm.validators import validate_birth_date


def test_accepts_iso_string():
    assert validate_birth_date('1990-05-01', {}) == date(1990, 5, 1)
    assert validate_birth_date('  1990-05-01 ', {}) == date(1990, 5, 1)


def test_accepts_date_and_datetime():
    assert validate_birth_date(date(1990, 5, 1), {}) == date(1990, 5, 1)
    assert validate_birth_date(datetime(1990, 5, 1, 23, 0), {}) == date(1990, 5, 1)


def test_accepts_future_date():
    """Future dates are allowed; scoring clamps them to zero days."""
    assert validate_birth_date('2999-01-01', {}) == date(2999, 1, 1)


def test_rejects_bad_format():
    with pytest.raises(ValueError, match="Invalid birth date '01/05/1990'"):
        validate_birth_date('01/05/1990', {})


def test_rejects_empty():
    with pytest.raises(ValueError, match='cannot be empty'):
        validate_birth_date('   ', {})


def test_rejects_other_types():
    with pytest.raises(ValueError, match='must be a date'):
        validate_birth_date(19900501, {})
