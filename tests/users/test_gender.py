"""Tests for gender normalization."""

import pytest

from authsvc.users.gender import normalize_gender


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Male", "M"),
        ("male", "M"),
        ("M", "M"),
        ("0", "M"),
        ("female", "F"),
        ("FEMALE", "F"),
        ("F", "F"),
        ("1", "F"),
        ("2", "2"),
        ("other", "O"),
        ("x", "X"),
        ("", None),
        (None, None),
    ],
)
def test_normalize_gender(raw, expected):
    assert normalize_gender(raw) == expected
