"""Tests for ViewRevalidator."""

from services.revalidation import ViewRevalidator


def test_unknown_path_is_version_zero():
    assert ViewRevalidator().version("/") == 0


def test_revalidate_bumps_only_that_path():
    revalidator = ViewRevalidator()
    assert revalidator.revalidate_path("/") == 1
    assert revalidator.revalidate_path("/") == 2
    assert revalidator.version("/") == 2
    assert revalidator.version("/my-banks") == 0
