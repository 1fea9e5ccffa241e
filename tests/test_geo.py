"""Tests for distance calculation and location fallback."""

import math

import pytest

from fangindex.errors import LocationUnavailable, PermissionDenied
from fangindex.geo import Coordinates, distance_km, resolve_user_location

HAMBURG = (53.5511, 9.9937)
BERLIN = (52.5200, 13.4050)
FALLBACK = (53.3347, 9.9717)


class TestDistance:
    def test_identity(self):
        assert distance_km(*HAMBURG, *HAMBURG) == 0.0

    def test_symmetry(self):
        assert distance_km(*HAMBURG, *BERLIN) == distance_km(*BERLIN, *HAMBURG)

    def test_hamburg_berlin(self):
        """Roughly 255 km as the crow flies."""
        assert 250 <= distance_km(*HAMBURG, *BERLIN) <= 260

    def test_along_meridian(self):
        """One degree of latitude is R * pi / 180 km."""
        expected = 6371.0 * math.pi / 180
        assert distance_km(53.0, 10.0, 54.0, 10.0) == pytest.approx(expected)

    def test_antipodes_non_negative(self):
        d = distance_km(0.0, 0.0, 0.0, 180.0)
        assert d >= 0
        assert d == pytest.approx(math.pi * 6371.0)


class TestResolveUserLocation:
    def test_no_provider_uses_fallback(self):
        assert resolve_user_location(None, FALLBACK) == Coordinates(*FALLBACK)

    def test_provider_location(self):
        result = resolve_user_location(lambda: (53.2509, 10.4141), FALLBACK)
        assert result == Coordinates(53.2509, 10.4141)
        assert result.lat == 53.2509

    def test_permission_denied_uses_fallback(self):
        def denied():
            raise PermissionDenied("user declined")

        assert resolve_user_location(denied, FALLBACK) == Coordinates(*FALLBACK)

    def test_unavailable_uses_fallback(self):
        def no_fix():
            raise LocationUnavailable("no GPS fix")

        assert resolve_user_location(no_fix, FALLBACK) == Coordinates(*FALLBACK)

    def test_other_errors_propagate(self):
        def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            resolve_user_location(broken, FALLBACK)
