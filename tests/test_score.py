"""Tests for Fangindex scoring engine."""

import itertools
from datetime import datetime

import pytest

from fangindex.astro import TZ
from fangindex.fetch import WaterLevelReading, WaterLevelTrend, WeatherSnapshot
from fangindex.score import (
    calculate_time_score,
    calculate_water_level_score,
    calculate_weather_score,
    clamp,
    compute_fangindex,
    round_half_up,
    select_best_fish,
)
from fangindex.waters import Species

# 2024-01-25 is a full moon (index 4, moon score 90)
FULL_MOON_DAWN = datetime(2024, 1, 25, 6, 0, tzinfo=TZ)
# 2024-01-11 is a new moon (index 0, moon score 85)
NEW_MOON_NOON = datetime(2024, 1, 11, 13, 0, tzinfo=TZ)


def make_weather(temp=16.0, pressure=1015, wind_speed=2.0, clouds=50) -> WeatherSnapshot:
    return WeatherSnapshot(
        temp=temp,
        pressure=pressure,
        humidity=70,
        wind_speed=wind_speed,
        clouds=clouds,
        description="scattered clouds",
    )


def make_reading(trend: WaterLevelTrend) -> WaterLevelReading:
    return WaterLevelReading(
        station="HAMBURG ST. PAULI",
        water_level=512.0,
        trend=trend,
        timestamp="2024-01-25T06:00:00+01:00",
    )


class TestClamp:
    def test_within_range(self):
        assert clamp(50, 0, 100) == 50

    def test_below_min(self):
        assert clamp(-10, 0, 100) == 0

    def test_above_max(self):
        assert clamp(150, 0, 100) == 100


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(64.5) == 65

    def test_below_half(self):
        assert round_half_up(59.4) == 59


class TestWeatherScore:
    def test_neutral_conditions(self):
        """No rule fires: baseline 50."""
        weather = make_weather(temp=7, pressure=1005, wind_speed=5, clouds=10)
        assert calculate_weather_score(weather) == 50

    def test_ideal_conditions_clamped(self):
        """50 + 20 + 15 + 10 + 10 = 105 -> 100."""
        assert calculate_weather_score(make_weather()) == 100

    def test_worst_conditions(self):
        """50 - 15 - 20 - 15 = 0."""
        weather = make_weather(temp=35, pressure=990, wind_speed=12, clouds=90)
        assert calculate_weather_score(weather) == 0

    def test_pressure_bands(self):
        assert calculate_weather_score(make_weather(temp=7, pressure=1010, wind_speed=5, clouds=10)) == 70
        assert calculate_weather_score(make_weather(temp=7, pressure=1020, wind_speed=5, clouds=10)) == 70
        assert calculate_weather_score(make_weather(temp=7, pressure=1031, wind_speed=5, clouds=10)) == 35
        assert calculate_weather_score(make_weather(temp=7, pressure=1000, wind_speed=5, clouds=10)) == 50

    def test_temperature_bands(self):
        assert calculate_weather_score(make_weather(temp=10, pressure=1005, wind_speed=5, clouds=10)) == 65
        assert calculate_weather_score(make_weather(temp=4.9, pressure=1005, wind_speed=5, clouds=10)) == 30
        assert calculate_weather_score(make_weather(temp=28.5, pressure=1005, wind_speed=5, clouds=10)) == 30

    def test_wind_and_clouds(self):
        assert calculate_weather_score(make_weather(temp=7, pressure=1005, wind_speed=2.9, clouds=10)) == 60
        assert calculate_weather_score(make_weather(temp=7, pressure=1005, wind_speed=8.1, clouds=10)) == 35
        assert calculate_weather_score(make_weather(temp=7, pressure=1005, wind_speed=5, clouds=70)) == 60


class TestTimeScore:
    @pytest.mark.parametrize("hour,expected", [
        (5, 90), (8, 90), (17, 90), (21, 90),
        (9, 65), (11, 65), (15, 65), (16, 65),
        (12, 35), (14, 35),
        (0, 20), (4, 20), (22, 20), (23, 20),
    ])
    def test_step_function(self, hour, expected):
        assert calculate_time_score(hour) == expected


class TestWaterLevelScore:
    def test_absent_reading(self):
        assert calculate_water_level_score(None) == 60

    def test_trends(self):
        assert calculate_water_level_score(make_reading(WaterLevelTrend.STABLE)) == 75
        assert calculate_water_level_score(make_reading(WaterLevelTrend.RISING)) == 85
        assert calculate_water_level_score(make_reading(WaterLevelTrend.FALLING)) == 50


class TestBestFish:
    def test_cold_water(self):
        assert select_best_fish(make_weather(temp=8, clouds=10)) == [Species.TROUT, Species.GRAYLING]

    def test_cold_water_overcast_adds_eel(self):
        assert select_best_fish(make_weather(temp=8, clouds=80)) == [
            Species.TROUT, Species.GRAYLING, Species.EEL,
        ]

    def test_moderate_band_edges(self):
        expected = [Species.PIKE, Species.ZANDER, Species.PERCH]
        assert select_best_fish(make_weather(temp=12)) == expected
        assert select_best_fish(make_weather(temp=20)) == expected

    def test_warm_water(self):
        fish = select_best_fish(make_weather(temp=25, clouds=80))
        assert fish == [Species.CARP, Species.TENCH, Species.CATFISH]

    def test_never_empty_never_more_than_three(self):
        for temp, clouds in itertools.product([-40, 0, 11.9, 12, 16, 20, 20.1, 50], [0, 61, 100]):
            fish = select_best_fish(make_weather(temp=temp, clouds=clouds))
            assert 1 <= len(fish) <= 3


class TestComputeFangindex:
    def test_weighted_combination(self):
        """0.35 * 100 + 0.30 * 90 + 0.20 * 90 + 0.15 * 60 = 89."""
        result = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)

        assert result.factors == {
            "weather": 100,
            "time_of_day": 90,
            "moon_phase": 90,
            "water_level": 60,
        }
        assert result.score == 89

    def test_absent_water_level_uses_default(self):
        result = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)
        assert result.factors["water_level"] == 60

    def test_rising_water_level(self):
        """0.15 * 85 instead of 0.15 * 60: 92.75 -> 93."""
        reading = make_reading(WaterLevelTrend.RISING)
        result = compute_fangindex("Elbe", make_weather(), reading, now=FULL_MOON_DAWN)

        assert result.factors["water_level"] == 85
        assert result.score == 93

    def test_deterministic(self):
        first = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)
        second = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)
        assert first == second

    def test_reasoning_text(self):
        result = compute_fangindex("Waldteich", make_weather(temp=15.6), None, now=FULL_MOON_DAWN)
        assert result.reasoning == "Full Moon, 16°C, pressure 1015 hPa. Good bite time!"

    def test_reasoning_off_peak(self):
        result = compute_fangindex("Waldteich", make_weather(), None, now=NEW_MOON_NOON)
        assert result.reasoning.startswith("New Moon, ")
        assert result.reasoning.endswith("Not the best time of day.")

    def test_high_score_recommendation_names_water(self):
        result = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)
        assert "Waldteich" in result.recommendation
        assert "Full Moon" in result.recommendation

    def test_medium_score_recommendation(self):
        """0.35 * 50 + 0.30 * 65 + 0.20 * 90 + 0.15 * 60 = 64."""
        weather = make_weather(temp=7, pressure=1005, wind_speed=5, clouds=10)
        now = datetime(2024, 1, 25, 10, 0, tzinfo=TZ)

        result = compute_fangindex("Waldteich", weather, None, now=now)

        assert result.score == 64
        assert "early morning" in result.recommendation

    def test_low_score_recommendation(self):
        """0.35 * 0 + 0.30 * 35 + 0.20 * 85 + 0.15 * 50 = 35."""
        weather = make_weather(temp=35, pressure=990, wind_speed=12, clouds=90)
        reading = make_reading(WaterLevelTrend.FALLING)

        result = compute_fangindex("Waldteich", weather, reading, now=NEW_MOON_NOON)

        assert result.score == 35
        assert "bottom fishing" in result.recommendation

    def test_target_species_does_not_change_score(self):
        plain = compute_fangindex("Waldteich", make_weather(), None, now=FULL_MOON_DAWN)
        hinted = compute_fangindex(
            "Waldteich", make_weather(), None, now=FULL_MOON_DAWN, target_species=Species.CARP,
        )
        assert plain == hinted

    def test_best_fish_by_temperature(self):
        cold = compute_fangindex("Seeve", make_weather(temp=8), None, now=FULL_MOON_DAWN)
        warm = compute_fangindex("Seeve", make_weather(temp=25), None, now=FULL_MOON_DAWN)

        assert Species.TROUT in cold.best_fish and Species.GRAYLING in cold.best_fish
        assert warm.best_fish == [Species.CARP, Species.TENCH, Species.CATFISH]

    def test_bounds_over_valid_inputs(self):
        """Every sub-score and the composite stay within 0..100."""
        pressures = [800, 999, 1000, 1010, 1020, 1030, 1031, 1100]
        temps = [-40, 4.9, 5, 10, 20, 28, 28.1, 50]
        winds = [0, 2.9, 3, 8, 8.1, 60]
        clouds = [0, 30, 70, 100]
        readings = [None, make_reading(WaterLevelTrend.FALLING), make_reading(WaterLevelTrend.RISING)]
        times = [FULL_MOON_DAWN, NEW_MOON_NOON, datetime(2024, 1, 18, 23, 0, tzinfo=TZ)]

        for p, t, w, c in itertools.product(pressures, temps, winds, clouds):
            weather = make_weather(temp=t, pressure=p, wind_speed=w, clouds=c)
            for reading, now in zip(readings, times):
                result = compute_fangindex("X", weather, reading, now=now)
                assert isinstance(result.score, int)
                assert 0 <= result.score <= 100
                assert all(0 <= v <= 100 for v in result.factors.values())
