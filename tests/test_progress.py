from datetime import datetime, timedelta, timezone
from types import GeneratorType
from zoneinfo import ZoneInfo

import pytest

from continuum.clock import TimeOfDay
from continuum.models import NotificationSettings
from continuum.progress import (
    DayConfig,
    PeriodKind,
    classify,
    generate_forecast,
    next_notification_instants,
    percent_remaining,
    period_end_instant,
    sleep_to_wake_ratio,
    waking_minutes,
)

DEFAULT = DayConfig.from_strings("09:00", "23:00")


def _at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2024, 1, day, hour, minute)


def test_from_strings_substitutes_defaults():
    assert DayConfig.from_strings("25:00", None) == DEFAULT
    assert DayConfig.from_strings("07:15", "garbage") == DayConfig(TimeOfDay(7, 15), TimeOfDay(23, 0))
    assert DayConfig.default().as_strings() == ("09:00", "23:00")


def test_classify_start_of_day():
    sample = classify(DEFAULT, _at(9))
    assert sample.period_kind is PeriodKind.DAY
    assert sample.percent_complete == 0
    assert sample.percent_remaining == 100


def test_classify_middle_of_day():
    assert waking_minutes(DEFAULT) == 840
    sample = classify(DEFAULT, _at(16))
    assert (sample.period_kind, sample.percent_complete) == (PeriodKind.DAY, 50)


def test_classify_night():
    sample = classify(DEFAULT, _at(2))
    assert (sample.period_kind, sample.percent_complete) == (PeriodKind.NIGHT, 30)


def test_classify_end_boundary_is_full_day():
    sample = classify(DEFAULT, _at(23))
    assert (sample.period_kind, sample.percent_complete) == (PeriodKind.DAY, 100)
    after = classify(DEFAULT, _at(23, 1))
    assert (after.period_kind, after.percent_complete) == (PeriodKind.NIGHT, 0)


def test_classify_truncates_percentage():
    # 100 minutes into an 840 minute day is 11.9%
    assert classify(DEFAULT, _at(10, 40)).percent_complete == 11


def test_classify_degenerate_config_is_start_of_day():
    config = DayConfig.from_strings("09:00", "09:00")
    for hour in (0, 9, 12, 23):
        sample = classify(config, _at(hour, 17))
        assert (sample.period_kind, sample.percent_complete) == (PeriodKind.DAY, 0)


def test_classify_day_spanning_midnight():
    config = DayConfig.from_strings("22:00", "06:00")
    assert classify(config, _at(2)).percent_complete == 50
    assert classify(config, _at(2)).period_kind is PeriodKind.DAY
    assert classify(config, _at(14)).period_kind is PeriodKind.NIGHT


def test_classify_accepts_time_of_day():
    sample = classify(DEFAULT, TimeOfDay(16, 0))
    assert sample.instant is None
    assert sample.percent_complete == 50


@pytest.mark.parametrize(
    "start,end",
    [("09:00", "23:00"), ("22:00", "06:00"), ("00:00", "23:59"), ("12:00", "12:01"), ("05:00", "05:00")],
)
def test_classify_percentage_stays_in_range(start, end):
    config = DayConfig.from_strings(start, end)
    base = _at(0)
    for offset in range(0, 24 * 60, 7):
        sample = classify(config, base + timedelta(minutes=offset))
        assert 0 <= sample.percent_complete <= 100


def test_period_end_instant():
    assert period_end_instant(DEFAULT, _at(16)) == _at(23)
    assert period_end_instant(DEFAULT, _at(2)) == _at(9)
    assert period_end_instant(DEFAULT, _at(23, 30)) == _at(9, day=2)


def test_percent_remaining_is_zero_at_night():
    assert percent_remaining(DEFAULT, _at(16)) == 50
    assert percent_remaining(DEFAULT, _at(2)) == 0
    assert percent_remaining(DayConfig.from_strings("09:00", "09:00"), _at(12)) == 0


def test_sleep_to_wake_ratio():
    assert sleep_to_wake_ratio(DEFAULT) == pytest.approx(600 / 840)
    assert sleep_to_wake_ratio(DayConfig.from_strings("09:00", "09:00")) is None


def test_forecast_is_lazy_and_starts_at_minute():
    forecast = generate_forecast(DEFAULT, datetime(2024, 1, 1, 16, 0, 42), 60, 60)
    assert isinstance(forecast, GeneratorType)
    first = next(forecast)
    assert first.instant == _at(16)
    assert first.percent_complete == 50


@pytest.mark.parametrize("horizon", [0, 59, 360, 1440, 10_000])
def test_forecast_never_exceeds_max_samples(horizon):
    samples = list(generate_forecast(DEFAULT, _at(12), horizon, 10))
    assert 1 <= len(samples) <= 10
    instants = [sample.instant for sample in samples]
    assert instants == sorted(instants)
    assert instants[-1] <= _at(12) + timedelta(minutes=horizon)


def test_forecast_uses_minute_steps_for_short_horizon():
    samples = list(generate_forecast(DEFAULT, _at(22, 58), 4, 360))
    assert [sample.instant.minute for sample in samples] == [58, 59, 0, 1, 2]
    assert [sample.period_kind for sample in samples][-2:] == [PeriodKind.NIGHT, PeriodKind.NIGHT]


def test_forecast_spreads_long_horizon():
    samples = list(generate_forecast(DEFAULT, _at(0), 1440, 10))
    assert len(samples) == 10
    assert samples[1].instant - samples[0].instant == timedelta(minutes=160)
    assert samples[-1].instant == _at(0, day=2)


def test_forecast_single_sample_is_start():
    samples = list(generate_forecast(DEFAULT, _at(12), 600, 1))
    assert [sample.instant for sample in samples] == [_at(12)]


def test_forecast_empty_for_invalid_bounds():
    assert list(generate_forecast(DEFAULT, _at(0), 60, 0)) == []
    assert list(generate_forecast(DEFAULT, _at(0), -5, 10)) == []


def test_notification_instant_for_half_day():
    settings = NotificationSettings(enabled=True, thresholds={50})
    milestones = next_notification_instants(DEFAULT, settings, _at(9))
    assert [(m.threshold, m.instant) for m in milestones] == [(50, _at(16))]


def test_notification_instants_sorted_by_threshold():
    settings = NotificationSettings(enabled=True, thresholds={10, 90, 50})
    milestones = next_notification_instants(DEFAULT, settings, _at(8))
    assert [m.threshold for m in milestones] == [90, 50, 10]
    assert [m.instant for m in milestones] == [_at(10, 24), _at(16), _at(21, 36)]


def test_notification_instants_roll_to_next_day():
    settings = NotificationSettings(enabled=True, thresholds={50})
    milestones = next_notification_instants(DEFAULT, settings, _at(10))
    assert [m.instant for m in milestones] == [_at(16, day=2)]


def test_notification_instants_empty_when_not_applicable():
    assert next_notification_instants(DEFAULT, NotificationSettings(thresholds={50}), _at(9)) == []
    assert next_notification_instants(DEFAULT, NotificationSettings(enabled=True), _at(9)) == []
    degenerate = DayConfig.from_strings("09:00", "09:00")
    settings = NotificationSettings(enabled=True, thresholds={50})
    assert next_notification_instants(degenerate, settings, _at(9)) == []


RIGA = ZoneInfo("Europe/Riga")


def test_forecast_steps_through_spring_forward_gap():
    # Clocks in Riga jump from 03:00 to 04:00 on 2024-03-31.
    start = datetime(2024, 3, 31, 2, 30, tzinfo=RIGA)
    samples = list(generate_forecast(DEFAULT, start, 120, 121))
    moments = [sample.instant.astimezone(timezone.utc) for sample in samples]
    assert len(samples) == 121
    assert len(set(moments)) == len(moments)
    assert moments[-1] - moments[0] == timedelta(minutes=120)
    assert samples[30].instant.hour == 4
    assert samples[30].instant.minute == 0


def test_notification_instant_counts_elapsed_minutes_across_gap():
    config = DayConfig.from_strings("01:00", "05:00")
    settings = NotificationSettings(enabled=True, thresholds={50})
    start = datetime(2024, 3, 31, 0, 30, tzinfo=RIGA)
    (milestone,) = next_notification_instants(config, settings, start)
    # 01:00 EET plus 120 elapsed minutes lands after the gap.
    assert milestone.instant.astimezone(timezone.utc) == datetime(2024, 3, 31, 1, 0, tzinfo=timezone.utc)
    assert (milestone.instant.hour, milestone.instant.minute) == (4, 0)
