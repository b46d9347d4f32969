import math
from dataclasses import replace

import pytest

from analyzers import PlanAnalyzer
from training_weeks import TrainingWeek, Workout, record_actual_mileage


@pytest.fixture
def weeks():
    return [
        record_actual_mileage(TrainingWeek(18, 0.6, Workout('3 x 2k', '', 6.0), Workout('13 Ez', '', 13.0), 30.0), 50),
        record_actual_mileage(TrainingWeek(17, 0.65, Workout('400m + 3k', '', 3.4), Workout('10 Mp', '', 10.0), 32.0), 38),
        TrainingWeek(16, 0.8, Workout('6 x 1k', '', 6.0), Workout('Rest', '', 0.0), 35.0),
    ]


def test_to_dataframe(weeks):
    df = PlanAnalyzer(weeks).to_dataframe()

    assert list(df['weeks_until_race']) == [18, 17, 16]
    assert list(df['planned_km']) == [49.0, 45.4, 41.0]
    assert list(df['completed']) == [True, True, False]
    assert df['actual_km'].iloc[0] == 50
    assert math.isnan(df['actual_km'].iloc[2])
    assert math.isnan(df['difference_km'].iloc[2])


def test_empty_plan():
    analyzer = PlanAnalyzer([])
    assert analyzer.to_dataframe().empty
    summary = analyzer.get_plan_summary()
    assert summary['total_weeks'] == 0
    assert summary['adherence_pct'] is None
    assert analyzer.find_large_deviations().empty
    assert analyzer.get_remaining_weeks() is None


def test_plan_summary(weeks):
    summary = PlanAnalyzer(weeks).get_plan_summary()

    assert summary['total_weeks'] == 3
    assert summary['completed_weeks'] == 2
    assert summary['current_weeks_until_race'] == 16
    assert summary['total_planned_km'] == 135.4
    assert summary['planned_to_date_km'] == 94.4
    assert summary['actual_to_date_km'] == 88.0
    assert summary['net_difference_km'] == -6.4
    assert summary['adherence_pct'] == 93.2
    assert summary['peak_planned_km'] == 49.0
    assert summary['peak_weeks_until_race'] == 18
    assert summary['remaining_planned_km'] == 41.0


def test_summary_when_every_week_is_logged(weeks):
    logged = weeks[:2]
    summary = PlanAnalyzer(logged).get_plan_summary()
    assert summary['current_weeks_until_race'] is None
    assert summary['remaining_planned_km'] == 0.0


def test_find_large_deviations(weeks):
    deviations = PlanAnalyzer(weeks).find_large_deviations(threshold_pct=10.0)

    assert list(deviations['weeks_until_race']) == [17]
    assert deviations['deviation_pct'].iloc[0] == pytest.approx(-16.3)


def test_find_large_deviations_threshold(weeks):
    assert PlanAnalyzer(weeks).find_large_deviations(threshold_pct=20.0).empty
    assert len(PlanAnalyzer(weeks).find_large_deviations(threshold_pct=1.0)) == 2


def test_find_large_deviations_ignores_stale_difference_cell(weeks):
    stale = list(weeks)
    stale[0] = replace(weeks[0], difference=-20.0)

    deviations = PlanAnalyzer(stale).find_large_deviations(threshold_pct=10.0)

    assert list(deviations['weeks_until_race']) == [17]
    assert deviations['difference_km'].iloc[0] == -7.4
