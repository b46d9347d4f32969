"""
Plan-vs-actual analysis of projected training weeks.
"""

from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from training_weeks import TrainingWeek, current_week_index, is_completed, planned_total


class PlanAnalyzer:
    """Core analysis engine over the weeks of one training plan."""

    def __init__(self, weeks: List[TrainingWeek]):
        """
        Initialize analyzer with projected weeks.

        Args:
            weeks: Weeks in plan order, as returned by project_weeks()
        """
        self.weeks = list(weeks)
        self._df = None

    @property
    def df(self) -> pd.DataFrame:
        if self._df is None:
            self._df = self.to_dataframe()
        return self._df

    def to_dataframe(self) -> pd.DataFrame:
        """
        Build a DataFrame with one row per week.

        Returns:
            DataFrame with columns weeks_until_race, fraction_of_peak, q1_km,
            q2_km, easy_km, planned_km, actual_km, difference_km, completed.
            Absent actual mileage and difference are NaN.
        """
        columns = ['weeks_until_race', 'fraction_of_peak', 'q1_km', 'q2_km', 'easy_km',
                   'planned_km', 'actual_km', 'difference_km', 'completed']
        if not self.weeks:
            return pd.DataFrame(columns=columns)

        records = []
        for week in self.weeks:
            records.append({
                'weeks_until_race': week.weeks_until_race,
                'fraction_of_peak': week.fraction_of_peak,
                'q1_km': week.q1.target_distance,
                'q2_km': week.q2.target_distance,
                'easy_km': week.weekly_easy_mileage,
                'planned_km': round(planned_total(week), 1),
                'actual_km': week.actual_mileage if week.actual_mileage is not None else np.nan,
                'difference_km': week.difference if week.difference is not None else np.nan,
                'completed': is_completed(week),
            })

        return pd.DataFrame(records, columns=columns)

    def get_plan_summary(self) -> Dict:
        """
        Summarize progress through the plan.

        Returns:
            Dictionary of summary metrics
        """
        df = self.df
        summary = {
            'total_weeks': len(df),
            'completed_weeks': 0,
            'current_weeks_until_race': None,
            'total_planned_km': 0.0,
            'planned_to_date_km': 0.0,
            'actual_to_date_km': 0.0,
            'net_difference_km': 0.0,
            'adherence_pct': None,
            'peak_planned_km': None,
            'peak_weeks_until_race': None,
            'remaining_planned_km': 0.0,
        }
        if df.empty:
            return summary

        completed = df[df['completed']]
        current_index = current_week_index(self.weeks)

        summary['completed_weeks'] = int(len(completed))
        if current_index >= 0:
            summary['current_weeks_until_race'] = self.weeks[current_index].weeks_until_race
        summary['total_planned_km'] = round(float(df['planned_km'].sum()), 1)
        summary['planned_to_date_km'] = round(float(completed['planned_km'].sum()), 1)
        summary['actual_to_date_km'] = round(float(completed['actual_km'].sum()), 1)
        summary['net_difference_km'] = round(summary['actual_to_date_km'] - summary['planned_to_date_km'], 1)

        if summary['planned_to_date_km'] > 0:
            summary['adherence_pct'] = round(100 * summary['actual_to_date_km'] / summary['planned_to_date_km'], 1)

        peak_row = df.loc[df['planned_km'].idxmax()]
        summary['peak_planned_km'] = round(float(peak_row['planned_km']), 1)
        summary['peak_weeks_until_race'] = int(peak_row['weeks_until_race'])

        remaining = self.get_remaining_weeks()
        if remaining is not None:
            summary['remaining_planned_km'] = round(float(remaining['planned_km'].sum()), 1)

        return summary

    def find_large_deviations(self, threshold_pct: float = 10.0) -> pd.DataFrame:
        """
        Find completed weeks that strayed far from the planned volume.

        Args:
            threshold_pct: Allowed deviation as a percentage of planned km

        Returns:
            DataFrame of completed weeks whose actual volume differs from the
            plan by more than the threshold, with a deviation_pct column
        """
        df = self.df
        if df.empty:
            return pd.DataFrame()

        completed = df[df['completed'] & (df['planned_km'] > 0)].copy()
        if completed.empty:
            return pd.DataFrame()

        completed['deviation_pct'] = (
            100 * (completed['actual_km'] - completed['planned_km']) / completed['planned_km']
        ).round(1)
        deviations = completed[completed['deviation_pct'].abs() > threshold_pct]
        return deviations[['weeks_until_race', 'planned_km', 'actual_km', 'difference_km', 'deviation_pct']]

    def get_remaining_weeks(self) -> Optional[pd.DataFrame]:
        """Weeks from the current week to race day, or None when all are logged."""
        current_index = current_week_index(self.weeks)
        if current_index < 0:
            return None
        return self.df.iloc[current_index:]
