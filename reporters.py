"""
Report generation for training plan progress.
Creates formatted console reports from the plan analyzer.
"""

from typing import Dict, List, Optional

from analyzers import PlanAnalyzer
from plan_grid import format_number
from training_weeks import TrainingWeek, is_completed, planned_total

DESCRIPTION_WIDTH = 24


class PlanReportGenerator:
    """Generates formatted reports from plan analysis."""

    def __init__(self, analyzer: PlanAnalyzer, deviation_threshold_pct: float = 10.0):
        """
        Initialize report generator.

        Args:
            analyzer: PlanAnalyzer instance with the plan's weeks
            deviation_threshold_pct: Percentage above which a week is flagged
        """
        self.analyzer = analyzer
        self.deviation_threshold_pct = deviation_threshold_pct

    def generate_plan_report(self) -> Dict:
        """
        Generate the plan progress report.

        Returns:
            Dictionary with 'summary' and 'deviations' sections
        """
        report = {
            'summary': self.analyzer.get_plan_summary(),
            'deviations': [],
        }

        deviations = self.analyzer.find_large_deviations(self.deviation_threshold_pct)
        if not deviations.empty:
            report['deviations'] = [
                {
                    'weeks_until_race': int(row['weeks_until_race']),
                    'planned_km': float(row['planned_km']),
                    'actual_km': float(row['actual_km']),
                    'deviation_pct': float(row['deviation_pct']),
                }
                for _, row in deviations.iterrows()
            ]

        return report

    def print_report(self, report: Dict, sections_to_print: Optional[List[str]] = None):
        """
        Print formatted report to console.

        Args:
            report: Report dictionary from generate_plan_report()
            sections_to_print: List of section names to print (default: all)
        """
        if not sections_to_print:
            sections_to_print = ['summary', 'deviations']

        print("\n" + "="*70)
        print(" " * 24 + "PLAN REPORT")
        print("="*70)

        for section in sections_to_print:
            if section not in report:
                continue
            title = section.replace('_', ' ').upper()
            print(f"\n{title}")
            print("-" * 70)
            if section == 'deviations':
                self._print_deviations(report[section])
            else:
                for key, value in report[section].items():
                    if value is not None:
                        print(f"  {self._format_key(key)}: {value}")

        print("\n" + "="*70)

    def _format_key(self, key: str) -> str:
        """Format dictionary key for display."""
        label = key.replace('_km', '').replace('_pct', '').replace('_', ' ').title()
        if key.endswith('_km'):
            return f"{label} (km)"
        if key.endswith('_pct'):
            return f"{label} (%)"
        return label

    def _print_deviations(self, deviations: List[Dict]):
        """Print weeks that missed the planned volume."""
        if not deviations:
            print(f"  ✓ All logged weeks within {self.deviation_threshold_pct:g}% of plan")
            return

        for item in deviations:
            sign = '+' if item['deviation_pct'] > 0 else ''
            print(f"  ⚠ {item['weeks_until_race']} weeks out: {item['actual_km']:g} km run vs "
                  f"{item['planned_km']:g} km planned ({sign}{item['deviation_pct']:.1f}%)")

    def print_week_table(self, weeks: List[TrainingWeek], current_index: int = -1):
        """
        Print the plan as a one-line-per-week table.

        Args:
            weeks: Weeks to list
            current_index: Index of the week to mark as current
        """
        print("\n" + "="*70)
        print(f"{'#':>3} {'Out':>4} {'Q1':<{DESCRIPTION_WIDTH}} {'Q2':<{DESCRIPTION_WIDTH}} "
              f"{'Plan':>6} {'Run':>6} {'Diff':>6}")
        print("-"*70)

        for index, week in enumerate(weeks):
            if index == current_index:
                marker = '>'
            elif is_completed(week):
                marker = '✓'
            else:
                marker = ' '
            q1 = (week.q1.description or 'Rest / Easy')[:DESCRIPTION_WIDTH]
            q2 = (week.q2.description or 'Rest / Easy')[:DESCRIPTION_WIDTH]
            print(f"{marker}{index + 1:>2} {week.weeks_until_race:>4} "
                  f"{q1:<{DESCRIPTION_WIDTH}} {q2:<{DESCRIPTION_WIDTH}} "
                  f"{planned_total(week):>6.1f} {format_number(week.actual_mileage):>6} "
                  f"{format_number(week.difference):>6}")

        print("="*70)
