#!/usr/bin/env python3
"""
Training Plan Editor
Views a training plan CSV, logs weekly mileage and notes, and writes the
edits back without touching any other cell of the file.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from analyzers import PlanAnalyzer
from config import Config
from data_sources import PlanFileSource
from plan_grid import RawGrid, detect_layout, update_raw_data
from reporters import PlanReportGenerator
from training_weeks import (
    TrainingWeek, current_week_index, project_weeks, record_actual_mileage, with_notes
)

LOG_LEVELS = ['TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL']


class PlanEditorApp:
    """Main application: a menu-driven editor over one plan file."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize the application."""
        self.config = config or Config()
        self.source = None
        self.grid: RawGrid = []
        self.weeks: List[TrainingWeek] = []
        self.analyzer = None
        self.reporter = None
        self.plan_loaded = False
        self.unsaved_changes = False

    def run(self, plan_path: Optional[str] = None):
        """Run the main application loop."""
        print("\n" + "="*70)
        print(" " * 23 + "TRAINING PLAN EDITOR")
        print("="*70)

        plan_path = plan_path or self.config.get_plan_path()
        if plan_path and Path(plan_path).exists():
            self.load_plan(plan_path)

        while True:
            self._show_main_menu()
            choice = input("\nSelect an option (1-8): ").strip()

            if choice == '1':
                self._load_plan_menu()
            elif choice == '2':
                self._view_weeks()
            elif choice == '3':
                self._log_mileage()
            elif choice == '4':
                self._edit_notes()
            elif choice == '5':
                self._view_report()
            elif choice == '6':
                self.save_plan()
            elif choice == '7':
                self._settings_menu()
            elif choice == '8':
                if self.unsaved_changes:
                    save_it = input("\nSave changes before exiting? (y/n): ").strip().lower()
                    if save_it == 'y':
                        self.save_plan()
                print("\n✓ Good luck with your training!")
                break
            else:
                print("\n✗ Invalid option. Please try again.")

    def _show_main_menu(self):
        """Display the main menu."""
        print("\n" + "-"*70)
        print("MAIN MENU")
        print("-"*70)
        print("1. Load Plan")
        print("2. View Weeks")
        print("3. Log Weekly Mileage")
        print("4. Edit Notes")
        print("5. Plan Report")
        print("6. Save Plan")
        print("7. Settings")
        print("8. Exit")

        if self.plan_loaded:
            status = " (unsaved changes)" if self.unsaved_changes else ""
            print(f"\n[Plan loaded: {len(self.weeks)} weeks from {self.source.file_path.name}{status}]")

    def load_plan(self, plan_path: str) -> bool:
        """
        Load a plan file and project its weeks.

        Args:
            plan_path: Path to the plan CSV

        Returns:
            True if the plan was loaded
        """
        source = PlanFileSource(plan_path)
        try:
            grid = source.load_grid()
        except (OSError, ValueError) as e:
            print(f"\n✗ Error loading plan: {e}")
            return False

        self.source = source
        self._set_grid(grid)
        self.unsaved_changes = False
        self.plan_loaded = True
        self.config.set_plan_path(str(source.file_path))
        print(f"\n✓ Loaded {len(self.weeks)} weeks ({detect_layout(grid).value} layout)")
        return True

    def _set_grid(self, grid: RawGrid):
        """Replace the grid and recompute everything projected from it."""
        self.grid = grid
        self.weeks = project_weeks(grid)
        self.analyzer = PlanAnalyzer(self.weeks)
        self.reporter = PlanReportGenerator(self.analyzer, self.config.get_deviation_threshold())

    def apply_week_edit(self, week_index: int, week: TrainingWeek) -> bool:
        """
        Write an edited week into the grid.

        Args:
            week_index: Position of the week in the projected list
            week: Edited week

        Returns:
            True if the grid changed
        """
        new_grid = update_raw_data(self.grid, week_index, week)
        if new_grid is self.grid:
            return False
        self._set_grid(new_grid)
        self.unsaved_changes = True
        return True

    def save_plan(self) -> bool:
        """Serialize the grid and write it back to the plan file."""
        if not self._check_plan():
            return False

        try:
            self.source.save_grid(self.grid, backup=self.config.backup_enabled())
        except (OSError, ValueError) as e:
            print(f"\n✗ Failed to save plan: {e}")
            return False

        self.unsaved_changes = False
        print(f"\n✓ Plan saved to {self.source.file_path}")
        return True

    def _load_plan_menu(self):
        """Ask for a plan file, offering recent ones."""
        recent = self.config.get_recent_plans()
        if recent:
            print("\nRecent plans:")
            for i, path in enumerate(recent, 1):
                print(f"{i}. {path}")

        answer = input("\nEnter plan file path or recent plan number: ").strip().strip('"').strip("'")
        if not answer:
            return
        if answer.isdigit() and 1 <= int(answer) <= len(recent):
            answer = recent[int(answer) - 1]

        if self.unsaved_changes:
            discard = input("\nDiscard unsaved changes? (y/n): ").strip().lower()
            if discard != 'y':
                return

        self.load_plan(answer)

    def _view_weeks(self):
        """List every week of the plan."""
        if not self._check_plan():
            return
        self.reporter.print_week_table(self.weeks, current_week_index(self.weeks))

    def _select_week(self) -> Optional[int]:
        """Prompt for a week number, defaulting to the current week."""
        current = current_week_index(self.weeks)
        default = current + 1 if current >= 0 else len(self.weeks)
        answer = input(f"\nWeek number (1-{len(self.weeks)}) [default: {default}]: ").strip()

        try:
            number = int(answer) if answer else default
        except ValueError:
            print("✗ Invalid input")
            return None

        if not 1 <= number <= len(self.weeks):
            print("✗ Invalid week number")
            return None
        return number - 1

    def _log_mileage(self):
        """Record the distance run in a week."""
        if not self._check_plan():
            return

        index = self._select_week()
        if index is None:
            return

        week = self.weeks[index]
        print(f"\n{week.weeks_until_race} weeks out | Q1: {week.q1.description or 'Rest / Easy'} "
              f"| Q2: {week.q2.description or 'Rest / Easy'}")
        answer = input("Actual mileage in km (blank to clear): ").strip()

        updated = record_actual_mileage(week, answer)
        if answer and updated.actual_mileage is None:
            print("✗ Invalid distance")
            return

        if self.apply_week_edit(index, updated):
            if updated.difference is not None:
                print(f"✓ Logged {updated.actual_mileage:g} km ({updated.difference:+g} km vs plan)")
            else:
                print("✓ Mileage cleared")

    def _edit_notes(self):
        """Edit the weekly or session notes of a week."""
        if not self._check_plan():
            return

        index = self._select_week()
        if index is None:
            return

        week = self.weeks[index]
        print("\n1. Weekly notes")
        print("2. Q1 notes")
        print("3. Q2 notes")
        choice = input("\nSelect notes to edit (1-3): ").strip()

        current = {'1': week.notes, '2': week.q1.notes, '3': week.q2.notes}.get(choice)
        if current is None:
            print("✗ Invalid option")
            return

        print(f"Current: {current or '(empty)'}")
        text = input("New notes: ")

        if choice == '1':
            updated = with_notes(week, notes=text)
        elif choice == '2':
            updated = with_notes(week, q1_notes=text)
        else:
            updated = with_notes(week, q2_notes=text)

        if self.apply_week_edit(index, updated):
            print("✓ Notes updated")

    def _view_report(self):
        """Print plan progress and deviations."""
        if not self._check_plan():
            return
        report = self.reporter.generate_plan_report()
        self.reporter.print_report(report)

    def _settings_menu(self):
        """Settings menu."""
        while True:
            print("\n" + "-"*70)
            print("SETTINGS")
            print("-"*70)
            print("1. View current settings")
            print("2. Update settings")
            print("3. Back")

            choice = input("\nSelect option (1-3): ").strip()

            if choice == '1':
                self.config.display_settings()
            elif choice == '2':
                self.config.update_interactive()
                if self.plan_loaded:
                    self._set_grid(self.grid)
            elif choice == '3':
                break

    def _check_plan(self) -> bool:
        """Check if a plan is loaded."""
        if not self.plan_loaded:
            print("\n✗ No plan loaded. Please load a plan first (Option 1).")
            return False
        return True


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="View and edit a training plan CSV.")
    parser.add_argument('--plan', help="Plan CSV file to open")
    parser.add_argument('--log-level', default='WARNING', type=str.upper, choices=LOG_LEVELS,
                        help="Log level for diagnostic messages")
    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level)

    app = PlanEditorApp()
    try:
        app.run(plan_path=args.plan)
    except KeyboardInterrupt:
        print("\n\n✓ Application terminated by user.")


if __name__ == "__main__":
    main()
