"""
Configuration management for the Training Plan Editor.
Handles user preferences and settings persistence.
"""

import copy
import json
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger


class Config:
    """Manages application configuration and user preferences."""

    CONFIG_DIR = Path.home() / '.training_plan_editor'
    CONFIG_FILE = CONFIG_DIR / 'config.json'

    MAX_RECENT_PLANS = 5

    DEFAULT_CONFIG = {
        'plan_path': None,
        'backup_on_save': True,
        'deviation_threshold_pct': 10.0,
        'recent_plans': [],
    }

    def __init__(self):
        """Initialize configuration manager."""
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(self.DEFAULT_CONFIG)
        if not self.CONFIG_FILE.exists():
            return config

        try:
            with open(self.CONFIG_FILE, 'r') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load config {}: {}", self.CONFIG_FILE, e)
            return config

        if not isinstance(loaded, dict):
            logger.warning("Ignoring config {}: expected a JSON object", self.CONFIG_FILE)
            return config

        # Merge with defaults to handle new config keys
        config.update(loaded)
        return config

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            with open(self.CONFIG_FILE, 'w') as f:
                json.dump(self.config, f, indent=2)
            return True
        except OSError as e:
            logger.error("Error saving config {}: {}", self.CONFIG_FILE, e)
            return False

    def get(self, key: str, default=None):
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key doesn't exist

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value):
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Value to set
        """
        self.config[key] = value

    def get_plan_path(self) -> Optional[str]:
        """Get the plan file opened most recently."""
        return self.config.get('plan_path')

    def set_plan_path(self, plan_path: str):
        """Remember a plan file as the current plan and add it to recent plans."""
        plan_path = str(plan_path)
        self.config['plan_path'] = plan_path

        recent = [p for p in self.config.get('recent_plans', []) if p != plan_path]
        recent.insert(0, plan_path)
        self.config['recent_plans'] = recent[:self.MAX_RECENT_PLANS]
        self.save()

    def get_recent_plans(self) -> List[str]:
        return self.config.get('recent_plans', [])

    def get_deviation_threshold(self) -> float:
        """Get the deviation percentage above which a week is flagged."""
        return float(self.config.get('deviation_threshold_pct', 10.0))

    def backup_enabled(self) -> bool:
        return bool(self.config.get('backup_on_save', True))

    def display_settings(self):
        """Display current settings."""
        print("\n" + "="*60)
        print("CURRENT SETTINGS")
        print("="*60)
        print(f"Plan File: {self.get_plan_path() or 'Not set'}")
        print(f"Backup On Save: {self.backup_enabled()}")
        print(f"Deviation Threshold: {self.get_deviation_threshold()}%")

        recent = self.get_recent_plans()
        if recent:
            print(f"\nRecent Plans: {len(recent)}")
            for i, path in enumerate(recent):
                print(f"  {i+1}. {path}")
        else:
            print("\nNo recent plans")

        print("="*60)

    def update_interactive(self):
        """Interactive configuration update."""
        print("\n" + "="*60)
        print("UPDATE SETTINGS")
        print("="*60)
        print("\n1. Toggle Backup On Save")
        print("2. Deviation Threshold")
        print("3. Clear Recent Plans")
        print("4. Back")

        choice = input("\nSelect setting to update (1-4): ").strip()

        if choice == '1':
            self.config['backup_on_save'] = not self.backup_enabled()
            self.save()
            print(f"✓ Backup on save {'enabled' if self.config['backup_on_save'] else 'disabled'}")
        elif choice == '2':
            try:
                threshold = float(input("Enter deviation threshold (%): "))
                self.config['deviation_threshold_pct'] = threshold
                self.save()
                print("✓ Deviation threshold updated")
            except ValueError:
                print("✗ Invalid input")
        elif choice == '3':
            self.config['recent_plans'] = []
            self.save()
            print("✓ Recent plans cleared")
