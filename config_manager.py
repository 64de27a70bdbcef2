"""Configuration management for the N-Queens solver.

This module provides a thin, explicit wrapper around a JSON configuration file
to centralize engine limits, benchmark settings and output options.

File format (high-level)
------------------------
- engine_settings: board-size limits, default N, thread count, solve time limit.
- benchmark_settings: N values and repetitions for the benchmark pipeline.
- output_settings: output directory, run tag and date stamping of filenames.

All methods return Python native types; the class does not validate semantics
beyond presence of keys to keep responsibilities minimal.
"""
import json
from pathlib import Path


class ConfigManager:
    """Load, query, and persist configuration.

    Parameters
    ----------
    config_path : str | os.PathLike, default "config.json"
        Path to the configuration file.
    """

    def __init__(self, config_path="config.json"):
        self.config_path = Path(config_path)
        self.config = self.load_config()

    def load_config(self):
        """Load and parse the JSON configuration file.

        Returns
        -------
        dict
            Root configuration object.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Create it or use the default config.json template"
            )

        with open(self.config_path, 'r') as f:
            return json.load(f)

    def save_config(self):
        """Persist the current in-memory configuration to disk."""
        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get_engine_settings(self):
        """Return engine settings (board limits, default N, threads, time limit)."""
        return self.config.get("engine_settings", {})

    def get_benchmark_settings(self):
        """Return benchmark settings (N values, runs per N)."""
        return self.config.get("benchmark_settings", {})

    def get_output_settings(self):
        """Return output settings (directory, run tag, date stamping)."""
        return self.config.get("output_settings", {})

    def update_setting(self, section, key, value):
        """Update a specific setting and persist the change immediately."""
        if section not in self.config:
            self.config[section] = {}
        self.config[section][key] = value
        self.save_config()
