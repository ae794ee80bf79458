"""
=========================
ConfigManager
=========================

Last update: October 2026

ConfigManager class. Holds the simulation parameters of a PBFT cluster and loads/saves them as JSON.
"""

import copy
import json
from typing import Any, Dict

from pbftsim.Log import log

SCHEDULERS = ('realtime', 'simulated')

DEFAULT_PARAMS = {
    "n_nodes": 12,
    "byzantine_probability": 0.2,
    "all_honest": False,
    "values": ["A", "B"],
    "view_change_delay": 2.0,  # seconds
    "max_failures": 3,
    "auto_advance": True,
    "redraw_byzantine_each_round": False,
    "rotate_leader_on_view_change": False,
    "scheduler": "realtime",
    "seed": None,
    "verbosity": 3,
}


class ConfigurationError(ValueError):
    """Raised when the simulation parameters describe a cluster that cannot be simulated."""


class ConfigManager:
    def __init__(self, config_file: str = None, **overrides):
        # default params
        self.simulation_params = copy.deepcopy(DEFAULT_PARAMS)

        if config_file:
            self.load_from_file(config_file)

        for key, value in overrides.items():
            self.set(key, value)

    def __repr__(self):
        return '[ConfigManager, params = %s]' % self.simulation_params

    def get_simulation_params(self) -> Dict[str, Any]:
        return copy.deepcopy(self.simulation_params)

    def get(self, key: str) -> Any:
        if key not in self.simulation_params:
            raise KeyError(f"Key '{key}' not found in simulation parameters.")
        return self.simulation_params[key]

    def set(self, key: str, value: Any):
        if key in self.simulation_params:
            self.simulation_params[key] = value
            log.config.debug('Set %s = %s', key, value)
        else:
            raise KeyError(f"Key '{key}' not found in simulation parameters.")

    def validate(self):
        params = self.simulation_params

        if not isinstance(params["n_nodes"], int) or params["n_nodes"] < 1:
            raise ConfigurationError(f"n_nodes must be a positive integer, got {params['n_nodes']!r}.")
        if not 0.0 <= float(params["byzantine_probability"]) <= 1.0:
            raise ConfigurationError(
                f"byzantine_probability must lie in [0, 1], got {params['byzantine_probability']!r}.")
        if len(set(params["values"])) < 2:
            raise ConfigurationError(f"At least two distinct values are needed, got {params['values']!r}.")
        if params["view_change_delay"] < 0:
            raise ConfigurationError(
                f"view_change_delay must not be negative, got {params['view_change_delay']!r}.")
        if params["max_failures"] < 1:
            raise ConfigurationError(f"max_failures must be at least 1, got {params['max_failures']!r}.")
        if params["scheduler"] not in SCHEDULERS:
            raise ConfigurationError(
                f"scheduler must be one of {SCHEDULERS}, got {params['scheduler']!r}.")
        if params["verbosity"] not in range(6):
            raise ConfigurationError(f"verbosity must be between 0 and 5, got {params['verbosity']!r}.")
        return True

    def load_from_file(self, config_file: str):
        with open(config_file, 'r') as file:
            data = json.load(file)
            for key, value in data.items():
                if key in self.simulation_params:
                    self.simulation_params[key] = value
                else:
                    log.config.warning('Ignoring unknown parameter %s in %s.', key, config_file)
        log.config.info('Loaded simulation parameters from %s.', config_file)

    def save_to_file(self, config_file: str):
        with open(config_file, 'w') as file:
            json.dump(self.simulation_params, file, indent=4)
        log.config.info('Saved simulation parameters to %s.', config_file)
