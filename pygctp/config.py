"""Tuning parameters for the swath geolocation searches."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from pygctp.exceptions import ConfigurationError
from pygctp.logging_config import get_logger

logger = get_logger(__name__)

# (field, test, message) for each constraint on a SearchConfig
_CHECKS = (
    ('tolerance_factor', lambda v: v > 0, 'must be positive'),
    ('max_iterations', lambda v: v > 0, 'must be a positive integer'),
    ('stagnation_limit', lambda v: 0 <= v < 1, 'must be in [0, 1)'),
    ('step_shrink_factor', lambda v: v > 0, 'must be positive'),
    ('window_factor', lambda v: v > 1, 'must be greater than 1'),
    ('window_max_iterations', lambda v: v > 0, 'must be a positive integer'),
    ('random_probes', lambda v: v >= 0, 'must be non-negative'),
    ('grid_probes', lambda v: v >= 1, 'must be at least 1'),
    ('min_search_size', lambda v: v >= 2, 'must be at least 2'),
)

_INT_FIELDS = ('max_iterations', 'window_max_iterations', 'random_probes',
               'grid_probes', 'min_search_size', 'seed')


@dataclass
class SearchConfig:
    """Multipliers and limits for swath nearest-location searches.

    Parameters
    ----------
    tolerance_factor : float, default=0.1
        Convergence tolerance of the gradient search as a fraction of the
        pixel resolution at the swath center.
    max_iterations : int, default=100
        Iteration cap of the gradient search.
    stagnation_limit : float, default=1e-6
        Relative change in distance below which the gradient search stops.
    step_shrink_factor : float, default=2.0
        The finite difference offset shrinks once the remaining distance
        is under ``step_shrink_factor * offset * resolution``.
    window_factor : float, default=3.0
        Multiplier applied to the best distance (in pixels) when the
        windowed search sizes its next window.
    window_max_iterations : int, default=20
        Iteration cap of the windowed search.
    random_probes : int, default=10
        Random probe locations per window.
    grid_probes : int, default=5
        Gridded probes per window side, the center probe is skipped.
    min_search_size : int, default=10
        Lower bound on the windowed search size in pixels.
    seed : int, optional
        Seed for the random probes, for repeatable searches.
    """

    tolerance_factor: float = 0.1
    max_iterations: int = 100
    stagnation_limit: float = 1e-6
    step_shrink_factor: float = 2.0
    window_factor: float = 3.0
    window_max_iterations: int = 20
    random_probes: int = 10
    grid_probes: int = 5
    min_search_size: int = 10
    seed: int = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ConfigurationError listing every out of range value."""
        problems = []
        for name, test, message in _CHECKS:
            value = getattr(self, name)
            if value is None or not test(value):
                problems.append('%s %s (got %r)' % (name, message, value))
        if problems:
            raise ConfigurationError('Invalid search configuration: ' + '; '.join(problems))

    def to_dict(self):
        return asdict(self)

    def save(self, filepath):
        """Write the configuration to a JSON file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info('Search configuration saved to %s', filepath)

    @classmethod
    def load(cls, filepath):
        """Read a configuration written by `save`.

        Unknown keys raise ConfigurationError. Integer fields stored as
        floats are converted back to integers.
        """
        filepath = Path(filepath)
        with open(filepath, 'r') as f:
            data = json.load(f)

        unknown = set(data) - set(field.name for field in fields(cls))
        if unknown:
            raise ConfigurationError('Unknown search configuration keys: %s'
                                     % ', '.join(sorted(unknown)))
        for name in _INT_FIELDS:
            if data.get(name) is not None:
                data[name] = int(data[name])
        logger.debug('Search configuration loaded from %s', filepath)
        return cls(**data)
