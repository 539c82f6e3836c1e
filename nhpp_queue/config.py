"""Run configuration for the queueing simulation."""

import json
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Callable, Dict, Optional

from nhpp_queue.distributions.intensity import constant_intensity, reference_intensity

PROFILES = ('reference', 'constant')


@dataclass(frozen=True)
class RunConfig:
    """Parameters of one simulation run.

    Defaults describe a working day from 7:00 to 23:00 with the reference
    arrival profile, which peaks at 5.8 clients per hour.
    """
    window_start: float = 7.0
    window_close: float = 23.0
    max_arrival_rate: float = 6.0
    service_rate: float = 10.0
    profile: str = 'reference'
    constant_rate: float = 0.5
    seed: Optional[int] = 42
    arrival_limit: Optional[int] = None
    ratio_check_step: float = 0.5

    def validate(self) -> 'RunConfig':
        if self.window_close <= self.window_start:
            raise ValueError("window_close must be greater than window_start")
        if self.max_arrival_rate <= 0:
            raise ValueError("max_arrival_rate must be > 0")
        if self.service_rate <= 0:
            raise ValueError("service_rate must be > 0")
        if self.profile not in PROFILES:
            raise ValueError(f"Unknown intensity profile: {self.profile}")
        if self.constant_rate < 0:
            raise ValueError("constant_rate must be >= 0")
        if self.arrival_limit is not None and self.arrival_limit < 0:
            raise ValueError("arrival_limit must be >= 0")
        if self.ratio_check_step <= 0:
            raise ValueError("ratio_check_step must be > 0")
        return self

    def intensity(self) -> Callable[[float], float]:
        """The arrival intensity profile this configuration selects."""
        if self.profile == 'constant':
            return constant_intensity(self.constant_rate)
        return reference_intensity

    def with_overrides(self, **overrides: Any) -> 'RunConfig':
        """Copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data).validate()

    @classmethod
    def from_json(cls, path: str) -> 'RunConfig':
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))
