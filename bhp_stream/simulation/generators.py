"""Pattern generators for synthetic surface data.

Each generator maps elapsed seconds since the start of a simulation to a
(rate, concentration, pressure) triple.  These are parametric curves with
Gaussian noise, not a physical model.  All outputs are clamped into the
configured limits.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, NamedTuple

from bhp_stream.simulation.config import DataPattern, GeneratorConfig, Limits
from bhp_stream.simulation.seeded_random import SeededRandom, create_seeded_random


class GeneratedValues(NamedTuple):
    rate: float
    concentration: float
    pressure: float


class BaseGenerator(ABC):
    """Common noise, clamping and reseeding for all patterns."""

    pattern: DataPattern

    def __init__(self, config: GeneratorConfig) -> None:
        self._config = config
        self._random: SeededRandom = create_seeded_random(config.seed)

    @abstractmethod
    def generate(self, elapsed: float) -> GeneratedValues:
        """Values for *elapsed* seconds since the simulation started."""
        ...

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    def update_config(self, **changes: Any) -> None:
        self._config = self._config.merged(**changes)
        if changes.get("seed") is not None:
            self._random = SeededRandom(changes["seed"])

    def reset(self, seed: int | None = None) -> None:
        if seed is not None:
            self._random = SeededRandom(seed)
        elif self._config.seed is not None:
            self._random = SeededRandom(self._config.seed)

    # ── Helpers ──────────────────────────────────────────────────────────

    def noise(self) -> float:
        return self._random.gaussian(0.0, 1.0)

    def _clamped(self, rate: float, concentration: float, pressure: float) -> GeneratedValues:
        c = self._config
        return GeneratedValues(
            rate=clamp(rate, c.rate_limits),
            concentration=clamp(concentration, c.concentration_limits),
            pressure=clamp(pressure, c.pressure_limits),
        )


class SteadyGenerator(BaseGenerator):
    """Constant values with minimal noise."""

    pattern = DataPattern.STEADY

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        amp = c.noise_level
        return self._clamped(
            c.base_rate + self.noise() * amp * 2,
            c.base_concentration + self.noise() * amp * 0.5,
            c.base_pressure + self.noise() * amp * 100,
        )


class RampingGenerator(BaseGenerator):
    """Five-minute cycles: ramp up, plateau, ramp down."""

    pattern = DataPattern.RAMPING
    period = 300.0

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        phase = (elapsed % self.period) / self.period
        if phase < 0.3:
            ramp = phase / 0.3
        elif phase < 0.7:
            ramp = 1.0
        else:
            ramp = (1.0 - phase) / 0.3

        min_rate, max_rate = c.rate_limits
        min_conc, max_conc = c.concentration_limits
        rate = min_rate + (max_rate - min_rate) * ramp + self.noise() * 2
        concentration = min_conc + (max_conc - min_conc) * ramp + self.noise() * 0.5
        pressure = 2000 + rate * 200 + self.noise() * 200
        return self._clamped(rate, concentration, pressure)


class CyclingGenerator(BaseGenerator):
    """Sinusoidal rate (2 min period) and concentration (3 min period)."""

    pattern = DataPattern.CYCLING

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        rate_wave = math.sin(2 * math.pi * elapsed / 120.0)
        conc_wave = math.sin(2 * math.pi * elapsed / 180.0)
        rate_span = c.rate_limits[1] - c.rate_limits[0]
        conc_span = c.concentration_limits[1] - c.concentration_limits[0]

        rate = c.base_rate + rate_span * 0.3 * rate_wave + self.noise() * 2
        concentration = c.base_concentration + conc_span * 0.4 * conc_wave + self.noise() * 0.5
        pressure = 2000 + rate * 200 + self.noise() * 200
        return self._clamped(rate, concentration, pressure)


class RealisticGenerator(BaseGenerator):
    """Ten-minute stages: rate ramp, steady pad, proppant ramp, flush.

    Occasional pressure spikes mimic screen-outs at high concentration.
    """

    pattern = DataPattern.REALISTIC
    stage_duration = 600.0
    ramp_up = 60.0
    steady = 240.0
    prop_ramp = 180.0
    ramp_down = 120.0

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        t = elapsed % self.stage_duration

        if t < self.ramp_up:
            progress = t / self.ramp_up
            min_rate = c.rate_limits[0]
            rate = min_rate + (c.base_rate - min_rate) * progress + self.noise() * 2
            concentration = 0.5 + self.noise() * 0.2
            pressure = 2000 + rate * 180 + self.noise() * 200
        elif t < self.ramp_up + self.steady:
            rate = c.base_rate + self.noise() * 2
            concentration = 1.0 + self.noise() * 0.3
            pressure = 4500 + self.noise() * 300
        elif t < self.ramp_up + self.steady + self.prop_ramp:
            progress = (t - self.ramp_up - self.steady) / self.prop_ramp
            max_conc = c.concentration_limits[1]
            rate = c.base_rate + self.noise() * 2
            concentration = 1.0 + (max_conc - 1.0) * progress + self.noise() * 0.5
            pressure = 5000 + concentration * 150 + self.noise() * 250
        else:
            progress = (t - self.ramp_up - self.steady - self.prop_ramp) / self.ramp_down
            rate = c.base_rate * (1 - progress * 0.5) + self.noise() * 2
            concentration = max(0.0, 10 * (1 - progress)) + self.noise() * 0.3
            pressure = 5500 * (1 - progress * 0.4) + self.noise() * 200

        if self._random.next_boolean(0.02) and concentration > 5:
            pressure += self._random.next_range(1000.0, 2000.0)

        return self._clamped(rate, concentration, pressure)


class PumpStopGenerator(BaseGenerator):
    """Six-minute cycles: five minutes pumping, one minute shut down with decay."""

    pattern = DataPattern.PUMP_STOP
    cycle = 360.0
    pumping = 300.0

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        t = elapsed % self.cycle
        if t < self.pumping:
            rate = c.base_rate + math.sin(2 * math.pi * t / 120.0) * 3 + self.noise() * 2
            concentration = c.base_concentration + self.noise() * 0.5
            pressure = 5000 + rate * 150 + self.noise() * 200
        else:
            decay = math.exp(-(t - self.pumping) / 20.0)
            rate = c.base_rate * 0.1 * decay + self.noise() * 0.5
            concentration = c.base_concentration * 0.2 * decay + self.noise() * 0.1
            pressure = 2000 * decay + 500 + self.noise() * 100
        return self._clamped(rate, concentration, pressure)


class StageTransitionGenerator(BaseGenerator):
    """Eight-minute realistic stages separated by two-minute transitions."""

    pattern = DataPattern.STAGE_TRANSITION
    stage = 480.0
    transition = 120.0

    def __init__(self, config: GeneratorConfig) -> None:
        super().__init__(config)
        self._stage_generator = RealisticGenerator(config)

    def generate(self, elapsed: float) -> GeneratedValues:
        c = self._config
        t = elapsed % (self.stage + self.transition)
        if t < self.stage:
            return self._stage_generator.generate(t)

        t -= self.stage
        half = self.transition / 2
        if t < half:
            down = t / half
            rate = c.base_rate * (1 - down) + self.noise()
            concentration = c.base_concentration * (1 - down) + self.noise() * 0.2
            pressure = 4000 * (1 - down * 0.5) + 1000 + self.noise() * 150
        else:
            up = (t - half) / half
            rate = c.base_rate * up + self.noise()
            concentration = c.base_concentration * 0.5 * up + self.noise() * 0.2
            pressure = 1000 + 3000 * up + self.noise() * 150
        return self._clamped(rate, concentration, pressure)

    def update_config(self, **changes: Any) -> None:
        super().update_config(**changes)
        self._stage_generator.update_config(**changes)

    def reset(self, seed: int | None = None) -> None:
        super().reset(seed)
        self._stage_generator.reset(seed)


_GENERATORS: dict[DataPattern, type[BaseGenerator]] = {
    cls.pattern: cls
    for cls in (
        SteadyGenerator,
        RampingGenerator,
        CyclingGenerator,
        RealisticGenerator,
        PumpStopGenerator,
        StageTransitionGenerator,
    )
}

_DESCRIPTIONS: dict[DataPattern, str] = {
    DataPattern.STEADY: "Constant values with minimal noise",
    DataPattern.RAMPING: "Gradual ramp up and down cycles",
    DataPattern.CYCLING: "Sinusoidal periodic variations",
    DataPattern.REALISTIC: "Complex multi-stage simulation mimicking real operations",
    DataPattern.PUMP_STOP: "Includes periodic pump shutdowns with decay",
    DataPattern.STAGE_TRANSITION: "Simulates transitions between pumping stages",
}


def create_generator(config: GeneratorConfig) -> BaseGenerator:
    """Instantiate the generator for ``config.pattern``."""
    return _GENERATORS[config.pattern](config)


def available_patterns() -> list[DataPattern]:
    return list(_GENERATORS)


def pattern_description(pattern: DataPattern) -> str:
    return _DESCRIPTIONS.get(pattern, "Unknown pattern")


def clamp(value: float, limits: Limits) -> float:
    return max(limits[0], min(limits[1], value))
