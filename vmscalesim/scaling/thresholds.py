"""Threshold functions mapping a VM's current state to a load boundary."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Union


class ThresholdFunction(ABC):
    """Maps a VM state snapshot to a threshold in [0, 1].

    The decision engine treats thresholds as opaque, so fixed, adaptive or
    trend-based policies can be plugged in without touching the engine.
    """

    @abstractmethod
    def __call__(self, vm) -> float:
        """Get the threshold for the VM's current state."""


class FixedThreshold(ThresholdFunction):
    """Constant threshold."""

    def __init__(self, value: float):
        _check_fraction(value)
        self.value = float(value)

    def __call__(self, vm) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"FixedThreshold({self.value})"


class CallableThreshold(ThresholdFunction):
    """Adapts a plain ``vm -> float`` callable."""

    def __init__(self, func: Callable[[Any], float]):
        self.func = func

    def __call__(self, vm) -> float:
        return float(self.func(vm))

    def __repr__(self) -> str:
        return f"CallableThreshold({getattr(self.func, '__name__', self.func)!r})"


class CoreScaledThreshold(ThresholdFunction):
    """Threshold that moves with the VM's core count.

    ``base + per_core * number_of_pes``, clamped into ``[minimum, maximum]``.
    Larger VMs can use a higher upper bound because a single extra task
    moves their core fraction less.
    """

    def __init__(self, base: float, per_core: float = 0.0,
                 minimum: float = 0.0, maximum: float = 1.0):
        _check_fraction(minimum)
        _check_fraction(maximum)
        if minimum > maximum:
            raise ValueError(f"Threshold minimum {minimum} exceeds maximum {maximum}")
        self.base = base
        self.per_core = per_core
        self.minimum = minimum
        self.maximum = maximum

    def __call__(self, vm) -> float:
        value = self.base + self.per_core * vm.number_of_pes
        return min(self.maximum, max(self.minimum, value))

    def __repr__(self) -> str:
        return (f"CoreScaledThreshold(base={self.base}, per_core={self.per_core}, "
                f"min={self.minimum}, max={self.maximum})")


ThresholdLike = Union[float, int, Callable[[Any], float], ThresholdFunction]


def as_threshold(obj: ThresholdLike) -> ThresholdFunction:
    """Coerce a number, callable or threshold function into a ThresholdFunction.

    Args:
        obj: Value to convert

    Returns:
        Threshold function

    Raises:
        TypeError: If the object cannot be used as a threshold
    """
    if isinstance(obj, ThresholdFunction):
        return obj
    if isinstance(obj, bool):
        raise TypeError("Booleans are not valid thresholds")
    if isinstance(obj, (int, float)):
        return FixedThreshold(obj)
    if callable(obj):
        return CallableThreshold(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a threshold")


def threshold_from_config(cfg: Union[float, Dict]) -> ThresholdFunction:
    """Build a threshold function from a configuration value.

    Args:
        cfg: Either a number, or a dict with ``type`` set to ``fixed``
            (``value``) or ``core_scaled`` (``base``, ``per_core``,
            ``min``, ``max``)

    Returns:
        Threshold function
    """
    if not isinstance(cfg, dict):
        return as_threshold(cfg)

    kind = cfg.get('type', 'fixed')
    if kind == 'fixed':
        return FixedThreshold(cfg['value'])
    if kind == 'core_scaled':
        return CoreScaledThreshold(
            base=cfg['base'],
            per_core=cfg.get('per_core', 0.0),
            minimum=cfg.get('min', 0.0),
            maximum=cfg.get('max', 1.0),
        )
    raise ValueError(f"Unknown threshold type: {kind!r}")


def validate_threshold_pair(lower: ThresholdFunction, upper: ThresholdFunction, vm) -> None:
    """Check that the lower threshold stays below the upper one for a VM.

    The engine never checks this itself; callers wiring a scaling binding do.

    Raises:
        ValueError: If the pair is unordered or out of [0, 1]
    """
    low = lower(vm)
    high = upper(vm)
    _check_fraction(low)
    _check_fraction(high)
    if not low < high:
        raise ValueError(
            f"Lower threshold {low:.2f} must be below upper threshold {high:.2f} "
            f"for Vm {getattr(vm, 'vm_id', '?')}"
        )


def _check_fraction(value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Threshold {value} is outside [0, 1]")
