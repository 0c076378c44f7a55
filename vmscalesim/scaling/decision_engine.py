"""Overload/underload decision engine for vertical VM scaling.

The engine turns noisy per-tick CPU readings into a damped load signal.
It keeps only the last valid observation: the signal is the last committed
CPU utilization scaled by how much the VM's core occupancy changed since
that observation. Core occupancy changes show up within the same tick,
while single-tick CPU spikes without a matching change in occupied cores
are smoothed out.
"""

from dataclasses import dataclass
from typing import Optional

from .diagnostics import StatusLine, StatusObserver
from .errors import InvalidVmConfigurationError
from .thresholds import ThresholdLike, as_threshold


@dataclass
class SmoothingState:
    """Mutable smoothing state owned by one (VM, resource) binding.

    Attributes:
        last_utilization: Last valid CPU utilization fraction
        last_core_fraction: Last valid fraction of cores occupied by tasks
        last_observed_tick: Last integer tick a status line was emitted for
    """
    last_utilization: float = 1.0
    last_core_fraction: float = 1.0
    last_observed_tick: int = 0


@dataclass(frozen=True)
class SignalReading:
    """Outcome of a single signal evaluation."""
    cpu_now: float
    running_count: int
    core_now: float
    signal: float
    committed: bool


def core_fraction(vm) -> float:
    """Fraction of the VM's cores allocated to running tasks, clamped to 1.

    Args:
        vm: VM exposing ``number_of_pes`` and ``running_tasks``

    Returns:
        Core fraction in [0, 1]

    Raises:
        InvalidVmConfigurationError: If the VM reports fewer than one core
    """
    capacity = vm.number_of_pes
    if capacity < 1:
        raise InvalidVmConfigurationError(
            f"Vm {getattr(vm, 'vm_id', '?')} reports {capacity} PEs"
        )

    allocated = float(sum(task.pes for task in vm.running_tasks))
    return min(1.0, allocated / capacity)


def compute_signal(state: SmoothingState, core_now: float) -> float:
    """Scale the last valid utilization by the change in core occupancy."""
    if state.last_core_fraction == 0:
        return 0.0
    return state.last_utilization * (core_now / state.last_core_fraction)


def evaluate(state: SmoothingState, vm) -> SignalReading:
    """Compute the load signal and commit the current observation if valid.

    The signal is computed from the state as it was before this call; the
    current reading only becomes the baseline for the next evaluation. A
    reading is committed only if CPU utilization, running task count and
    core fraction are all non-zero, so idle or transient zero ticks carry
    the previous baseline forward.

    Args:
        state: Smoothing state, updated in place
        vm: VM to read

    Returns:
        The reading for this evaluation
    """
    cpu_now = vm.cpu_percent_utilization
    running_count = len(vm.running_tasks)
    core_now = core_fraction(vm)

    signal = compute_signal(state, core_now)

    committed = cpu_now != 0 and running_count != 0 and core_now != 0
    if committed:
        state.last_utilization = cpu_now
        state.last_core_fraction = core_now

    return SignalReading(
        cpu_now=cpu_now,
        running_count=running_count,
        core_now=core_now,
        signal=signal,
        committed=committed,
    )


class VerticalScalingEngine:
    """Decides whether a VM is overloaded or underloaded.

    One engine is bound to one VM and one resource. Thresholds are supplied
    by the caller; the engine does not check that lower < upper.
    """

    def __init__(self, vm, lower_threshold: ThresholdLike, upper_threshold: ThresholdLike,
                 state: Optional[SmoothingState] = None,
                 observer: Optional[StatusObserver] = None):
        """Initialize engine.

        Args:
            vm: VM to observe
            lower_threshold: Underload threshold function or constant
            upper_threshold: Overload threshold function or constant
            state: Existing smoothing state (a fresh one if None)
            observer: Status line sink (diagnostics disabled if None)
        """
        self.vm = vm
        self.lower_threshold = as_threshold(lower_threshold)
        self.upper_threshold = as_threshold(upper_threshold)
        self._state = state if state is not None else SmoothingState()
        self.observer = observer
        self._last_reading: Optional[SignalReading] = None

    @property
    def state(self) -> SmoothingState:
        return self._state

    @property
    def last_reading(self) -> Optional[SignalReading]:
        return self._last_reading

    def core_fraction(self) -> float:
        return core_fraction(self.vm)

    def is_overloaded(self) -> bool:
        """Check whether the load signal is above the upper threshold."""
        reading = self._evaluate()
        return reading.signal > self.upper_threshold(self.vm)

    def is_underloaded(self) -> bool:
        """Check whether the load signal is below the lower threshold.

        A VM with no running tasks is never underloaded, so a freshly
        provisioned VM is not shrunk before it receives work.
        """
        reading = self._evaluate()
        if reading.running_count == 0:
            return False
        return reading.signal < self.lower_threshold(self.vm)

    def _evaluate(self) -> SignalReading:
        self._observe()
        self._last_reading = evaluate(self._state, self.vm)
        return self._last_reading

    def _observe(self) -> None:
        if self.observer is None:
            return

        tick = int(self.vm.clock)
        if tick == self._state.last_observed_tick:
            return

        self.observer.notify(StatusLine.from_vm(self.vm))
        self._state.last_observed_tick = tick

    def __repr__(self) -> str:
        return (f"VerticalScalingEngine(vm={getattr(self.vm, 'vm_id', '?')}, "
                f"lower={self.lower_threshold!r}, upper={self.upper_threshold!r})")
