"""Vertical scaling binding of one VM resource to a decision engine."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from dataclasses_json import dataclass_json

from .decision_engine import VerticalScalingEngine
from .diagnostics import StatusObserver
from .resource_scaling import ResourceScaling, ResourceScalingGradual, resource_scaling_from_name
from .resources import ResourceKind
from .thresholds import ThresholdLike, as_threshold, threshold_from_config, validate_threshold_pair
from ..utils.logger import setup_logger


class ScalingDirection(Enum):
    """Direction of a vertical scaling request."""
    UP = "up"
    DOWN = "down"


@dataclass_json
@dataclass
class ScalingRequest:
    """A request to change the capacity of one VM resource."""
    time: float
    vm_id: int
    resource_kind: str
    direction: str
    amount: float
    current_capacity: float
    new_capacity: float
    signal: float


class VerticalVmScaling:
    """Scaling configuration for one resource of one VM.

    Holds the resource kind, scaling factor, strategy and thresholds. Once
    attached to a VM it owns a VerticalScalingEngine and turns its verdicts
    into ScalingRequests. Applying a request is left to the caller.
    """

    def __init__(self, resource_kind: ResourceKind, scaling_factor: float,
                 resource_scaling: Optional[ResourceScaling] = None,
                 lower_threshold: ThresholdLike = 0.3,
                 upper_threshold: ThresholdLike = 0.8,
                 min_capacity: Optional[float] = None,
                 max_capacity: Optional[float] = None,
                 observer: Optional[StatusObserver] = None):
        """Initialize scaling binding.

        Args:
            resource_kind: Resource to scale
            scaling_factor: Fraction of capacity to scale by (> 0)
            resource_scaling: Amount strategy (gradual if None)
            lower_threshold: Underload threshold
            upper_threshold: Overload threshold
            min_capacity: Lowest capacity a request may propose (at least 1)
            max_capacity: Highest capacity a request may propose
            observer: Status line sink passed to the engine
        """
        if scaling_factor <= 0:
            raise ValueError(f"Scaling factor must be positive, got {scaling_factor}")

        self.resource_kind = resource_kind
        self.scaling_factor = scaling_factor
        self.resource_scaling = resource_scaling or ResourceScalingGradual()
        self.lower_threshold = as_threshold(lower_threshold)
        self.upper_threshold = as_threshold(upper_threshold)
        self.observer = observer
        self.logger = setup_logger(self.__class__.__name__)

        self.min_capacity = 1.0 if min_capacity is None else max(1.0, min_capacity)
        self.max_capacity = max_capacity

        self.vm = None
        self.engine: Optional[VerticalScalingEngine] = None
        self.last_processing_time: Optional[float] = None
        self.last_verdict: Optional[ScalingDirection] = None

    def attach(self, vm) -> VerticalScalingEngine:
        """Bind this scaling to a VM and create its decision engine.

        Raises:
            ValueError: If the thresholds are unordered for the VM
        """
        validate_threshold_pair(self.lower_threshold, self.upper_threshold, vm)
        self.vm = vm
        self.engine = VerticalScalingEngine(
            vm, self.lower_threshold, self.upper_threshold, observer=self.observer
        )
        self.logger.debug(
            f"Attached {self.resource_kind.value} scaling to Vm {vm.vm_id} "
            f"(factor={self.scaling_factor}, strategy={type(self.resource_scaling).__name__})"
        )
        return self.engine

    def resource_capacity(self) -> float:
        return self._require_vm().capacity_of(self.resource_kind)

    def resource_utilization(self) -> float:
        """Current utilization of the bound resource.

        For PEs this is the engine's smoothed signal once one exists, since
        that is what the verdict was based on.
        """
        vm = self._require_vm()
        if self.resource_kind == ResourceKind.PE:
            reading = self.engine.last_reading
            return reading.signal if reading is not None else vm.cpu_percent_utilization
        if self.resource_kind == ResourceKind.RAM:
            return vm.ram.percent_utilization
        return vm.bandwidth_utilization

    def active_threshold(self) -> float:
        """Threshold matching the last verdict (lower if underloaded)."""
        vm = self._require_vm()
        if self.last_verdict == ScalingDirection.DOWN:
            return self.lower_threshold(vm)
        return self.upper_threshold(vm)

    def request_scaling_if_predicate_matches(self, time: float) -> Optional[ScalingRequest]:
        """Check the VM once for this time and build a scaling request.

        Args:
            time: Current simulation time

        Returns:
            A request, or None if the VM is stable, the time was already
            checked, or the capacity bounds leave nothing to change
        """
        vm = self._require_vm()
        if self.last_processing_time is not None and time <= self.last_processing_time:
            return None
        self.last_processing_time = time

        if self.engine.is_overloaded():
            direction = ScalingDirection.UP
        elif self.engine.is_underloaded():
            direction = ScalingDirection.DOWN
        else:
            self.last_verdict = None
            return None

        self.last_verdict = direction
        current = self.resource_capacity()
        amount = self.resource_scaling.amount_to_scale(self)
        if self.resource_kind == ResourceKind.PE and amount > 0:
            amount = float(max(1, math.floor(amount + 0.5)))

        if direction == ScalingDirection.UP:
            new_capacity = self._bounded(current + amount)
        else:
            new_capacity = self._bounded(current - amount, floor=self._held_amount(current))
        if new_capacity == current:
            return None

        request = ScalingRequest(
            time=time,
            vm_id=vm.vm_id,
            resource_kind=self.resource_kind.value,
            direction=direction.value,
            amount=abs(new_capacity - current),
            current_capacity=current,
            new_capacity=new_capacity,
            signal=self.engine.last_reading.signal,
        )
        self.logger.info(
            f"Vm {vm.vm_id} {self.resource_kind.value} scale {direction.value}: "
            f"{current:.0f} -> {new_capacity:.0f} (signal={request.signal:.2f})"
        )
        return request

    def _bounded(self, capacity: float, floor: float = 0.0) -> float:
        capacity = max(self.min_capacity, floor, capacity)
        if self.max_capacity is not None:
            capacity = min(self.max_capacity, capacity)
        return float(capacity)

    def _held_amount(self, current: float) -> float:
        # RAM and bandwidth never shrink below what running tasks hold
        if self.resource_kind == ResourceKind.PE:
            return 0.0
        return min(current, self.vm.allocated_of(self.resource_kind))

    def _require_vm(self):
        if self.vm is None:
            raise RuntimeError("Scaling is not attached to a Vm")
        return self.vm

    @classmethod
    def from_config(cls, config: Dict,
                    observer: Optional[StatusObserver] = None) -> "VerticalVmScaling":
        """Create a scaling binding from a configuration section.

        Args:
            config: Section with ``resource``, ``scaling_factor``, ``strategy``,
                ``lower_threshold``, ``upper_threshold``, ``min_capacity``,
                ``max_capacity``
            observer: Status line sink

        Returns:
            Unattached scaling binding
        """
        return cls(
            resource_kind=ResourceKind.from_name(config.get('resource', 'pe')),
            scaling_factor=config.get('scaling_factor', 0.1),
            resource_scaling=resource_scaling_from_name(config.get('strategy', 'gradual')),
            lower_threshold=threshold_from_config(config.get('lower_threshold', 0.3)),
            upper_threshold=threshold_from_config(config.get('upper_threshold', 0.8)),
            min_capacity=config.get('min_capacity'),
            max_capacity=config.get('max_capacity'),
            observer=observer,
        )

    def __repr__(self) -> str:
        return (f"VerticalVmScaling({self.resource_kind.value}, factor={self.scaling_factor}, "
                f"vm={getattr(self.vm, 'vm_id', None)})")
