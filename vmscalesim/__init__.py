"""VMScaleSim: vertical VM scaling decision engine and simulator."""

from .core.simulator import Simulator
from .core.event_queue import Event, EventType, EventQueue
from .core.metrics_collector import MetricsCollector
from .scaling.decision_engine import VerticalScalingEngine, SmoothingState, core_fraction
from .scaling.errors import InvalidVmConfigurationError
from .scaling.resources import ResourceKind
from .scaling.vertical_scaling import VerticalVmScaling, ScalingRequest
from .vm.vm import Vm, Task
from .utils.logger import setup_logger

__version__ = "0.1.0"
__all__ = [
    "Simulator",
    "Event",
    "EventType",
    "EventQueue",
    "MetricsCollector",
    "VerticalScalingEngine",
    "SmoothingState",
    "core_fraction",
    "InvalidVmConfigurationError",
    "ResourceKind",
    "VerticalVmScaling",
    "ScalingRequest",
    "Vm",
    "Task",
    "setup_logger",
]
