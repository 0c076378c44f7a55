"""Vertical scaling decision components."""

from .decision_engine import (
    SmoothingState, SignalReading, VerticalScalingEngine,
    core_fraction, compute_signal, evaluate,
)
from .diagnostics import StatusLine, StatusObserver, LoggingStatusObserver, RecordingStatusObserver
from .errors import InvalidVmConfigurationError
from .resource_scaling import (
    ResourceScaling, ResourceScalingGradual, ResourceScalingInstantaneous,
    resource_scaling_from_name,
)
from .resources import ResourceKind
from .thresholds import (
    ThresholdFunction, FixedThreshold, CallableThreshold, CoreScaledThreshold,
    as_threshold, threshold_from_config, validate_threshold_pair,
)
from .vertical_scaling import VerticalVmScaling, ScalingRequest, ScalingDirection

__all__ = [
    "SmoothingState",
    "SignalReading",
    "VerticalScalingEngine",
    "core_fraction",
    "compute_signal",
    "evaluate",
    "StatusLine",
    "StatusObserver",
    "LoggingStatusObserver",
    "RecordingStatusObserver",
    "InvalidVmConfigurationError",
    "ResourceScaling",
    "ResourceScalingGradual",
    "ResourceScalingInstantaneous",
    "resource_scaling_from_name",
    "ResourceKind",
    "ThresholdFunction",
    "FixedThreshold",
    "CallableThreshold",
    "CoreScaledThreshold",
    "as_threshold",
    "threshold_from_config",
    "validate_threshold_pair",
    "VerticalVmScaling",
    "ScalingRequest",
    "ScalingDirection",
]
