"""Strategies computing how much of a resource to add or remove."""

from abc import ABC, abstractmethod


class ResourceScaling(ABC):
    """Computes the amount to scale a resource by, in resource units."""

    @abstractmethod
    def amount_to_scale(self, scaling) -> float:
        """Get the amount to add (up-scaling) or remove (down-scaling).

        Args:
            scaling: VerticalVmScaling binding being processed

        Returns:
            Non-negative amount in the resource's units
        """


class ResourceScalingGradual(ResourceScaling):
    """Scales by a fixed share of the current capacity.

    A scaling factor of 1 doubles the capacity on up-scaling.
    """

    def amount_to_scale(self, scaling) -> float:
        return scaling.resource_capacity() * scaling.scaling_factor


class ResourceScalingInstantaneous(ResourceScaling):
    """Scales by the amount that brings utilization back to the threshold.

    The scaling factor is ignored.
    """

    def amount_to_scale(self, scaling) -> float:
        threshold = scaling.active_threshold()
        if threshold == 0:
            return 0.0

        utilization = scaling.resource_utilization()
        capacity = scaling.resource_capacity()
        return abs(capacity * (utilization - threshold) / threshold)


_STRATEGIES = {
    'gradual': ResourceScalingGradual,
    'instantaneous': ResourceScalingInstantaneous,
}


def resource_scaling_from_name(name: str) -> ResourceScaling:
    """Create a scaling strategy by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return _STRATEGIES[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown resource scaling '{name}', expected one of {sorted(_STRATEGIES)}"
        ) from None
