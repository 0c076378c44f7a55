"""VM collaborators read by the scaling engine."""

from .vm import Vm, Task, RamResource, InvalidVmConfigurationError

__all__ = ["Vm", "Task", "RamResource", "InvalidVmConfigurationError"]
