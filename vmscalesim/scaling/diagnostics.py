"""Status-line observers for the decision engine.

Diagnostics are a side channel: observers receive a snapshot of the VM once
per tick and never influence scaling verdicts.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from dataclasses_json import dataclass_json

from ..utils.logger import setup_logger


@dataclass_json
@dataclass
class StatusLine:
    """VM snapshot reported by the engine."""
    time: float
    vm_id: int
    cpu_percent: float
    number_of_pes: int
    running_tasks: int
    ram_percent: float
    ram_allocated_mb: float

    @classmethod
    def from_vm(cls, vm) -> "StatusLine":
        return cls(
            time=vm.clock,
            vm_id=vm.vm_id,
            cpu_percent=vm.cpu_percent_utilization * 100.0,
            number_of_pes=vm.number_of_pes,
            running_tasks=len(vm.running_tasks),
            ram_percent=vm.ram.percent_utilization * 100.0,
            ram_allocated_mb=vm.ram.allocated_mb,
        )

    def format(self) -> str:
        return (
            f"Time {self.time:6.1f}: Vm {self.vm_id} CPU Usage: {self.cpu_percent:6.2f}% "
            f"({self.number_of_pes:2d} vCPUs. Running Tasks: #{self.running_tasks}). "
            f"RAM usage: {self.ram_percent:.2f}% ({int(self.ram_allocated_mb)} MB)"
        )


class StatusObserver(ABC):
    """Receives engine status lines."""

    @abstractmethod
    def notify(self, line: StatusLine) -> None:
        """Handle one status line."""


class LoggingStatusObserver(StatusObserver):
    """Writes status lines to the project logger."""

    def __init__(self, level: str = "INFO"):
        self.logger = setup_logger(self.__class__.__name__)
        self.level = getattr(logging, level.upper(), logging.INFO)

    def notify(self, line: StatusLine) -> None:
        self.logger.log(self.level, line.format())


class RecordingStatusObserver(StatusObserver):
    """Keeps every status line in memory."""

    def __init__(self):
        self.lines: List[StatusLine] = []

    def notify(self, line: StatusLine) -> None:
        self.lines.append(line)

    def to_records(self) -> List[dict]:
        return [line.to_dict() for line in self.lines]
