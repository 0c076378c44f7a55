"""Virtual machine model observed by the vertical scaling engine."""

from dataclasses import dataclass
from typing import List, Optional

from ..scaling.errors import InvalidVmConfigurationError
from ..scaling.resources import ResourceKind
from ..utils.logger import setup_logger


@dataclass
class Task:
    """A unit of work running inside a VM."""
    task_id: int
    pes: int
    length: float  # million instructions
    submitted_at: float = 0.0
    ram_mb: float = 0.0
    bw: float = 0.0

    # Execution state
    remaining: Optional[float] = None
    start_time: Optional[float] = None
    finish_time: Optional[float] = None

    def __post_init__(self):
        if self.pes < 1:
            raise ValueError(f"Task {self.task_id} must request at least one PE")
        if self.remaining is None:
            self.remaining = float(self.length)

    def is_finished(self) -> bool:
        return self.remaining <= 0.0

    def __repr__(self) -> str:
        return f"Task(id={self.task_id}, pes={self.pes}, remaining={self.remaining:.1f})"


@dataclass
class RamResource:
    """RAM capacity and current allocation of a VM, in MB."""
    capacity_mb: float
    allocated_mb: float = 0.0

    @property
    def percent_utilization(self) -> float:
        """Allocated fraction of the capacity (0-1)."""
        if self.capacity_mb <= 0:
            return 0.0
        return min(1.0, self.allocated_mb / self.capacity_mb)


class Vm:
    """A VM running tasks under a time-shared scheduler.

    Every submitted task runs immediately. When the PEs requested by running
    tasks exceed the VM's PE count, each task gets a proportional share of the
    capacity, so allocated cores may exceed the available ones.
    """

    def __init__(self, vm_id: int, number_of_pes: int, mips: float = 1000.0,
                 ram_mb: float = 4096.0, bandwidth: float = 1000.0):
        """Initialize VM.

        Args:
            vm_id: VM identifier
            number_of_pes: Number of processing elements (cores)
            mips: Capacity of each PE in million instructions per second
            ram_mb: RAM capacity in MB
            bandwidth: Bandwidth capacity in Mbps
        """
        if number_of_pes < 1:
            raise InvalidVmConfigurationError(
                f"Vm {vm_id} must have at least one PE, got {number_of_pes}"
            )

        self.vm_id = vm_id
        self.number_of_pes = int(number_of_pes)
        self.mips = mips
        self.ram = RamResource(capacity_mb=ram_mb)
        self.bandwidth_capacity = bandwidth
        self.logger = setup_logger(self.__class__.__name__)

        self.clock = 0.0
        self.running_tasks: List[Task] = []
        self.finished_tasks: List[Task] = []
        self.cpu_percent_utilization = 0.0

    @property
    def bandwidth_utilization(self) -> float:
        """Fraction of the bandwidth requested by running tasks (0-1)."""
        if self.bandwidth_capacity <= 0:
            return 0.0
        used = sum(task.bw for task in self.running_tasks)
        return min(1.0, used / self.bandwidth_capacity)

    def submit(self, task: Task) -> None:
        """Start running a task at the current clock.

        Args:
            task: Task to run
        """
        task.start_time = self.clock
        self.running_tasks.append(task)
        self._update_ram()
        self.logger.debug(f"Vm {self.vm_id} started {task} at {self.clock:.1f}s")

    def advance(self, now: float) -> List[Task]:
        """Execute running tasks up to the given time.

        Args:
            now: New simulation time

        Returns:
            Tasks finished during this step
        """
        dt = now - self.clock
        if dt <= 0:
            return []

        requested_pes = sum(task.pes for task in self.running_tasks)
        share = 1.0 if requested_pes <= self.number_of_pes else self.number_of_pes / requested_pes

        executed = 0.0
        finished = []
        for task in self.running_tasks:
            work = min(task.remaining, task.pes * self.mips * share * dt)
            task.remaining -= work
            executed += work
            if task.is_finished():
                task.finish_time = now
                finished.append(task)

        self.cpu_percent_utilization = min(1.0, executed / (self.number_of_pes * self.mips * dt))
        self.running_tasks = [task for task in self.running_tasks if not task.is_finished()]
        self.finished_tasks.extend(finished)
        self.clock = now
        self._update_ram()

        return finished

    def capacity_of(self, kind: ResourceKind) -> float:
        """Get the current capacity of a resource."""
        if kind == ResourceKind.PE:
            return float(self.number_of_pes)
        if kind == ResourceKind.RAM:
            return self.ram.capacity_mb
        return self.bandwidth_capacity

    def allocated_of(self, kind: ResourceKind) -> float:
        """Get the amount of a resource held by running tasks.

        RAM and bandwidth are capped at the current capacity; PEs are not,
        since tasks may oversubscribe the cores.
        """
        if kind == ResourceKind.PE:
            return float(sum(task.pes for task in self.running_tasks))
        if kind == ResourceKind.RAM:
            return self.ram.allocated_mb
        return min(self.bandwidth_capacity, sum(task.bw for task in self.running_tasks))

    def resize(self, kind: ResourceKind, new_capacity: float) -> None:
        """Apply a new capacity to a resource.

        Args:
            kind: Resource to resize
            new_capacity: New capacity (PEs are rounded to whole cores)

        Raises:
            InvalidVmConfigurationError: If the PE count would drop below one
                or another resource would drop to zero
        """
        if kind == ResourceKind.PE:
            pes = int(round(new_capacity))
            if pes < 1:
                raise InvalidVmConfigurationError(
                    f"Vm {self.vm_id} cannot be resized to {pes} PEs"
                )
            self.number_of_pes = pes
        elif new_capacity <= 0:
            raise InvalidVmConfigurationError(
                f"Vm {self.vm_id} cannot be resized to {new_capacity} {kind.value}"
            )
        elif kind == ResourceKind.RAM:
            self.ram.capacity_mb = float(new_capacity)
            self._update_ram()
        else:
            self.bandwidth_capacity = float(new_capacity)

        self.logger.debug(f"Vm {self.vm_id} {kind.value} resized to {new_capacity:.2f}")

    def _update_ram(self) -> None:
        self.ram.allocated_mb = min(
            self.ram.capacity_mb, sum(task.ram_mb for task in self.running_tasks)
        )

    def __repr__(self) -> str:
        return f"Vm(id={self.vm_id}, pes={self.number_of_pes}, running={len(self.running_tasks)})"
