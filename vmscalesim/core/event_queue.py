"""Event queue for the tick-driven scaling simulation."""

import heapq
import itertools
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


class EventType(Enum):
    """Types of events in the simulation."""
    TASK_ARRIVAL = "task_arrival"
    TICK = "tick"
    SIMULATION_END = "simulation_end"


@dataclass(order=True)
class Event:
    """Event in the simulation.

    Attributes:
        time: Event timestamp
        priority: Tie-breaker for equal times (lower = processed first)
        seq: Insertion order, keeps same-time same-priority events FIFO
        event_type: Type of event
        data: Event-specific data
    """
    time: float
    priority: int = field(default=0)
    seq: int = field(default=0)
    event_type: EventType = field(default=EventType.TICK, compare=False)
    data: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.time < 0:
            raise ValueError("Event time cannot be negative")


class EventQueue:
    """Priority queue ordered by time, then priority, then insertion order."""

    def __init__(self):
        self._queue = []
        self._counter = itertools.count()

    def push(self, event: Event) -> None:
        event.seq = next(self._counter)
        heapq.heappush(self._queue, event)

    def pop(self) -> Event:
        """Remove and return the next event.

        Raises:
            IndexError: If queue is empty
        """
        if self.is_empty():
            raise IndexError("Cannot pop from empty event queue")
        return heapq.heappop(self._queue)

    def peek(self) -> Optional[Event]:
        return self._queue[0] if self._queue else None

    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EventQueue(size={len(self._queue)}, next={self.peek()})"
