"""Workload generation and trace replay."""

from .task_generator import TaskGenerator
from .arrival_process import ArrivalProcess

__all__ = ["TaskGenerator", "ArrivalProcess"]
