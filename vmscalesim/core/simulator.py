"""Tick-driven simulation of a VM under vertical scaling."""

import time
from typing import Dict, List, Optional

import numpy as np
from tqdm import tqdm

from .event_queue import Event, EventType, EventQueue
from .metrics_collector import MetricsCollector
from ..scaling.diagnostics import LoggingStatusObserver, StatusObserver
from ..scaling.vertical_scaling import VerticalVmScaling
from ..vm.vm import Task, Vm
from ..workload.task_generator import TaskGenerator
from ..utils.logger import setup_logger


class Simulator:
    """Runs a single VM through a workload while its scalings resize it.

    At every tick the simulator:
    - advances task execution on the VM
    - starts the tasks that arrived since the previous tick
    - asks every scaling binding for a request and applies it
    - records the VM state and the engine signal
    """

    def __init__(self, config: Dict, observer: Optional[StatusObserver] = None):
        """Initialize simulator.

        Args:
            config: Simulation configuration dictionary
            observer: Status line sink overriding the ``diagnostics`` section
        """
        self.config = config
        self.logger = setup_logger(self.__class__.__name__)

        sim_config = config.get('simulation', {})
        self.duration = sim_config.get('duration', 600.0)
        self.tick_interval = sim_config.get('tick_interval', 1.0)
        self.show_progress = sim_config.get('show_progress', False)
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")

        self.rng = np.random.default_rng(sim_config.get('random_seed', 42))
        self.current_time = 0.0
        self.event_queue = EventQueue()
        self.metrics_collector = MetricsCollector(config)

        vm_config = config.get('vm', {})
        self.vm = Vm(
            vm_id=vm_config.get('id', 0),
            number_of_pes=vm_config.get('pes', 2),
            mips=vm_config.get('mips', 1000.0),
            ram_mb=vm_config.get('ram_mb', 4096.0),
            bandwidth=vm_config.get('bandwidth', 1000.0),
        )

        if observer is None:
            diagnostics = config.get('diagnostics', {})
            if diagnostics.get('enabled', True):
                observer = LoggingStatusObserver(diagnostics.get('level', 'INFO'))
        self.observer = observer

        self.scalings: List[VerticalVmScaling] = []
        # One status line per tick: only the first binding reports
        for index, scaling_config in enumerate(config.get('scaling', [])):
            scaling = VerticalVmScaling.from_config(
                scaling_config, observer=self.observer if index == 0 else None
            )
            scaling.attach(self.vm)
            self.scalings.append(scaling)

        self.task_generator = TaskGenerator(config.get('workload', {}), rng=self.rng)
        self.pending_tasks: List[Task] = []
        self.total_tasks = 0

        self.logger.info("Simulator initialized")
        self.logger.info(f"Vm {self.vm.vm_id}: {self.vm.number_of_pes} PEs, "
                         f"{len(self.scalings)} scaling binding(s)")

    def run(self) -> Dict:
        """Run the simulation.

        Returns:
            Dictionary containing simulation results and metrics
        """
        start_time = time.time()
        self.logger.info("Starting simulation...")

        self._initialize()
        num_ticks = int(np.floor(self.duration / self.tick_interval))

        with tqdm(total=num_ticks, desc="ticks", disable=not self.show_progress) as progress:
            while not self.event_queue.is_empty():
                event = self.event_queue.pop()
                self.current_time = event.time

                if event.event_type == EventType.SIMULATION_END:
                    break

                if event.event_type == EventType.TASK_ARRIVAL:
                    self.pending_tasks.append(event.data['task'])
                elif event.event_type == EventType.TICK:
                    self._handle_tick()
                    progress.update(1)

        results = self._finalize()

        elapsed_time = time.time() - start_time
        self.logger.info(f"Simulation completed in {elapsed_time:.2f}s")

        return results

    def _initialize(self) -> None:
        self.event_queue.push(Event(
            time=self.duration,
            event_type=EventType.SIMULATION_END,
            priority=999
        ))

        for t in np.arange(self.tick_interval, self.duration + 1e-9, self.tick_interval):
            self.event_queue.push(Event(
                time=float(t),
                event_type=EventType.TICK,
                priority=10
            ))

        tasks = self.task_generator.generate(start_time=0.0, end_time=self.duration)
        self.total_tasks = len(tasks)
        for task in tasks:
            self.event_queue.push(Event(
                time=task.submitted_at,
                event_type=EventType.TASK_ARRIVAL,
                data={'task': task},
                priority=0
            ))

    def _handle_tick(self) -> None:
        """Advance the VM, start arrived tasks, then apply scaling."""
        for task in self.vm.advance(self.current_time):
            self.metrics_collector.record_task_completion(task)

        for task in self.pending_tasks:
            self.vm.submit(task)
        self.pending_tasks = []

        for scaling in self.scalings:
            request = scaling.request_scaling_if_predicate_matches(self.current_time)
            if request is not None:
                self.vm.resize(scaling.resource_kind, request.new_capacity)
                self.metrics_collector.record_scaling(request.to_dict())

        self.metrics_collector.record_tick(self.current_time, self._sample())

    def _sample(self) -> Dict:
        sample = {
            'cpu_utilization': self.vm.cpu_percent_utilization,
            'number_of_pes': self.vm.number_of_pes,
            'running_tasks': len(self.vm.running_tasks),
            'ram_utilization': self.vm.ram.percent_utilization,
        }
        if self.scalings:
            engine = self.scalings[0].engine
            reading = engine.last_reading
            sample['core_fraction'] = engine.core_fraction()
            sample['signal'] = reading.signal if reading is not None else 0.0
            sample['verdict'] = (self.scalings[0].last_verdict.value
                                 if self.scalings[0].last_verdict is not None else 'stable')
        return sample

    def _finalize(self) -> Dict:
        """Compute results once the simulation has ended."""
        self.logger.info("Finalizing simulation...")
        metrics = self.metrics_collector.compute_metrics()

        return {
            'total_tasks': self.total_tasks,
            **metrics,
            'final_pes': self.vm.number_of_pes,
            'final_ram_mb': self.vm.ram.capacity_mb,
            'final_bandwidth': self.vm.bandwidth_capacity,
            'running_tasks_at_end': len(self.vm.running_tasks),
            'scaling_events': list(self.metrics_collector.scaling_events),
            'simulation_duration': self.duration,
        }
