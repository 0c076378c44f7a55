"""Tests for the VM model and task workload generation."""

import json
import tempfile
import unittest
from pathlib import Path

from vmscalesim.scaling.errors import InvalidVmConfigurationError
from vmscalesim.scaling.resources import ResourceKind
from vmscalesim.vm.vm import RamResource, Task, Vm
from vmscalesim.workload.arrival_process import ArrivalProcess
from vmscalesim.workload.task_generator import TaskGenerator


class TestVm(unittest.TestCase):
    """Test cases for Vm."""

    def test_rejects_zero_cores(self):
        with self.assertRaises(InvalidVmConfigurationError):
            Vm(vm_id=0, number_of_pes=0)

    def test_task_requires_a_pe(self):
        with self.assertRaises(ValueError):
            Task(task_id=0, pes=0, length=100)

    def test_cpu_utilization_from_executed_work(self):
        vm = Vm(vm_id=0, number_of_pes=4, mips=1000)
        vm.submit(Task(task_id=0, pes=2, length=10000))

        finished = vm.advance(1.0)

        self.assertEqual(finished, [])
        self.assertAlmostEqual(vm.cpu_percent_utilization, 0.5)
        self.assertAlmostEqual(vm.running_tasks[0].remaining, 8000)
        self.assertEqual(vm.clock, 1.0)

    def test_oversubscribed_tasks_share_capacity(self):
        vm = Vm(vm_id=0, number_of_pes=2, mips=1000)
        for i in range(4):
            vm.submit(Task(task_id=i, pes=1, length=10000))

        vm.advance(1.0)

        self.assertAlmostEqual(vm.cpu_percent_utilization, 1.0)
        for task in vm.running_tasks:
            self.assertAlmostEqual(task.remaining, 9500)

    def test_finished_tasks_leave_the_vm(self):
        vm = Vm(vm_id=0, number_of_pes=4, mips=1000)
        vm.submit(Task(task_id=0, pes=1, length=500))
        vm.submit(Task(task_id=1, pes=1, length=5000))

        finished = vm.advance(1.0)

        self.assertEqual([task.task_id for task in finished], [0])
        self.assertEqual(finished[0].finish_time, 1.0)
        self.assertEqual(len(vm.running_tasks), 1)
        self.assertAlmostEqual(vm.cpu_percent_utilization, 1500 / 4000)

    def test_advance_backwards_is_a_no_op(self):
        vm = Vm(vm_id=0, number_of_pes=1)
        vm.advance(2.0)
        self.assertEqual(vm.advance(1.0), [])
        self.assertEqual(vm.clock, 2.0)

    def test_ram_follows_running_tasks(self):
        vm = Vm(vm_id=0, number_of_pes=2, ram_mb=1024)
        vm.submit(Task(task_id=0, pes=1, length=500, ram_mb=256))
        self.assertAlmostEqual(vm.ram.percent_utilization, 0.25)

        vm.advance(1.0)
        self.assertEqual(vm.ram.allocated_mb, 0)

    def test_resize(self):
        vm = Vm(vm_id=0, number_of_pes=2, ram_mb=1024, bandwidth=100)

        vm.resize(ResourceKind.PE, 3.6)
        vm.resize(ResourceKind.RAM, 2048)
        vm.resize(ResourceKind.BANDWIDTH, 50)

        self.assertEqual(vm.number_of_pes, 4)
        self.assertEqual(vm.capacity_of(ResourceKind.RAM), 2048)
        self.assertEqual(vm.capacity_of(ResourceKind.BANDWIDTH), 50)

        with self.assertRaises(InvalidVmConfigurationError):
            vm.resize(ResourceKind.PE, 0.2)

    def test_resize_rejects_empty_ram_and_bandwidth(self):
        vm = Vm(vm_id=0, number_of_pes=2, ram_mb=1024, bandwidth=100)

        with self.assertRaises(InvalidVmConfigurationError):
            vm.resize(ResourceKind.RAM, 0)
        with self.assertRaises(InvalidVmConfigurationError):
            vm.resize(ResourceKind.BANDWIDTH, -5)
        self.assertEqual(vm.capacity_of(ResourceKind.RAM), 1024)
        self.assertEqual(vm.capacity_of(ResourceKind.BANDWIDTH), 100)

    def test_ram_resize_reclamps_allocation(self):
        vm = Vm(vm_id=0, number_of_pes=2, ram_mb=1024, bandwidth=100)
        vm.submit(Task(task_id=0, pes=1, length=5000, ram_mb=800, bw=30))

        vm.resize(ResourceKind.RAM, 512)
        self.assertEqual(vm.ram.allocated_mb, 512)
        self.assertEqual(vm.allocated_of(ResourceKind.RAM), 512)

        vm.resize(ResourceKind.RAM, 2048)
        self.assertEqual(vm.ram.allocated_mb, 800)
        self.assertEqual(vm.allocated_of(ResourceKind.BANDWIDTH), 30)
        self.assertEqual(vm.allocated_of(ResourceKind.PE), 1.0)

    def test_empty_ram_resource(self):
        self.assertEqual(RamResource(capacity_mb=0).percent_utilization, 0.0)


class TestTaskGenerator(unittest.TestCase):
    """Test cases for TaskGenerator."""

    def test_uniform_arrivals(self):
        generator = TaskGenerator({
            'type': 'uniform',
            'arrival_rate': 1.0,
            'pes': [2],
            'length': {'distribution': 'constant', 'mean': 5000},
            'ram_per_pe_mb': 100,
        })

        tasks = generator.generate(0.0, 10.0)

        self.assertEqual(len(tasks), 10)
        self.assertEqual([t.task_id for t in tasks], list(range(10)))
        self.assertTrue(all(t.pes == 2 and t.length == 5000 for t in tasks))
        self.assertEqual(tasks[0].ram_mb, 200)

    def test_seeded_poisson_is_reproducible(self):
        config = {'type': 'poisson', 'arrival_rate': 2.0, 'seed': 3}

        first = TaskGenerator(config).generate(0.0, 30.0)
        second = TaskGenerator(config).generate(0.0, 30.0)

        self.assertGreater(len(first), 0)
        self.assertEqual([t.submitted_at for t in first], [t.submitted_at for t in second])
        self.assertTrue(all(1000 <= t.length <= 200000 for t in first))

    def test_burst_pattern_leaves_idle_gaps(self):
        generator = TaskGenerator({
            'type': 'burst', 'arrival_rate': 1.0, 'seed': 1,
            'burst_duration': 10, 'idle_duration': 20,
        })

        tasks = generator.generate(0.0, 60.0)

        self.assertTrue(all(not 10 <= t.submitted_at < 30 for t in tasks))

    def test_max_tasks(self):
        generator = TaskGenerator({'type': 'uniform', 'arrival_rate': 1.0, 'max_tasks': 3})
        self.assertEqual(len(generator.generate(0.0, 10.0)), 3)

    def test_trace_replay(self):
        with tempfile.TemporaryDirectory() as tmp:
            trace_path = Path(tmp) / "trace.json"
            trace_path.write_text(json.dumps([
                {'arrival_time': 5.0, 'pes': 2, 'length': 1000},
                {'arrival_time': 1.0, 'pes': 1, 'length': 2000, 'ram_mb': 64},
                {'arrival_time': 50.0, 'pes': 1, 'length': 2000},
            ]))

            tasks = TaskGenerator({'type': 'trace', 'trace_path': str(trace_path)}).generate(0.0, 10.0)

        self.assertEqual([t.submitted_at for t in tasks], [1.0, 5.0])
        self.assertEqual(tasks[0].ram_mb, 64)
        self.assertEqual(tasks[1].pes, 2)

    def test_invalid_config(self):
        with self.assertRaises(ValueError):
            TaskGenerator({'type': 'trace'}).generate(0.0, 10.0)
        with self.assertRaises(ValueError):
            TaskGenerator({'type': 'diurnal'}).generate(0.0, 10.0)
        with self.assertRaises(ValueError):
            ArrivalProcess('poisson', rate=0.0)


if __name__ == '__main__':
    unittest.main()
