"""Tests for the overload/underload decision engine."""

import unittest
from types import SimpleNamespace

from vmscalesim.scaling.decision_engine import (
    SmoothingState, VerticalScalingEngine, compute_signal, core_fraction, evaluate
)
from vmscalesim.scaling.diagnostics import RecordingStatusObserver
from vmscalesim.scaling.errors import InvalidVmConfigurationError


def make_vm(pes=4, task_pes=(), cpu=0.0, clock=0.0):
    """Build a minimal VM snapshot exposing what the engine reads."""
    return SimpleNamespace(
        vm_id=7,
        number_of_pes=pes,
        running_tasks=[SimpleNamespace(pes=p) for p in task_pes],
        cpu_percent_utilization=cpu,
        clock=clock,
        ram=SimpleNamespace(percent_utilization=0.25, allocated_mb=1024),
    )


class TestCoreFraction(unittest.TestCase):
    """Test cases for core_fraction."""

    def test_fraction_of_allocated_cores(self):
        vm = make_vm(pes=4, task_pes=(1, 1))
        self.assertAlmostEqual(core_fraction(vm), 0.5)

    def test_clamped_when_oversubscribed(self):
        vm = make_vm(pes=2, task_pes=(2, 2, 1))
        self.assertEqual(core_fraction(vm), 1.0)

    def test_zero_without_tasks(self):
        self.assertEqual(core_fraction(make_vm(pes=4)), 0.0)

    def test_zero_cores_is_rejected(self):
        vm = make_vm(pes=0, task_pes=(1,))
        with self.assertRaises(InvalidVmConfigurationError):
            core_fraction(vm)

    def test_engine_delegates(self):
        vm = make_vm(pes=4, task_pes=(3,))
        engine = VerticalScalingEngine(vm, 0.3, 0.8)
        self.assertAlmostEqual(engine.core_fraction(), 0.75)


class TestSignal(unittest.TestCase):
    """Test cases for signal computation and state commits."""

    def test_initial_state(self):
        state = SmoothingState()
        self.assertEqual(state.last_utilization, 1.0)
        self.assertEqual(state.last_core_fraction, 1.0)
        self.assertEqual(state.last_observed_tick, 0)

    def test_zero_core_fraction_baseline_is_guarded(self):
        state = SmoothingState(last_utilization=0.9, last_core_fraction=0.0)
        self.assertEqual(compute_signal(state, 0.5), 0.0)

    def test_evaluate_with_zero_baseline_does_not_fail(self):
        state = SmoothingState(last_utilization=0.9, last_core_fraction=0.0)
        reading = evaluate(state, make_vm(pes=4, task_pes=(2,), cpu=0.4))

        self.assertEqual(reading.signal, 0.0)
        self.assertTrue(reading.committed)
        self.assertAlmostEqual(state.last_core_fraction, 0.5)

    def test_signal_uses_state_before_commit(self):
        state = SmoothingState(last_utilization=0.6, last_core_fraction=0.5)
        reading = evaluate(state, make_vm(pes=4, task_pes=(1, 1, 1, 1), cpu=0.9))

        self.assertAlmostEqual(reading.signal, 1.2)
        self.assertAlmostEqual(state.last_utilization, 0.9)
        self.assertAlmostEqual(state.last_core_fraction, 1.0)

    def test_zero_cpu_carries_state_forward(self):
        state = SmoothingState(last_utilization=0.6, last_core_fraction=0.5)
        reading = evaluate(state, make_vm(pes=4, task_pes=(1,), cpu=0.0))

        self.assertFalse(reading.committed)
        self.assertEqual(state.last_utilization, 0.6)
        self.assertEqual(state.last_core_fraction, 0.5)
        # Prior baseline with the current core fraction
        self.assertAlmostEqual(reading.signal, 0.6 * (0.25 / 0.5))

    def test_no_tasks_carries_state_forward(self):
        state = SmoothingState(last_utilization=0.7, last_core_fraction=0.5)
        reading = evaluate(state, make_vm(pes=4, cpu=0.3))

        self.assertFalse(reading.committed)
        self.assertEqual(reading.signal, 0.0)
        self.assertEqual(state.last_utilization, 0.7)
        self.assertEqual(state.last_core_fraction, 0.5)


class TestVerticalScalingEngine(unittest.TestCase):
    """Test cases for VerticalScalingEngine verdicts."""

    def test_scenarios_a_and_b(self):
        vm = make_vm(pes=4, task_pes=(1, 1), cpu=0.6, clock=1.0)
        engine = VerticalScalingEngine(vm, lower_threshold=0.3, upper_threshold=0.8)

        # Tick 1 commits the observation
        engine.is_overloaded()
        self.assertAlmostEqual(engine.state.last_utilization, 0.6)
        self.assertAlmostEqual(engine.state.last_core_fraction, 0.5)

        # Tick 2, same occupancy
        vm.clock = 2.0
        self.assertFalse(engine.is_overloaded())
        self.assertAlmostEqual(engine.last_reading.signal, 0.6)

        # Tick 3, occupancy doubles
        vm.clock = 3.0
        vm.running_tasks = [SimpleNamespace(pes=1) for _ in range(4)]
        self.assertTrue(engine.is_overloaded())
        self.assertAlmostEqual(engine.last_reading.signal, 1.2)

    def test_scenario_c_idle_vm(self):
        vm = make_vm(pes=4, cpu=0.0)
        engine = VerticalScalingEngine(vm, lower_threshold=0.3, upper_threshold=0.8)

        self.assertFalse(engine.is_underloaded())
        self.assertEqual(engine.core_fraction(), 0.0)

    def test_idle_guard_ignores_signal(self):
        vm = make_vm(pes=4, cpu=0.5)
        # A lower threshold of 1.0 would flag any working VM
        engine = VerticalScalingEngine(vm, lower_threshold=1.0, upper_threshold=1.0)

        self.assertFalse(engine.is_underloaded())
        self.assertEqual(engine.last_reading.signal, 0.0)

    def test_underloaded_with_running_tasks(self):
        vm = make_vm(pes=8, task_pes=(1,), cpu=0.1)
        engine = VerticalScalingEngine(vm, lower_threshold=0.3, upper_threshold=0.8)

        self.assertTrue(engine.is_underloaded())

    def test_both_verdicts_share_state(self):
        vm = make_vm(pes=4, task_pes=(1, 1), cpu=0.6)
        engine = VerticalScalingEngine(vm, lower_threshold=0.3, upper_threshold=0.8)

        engine.is_overloaded()
        state_after_overload = (engine.state.last_utilization, engine.state.last_core_fraction)
        engine.is_underloaded()

        self.assertEqual(
            (engine.state.last_utilization, engine.state.last_core_fraction),
            state_after_overload
        )
        self.assertAlmostEqual(engine.last_reading.signal, 0.6)

    def test_threshold_monotonicity(self):
        vm = make_vm(pes=4, task_pes=(1, 1), cpu=0.6)
        baseline = SmoothingState(last_utilization=0.6, last_core_fraction=0.5)

        def overloaded(upper):
            state = SmoothingState(**vars(baseline))
            return VerticalScalingEngine(vm, 0.0, upper, state=state).is_overloaded()

        def underloaded(lower):
            state = SmoothingState(**vars(baseline))
            return VerticalScalingEngine(vm, lower, 1.0, state=state).is_underloaded()

        uppers = [0.1, 0.3, 0.5, 0.59, 0.61, 0.8, 1.0]
        over = [overloaded(u) for u in uppers]
        self.assertEqual(over, sorted(over, reverse=True))
        self.assertTrue(over[0])
        self.assertFalse(over[-1])

        lowers = [1.0, 0.8, 0.61, 0.59, 0.3, 0.0]
        under = [underloaded(low) for low in lowers]
        self.assertEqual(under, sorted(under, reverse=True))
        self.assertTrue(under[0])
        self.assertFalse(under[-1])

    def test_callable_thresholds(self):
        vm = make_vm(pes=4, task_pes=(1, 1, 1, 1), cpu=0.9)
        engine = VerticalScalingEngine(
            vm,
            lower_threshold=lambda v: 0.1,
            upper_threshold=lambda v: 0.2 * v.number_of_pes,
        )
        self.assertTrue(engine.is_overloaded())

    def test_zero_core_vm_fails_loudly(self):
        engine = VerticalScalingEngine(make_vm(pes=0, task_pes=(1,), cpu=0.5), 0.3, 0.8)
        with self.assertRaises(InvalidVmConfigurationError):
            engine.is_overloaded()


class TestEngineDiagnostics(unittest.TestCase):
    """Test cases for status line emission."""

    def test_one_line_per_tick(self):
        vm = make_vm(pes=4, task_pes=(1,), cpu=0.5, clock=1.0)
        observer = RecordingStatusObserver()
        engine = VerticalScalingEngine(vm, 0.3, 0.8, observer=observer)

        engine.is_overloaded()
        engine.is_underloaded()
        vm.clock = 1.5
        engine.is_overloaded()
        self.assertEqual(len(observer.lines), 1)

        vm.clock = 2.0
        engine.is_underloaded()
        self.assertEqual(len(observer.lines), 2)
        self.assertEqual(engine.state.last_observed_tick, 2)

        line = observer.lines[0]
        self.assertEqual(line.vm_id, 7)
        self.assertEqual(line.running_tasks, 1)
        self.assertAlmostEqual(line.cpu_percent, 50.0)
        self.assertIn("Vm 7 CPU Usage:  50.00%", line.format())
        self.assertEqual(observer.to_records()[0]['number_of_pes'], 4)

    def test_diagnostics_do_not_change_verdicts(self):
        samples = [(0.6, (1, 1)), (0.0, (1,)), (0.9, (1, 1, 1, 1)), (0.2, (1,))]

        def run(observer):
            vm = make_vm(pes=4)
            engine = VerticalScalingEngine(vm, 0.3, 0.8, observer=observer)
            verdicts = []
            for tick, (cpu, task_pes) in enumerate(samples, start=1):
                vm.clock = float(tick)
                vm.cpu_percent_utilization = cpu
                vm.running_tasks = [SimpleNamespace(pes=p) for p in task_pes]
                verdicts.append((engine.is_overloaded(), engine.is_underloaded()))
            return verdicts, (engine.state.last_utilization, engine.state.last_core_fraction)

        self.assertEqual(run(None), run(RecordingStatusObserver()))


if __name__ == '__main__':
    unittest.main()
