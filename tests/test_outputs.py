import json
import logging

import numpy as np
import pytest

from saint_venant.simulations.checkpoint import CheckpointManager
from saint_venant.simulations.monitor import SimulationMonitor
from saint_venant.simulations.state import (
    SimulationState,
    compute_derived_quantities,
    count_dry_cells,
)
from saint_venant.simulations.writer import SOLUTION_HEADER, SolutionWriter


@pytest.fixture
def solution():
    return np.array([[1.0, 2.0], [4.0, -2.0], [0.0, 0.0]])


def test_derived_quantities(solution):
    derived = compute_derived_quantities(solution, np.array([0.5, 0.0, 1.0]), gravity=4.0)
    np.testing.assert_array_equal(derived.free_surface, [1.5, 4.0, 1.0])
    np.testing.assert_array_equal(derived.velocity[:2], [2.0, -0.5])
    np.testing.assert_allclose(derived.froude[:2], [1.0, 0.125])
    # 水深0のセルは保護しない
    assert np.isnan(derived.velocity[2])
    assert count_dry_cells(solution) == 1


def test_writer_layout(tmp_path, solution):
    writer = SolutionWriter(tmp_path, [0.5, 1.5, 2.5], [0.0, 0.0, 0.0], gravity=4.0)
    wet = np.vstack([solution[:2], [[2.0, 0.0]]])
    path = writer.save_solution(writer.solution_path("HLL", 3), wet)

    assert path.name == "solution_HLL_3.txt"
    lines = path.read_text().splitlines()
    assert lines[0] == SOLUTION_HEADER
    assert lines[1] == "0.5 1 1 2 2 1"
    assert lines[2] == "1.5 4 4 -0.5 -2 0.125"
    assert lines[3] == "2.5 2 2 0 0 0"


def test_writer_warns_on_dry_cells(tmp_path, solution, caplog):
    writer = SolutionWriter(tmp_path, [0.5, 1.5, 2.5], [0.0, 0.0, 0.0], gravity=9.81)
    with caplog.at_level(logging.WARNING):
        path = writer.save_solution(tmp_path / "dry.txt", solution, time=0.5)

    assert any("1" in r.getMessage() and r.levelno == logging.WARNING for r in caplog.records)
    last = path.read_text().splitlines()[-1].split()
    assert last[3] == "nan"


def test_checkpoint_round_trip(tmp_path, solution):
    manager = CheckpointManager(tmp_path)
    for iteration in (10, 200, 30):
        manager.save(SimulationState(solution=solution * iteration, time=iteration * 0.1, iteration=iteration))

    assert manager.latest().name == "checkpoint_000200.npz"
    state = manager.load()
    assert state.iteration == 200
    assert state.time == pytest.approx(20.0)
    np.testing.assert_array_equal(state.solution, solution * 200)


def test_checkpoint_latest_requires_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        CheckpointManager(tmp_path).latest()


def test_state_validation():
    with pytest.raises(ValueError):
        SimulationState(solution=np.zeros((4, 3)), time=0.0, iteration=0).validate()
    with pytest.raises(ValueError):
        SimulationState(solution=np.zeros((4, 2)), time=0.0, iteration=-1).validate()


def test_monitor_report_and_plots(tmp_path):
    monitor = SimulationMonitor(dx=0.5, gravity=9.81)
    solution = np.column_stack([np.ones(4), np.full(4, 0.5)])
    topography = np.zeros(4)
    monitor.update(0.0, solution, topography)
    monitor.update(0.1, solution * 2.0, topography)

    summary = monitor.get_summary()
    assert summary["recorded_steps"] == 2
    assert summary["mass_variation"] == pytest.approx(2.0)
    assert summary["max_velocity"] == pytest.approx(0.5)

    report_path = monitor.generate_report(tmp_path)
    report = json.loads(report_path.read_text())
    assert report["statistics"]["total_mass"] == [2.0, 4.0]

    monitor.plot_history(tmp_path)
    assert (tmp_path / "plots" / "total_mass.png").exists()
    assert (tmp_path / "plots" / "max_froude.png").exists()

    path = monitor.plot_solution(
        tmp_path, np.arange(4) + 0.5, solution, topography, exact=solution
    )
    assert path.exists()


def test_monitor_summary_without_steps():
    assert SimulationMonitor(dx=0.1, gravity=9.81).get_summary() == {"recorded_steps": 0}
