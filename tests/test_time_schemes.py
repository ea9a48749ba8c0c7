import numpy as np
import pytest

from saint_venant.numerics.time_evolution import (
    ExplicitEuler,
    RK2,
    RungeKutta4,
    create_scheme,
)
from saint_venant.simulations.diagnostics import observed_order

from conftest import (
    StubMesh,
    StubPhysics,
    FunctionFlux,
    BufferReusingFlux,
    constant_flux,
    decay_flux,
    make_config,
)

SCHEME_CLASSES = [ExplicitEuler, RK2, RungeKutta4]


def _initialized(scheme_cls, tmp_path, flux, physics, mesh, **time):
    config = make_config(tmp_path, time=time)
    scheme = scheme_cls()
    scheme.initialize(config, mesh, physics, flux)
    return scheme


def _decay_error(scheme_cls, tmp_path, dt, final_time=1.0):
    """dU/dt = -U を時刻 final_time まで解いたときの誤差"""
    mesh = StubMesh(n_cells=3, dx=0.1)
    initial = np.ones((3, 2))
    scheme = _initialized(
        scheme_cls,
        tmp_path,
        decay_flux(mesh.dx),
        StubPhysics(mesh, initial),
        mesh,
        time_step=dt,
        final_time=final_time,
    )
    for _ in range(int(round(final_time / dt))):
        scheme.step()
        scheme.advance_time()
    return float(np.max(np.abs(scheme.solution - np.exp(-final_time))))


@pytest.mark.parametrize("scheme_cls", SCHEME_CLASSES)
def test_zero_rhs_is_fixed_point(scheme_cls, tmp_path, mesh, lake_state):
    scheme = _initialized(
        scheme_cls, tmp_path, constant_flux(0.0, mesh.dx), StubPhysics(mesh, lake_state), mesh
    )
    for _ in range(5):
        scheme.step()
        scheme.advance_time()
    np.testing.assert_array_equal(scheme.solution, lake_state)


@pytest.mark.parametrize("scheme_cls", SCHEME_CLASSES)
def test_constant_rhs_is_integrated_exactly(scheme_cls, tmp_path, mesh, lake_state):
    rate = 0.25
    dt = 0.1
    scheme = _initialized(
        scheme_cls,
        tmp_path,
        constant_flux(rate, mesh.dx),
        StubPhysics(mesh, lake_state),
        mesh,
        time_step=dt,
    )
    for k in range(1, 6):
        scheme.step()
        scheme.advance_time()
        np.testing.assert_allclose(scheme.solution, lake_state + k * dt * rate)


def test_source_term_adds_to_flux(tmp_path, mesh, lake_state):
    # 右辺 = 流束/dx + 生成項 = 0.5 + 0.25
    physics = StubPhysics(mesh, lake_state, source=lambda u: np.full(u.shape, 0.25))
    scheme = _initialized(
        ExplicitEuler, tmp_path, constant_flux(0.5, mesh.dx), physics, mesh, time_step=0.1
    )
    scheme.step()
    np.testing.assert_allclose(scheme.solution, lake_state + 0.1 * 0.75)


def test_explicit_euler_is_first_order(tmp_path):
    coarse = _decay_error(ExplicitEuler, tmp_path, 0.1)
    fine = _decay_error(ExplicitEuler, tmp_path, 0.05)
    assert abs(observed_order(coarse, fine) - 1.0) < 0.15


def test_rk2_is_second_order(tmp_path):
    coarse = _decay_error(RK2, tmp_path, 0.1)
    fine = _decay_error(RK2, tmp_path, 0.05)
    assert abs(observed_order(coarse, fine) - 2.0) < 0.2


def test_rk4_is_more_accurate_than_rk2(tmp_path):
    assert _decay_error(RungeKutta4, tmp_path, 0.1) < _decay_error(RK2, tmp_path, 0.1)


def test_rk2_second_stage_uses_trial_state(tmp_path, mesh, lake_state):
    log = []
    dt = 0.1
    rate = 2.0
    flux = FunctionFlux(lambda t, u: np.full(u.shape, rate * mesh.dx), log=log)
    physics = StubPhysics(mesh, lake_state, log=log)
    scheme = _initialized(
        RK2, tmp_path, flux, physics, mesh, time_step=dt, initial_time=0.5, final_time=1.0
    )
    scheme.step()

    kinds = [entry[0] for entry in log]
    assert kinds == ["flux", "source", "source", "flux"]

    # 第1段は時刻 t、第2段の流束は t + dt
    assert log[0][1] == pytest.approx(0.5)
    assert log[3][1] == pytest.approx(0.5 + dt)

    # 第2段の生成項と流束は同じ試行状態を見る
    trial = lake_state + dt * rate
    np.testing.assert_array_equal(log[2][2], log[3][2])
    np.testing.assert_allclose(log[3][2], trial)


def test_step_does_not_advance_clock(tmp_path, mesh, lake_state):
    scheme = _initialized(
        RK2, tmp_path, constant_flux(0.0, mesh.dx), StubPhysics(mesh, lake_state), mesh,
        time_step=0.1,
    )
    scheme.step()
    assert scheme.current_time == 0.0
    assert scheme.step_count == 1
    assert scheme.advance_time() == pytest.approx(0.1)


@pytest.mark.parametrize("scheme_cls", SCHEME_CLASSES)
def test_buffer_reusing_provider_gives_same_result(scheme_cls, tmp_path, mesh):
    initial = np.column_stack([np.linspace(1.0, 2.0, mesh.n_cells), np.zeros(mesh.n_cells)])
    function = lambda t, u: -mesh.dx * np.asarray(u)  # noqa: E731

    results = []
    for flux in (FunctionFlux(function), BufferReusingFlux(function, initial.shape)):
        scheme = _initialized(
            scheme_cls, tmp_path, flux, StubPhysics(mesh, initial), mesh, time_step=0.1
        )
        for _ in range(3):
            scheme.step()
            scheme.advance_time()
        results.append(np.array(scheme.solution))

    np.testing.assert_array_equal(results[0], results[1])


def test_initial_condition_is_copied(tmp_path, mesh, lake_state):
    physics = StubPhysics(mesh, lake_state)
    scheme = _initialized(ExplicitEuler, tmp_path, constant_flux(1.0, mesh.dx), physics, mesh)
    scheme.step()
    np.testing.assert_array_equal(physics.initial_condition(), lake_state)


def test_provider_cannot_modify_state(tmp_path, mesh, lake_state):
    def mutate(t, u):
        u[0, 0] = -1.0
        return np.zeros(u.shape)

    scheme = _initialized(ExplicitEuler, tmp_path, FunctionFlux(mutate), StubPhysics(mesh, lake_state), mesh)
    with pytest.raises(ValueError):
        scheme.step()


def test_initialize_rejects_wrong_shape(tmp_path, mesh):
    physics = StubPhysics(mesh, np.ones((mesh.n_cells + 1, 2)))
    with pytest.raises(ValueError):
        _initialized(RK2, tmp_path, constant_flux(0.0, mesh.dx), physics, mesh)


@pytest.mark.parametrize(
    "time",
    [
        {"time_step": 0.0},
        {"time_step": -0.1},
        {"initial_time": 1.0, "final_time": 0.5},
    ],
)
def test_initialize_rejects_invalid_time_parameters(time, tmp_path, mesh, lake_state):
    with pytest.raises(ValueError):
        _initialized(
            RK2, tmp_path, constant_flux(0.0, mesh.dx), StubPhysics(mesh, lake_state), mesh, **time
        )


def test_initialize_rejects_non_positive_dx(tmp_path, lake_state):
    mesh = StubMesh(n_cells=10, dx=0.0)
    with pytest.raises(ValueError):
        _initialized(RK2, tmp_path, constant_flux(0.0, 1.0), StubPhysics(mesh, lake_state), mesh)


def test_step_before_initialize_raises():
    with pytest.raises(RuntimeError):
        RK2().step()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("ExplicitEuler", ExplicitEuler),
        ("euler", ExplicitEuler),
        ("RK2", RK2),
        ("rk4", RungeKutta4),
    ],
)
def test_create_scheme(name, expected):
    scheme = create_scheme(name)
    assert isinstance(scheme, expected)


def test_create_scheme_rejects_unknown_name():
    with pytest.raises(ValueError):
        create_scheme("Crank-Nicolson")


def test_diagnostics(tmp_path, mesh, lake_state):
    scheme = _initialized(
        RK2, tmp_path, constant_flux(1.0, mesh.dx), StubPhysics(mesh, lake_state), mesh,
        time_step=0.1,
    )
    scheme.step()
    diagnostics = scheme.get_diagnostics()
    assert diagnostics["method"] == "RK2"
    assert diagnostics["order"] == 2
    assert diagnostics["step_count"] == 1
    assert diagnostics["max_increment"] == pytest.approx(0.1)
    assert diagnostics["elapsed_time"] >= 0.0
