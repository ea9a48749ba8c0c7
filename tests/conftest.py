import numpy as np
import pytest

from saint_venant.simulations.config import (
    SimulationConfig,
    MeshConfig,
    TimeConfig,
    PhysicsConfig,
    OutputConfig,
    ProbeConfig,
    LoggingConfig,
)


class StubMesh:
    """一様格子のスタブ"""

    def __init__(self, n_cells=10, dx=0.1, xmin=0.0):
        self.n_cells = n_cells
        self.dx = dx
        self.cell_centers = xmin + (np.arange(n_cells) + 0.5) * dx


class StubPhysics:
    """初期条件と生成項を外から与える物理モデルのスタブ"""

    def __init__(self, mesh, initial, source=None, exact=None, gravity=9.81, log=None):
        self.mesh = mesh
        self.gravity = gravity
        self.topography = np.zeros(mesh.n_cells)
        self._initial = np.asarray(initial, dtype=float)
        self._source = source
        self._exact = exact
        self.exact_solution = None
        self.log = log

    def initial_condition(self):
        return self._initial.copy()

    def build_source_term(self, solution):
        if self.log is not None:
            self.log.append(("source", None, np.array(solution)))
        if self._source is None:
            return np.zeros_like(solution)
        return self._source(solution)

    def build_exact_solution(self, time):
        self.exact_solution = (
            self._initial.copy() if self._exact is None else self._exact(time)
        )
        return self.exact_solution


class FunctionFlux:
    """流束ベクトルを関数 f(t, U) で与えるスタブ"""

    scheme_name = "Stub"

    def __init__(self, function, log=None):
        self.function = function
        self.log = log

    def build_flux_vector(self, time, solution):
        if self.log is not None:
            self.log.append(("flux", time, np.array(solution)))
        return self.function(time, solution)


class BufferReusingFlux(FunctionFlux):
    """毎回同じ内部バッファを上書きして返すスタブ"""

    def __init__(self, function, shape):
        super().__init__(function)
        self._buffer = np.zeros(shape)

    def build_flux_vector(self, time, solution):
        self._buffer[...] = self.function(time, solution)
        return self._buffer


def constant_flux(value, dx):
    """右辺が一定値 value になる流束"""
    return FunctionFlux(lambda t, u: np.full(u.shape, value * dx))


def decay_flux(dx, rate=1.0):
    """右辺が -rate * U になる流束（dU/dt = -rate U）"""
    return FunctionFlux(lambda t, u: -rate * dx * np.asarray(u))


def make_config(results_dir, **sections):
    """テスト用の設定を生成（各セクションは辞書で上書き）"""
    defaults = {
        "mesh": {"xmin": 0.0, "xmax": 1.0, "dx": 0.1},
        "time": {"scheme": "RK2", "time_step": 0.1, "initial_time": 0.0, "final_time": 0.45},
        "physics": {},
        "output": {"results_dir": results_dir},
        "probes": {},
        "logging": {"verbosity": 0, "file_logging": False},
    }
    for name, values in sections.items():
        defaults[name] = {**defaults[name], **values}
    return SimulationConfig(
        mesh=MeshConfig(**defaults["mesh"]),
        time=TimeConfig(**defaults["time"]),
        physics=PhysicsConfig(**defaults["physics"]),
        output=OutputConfig(**defaults["output"]),
        probes=ProbeConfig(**defaults["probes"]),
        logging=LoggingConfig(**defaults["logging"]),
    )


@pytest.fixture
def mesh():
    return StubMesh(n_cells=10, dx=0.1)


@pytest.fixture
def lake_state(mesh):
    state = np.zeros((mesh.n_cells, 2))
    state[:, 0] = 1.0
    return state
