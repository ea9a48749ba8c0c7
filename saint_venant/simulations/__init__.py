from .config import (
    SimulationConfig,
    MeshConfig,
    TimeConfig,
    PhysicsConfig,
    OutputConfig,
    ProbeConfig,
    LoggingConfig,
)
from .state import SimulationState, DerivedQuantities, compute_derived_quantities
from .probes import ProbeSampler, resolve_probe_indices
from .diagnostics import ErrorReport, compute_l1_error, compute_l2_error, observed_order
from .writer import SolutionWriter
from .checkpoint import CheckpointManager
from .monitor import SimulationMonitor
from .runner import SimulationRunner, RunPhase, RunResult
from .manager import SimulationManager

__all__ = [
    "SimulationConfig",
    "MeshConfig",
    "TimeConfig",
    "PhysicsConfig",
    "OutputConfig",
    "ProbeConfig",
    "LoggingConfig",
    "SimulationState",
    "DerivedQuantities",
    "compute_derived_quantities",
    "ProbeSampler",
    "resolve_probe_indices",
    "ErrorReport",
    "compute_l1_error",
    "compute_l2_error",
    "observed_order",
    "SolutionWriter",
    "CheckpointManager",
    "SimulationMonitor",
    "SimulationRunner",
    "RunPhase",
    "RunResult",
    "SimulationManager",
]
