"""格子と協調オブジェクトのインターフェース"""

from .interfaces import Geometry, PhysicsModel, FluxProvider
from .mesh import UniformMesh

__all__ = ["Geometry", "PhysicsModel", "FluxProvider", "UniformMesh"]
