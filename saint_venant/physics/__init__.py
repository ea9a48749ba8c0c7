"""浅水方程式の物理モデルと数値流束"""

from .shallow_water import ShallowWaterPhysics
from .flux import FiniteVolumeFlux, RusanovFlux, HLLFlux, create_flux

__all__ = [
    "ShallowWaterPhysics",
    "FiniteVolumeFlux",
    "RusanovFlux",
    "HLLFlux",
    "create_flux",
]
