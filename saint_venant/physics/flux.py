"""有限体積法の数値流束を提供するモジュール

状態の両端に仮想セルを付け加え、各セル境界の数値流束を計算したうえで、
各セルの正味の流束 F_{i-1/2} - F_{i+1/2} を返します。
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np

from saint_venant.core.interfaces import Geometry

# これ未満の水深は乾燥セルとして扱う
DRY_THRESHOLD = 1e-6


class FiniteVolumeFlux(ABC):
    """有限体積法の数値流束の基底クラス"""

    scheme_name: str = "FiniteVolume"

    def __init__(self, physics, mesh: Geometry, left_bc: str = "Neumann", right_bc: str = "Neumann"):
        self.physics = physics
        self.mesh = mesh
        self.left_bc = left_bc
        self.right_bc = right_bc

    @property
    def gravity(self) -> float:
        return self.physics.gravity

    def physical_flux(self, h: np.ndarray, q: np.ndarray) -> np.ndarray:
        """物理流束 F(U) = [q, q²/h + g h²/2]

        乾燥セルでは q = 0 として扱います。
        """
        u = self.velocity(h, q)
        flux = np.empty(h.shape + (2,))
        flux[..., 0] = np.where(h > DRY_THRESHOLD, q, 0.0)
        flux[..., 1] = h * u**2 + 0.5 * self.gravity * h**2
        return flux

    @staticmethod
    def velocity(h: np.ndarray, q: np.ndarray) -> np.ndarray:
        """乾燥セルで0となる流速 q/h"""
        wet = h > DRY_THRESHOLD
        return np.where(wet, q / np.where(wet, h, 1.0), 0.0)

    def wave_speeds(self, left: np.ndarray, right: np.ndarray):
        """セル境界の最小・最大特性速度 (λ1, λ2)"""
        g = self.gravity
        h_l, h_r = left[:, 0], right[:, 0]
        u_l = self.velocity(h_l, left[:, 1])
        u_r = self.velocity(h_r, right[:, 1])
        c_l = np.sqrt(g * np.maximum(h_l, 0.0))
        c_r = np.sqrt(g * np.maximum(h_r, 0.0))
        return np.minimum(u_l - c_l, u_r - c_r), np.maximum(u_l + c_l, u_r + c_r)

    def _ghost_state(self, cell: np.ndarray, kind: str) -> np.ndarray:
        ghost = np.array(cell, dtype=float)
        if kind == "Wall":
            ghost[1] = 0.0
        elif kind != "Neumann":
            raise ValueError(f"未対応の境界条件: {kind}")
        return ghost

    def extend_with_ghosts(self, solution: np.ndarray) -> np.ndarray:
        """両端に仮想セルを付け加えた (N+2)×2 の状態を返す"""
        extended = np.empty((solution.shape[0] + 2, 2))
        extended[1:-1] = solution
        extended[0] = self._ghost_state(solution[0], self.left_bc)
        extended[-1] = self._ghost_state(solution[-1], self.right_bc)
        return extended

    @abstractmethod
    def interface_flux(self, left: np.ndarray, right: np.ndarray) -> np.ndarray:
        """セル境界の左右の状態から数値流束を計算（M×2）"""
        pass

    def build_flux_vector(self, time: float, solution: np.ndarray) -> np.ndarray:
        """各セルの正味の流束を返す（毎回新しい配列）

        Args:
            time: 現在時刻（時間依存の境界条件用）
            solution: 状態（N×2）

        Returns:
            F_{i-1/2} - F_{i+1/2}（N×2）
        """
        extended = self.extend_with_ghosts(solution)
        fluxes = self.interface_flux(extended[:-1], extended[1:])
        return fluxes[:-1] - fluxes[1:]


class RusanovFlux(FiniteVolumeFlux):
    """Rusanov（局所Lax-Friedrichs）流束

    F̂ = 1/2 [F(U_L) + F(U_R) - α (U_R - U_L)],  α = max(|λ1|, |λ2|)
    """

    scheme_name = "Rusanov"

    def interface_flux(self, left: np.ndarray, right: np.ndarray) -> np.ndarray:
        lambda1, lambda2 = self.wave_speeds(left, right)
        alpha = np.maximum(np.abs(lambda1), np.abs(lambda2))[:, None]
        flux_l = self.physical_flux(left[:, 0], left[:, 1])
        flux_r = self.physical_flux(right[:, 0], right[:, 1])
        return 0.5 * ((flux_l + flux_r) - alpha * (right - left))


class HLLFlux(FiniteVolumeFlux):
    """HLL（Harten-Lax-van Leer）流束"""

    scheme_name = "HLL"

    def interface_flux(self, left: np.ndarray, right: np.ndarray) -> np.ndarray:
        lambda1, lambda2 = self.wave_speeds(left, right)
        flux_l = self.physical_flux(left[:, 0], left[:, 1])
        flux_r = self.physical_flux(right[:, 0], right[:, 1])

        l1 = lambda1[:, None]
        l2 = lambda2[:, None]
        spread = np.where(l2 - l1 > 0.0, l2 - l1, 1.0)
        star = (l2 * flux_l - l1 * flux_r + l1 * l2 * (right - left)) / spread

        return np.where(l1 >= 0.0, flux_l, np.where(l2 <= 0.0, flux_r, star))


FLUXES: Dict[str, Type[FiniteVolumeFlux]] = {
    "rusanov": RusanovFlux,
    "hll": HLLFlux,
}


def create_flux(name: str, physics, mesh: Geometry, left_bc: str = "Neumann", right_bc: str = "Neumann") -> FiniteVolumeFlux:
    """名前から数値流束を生成"""
    if name.lower() not in FLUXES:
        raise ValueError(f"サポートされていない数値流束: {name}")
    return FLUXES[name.lower()](physics, mesh, left_bc=left_bc, right_bc=right_bc)
