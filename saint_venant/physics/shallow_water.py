"""1次元浅水（Saint-Venant）方程式の物理モデル

保存形

    ∂U/∂t + ∂F(U)/∂x = S(U),   U = [h, q]ᵀ,  F(U) = [q, q²/h + g h²/2]ᵀ,
    S(U) = [0, -g h dz/dx]ᵀ

に対して、地形・初期条件・生成項・厳密解を構築します。
"""

from typing import Optional
import logging

import numpy as np
from scipy.optimize import brentq

from saint_venant.core.interfaces import Geometry

# ダム決壊問題の左右の水位
DAM_BREAK_WET_HEIGHTS = (2.0, 1.0)
DAM_BREAK_DRY_HEIGHTS = (2.0, 0.0)


class ShallowWaterPhysics:
    """浅水方程式の物理モデル

    Attributes:
        gravity: 重力加速度
        topography: 地形高さ z（長さN）
        exact_solution: 直前に構築した厳密解（N×2）
    """

    def __init__(self, physics_config, mesh: Geometry, logger=None):
        """物理モデルを初期化

        Args:
            physics_config: ``PhysicsConfig``
            mesh: 格子
            logger: ロガー
        """
        self.config = physics_config
        self.mesh = mesh
        self.logger = logger or logging.getLogger(__name__)

        self._gravity = float(physics_config.gravity)
        self._topography = self._build_topography()
        self._exact_solution: Optional[np.ndarray] = None

    @property
    def gravity(self) -> float:
        return self._gravity

    @property
    def topography(self) -> np.ndarray:
        return self._topography

    @property
    def exact_solution(self) -> np.ndarray:
        if self._exact_solution is None:
            raise RuntimeError("厳密解がまだ構築されていません")
        return self._exact_solution

    @property
    def domain_center(self) -> float:
        centers = self.mesh.cell_centers
        dx = self.mesh.dx
        return 0.5 * ((centers[0] - 0.5 * dx) + (centers[-1] + 0.5 * dx))

    def _build_topography(self) -> np.ndarray:
        """地形 z(x) を構築

        - FlatBottom: z = 0
        - Bump: 8 < x < 12 で z = 0.2 - 0.05 (x - 10)²
        """
        x = np.asarray(self.mesh.cell_centers, dtype=float)
        topography = np.zeros_like(x)

        kind = self.config.topography
        if kind == "FlatBottom":
            pass
        elif kind == "Bump":
            on_bump = (x > 8.0) & (x < 12.0)
            topography[on_bump] = 0.2 - 0.05 * (x[on_bump] - 10.0) ** 2
        else:
            raise ValueError(f"未対応の地形: {kind}")

        self.logger.debug(f"地形を構築: {kind}")
        return topography

    def _topography_slope(self) -> np.ndarray:
        """地形勾配 dz/dx（解析式）"""
        x = np.asarray(self.mesh.cell_centers, dtype=float)
        slope = np.zeros_like(x)
        if self.config.topography == "Bump":
            on_bump = (x > 8.0) & (x < 12.0)
            slope[on_bump] = -0.1 * (x[on_bump] - 10.0)
        return slope

    def initial_condition(self) -> np.ndarray:
        """初期条件 U(x, 0) = [h, q] を構築

        水深は自由水面高さ H から地形を引いて h = max(H - z, 0) とします。
        """
        x = np.asarray(self.mesh.cell_centers, dtype=float)
        z = self._topography
        solution = np.zeros((x.size, 2))

        kind = self.config.initial_condition
        if kind == "UniformHeightAndDischarge":
            solution[:, 0] = np.maximum(self.config.initial_height - z, 0.0)
            solution[:, 1] = self.config.initial_discharge
        elif kind in ("DamBreakWet", "DamBreakDry"):
            left, right = (
                DAM_BREAK_WET_HEIGHTS if kind == "DamBreakWet" else DAM_BREAK_DRY_HEIGHTS
            )
            surface = np.where(x < self.domain_center, left, right)
            solution[:, 0] = np.maximum(surface - z, 0.0)
        elif kind == "SinePerturbation":
            surface = np.where(np.abs(x) < 1.0, 2.0 + 0.2 * np.cos(np.pi * x), 1.8)
            solution[:, 0] = np.maximum(surface - z, 0.0)
        else:
            raise ValueError(f"未対応の初期条件: {kind}")

        self.logger.debug(f"初期条件を構築: {kind}")
        return solution

    def build_source_term(self, solution: np.ndarray) -> np.ndarray:
        """生成項 S = [0, -g h dz/dx] を返す（毎回新しい配列）"""
        source = np.zeros((self.mesh.n_cells, 2))
        if self.config.topography != "FlatBottom":
            source[:, 1] = -self._gravity * solution[:, 0] * self._topography_slope()
        return source

    def build_exact_solution(self, time: float) -> np.ndarray:
        """時刻 time における厳密解を構築

        - RestingLake: 静水状態 h = max(H0 - z, 0), q = 0
        - DamBreakWet: 平坦床上の湿潤ダム決壊（Stokerの解）
        """
        case = self.config.test_case
        if case == "RestingLake":
            exact = np.zeros((self.mesh.n_cells, 2))
            exact[:, 0] = np.maximum(self.config.initial_height - self._topography, 0.0)
        elif case == "DamBreakWet":
            exact = self._stoker_solution(time)
        else:
            raise ValueError(f"厳密解が定義されていないテストケース: {case}")

        self._exact_solution = exact
        return exact

    def _stoker_solution(self, time: float) -> np.ndarray:
        """湿潤床ダム決壊のStokerの厳密解

        中間状態の波速 c_m = sqrt(g h_m) は
        -8 g h_r c_m² (sqrt(g h_l) - c_m)² + (c_m² - g h_r)² (c_m² + g h_r) = 0
        の (sqrt(g h_r), sqrt(g h_l)) 内の根として求めます。
        """
        g = self._gravity
        h_left, h_right = DAM_BREAK_WET_HEIGHTS
        x = np.asarray(self.mesh.cell_centers, dtype=float)
        x0 = self.domain_center

        exact = np.zeros((x.size, 2))
        if time <= 0.0:
            exact[:, 0] = np.where(x < x0, h_left, h_right)
            return exact

        c_left = np.sqrt(g * h_left)
        c_right = np.sqrt(g * h_right)

        def residual(cm: float) -> float:
            return (
                -8.0 * g * h_right * cm**2 * (c_left - cm) ** 2
                + (cm**2 - g * h_right) ** 2 * (cm**2 + g * h_right)
            )

        cm = brentq(residual, c_right, c_left)

        x_a = x0 - time * c_left
        x_b = x0 + time * (2.0 * c_left - 3.0 * cm)
        x_c = x0 + time * (2.0 * cm**2 * (c_left - cm)) / (cm**2 - g * h_right)

        h = np.full_like(x, h_right)
        u = np.zeros_like(x)

        h[x <= x_a] = h_left

        fan = (x > x_a) & (x <= x_b)
        xi = (x[fan] - x0) / time
        h[fan] = 4.0 / (9.0 * g) * (c_left - 0.5 * xi) ** 2
        u[fan] = 2.0 / 3.0 * (xi + c_left)

        plateau = (x > x_b) & (x <= x_c)
        h[plateau] = cm**2 / g
        u[plateau] = 2.0 * (c_left - cm)

        exact[:, 0] = h
        exact[:, 1] = h * u
        return exact
