"""
前進（陽的）オイラー法による時間積分

1次精度の陽的時間積分スキーム
"""

import numpy as np

from .base import TimeScheme


class ExplicitEuler(TimeScheme):
    """
    陽的オイラー法

    数値スキーム: U(t+Δt) = U(t) + Δt * (F(t, U)/Δx + S(U))

    特徴:
    - 1ステップあたり流束と生成項を1回ずつ評価
    - 時間方向1次精度
    """

    name = "ExplicitEuler"

    def integrate(self, solution: np.ndarray, time: float, dt: float) -> None:
        increment = dt * self.evaluate_rhs(time, solution)
        solution += increment
        self._record_increment(increment)

    def get_order(self) -> int:
        return 1
