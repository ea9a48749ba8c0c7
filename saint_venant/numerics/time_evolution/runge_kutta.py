"""Runge-Kutta法による時間積分を提供するモジュール"""

from dataclasses import dataclass
from typing import List

import numpy as np

from .base import TimeScheme


@dataclass
class RKStage:
    """Runge-Kutta法の各ステージの情報"""

    coefficient: float  # 時刻係数
    weight: float  # 重み係数


class RK2(TimeScheme):
    """2次Runge-Kutta法（Heun法）

    k1 = F(t, U)/Δx + S(U)
    U* = U + Δt k1
    k2 = F(t+Δt, U*)/Δx + S(U*)
    U  ← U + Δt/2 (k1 + k2)

    第2段では生成項を先に、続いて流束を同じ試行状態 U* で評価します。
    """

    name = "RK2"

    def integrate(self, solution: np.ndarray, time: float, dt: float) -> None:
        k1 = self.evaluate_rhs(time, solution)

        trial = solution + dt * k1
        k2 = self.evaluate_rhs(time + dt, trial, source_first=True)

        increment = 0.5 * dt * (k1 + k2)
        solution += increment
        self._record_increment(increment)

    def get_order(self) -> int:
        return 2


class RungeKutta4(TimeScheme):
    """4次のRunge-Kutta法

    高精度な陽的時間積分スキーム。1ステップあたり右辺を4回評価します。
    """

    name = "RK4"

    def __init__(self, logger=None):
        super().__init__(logger)
        self._stages: List[RKStage] = [
            RKStage(coefficient=0.0, weight=1 / 6),
            RKStage(coefficient=0.5, weight=1 / 3),
            RKStage(coefficient=0.5, weight=1 / 3),
            RKStage(coefficient=1.0, weight=1 / 6),
        ]

    def integrate(self, solution: np.ndarray, time: float, dt: float) -> None:
        k_values = [self.evaluate_rhs(time, solution)]

        # 各段の試行状態は直前の段の傾きから作る
        for stage in self._stages[1:]:
            trial = solution + stage.coefficient * dt * k_values[-1]
            k_values.append(
                self.evaluate_rhs(time + stage.coefficient * dt, trial, source_first=True)
            )

        increment = dt * sum(
            stage.weight * k for stage, k in zip(self._stages, k_values)
        )
        solution += increment
        self._record_increment(increment)

    def get_order(self) -> int:
        return 4
