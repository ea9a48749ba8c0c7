"""
時間発展スキームのパッケージ

有限体積法で半離散化した保存則を固定の時間刻み幅で前進させる陽的スキームを提供します。

主な機能:
- 抽象的な時間積分インターフェース
- 陽的オイラー法
- 2次Runge-Kutta法（Heun法）
- 4次Runge-Kutta法
"""

from .base import TimeScheme
from .euler import ExplicitEuler
from .runge_kutta import RK2, RungeKutta4, RKStage
from .integrator import create_scheme, SCHEMES

__all__ = [
    # 基底クラス
    "TimeScheme",
    # 具体的な時間積分法
    "ExplicitEuler",
    "RK2",
    "RungeKutta4",
    "RKStage",
    # 生成関数
    "create_scheme",
    "SCHEMES",
]
