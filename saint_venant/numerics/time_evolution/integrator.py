from typing import Dict, Type

from .base import TimeScheme
from .euler import ExplicitEuler
from .runge_kutta import RK2, RungeKutta4

SCHEMES: Dict[str, Type[TimeScheme]] = {
    "expliciteuler": ExplicitEuler,
    "euler": ExplicitEuler,
    "rk2": RK2,
    "rk4": RungeKutta4,
}


def create_scheme(method: str = "rk2", **kwargs) -> TimeScheme:
    """時間積分スキームを生成

    Args:
        method: スキーム名（'ExplicitEuler', 'RK2', 'RK4'、大文字小文字は区別しない）
        **kwargs: スキームのコンストラクタに渡す追加のパラメータ

    Returns:
        生成された時間積分スキーム
    """
    if method.lower() not in SCHEMES:
        raise ValueError(f"サポートされていない時間積分法: {method}")

    return SCHEMES[method.lower()](**kwargs)
