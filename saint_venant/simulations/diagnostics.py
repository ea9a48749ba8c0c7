"""厳密解との誤差評価を提供するモジュール"""

from dataclasses import dataclass
from typing import List
import math

import numpy as np


def _difference(solution: np.ndarray, exact: np.ndarray) -> np.ndarray:
    solution = np.asarray(solution, dtype=float)
    exact = np.asarray(exact, dtype=float)
    if solution.shape != exact.shape:
        raise ValueError(
            f"数値解と厳密解の形状が一致しません: {solution.shape} != {exact.shape}"
        )
    return solution - exact


def compute_l2_error(solution: np.ndarray, exact: np.ndarray, dx: float) -> np.ndarray:
    """成分ごとのL2誤差 dx * ||U - U_exact||_2

    Returns:
        (h の誤差, q の誤差)
    """
    return np.linalg.norm(_difference(solution, exact), axis=0) * dx


def compute_l1_error(solution: np.ndarray, exact: np.ndarray, dx: float) -> np.ndarray:
    """成分ごとのL1誤差 dx * Σ|U - U_exact|"""
    return np.abs(_difference(solution, exact)).sum(axis=0) * dx


def observed_order(coarse_error: float, fine_error: float, ratio: float = 2.0) -> float:
    """刻み幅を 1/ratio にしたときの観測収束次数"""
    if coarse_error <= 0 or fine_error <= 0:
        raise ValueError("誤差は正の値である必要があります")
    return math.log(coarse_error / fine_error) / math.log(ratio)


@dataclass
class ErrorReport:
    """誤差評価の結果

    Attributes:
        l2: (h, q) のL2誤差
        l1: (h, q) のL1誤差
        dx: 空間刻み幅
        time: 評価時刻
    """

    l2: np.ndarray
    l1: np.ndarray
    dx: float
    time: float

    @classmethod
    def evaluate(
        cls, solution: np.ndarray, exact: np.ndarray, dx: float, time: float
    ) -> "ErrorReport":
        return cls(
            l2=compute_l2_error(solution, exact, dx),
            l1=compute_l1_error(solution, exact, dx),
            dx=dx,
            time=time,
        )

    def lines(self) -> List[str]:
        """コンソール出力用の行"""
        return [
            f"Error h  L2 = {self.l2[0]:g} and error q L2 = {self.l2[1]:g} for dx = {self.dx:g}",
            f"Error h  L1 = {self.l1[0]:g} and error q L1 = {self.l1[1]:g} for dx = {self.dx:g}",
        ]

    def to_dict(self):
        return {
            "time": self.time,
            "dx": self.dx,
            "l2": {"h": float(self.l2[0]), "q": float(self.l2[1])},
            "l1": {"h": float(self.l1[0]), "q": float(self.l1[1])},
        }
