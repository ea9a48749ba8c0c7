"""
シミュレーションの状態を管理するモジュール

状態配列（N×2、列は水深 h と流量 q）から出力用の派生量を計算し、
チェックポイント用の状態スナップショットを保存・読み込みします。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple

import numpy as np


class DerivedQuantities(NamedTuple):
    """出力用の派生量"""

    free_surface: np.ndarray  # H = h + z
    depth: np.ndarray  # h
    velocity: np.ndarray  # u = q / h
    discharge: np.ndarray  # q
    froude: np.ndarray  # Fr = |u| / sqrt(g h)


def compute_derived_quantities(
    solution: np.ndarray, topography: np.ndarray, gravity: float
) -> DerivedQuantities:
    """状態から自由水面・流速・フルード数を計算

    水深が0以下のセルは保護せず、numpyの除算結果（inf, nan）をそのまま返します。
    """
    solution = np.asarray(solution, dtype=float)
    h = solution[..., 0]
    q = solution[..., 1]
    with np.errstate(divide="ignore", invalid="ignore"):
        u = q / h
        froude = np.abs(u) / np.sqrt(gravity * h)
    return DerivedQuantities(
        free_surface=h + np.asarray(topography, dtype=float),
        depth=h,
        velocity=u,
        discharge=q,
        froude=froude,
    )


def count_dry_cells(solution: np.ndarray) -> int:
    """水深が0以下のセル数"""
    return int(np.count_nonzero(np.asarray(solution)[..., 0] <= 0.0))


@dataclass
class SimulationState:
    """チェックポイントとして保存する状態

    Attributes:
        solution: 状態配列（N×2）
        time: 時刻
        iteration: 反復回数
        diagnostics: 追加の診断情報
    """

    solution: np.ndarray
    time: float
    iteration: int
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """状態の妥当性を検証"""
        if self.solution.ndim != 2 or self.solution.shape[1] != 2:
            raise ValueError(f"状態配列の形状が不正です: {self.solution.shape}")
        if self.iteration < 0:
            raise ValueError("反復回数は非負である必要があります")

    def save_state(self, filepath) -> None:
        """状態をnpzファイルに保存"""
        np.savez_compressed(
            filepath,
            solution=self.solution,
            time=self.time,
            iteration=self.iteration,
        )

    @classmethod
    def load_state(cls, filepath) -> "SimulationState":
        """npzファイルから状態を読み込み"""
        with np.load(filepath) as data:
            state = cls(
                solution=np.array(data["solution"], dtype=float),
                time=float(data["time"]),
                iteration=int(data["iteration"]),
            )
        state.validate()
        return state
