"""プローブ（観測点）の時系列出力を担当するモジュール"""

from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

import numpy as np

from .state import compute_derived_quantities
from .writer import format_value


def resolve_probe_indices(
    positions: Sequence[float], cell_centers: Sequence[float]
) -> List[int]:
    """各プローブ位置に最も近いセル中心の番号を返す

    全セルを線形走査し、距離が厳密に小さい場合のみ更新するため、
    等距離の場合は番号の小さいセルが選ばれます。

    Args:
        positions: プローブの位置
        cell_centers: セル中心座標

    Returns:
        プローブ位置と同じ順序のセル番号
    """
    centers = np.asarray(cell_centers, dtype=float)
    if centers.size == 0:
        raise ValueError("セル中心が空です")

    indices = []
    for position in positions:
        index = 0
        distance_min = abs(position - centers[0])
        for k, x in enumerate(centers):
            distance = abs(position - x)
            if distance < distance_min:
                distance_min = distance
                index = k
        indices.append(index)
    return indices


class ProbeSampler:
    """プローブの解決と時系列レコードの追記を行うクラス

    プローブごとに ``probe_<番号>.txt`` を持ち、1行に
    ``time,H,h,u,q,Fr`` を書き込みます。ファイルは出力のたびに追記モードで開きます。
    """

    def __init__(
        self,
        references: Sequence[int],
        positions: Sequence[float],
        results_dir: Union[str, Path],
        gravity: float,
        logger=None,
    ):
        if len(references) != len(positions):
            raise ValueError("プローブの番号と位置の数が一致しません")

        self.references = list(references)
        self.positions = [float(p) for p in positions]
        self.results_dir = Path(results_dir)
        self.gravity = gravity
        self.logger = logger or logging.getLogger(__name__)
        self._indices: Optional[List[int]] = None

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def indices(self) -> List[int]:
        if self._indices is None:
            raise RuntimeError("プローブのセル番号がまだ解決されていません")
        return self._indices

    def probe_path(self, reference: int) -> Path:
        return self.results_dir / f"probe_{reference}.txt"

    def resolve(self, cell_centers: Sequence[float]) -> List[int]:
        """プローブ位置をセル番号に解決（ループ開始前に1回）"""
        self._indices = resolve_probe_indices(self.positions, cell_centers)
        for reference, position, index in zip(self.references, self.positions, self._indices):
            self.logger.debug(f"プローブ{reference}: x = {position} -> セル{index}")
        return self._indices

    def clear(self) -> None:
        """前回の実行で残ったプローブファイルを削除"""
        for reference in self.references:
            self.probe_path(reference).unlink(missing_ok=True)

    def record(self, time: float, solution: np.ndarray, topography: np.ndarray) -> None:
        """全プローブについて現在の値を1行ずつ追記"""
        for reference, index in zip(self.references, self.indices):
            self.emit(reference, index, time, solution, topography)

    def emit(
        self,
        reference: int,
        index: int,
        time: float,
        solution: np.ndarray,
        topography: np.ndarray,
    ) -> None:
        """1つのプローブのレコードを追記"""
        derived = compute_derived_quantities(
            solution[index], topography[index], self.gravity
        )
        values = (
            time,
            derived.free_surface,
            derived.depth,
            derived.velocity,
            derived.discharge,
            derived.froude,
        )
        with open(self.probe_path(reference), "a", encoding="utf-8") as f:
            f.write(",".join(format_value(float(v)) for v in values) + "\n")
