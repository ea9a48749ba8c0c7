"""解のテキスト出力を担当するモジュール

gnuplotで読める空白区切りの列形式で、スナップショット・地形・厳密解を書き出します。
"""

from pathlib import Path
from typing import Union
import logging

import numpy as np

from .state import compute_derived_quantities, count_dry_cells

SOLUTION_HEADER = "# x  H=h+z   h       u       q       Fr=|u|/sqrt(gh)"


def format_value(value: float) -> str:
    """有効数字6桁の一般形式で数値を整形"""
    return f"{value:g}"


class SolutionWriter:
    """スナップショットと地形の出力を担当するクラス"""

    def __init__(
        self,
        results_dir: Union[str, Path],
        cell_centers: np.ndarray,
        topography: np.ndarray,
        gravity: float,
        logger=None,
    ):
        self.results_dir = Path(results_dir)
        self.cell_centers = np.asarray(cell_centers, dtype=float)
        self.topography = np.asarray(topography, dtype=float)
        self.gravity = gravity
        self.logger = logger or logging.getLogger(__name__)

        self.results_dir.mkdir(parents=True, exist_ok=True)

    def solution_path(self, flux_name: str, index: int) -> Path:
        return self.results_dir / f"solution_{flux_name}_{index}.txt"

    def save_solution(self, filepath: Union[str, Path], solution: np.ndarray, time: float = None) -> Path:
        """状態を1セル1行で書き出す

        Args:
            filepath: 出力ファイルのパス
            solution: 状態配列（N×2）
            time: ログ出力用の時刻

        Returns:
            書き出したファイルのパス
        """
        filepath = Path(filepath)
        if time is not None:
            self.logger.info(f"解を保存: t = {time:g} -> {filepath.name}")

        dry = count_dry_cells(solution)
        if dry:
            self.logger.warning(
                f"{filepath.name}: 水深が0以下のセルが{dry}個あります（流速とフルード数は未定義）"
            )

        derived = compute_derived_quantities(solution, self.topography, self.gravity)
        columns = np.column_stack(
            [self.cell_centers, derived.free_surface, derived.depth,
             derived.velocity, derived.discharge, derived.froude]
        )
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(SOLUTION_HEADER + "\n")
            for row in columns:
                f.write(" ".join(format_value(v) for v in row) + "\n")
        return filepath

    def save_topography(self, filename: str = "topography.txt") -> Path:
        """地形を x, z の2列で書き出す"""
        filepath = self.results_dir / filename
        with open(filepath, "w", encoding="utf-8") as f:
            for x, z in zip(self.cell_centers, self.topography):
                f.write(f"{format_value(x)} {format_value(z)}\n")
        return filepath
