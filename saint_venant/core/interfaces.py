"""時間積分コアが利用する協調オブジェクトのプロトコル

格子・物理モデル・数値流束は時間積分器の外で構築され、
``TimeScheme.initialize`` に借用参照として渡されます。
"""

from typing import Protocol
import numpy as np


class Geometry(Protocol):
    """一様格子のプロトコル"""

    @property
    def n_cells(self) -> int:
        """セル数"""
        ...

    @property
    def cell_centers(self) -> np.ndarray:
        """セル中心座標（長さN、セル番号順）"""
        ...

    @property
    def dx(self) -> float:
        """一様な空間刻み幅"""
        ...


class PhysicsModel(Protocol):
    """物理モデルのプロトコル

    返される配列は次の呼び出しまで有効であればよく、
    時間積分器側で受け取った時点で複製します。
    """

    @property
    def gravity(self) -> float:
        ...

    @property
    def topography(self) -> np.ndarray:
        """地形高さ z（長さN）"""
        ...

    @property
    def exact_solution(self) -> np.ndarray:
        """直前に構築した厳密解（N×2）"""
        ...

    def initial_condition(self) -> np.ndarray:
        """初期条件（N×2、列は h, q）"""
        ...

    def build_source_term(self, solution: np.ndarray) -> np.ndarray:
        """状態に対する生成項（N×2）"""
        ...

    def build_exact_solution(self, time: float) -> np.ndarray:
        """時刻 time における厳密解を構築"""
        ...


class FluxProvider(Protocol):
    """有限体積法の数値流束のプロトコル"""

    @property
    def scheme_name(self) -> str:
        """出力ファイル名に使用する流束名"""
        ...

    def build_flux_vector(self, time: float, solution: np.ndarray) -> np.ndarray:
        """各セルの正味の流束 F_{i-1/2} - F_{i+1/2}（N×2）"""
        ...
