"""1次元一様格子を提供するモジュール"""

import numpy as np


class UniformMesh:
    """一様な1次元有限体積格子

    区間 [xmin, xmax] を幅 dx のセルに分割します。
    セル中心は xmin + (i + 1/2) dx です。
    """

    def __init__(self, xmin: float, xmax: float, dx: float):
        if dx <= 0:
            raise ValueError("空間刻み幅dxは正の値である必要があります")
        if xmax <= xmin:
            raise ValueError("xmaxはxminより大きい必要があります")

        self._xmin = float(xmin)
        self._xmax = float(xmax)
        self._dx = float(dx)
        # 丸め誤差で最後のセルが落ちないよう四捨五入する
        self._n_cells = int(round((self._xmax - self._xmin) / self._dx))
        if self._n_cells < 1:
            raise ValueError("セル数が1未満です")
        self._cell_centers = self._xmin + (np.arange(self._n_cells) + 0.5) * self._dx
        self._cell_centers.setflags(write=False)

    @classmethod
    def from_config(cls, mesh_config) -> "UniformMesh":
        return cls(mesh_config.xmin, mesh_config.xmax, mesh_config.dx)

    @property
    def xmin(self) -> float:
        return self._xmin

    @property
    def xmax(self) -> float:
        return self._xmax

    @property
    def n_cells(self) -> int:
        return self._n_cells

    @property
    def cell_centers(self) -> np.ndarray:
        return self._cell_centers

    @property
    def dx(self) -> float:
        return self._dx

    def __repr__(self) -> str:
        return (
            f"UniformMesh(xmin={self._xmin}, xmax={self._xmax}, "
            f"dx={self._dx}, n_cells={self._n_cells})"
        )
