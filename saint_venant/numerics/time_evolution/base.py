"""時間積分スキームの基底クラスを提供するモジュール

このモジュールは、半離散化された保存則

    dU/dt = F(t, U) / dx + S(U)

を固定の時間刻み幅で前進させる陽的スキームの共通インターフェースを定義します。
F は数値流束（正味の流束ベクトル）、S は生成項です。
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional
import logging

import numpy as np

from saint_venant.core.interfaces import Geometry, PhysicsModel, FluxProvider


def _readonly(array: np.ndarray) -> np.ndarray:
    """書き込み不可のビューを返す"""
    view = array.view()
    view.flags.writeable = False
    return view


class TimeScheme(ABC):
    """時間積分スキームの基底クラス

    状態配列（N×2、列は h, q）を所有し、``step`` ごとにその場で更新します。
    格子・物理モデル・数値流束は ``initialize`` で借用参照として受け取り、
    ``finalize`` で手放します。
    """

    name: str = "TimeScheme"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

        self._mesh: Optional[Geometry] = None
        self._physics: Optional[PhysicsModel] = None
        self._flux: Optional[FluxProvider] = None

        self._solution: Optional[np.ndarray] = None
        self._dx: Optional[float] = None
        self._time_step: Optional[float] = None
        self._initial_time = 0.0
        self._final_time = 0.0
        self._current_time = 0.0
        self._step_count = 0
        self._start_time: Optional[datetime] = None
        self._last_increment = 0.0

    def initialize(
        self,
        config,
        mesh: Geometry,
        physics: PhysicsModel,
        flux: FluxProvider,
    ) -> None:
        """作業状態を初期条件に設定し、時刻を初期時刻に戻す

        Args:
            config: シミュレーション設定（``time`` セクションを使用）
            mesh: 格子
            physics: 物理モデル
            flux: 数値流束

        Raises:
            ValueError: 時間パラメータ・空間刻み幅・初期条件の形状が不正な場合
        """
        time_config = config.time
        self._validate_parameters(
            time_config.time_step,
            time_config.initial_time,
            time_config.final_time,
            mesh.dx,
        )

        self._mesh = mesh
        self._physics = physics
        self._flux = flux

        self._dx = float(mesh.dx)
        self._time_step = float(time_config.time_step)
        self._initial_time = float(time_config.initial_time)
        self._final_time = float(time_config.final_time)

        self._solution = self._checked_copy(physics.initial_condition())
        self._current_time = self._initial_time
        self._step_count = 0
        self._start_time = None
        self._last_increment = 0.0

        self.logger.debug(
            f"{self.name}を初期化: dt={self._time_step}, dx={self._dx}, "
            f"t0={self._initial_time}, tf={self._final_time}, N={mesh.n_cells}"
        )

    def _validate_parameters(
        self, time_step: float, initial_time: float, final_time: float, dx: float
    ) -> None:
        """パラメータの妥当性を検証"""
        if time_step is None or time_step <= 0:
            raise ValueError("時間刻み幅は正である必要があります")
        if initial_time is None or final_time is None:
            raise ValueError("初期時刻と終了時刻の指定が必要です")
        if final_time < initial_time:
            raise ValueError("終了時刻は初期時刻以上である必要があります")
        if dx is None or dx <= 0:
            raise ValueError("空間刻み幅は正である必要があります")

    def _checked_copy(self, solution: np.ndarray) -> np.ndarray:
        array = np.array(solution, dtype=float, copy=True)
        expected = (self._mesh.n_cells, 2)
        if array.shape != expected:
            raise ValueError(
                f"状態配列の形状が不正です: {array.shape} (期待値 {expected})"
            )
        return array

    def restore(self, solution: np.ndarray, time: float) -> None:
        """チェックポイントから状態と時刻を復元"""
        self._require_initialized()
        self._solution[...] = self._checked_copy(solution)
        self._current_time = float(time)

    def step(self) -> None:
        """状態を時間刻み幅1つ分だけその場で前進させる

        時刻は進めません。時刻の更新は ``advance_time`` で行います。
        """
        self._require_initialized()
        if self._start_time is None:
            self._start_time = datetime.now()

        self.integrate(self._solution, self._current_time, self._time_step)
        self._step_count += 1

    @abstractmethod
    def integrate(self, solution: np.ndarray, time: float, dt: float) -> None:
        """状態 ``solution`` を時刻 ``time`` から ``dt`` だけその場で更新"""
        pass

    @abstractmethod
    def get_order(self) -> int:
        """時間方向の精度次数"""
        pass

    def advance_time(self) -> float:
        """時刻を時間刻み幅1つ分進め、新しい時刻を返す"""
        self._require_initialized()
        self._current_time += self._time_step
        return self._current_time

    def evaluate_rhs(
        self, time: float, solution: np.ndarray, source_first: bool = False
    ) -> np.ndarray:
        """右辺 k = F(t, U)/dx + S(U) を評価

        協調オブジェクトの戻り値は内部バッファの再利用を許すため、ここで複製します。
        ``source_first`` が真の場合、生成項を数値流束より先に評価します。

        Args:
            time: 流束を評価する時刻
            solution: 評価する状態
            source_first: 生成項を先に評価するかどうか

        Returns:
            右辺の値（N×2）
        """
        view = _readonly(solution)
        if source_first:
            source = self._source_term(view)
            flux = self._flux_vector(time, view)
        else:
            flux = self._flux_vector(time, view)
            source = self._source_term(view)
        return flux / self._dx + source

    def _flux_vector(self, time: float, solution: np.ndarray) -> np.ndarray:
        return np.array(self._flux.build_flux_vector(time, solution), dtype=float)

    def _source_term(self, solution: np.ndarray) -> np.ndarray:
        return np.array(self._physics.build_source_term(solution), dtype=float)

    def _record_increment(self, increment: np.ndarray) -> None:
        self._last_increment = float(np.abs(increment).max(initial=0.0))

    def _require_initialized(self) -> None:
        if self._solution is None:
            raise RuntimeError(f"{self.name}が初期化されていません")

    @property
    def solution(self) -> np.ndarray:
        """作業状態（書き込み不可のビュー）"""
        self._require_initialized()
        return _readonly(self._solution)

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def time_step(self) -> Optional[float]:
        return self._time_step

    @property
    def initial_time(self) -> float:
        return self._initial_time

    @property
    def final_time(self) -> float:
        return self._final_time

    @property
    def dx(self) -> Optional[float]:
        return self._dx

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def elapsed_time(self) -> Optional[float]:
        """最初のステップからの経過時間（秒）"""
        if self._start_time is None:
            return None
        return (datetime.now() - self._start_time).total_seconds()

    def get_diagnostics(self) -> Dict[str, Any]:
        """診断情報を取得"""
        return {
            "method": self.name,
            "order": self.get_order(),
            "time": self._current_time,
            "dt": self._time_step,
            "step_count": self._step_count,
            "max_increment": self._last_increment,
            "elapsed_time": self.elapsed_time,
        }

    def finalize(self) -> None:
        """協調オブジェクトへの参照を手放す"""
        self._mesh = None
        self._physics = None
        self._flux = None
