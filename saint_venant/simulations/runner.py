"""時間ループの実行を管理するモジュール"""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from saint_venant.core.interfaces import Geometry, PhysicsModel, FluxProvider
from saint_venant.logger import REPORT_EXTRA
from saint_venant.numerics.time_evolution import TimeScheme
from .checkpoint import CheckpointManager
from .config import SimulationConfig
from .diagnostics import ErrorReport
from .monitor import SimulationMonitor
from .probes import ProbeSampler
from .state import SimulationState
from .writer import SolutionWriter

EXACT_SOLUTION_FILENAME = "solution_exacte.txt"


class RunPhase(Enum):
    """時間ループの段階"""

    INITIALIZING = auto()
    STEPPING = auto()
    SAMPLING = auto()
    FINISHED = auto()


@dataclass
class RunResult:
    """実行結果"""

    iterations: int
    final_time: float
    snapshots: List[Path] = field(default_factory=list)
    error_report: Optional[ErrorReport] = None


class SimulationRunner:
    """時間ループを実行するクラス

    時間積分スキームを1ステップずつ進め、時刻と反復回数を更新し、
    設定された間隔でスナップショット・プローブ・チェックポイントを出力します。
    終了時刻に達した後、必要であれば厳密解との誤差を評価します。
    """

    def __init__(
        self,
        config: SimulationConfig,
        mesh: Geometry,
        physics: PhysicsModel,
        flux: FluxProvider,
        scheme: TimeScheme,
        logger=None,
        monitor: Optional[SimulationMonitor] = None,
    ):
        """初期化

        Args:
            config: シミュレーション設定
            mesh: 格子
            physics: 物理モデル（初期条件・地形・生成項・厳密解）
            flux: 数値流束
            scheme: 時間積分スキーム
            logger: ロガー
            monitor: シミュレーション監視インスタンス
        """
        self.config = config
        self.mesh = mesh
        self.physics = physics
        self.flux = flux
        self.scheme = scheme
        self.logger = logger or logging.getLogger(__name__)
        self.monitor = monitor

        results_dir = config.output.results_dir
        self.writer = SolutionWriter(
            results_dir,
            mesh.cell_centers,
            physics.topography,
            physics.gravity,
            logger=self.logger,
        )
        self.sampler = ProbeSampler(
            config.probes.references,
            config.probes.positions,
            results_dir,
            physics.gravity,
            logger=self.logger,
        )
        self.checkpoints = CheckpointManager(results_dir, logger=self.logger)

        self.phase: Optional[RunPhase] = None
        self._iteration = 0
        self._snapshots: List[Path] = []
        self._error_report: Optional[ErrorReport] = None

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def current_time(self) -> float:
        return self.scheme.current_time

    @property
    def snapshots(self) -> List[Path]:
        return list(self._snapshots)

    def initialize(self, state: Optional[SimulationState] = None) -> None:
        """時間ループの前処理

        スキームを初期化し、プローブのセル番号を解決して、
        初期条件のスナップショットと地形を書き出します。
        ``state`` が与えられた場合はチェックポイントから再開します。
        """
        self.phase = RunPhase.INITIALIZING
        self.scheme.initialize(self.config, self.mesh, self.physics, self.flux)
        self._snapshots = []
        self._error_report = None

        if len(self.sampler):
            self.sampler.resolve(self.mesh.cell_centers)

        if state is None:
            self._iteration = 0
            if len(self.sampler):
                self.sampler.clear()
            self._save_snapshot(0)
        else:
            self.restore(state)

        self.writer.save_topography()

        if self.monitor is not None:
            self._update_monitor()

        self.phase = RunPhase.STEPPING

    def restore(self, state: SimulationState) -> None:
        """チェックポイントの状態・時刻・反復回数を復元"""
        state.validate()
        self.scheme.restore(state.solution, state.time)
        self._iteration = state.iteration
        self.logger.info(f"反復{state.iteration}（t = {state.time:g}）から再開")

    def is_finished(self) -> bool:
        """終了時刻に達したかどうか"""
        return self.scheme.current_time >= self.scheme.final_time

    def step_forward(self) -> Dict[str, Any]:
        """1ステップ進め、必要な出力を行う

        Returns:
            ステップ情報の辞書
        """
        if self.phase not in (RunPhase.STEPPING, RunPhase.SAMPLING):
            raise RuntimeError("時間ループが初期化されていません")

        self.phase = RunPhase.STEPPING
        self.scheme.step()
        self.scheme.advance_time()
        self._iteration += 1

        self.phase = RunPhase.SAMPLING
        self._sample()
        if self.monitor is not None:
            self._update_monitor()

        step_info = {
            "step": self._iteration,
            "time": self.scheme.current_time,
            "dt": self.scheme.time_step,
        }
        self.logger.debug(f"ステップ {self._iteration}: t={step_info['time']:.6g}")
        return step_info

    def _sample(self) -> None:
        output = self.config.output
        n = self._iteration

        if not output.save_final_time_only and n % output.save_frequency == 0:
            self._save_snapshot(n // output.save_frequency)

        if len(self.sampler) and n % output.probe_frequency == 0:
            self.sampler.record(
                self.scheme.current_time, self.scheme.solution, self.physics.topography
            )

        if output.checkpoint_frequency and n % output.checkpoint_frequency == 0:
            self.save_checkpoint()

    def _save_snapshot(self, index: int) -> Path:
        path = self.writer.solution_path(self.flux.scheme_name, index)
        self.writer.save_solution(path, self.scheme.solution, self.scheme.current_time)
        self._snapshots.append(path)
        return path

    def _update_monitor(self) -> None:
        self.monitor.update(
            self.scheme.current_time, self.scheme.solution, self.physics.topography
        )

    def save_checkpoint(self) -> Path:
        """現在の状態をチェックポイントとして保存"""
        state = SimulationState(
            solution=self.scheme.solution.copy(),
            time=self.scheme.current_time,
            iteration=self._iteration,
        )
        return self.checkpoints.save(state)

    def run(self, state: Optional[SimulationState] = None) -> RunResult:
        """終了時刻まで時間ループを実行

        Args:
            state: 再開する状態（省略時は初期条件から開始）

        Returns:
            実行結果
        """
        self.initialize(state)

        self.logger.info("=" * 60)
        self.logger.info(
            f"時間ループを開始: scheme={self.scheme.name}, flux={self.flux.scheme_name}, "
            f"t={self.scheme.current_time:g} -> {self.scheme.final_time:g}"
        )

        while not self.is_finished():
            self.step_forward()

        return self.finalize()

    def finalize(self) -> RunResult:
        """時間ループの後処理

        最終時刻のみ保存する設定ならスナップショットを1つ書き出し、
        テストケースでは厳密解を構築して誤差を評価します。
        """
        output = self.config.output
        if output.save_final_time_only:
            self._save_snapshot(self._iteration // output.save_frequency)

        if self.config.is_test_case:
            self._error_report = self._evaluate_errors()

        self.phase = RunPhase.FINISHED
        self.scheme.finalize()
        elapsed = self.scheme.elapsed_time
        self.logger.info(
            f"1次元Saint-Venant方程式の求解が完了: {self._iteration}ステップ, "
            f"t = {self.scheme.current_time:g}"
            + (f", 経過時間 {elapsed:.2f}秒" if elapsed is not None else "")
        )
        self.logger.info("=" * 60)

        return RunResult(
            iterations=self._iteration,
            final_time=self.scheme.current_time,
            snapshots=self.snapshots,
            error_report=self._error_report,
        )

    def _evaluate_errors(self) -> ErrorReport:
        time = self.scheme.current_time
        exact = self.physics.build_exact_solution(time)
        self.writer.save_solution(
            self.writer.results_dir / EXACT_SOLUTION_FILENAME, exact
        )

        report = ErrorReport.evaluate(self.scheme.solution, exact, self.mesh.dx, time)
        for line in report.lines():
            self.logger.info(line, extra=REPORT_EXTRA)
        if self.monitor is not None:
            self.monitor.record_errors(report)
        return report

    @property
    def error_report(self) -> Optional[ErrorReport]:
        return self._error_report
