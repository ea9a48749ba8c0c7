"""シミュレーション全体を管理するモジュール

このモジュールは、設定から格子・物理モデル・数値流束・時間積分スキームを組み立て、
時間ループの実行と結果のレポート出力を担当します。
"""

from pathlib import Path
from typing import Optional, Union
import logging

from saint_venant.core import UniformMesh
from saint_venant.numerics.time_evolution import create_scheme
from saint_venant.physics import ShallowWaterPhysics, create_flux
from .config import SimulationConfig
from .monitor import SimulationMonitor
from .runner import RunResult, SimulationRunner


class SimulationManager:
    """シミュレーション管理クラス

    シミュレーション全体の実行フローを管理し、
    各コンポーネント間の連携を取ります。
    """

    def __init__(self, config: SimulationConfig, logger=None):
        """シミュレーションマネージャーを初期化

        Args:
            config: シミュレーション設定
            logger: ロガー（``SimulationLogger`` または ``logging.Logger``）
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.output_dir = Path(config.output.results_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        physics_config = config.physics
        self.mesh = UniformMesh.from_config(config.mesh)
        self.physics = ShallowWaterPhysics(
            physics_config, self.mesh, logger=self.logger.getChild("physics")
        )
        self.flux = create_flux(
            physics_config.flux,
            self.physics,
            self.mesh,
            left_bc=physics_config.left_bc,
            right_bc=physics_config.right_bc,
        )
        self.scheme = create_scheme(
            config.time.scheme, logger=self.logger.getChild("time_evolution")
        )
        self.monitor = SimulationMonitor(
            self.mesh.dx, self.physics.gravity, logger=self.logger.getChild("monitor")
        )
        self.runner = SimulationRunner(
            config,
            self.mesh,
            self.physics,
            self.flux,
            self.scheme,
            logger=self.logger.getChild("runner"),
            monitor=self.monitor,
        )

        self.logger.info(
            f"格子: {self.mesh}, 時間積分: {self.scheme.name}, 数値流束: {self.flux.scheme_name}"
        )

    def run_simulation(
        self, checkpoint_path: Optional[Union[str, Path]] = None
    ) -> RunResult:
        """シミュレーションを実行

        Args:
            checkpoint_path: チェックポイントファイルのパス（省略可）

        Returns:
            実行結果
        """
        state = None
        if checkpoint_path:
            self.logger.info(f"チェックポイントから再開: {checkpoint_path}")
            state = self.runner.checkpoints.load(checkpoint_path)
        else:
            self.logger.info("新規シミュレーションを開始")

        result = self.runner.run(state)

        # 結果の解析とレポート生成
        self.monitor.generate_report(self.output_dir)
        if self.config.output.plot:
            self.monitor.plot_history(self.output_dir)
            exact = self.physics.exact_solution if self.config.is_test_case else None
            self.monitor.plot_solution(
                self.output_dir,
                self.mesh.cell_centers,
                self.scheme.solution,
                self.physics.topography,
                exact=exact,
            )

        self.logger.info(f"サマリー: {self.monitor.get_summary()}")
        return result
