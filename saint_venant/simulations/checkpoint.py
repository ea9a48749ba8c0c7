"""チェックポイント管理を提供するモジュール"""

from pathlib import Path
from typing import Optional, Union
import logging

from .state import SimulationState


class CheckpointManager:
    """チェックポイントの保存と読み込みを管理"""

    def __init__(self, results_dir: Union[str, Path], logger=None):
        self.checkpoint_dir = Path(results_dir) / "checkpoints"
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, iteration: int) -> Path:
        return self.checkpoint_dir / f"checkpoint_{iteration:06d}.npz"

    def save(self, state: SimulationState) -> Path:
        """チェックポイントを保存

        Args:
            state: 保存する状態

        Returns:
            保存先のパス
        """
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.path_for(state.iteration)
        state.save_state(filepath)
        self.logger.debug(f"チェックポイントを保存: {filepath}")
        return filepath

    def latest(self) -> Path:
        checkpoints = sorted(self.checkpoint_dir.glob("checkpoint_*.npz"))
        if not checkpoints:
            raise FileNotFoundError(
                f"チェックポイントが見つかりません: {self.checkpoint_dir}"
            )
        return max(checkpoints, key=lambda p: int(p.stem.split("_")[1]))

    def load(self, filepath: Optional[Union[str, Path]] = None) -> SimulationState:
        """チェックポイントを読み込み（省略時は最新）"""
        filepath = Path(filepath) if filepath is not None else self.latest()
        state = SimulationState.load_state(filepath)
        self.logger.info(
            f"チェックポイントを読み込み: {filepath} (t = {state.time:g}, n = {state.iteration})"
        )
        return state
