"""ロギング設定を管理するモジュール

このモジュールは、ソルバーのログ出力設定を保持するデータクラスを提供します。
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path

# 冗長度とログレベルの対応
VERBOSITY_LEVELS = {0: "warning", 1: "info", 2: "debug"}


@dataclass
class LogConfig:
    """ロギング設定を管理するクラス

    Attributes:
        level: 基本ログレベル
        log_dir: ログファイル出力ディレクトリ
        file_logging: ファイルへのログ出力設定
        console_logging: コンソールへのログ出力設定
        report_to_stdout: レポート行を標準出力へ書くかどうか
    """

    level: str = "info"
    log_dir: Path = Path("logs")
    file_logging: Dict[str, Any] = field(
        default_factory=lambda: {
            "enabled": True,
            "filename": "saint_venant.log",
            "level": "debug",
            "max_bytes": 10_000_000,  # 10MB
            "backup_count": 5,
        }
    )
    console_logging: Dict[str, Any] = field(
        default_factory=lambda: {"enabled": True, "level": "info", "color": True}
    )
    # 誤差評価などのレポート行を冗長度に関係なく標準出力へ書くかどうか
    report_to_stdout: bool = True

    def __post_init__(self):
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    @classmethod
    def from_verbosity(
        cls, verbosity: int, log_dir: Path, file_logging: Optional[bool] = True
    ) -> "LogConfig":
        """冗長度からロギング設定を生成

        冗長度 0 は警告以上、1 は情報、2 はデバッグ出力に対応します。

        Args:
            verbosity: 冗長度（0, 1, 2）
            log_dir: ログファイル出力ディレクトリ
            file_logging: ファイル出力を有効にするかどうか

        Returns:
            生成されたロギング設定
        """
        level = VERBOSITY_LEVELS.get(min(max(int(verbosity), 0), 2))
        config = cls(level=level, log_dir=Path(log_dir))
        config.file_logging["enabled"] = bool(file_logging)
        config.console_logging["level"] = level
        return config

    def validate(self):
        """設定の妥当性を検証

        Raises:
            ValueError: 無効な設定値が検出された場合
        """
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")

        if not self.file_logging["enabled"] and not self.console_logging["enabled"]:
            raise ValueError("At least one logging handler must be enabled")

    def get_file_path(self, filename: Optional[str] = None) -> Path:
        """ログファイルのパスを取得"""
        filename = filename or self.file_logging["filename"]
        return self.log_dir / filename

    def create_directories(self):
        """必要なディレクトリを作成"""
        if self.file_logging["enabled"]:
            self.log_dir.mkdir(parents=True, exist_ok=True)
