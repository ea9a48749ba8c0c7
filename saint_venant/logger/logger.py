"""ソルバー用ロガーを提供するモジュール

このモジュールは、時間発展計算の進捗や誤差評価を記録するロギング機能を提供します。
"""

import logging
from pathlib import Path
from typing import Optional, Dict, Any, Union
from .config import LogConfig
from .handlers import (
    FileLogHandler,
    ConsoleLogHandler,
    ReportHandler,
    BufferedLogHandler,
)


class SimulationLogger:
    """シミュレーション用ロガークラス

    標準の ``logging.Logger`` を包み、ファイル・コンソール・メモリバッファへの
    出力をまとめて設定します。未定義の属性アクセスは内部のロガーに転送されるため、
    ``logging.Logger`` と同じように ``info`` や ``warning`` を呼び出せます。
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        parent: Optional["SimulationLogger"] = None,
    ):
        """ロガーを初期化

        Args:
            name: ロガーの名前
            config: ロギング設定
            parent: 親ロガー（セクション分割用）
        """
        self.name = name
        self.config = config or LogConfig()
        self.parent = parent

        self.config.validate()
        self.config.create_directories()

        self._debug_buffer = BufferedLogHandler()
        if parent is None:
            self.logger = self._create_logger()
            self.logger.debug(f"ロギングシステムを初期化: {name}")
        else:
            # 子ロガーは親のハンドラへ伝播させる
            self.logger = logging.getLogger(name)
            self.logger.setLevel(parent.logger.level)
            self.logger.handlers.clear()
            self.logger.addHandler(self._debug_buffer)
            self.logger.propagate = True

    def _create_logger(self) -> logging.Logger:
        """ロガーを生成して設定"""
        logger = logging.getLogger(self.name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # 既存のハンドラを閉じてから差し替える
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

        if self.config.file_logging["enabled"]:
            logger.addHandler(FileLogHandler(self.config))

        if self.config.console_logging["enabled"]:
            logger.addHandler(ConsoleLogHandler(self.config))

        if self.config.report_to_stdout:
            logger.addHandler(ReportHandler())

        self._debug_buffer.setLevel(getattr(logging, self.config.level.upper()))
        logger.addHandler(self._debug_buffer)

        return logger

    def start_section(self, name: str) -> "SimulationLogger":
        """新しいログセクションを開始

        Args:
            name: セクション名

        Returns:
            セクション用の子ロガー
        """
        return SimulationLogger(f"{self.name}.{name}", self.config, self)

    def get_recent_logs(self, n: int = 100) -> list:
        """最近のログメッセージを取得"""
        return self._debug_buffer.get_logs()[-n:]

    def save_debug_info(self, path: Union[str, Path]):
        """バッファ内のログをファイルに保存"""
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            for log in self._debug_buffer.get_logs():
                f.write(f"{log}\n")

    def log_error_with_context(
        self, msg: str, error: Exception, context: Optional[Dict[str, Any]] = None
    ):
        """エラー情報をコンテキスト付きでログ出力

        Args:
            msg: エラーメッセージ
            error: 発生した例外
            context: 追加のコンテキスト情報
        """
        error_info = {
            "message": msg,
            "error_type": type(error).__name__,
            "error_msg": str(error),
            "context": context or {},
        }
        self.logger.error(f"Error occurred: {error_info}", exc_info=error)

    def log_performance(self, section: str, elapsed: float):
        """経過時間をログ出力"""
        self.logger.info(f"Performance - {section}: {elapsed:.3f} seconds")

    def close(self):
        """ハンドラを閉じる"""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def __getattr__(self, name: str):
        return getattr(self.logger, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.log_error_with_context(
                "Error in simulation section", exc_val, {"section": self.name}
            )
        return False  # 例外を伝播させる
