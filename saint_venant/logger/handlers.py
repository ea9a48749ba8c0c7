"""ログハンドラを提供するモジュール

ファイル・コンソール・メモリバッファに加え、誤差評価の結果を冗長度に関係なく
標準出力へ書き出すレポート用ハンドラを提供します。
"""

import collections
import logging
import logging.handlers
import sys

from .config import LogConfig
from .formatters import ConsoleFormatter, FileFormatter

# レポート行として扱うレコードに付ける属性
REPORT_EXTRA = {"report": True}


def is_report(record: logging.LogRecord) -> bool:
    return getattr(record, "report", False)


def _level(name: str) -> int:
    return getattr(logging, name.upper())


class FileLogHandler(logging.handlers.RotatingFileHandler):
    """設定に従ってローテーションするログファイルハンドラ"""

    def __init__(self, config: LogConfig):
        settings = config.file_logging
        super().__init__(
            filename=str(config.get_file_path()),
            maxBytes=settings["max_bytes"],
            backupCount=settings["backup_count"],
            encoding="utf-8",
        )
        self.setFormatter(FileFormatter())
        self.setLevel(_level(settings["level"]))


class ConsoleLogHandler(logging.StreamHandler):
    """標準エラー出力へのログハンドラ

    レポート行は ``ReportHandler`` が出力するため、ここでは除外します。
    """

    def __init__(self, config: LogConfig):
        super().__init__(sys.stderr)
        settings = config.console_logging
        self.setFormatter(
            ConsoleFormatter(
                detailed=settings["level"].lower() == "debug",
                use_color=settings["color"],
            )
        )
        self.setLevel(_level(settings["level"]))
        self.addFilter(lambda record: not is_report(record))


class ReportHandler(logging.StreamHandler):
    """レポート行（``extra=REPORT_EXTRA``）だけを標準出力へ書くハンドラ

    コンソールの冗長度とは独立に、メッセージのみをそのまま出力します。
    """

    def __init__(self, stream=None):
        super().__init__(stream or sys.stdout)
        self.setFormatter(logging.Formatter("%(message)s"))
        self.setLevel(logging.INFO)
        self.addFilter(is_report)


class BufferedLogHandler(logging.Handler):
    """直近のログメッセージをメモリ上に保持するハンドラ

    エラー発生時の文脈確認やテストに使用します。
    """

    def __init__(self, capacity: int = 1000):
        super().__init__()
        self.buffer = collections.deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord):
        self.buffer.append(self.format(record))

    def get_logs(self) -> list:
        return list(self.buffer)

    def clear(self):
        self.buffer.clear()
