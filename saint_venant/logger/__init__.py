"""ソルバー用ロギングパッケージ

このパッケージは、ソルバー全体で使用される統一的なロギング機能を提供します。
``extra=REPORT_EXTRA`` を付けて出力した行は、冗長度に関係なく標準出力にも書かれます。
"""

from .logger import SimulationLogger
from .handlers import (
    FileLogHandler,
    ConsoleLogHandler,
    ReportHandler,
    BufferedLogHandler,
    REPORT_EXTRA,
)
from .formatters import FileFormatter, ConsoleFormatter
from .config import LogConfig

__all__ = [
    "SimulationLogger",
    "FileLogHandler",
    "ConsoleLogHandler",
    "ReportHandler",
    "BufferedLogHandler",
    "REPORT_EXTRA",
    "FileFormatter",
    "ConsoleFormatter",
    "LogConfig",
]
