"""ログフォーマッタを提供するモジュール

ロガー名 ``SaintVenant.manager.runner`` の末尾（``runner``）をセクション名として扱い、
ファイル出力とコンソール出力で異なる詳細度の書式を使い分けます。
"""

import datetime
import logging


def section_name(record: logging.LogRecord) -> str:
    """ロガー名の末尾をセクション名として返す"""
    return record.name.rsplit(".", 1)[-1]


class FileFormatter(logging.Formatter):
    """ログファイル用フォーマッタ

    時刻をミリ秒精度で出力し、セクション名と発生位置を付けます。
    """

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-8s [%(section)s] %(message)s "
            "(%(filename)s:%(lineno)d)"
        )

    def format(self, record: logging.LogRecord) -> str:
        record.section = section_name(record)
        return super().format(record)

    def formatTime(self, record: logging.LogRecord, datefmt: str = None) -> str:
        ct = datetime.datetime.fromtimestamp(record.created)
        return ct.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class ConsoleFormatter(logging.Formatter):
    """コンソール用フォーマッタ

    デバッグ出力時はセクション名と行番号を含め、それ以外ではレベル名と
    メッセージのみを出力します。カラー表示時はレベル名を色付けしますが、
    元のレコードは書き換えないため他のハンドラには影響しません。
    """

    COLORS = {
        "DEBUG": "\033[36m",  # シアン
        "INFO": "\033[32m",  # 緑
        "WARNING": "\033[33m",  # 黄
        "ERROR": "\033[31m",  # 赤
        "CRITICAL": "\033[35m",  # マゼンタ
    }
    RESET = "\033[0m"

    def __init__(self, detailed: bool = False, use_color: bool = True):
        if detailed:
            fmt = "%(levelname)s [%(section)s:%(lineno)d] %(message)s"
        else:
            fmt = "%(levelname)s %(message)s"
        super().__init__(fmt)
        self.detailed = detailed
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        record.section = section_name(record)
        if not self.use_color:
            return super().format(record)

        levelname = record.levelname
        color = self.COLORS.get(levelname, self.RESET)
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname
