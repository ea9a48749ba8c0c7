import logging

import pytest

from saint_venant.logger import (
    SimulationLogger,
    LogConfig,
    ConsoleFormatter,
    FileFormatter,
    ReportHandler,
    BufferedLogHandler,
    REPORT_EXTRA,
)


@pytest.fixture
def logger(tmp_path):
    log = SimulationLogger("test_saint_venant", LogConfig.from_verbosity(1, tmp_path))
    yield log
    log.close()


@pytest.mark.parametrize("verbosity, level", [(0, "warning"), (1, "info"), (2, "debug")])
def test_from_verbosity(tmp_path, verbosity, level):
    config = LogConfig.from_verbosity(verbosity, tmp_path)
    assert config.level == level
    assert config.console_logging["level"] == level
    assert config.get_file_path() == tmp_path / "saint_venant.log"


def test_invalid_level_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        LogConfig(level="verbose", log_dir=tmp_path).validate()


def test_no_handler_is_rejected(tmp_path):
    config = LogConfig.from_verbosity(1, tmp_path, file_logging=False)
    config.console_logging["enabled"] = False
    with pytest.raises(ValueError):
        config.validate()


def test_messages_reach_file_and_buffer(logger, tmp_path):
    logger.info("時間ループを開始")
    logger.debug("バッファには残らない")

    assert any("時間ループを開始" in m for m in logger.get_recent_logs())
    assert not any("バッファには残らない" in m for m in logger.get_recent_logs())

    for handler in logger.handlers:
        handler.flush()
    content = (tmp_path / "saint_venant.log").read_text(encoding="utf-8")
    # ファイルにはデバッグ出力も書かれる
    assert "時間ループを開始" in content
    assert "バッファには残らない" in content


def test_section_logger_propagates_to_parent(logger):
    section = logger.start_section("runner")
    section.info("スナップショットを保存")
    logger.getChild("monitor").info("統計情報を保存")

    recent = logger.get_recent_logs()
    assert any("スナップショットを保存" in m for m in recent)
    assert any("統計情報を保存" in m for m in recent)
    assert any("スナップショットを保存" in m for m in section.get_recent_logs())


def test_log_error_with_context(logger, tmp_path):
    try:
        raise ValueError("dt must be positive")
    except ValueError as e:
        logger.log_error_with_context("設定エラー", e, {"time_step": 0.0})

    last = logger.get_recent_logs()[-1]
    assert "ValueError" in last
    assert "time_step" in last

    logger.save_debug_info(tmp_path / "debug.txt")
    assert "dt must be positive" in (tmp_path / "debug.txt").read_text(encoding="utf-8")


def test_context_manager_propagates_exception(logger):
    with pytest.raises(RuntimeError):
        with logger.start_section("step"):
            raise RuntimeError("boom")
    assert any("boom" in m for m in logger.get_recent_logs())


def _record(name="SaintVenant.manager.runner", level=logging.WARNING, msg="dry cells"):
    return logging.LogRecord(name, level, __file__, 42, msg, None, None)


def test_console_formatter_keeps_record_intact():
    record = _record()
    formatted = ConsoleFormatter(use_color=True).format(record)
    assert "dry cells" in formatted
    assert "\033[33m" in formatted
    assert record.levelname == "WARNING"


def test_console_formatter_detail_follows_verbosity():
    assert ConsoleFormatter(use_color=False).format(_record()) == "WARNING dry cells"
    detailed = ConsoleFormatter(detailed=True, use_color=False).format(_record())
    assert detailed == "WARNING [runner:42] dry cells"


def test_file_formatter_names_section():
    formatted = FileFormatter().format(_record(level=logging.INFO))
    assert "[runner] dry cells" in formatted
    assert "INFO" in formatted


def test_buffered_handler_capacity():
    handler = BufferedLogHandler(capacity=2)
    for i in range(3):
        handler.emit(logging.LogRecord("x", logging.INFO, __file__, 1, f"m{i}", None, None))
    assert handler.get_logs() == ["m1", "m2"]
    handler.clear()
    assert handler.get_logs() == []


def test_log_performance(logger):
    logger.log_performance("simulation", 1.23456)
    assert any("simulation: 1.235 seconds" in m for m in logger.get_recent_logs())


def test_report_handler_passes_only_report_lines():
    handler = ReportHandler()
    plain = _record(level=logging.INFO, msg="step 10")
    report = _record(level=logging.INFO, msg="Error h  L2 = 0")
    report.report = True
    assert not handler.filter(plain)
    assert handler.filter(report)


@pytest.mark.parametrize("verbosity", [0, 1])
def test_report_lines_reach_stdout_once(tmp_path, capsys, verbosity):
    log = SimulationLogger(
        "test_saint_venant_report",
        LogConfig.from_verbosity(verbosity, tmp_path, file_logging=False),
    )
    try:
        log.getChild("runner").info("Error h  L1 = 0", extra=REPORT_EXTRA)
        log.info("時間ループを開始")
    finally:
        log.close()

    captured = capsys.readouterr()
    assert captured.out == "Error h  L1 = 0\n"
    assert "Error h" not in captured.err
    assert ("時間ループを開始" in captured.err) == (verbosity >= 1)
