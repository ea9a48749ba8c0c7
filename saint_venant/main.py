import sys
import argparse
from datetime import datetime
from pathlib import Path

from saint_venant.logger import SimulationLogger, LogConfig
from saint_venant.simulations import SimulationConfig, SimulationManager


def parse_args(argv=None):
    """コマンドライン引数をパース"""
    parser = argparse.ArgumentParser(description="1次元Saint-Venant方程式ソルバー")
    parser.add_argument("--config", type=str, required=True, help="設定ファイルのパス")
    parser.add_argument("--checkpoint", type=str, help="チェックポイントファイルのパス")
    parser.add_argument("--debug", action="store_true", help="デバッグモードを有効化")
    return parser.parse_args(argv)


def setup_logging(config: SimulationConfig, debug: bool) -> SimulationLogger:
    """ロギングを設定"""
    verbosity = 2 if debug else config.logging.verbosity
    log_config = LogConfig.from_verbosity(
        verbosity, config.log_dir, file_logging=config.logging.file_logging
    )
    return SimulationLogger("SaintVenant", log_config)


def main(argv=None) -> int:
    """メイン関数"""
    args = parse_args(argv)

    # 設定ファイルの読み込み（不正な設定はロガー生成前に報告する）
    try:
        config = SimulationConfig.from_yaml(args.config)
    except (OSError, ValueError) as e:
        print(f"設定ファイルの読み込みに失敗: {e}", file=sys.stderr)
        return 1

    logger = setup_logging(config, args.debug)
    checkpoint = Path(args.checkpoint) if args.checkpoint else None

    try:
        start = datetime.now()
        manager = SimulationManager(config, logger.start_section("manager"))
        manager.run_simulation(checkpoint)
        logger.log_performance("simulation", (datetime.now() - start).total_seconds())
        logger.info("シミュレーション正常終了")
        return 0

    except Exception as e:
        logger.log_error_with_context(
            "シミュレーション中にエラーが発生",
            e,
            {"config": args.config, "checkpoint": args.checkpoint},
        )
        return 1

    finally:
        logger.close()


if __name__ == "__main__":
    sys.exit(main())
