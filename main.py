"""
devdash 主入口：读取配置，启动终端会话与定时刷新。
"""

import argparse
import logging
import os
import sys

import yaml
from pydantic import ValidationError
from rich.console import Console

from devdash.backends.rich_backend import RichManager
from devdash.config_loader import DEFAULT_CONFIG_FILE, load_config
from devdash.data_controller import DataController
from devdash.refresher import Refresher
from devdash.tui import BackendInitError, Tui, display_error, display_no_file

LOG_FILE = "devdash.log"

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="devdash", description="Developer dashboard for the terminal")
    parser.add_argument("-config", default=DEFAULT_CONFIG_FILE, help="path to the YAML configuration file")
    parser.add_argument("-debug", action="store_true", help="write debug logs to devdash.log")
    parser.add_argument("-term", action="store_true", help="print the terminal size and exit")
    return parser.parse_args(argv)


def setup_logging(debug: bool):
    # 屏幕归终端会话所有，日志只写文件
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=LOG_FILE,
    )


def run(tui: Tui, config_path: str) -> int:
    if not os.path.exists(config_path):
        logger.warning(f"配置文件不存在: {config_path}")
        display_no_file(tui)
        tui.add_k_quit("C-c")
        tui.loop()
        return 0

    try:
        config = load_config(config_path)
    except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
        logger.error(f"配置加载失败: {e}")
        display_error(tui, e)
        tui.loop()
        return 1

    tui.add_k_quit(config.quit_key())
    store = DataController(config.general.cache_file)
    refresher = Refresher(tui, config, store)
    try:
        refresher.start()
        tui.loop()
    finally:
        refresher.stop()
        store.close()
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.term:
        width, height = Console().size
        print(f"Width: {width}, Height: {height}")
        return 0

    setup_logging(args.debug)

    try:
        manager = RichManager()
    except BackendInitError as e:
        print(f"devdash: {e}", file=sys.stderr)
        return 1

    tui = Tui(manager)
    try:
        return run(tui, args.config)
    finally:
        tui.close()
        logger.debug("已退出")


if __name__ == "__main__":
    sys.exit(main())
