# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
#!/usr/bin/env python3
import asyncio
import argparse
from tuya_playground.log import setup_logging, get_logger
from .mixins.helpers import ConfigError
from .core import TuyaPlayground


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tuya-playground", exit_on_error=True)
    p.add_argument(
        "-c",
        "--config",
        help="Directory or file path for config.yaml (defaults to /config/config.yaml)",
    )
    return p


async def async_main(argv: list[str] | None = None) -> int:
    setup_logging()
    logger = get_logger(__name__)

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        async with TuyaPlayground(args=args) as playground:
            await playground.main_loop()
    except ConfigError as err:
        logger.error(f"Fatal config error was found: {err}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Shutdown requested (Ctrl+C). Exiting gracefully...")
        return 1
    except asyncio.CancelledError:
        logger.warning("Main loop cancelled.")
        return 1
    except Exception as err:
        logger.error(f"Unhandled exception: {err}", exc_info=True)
        return 1
    finally:
        logger.info("tuya-playground stopped.")

    return 0


def main() -> int:
    return asyncio.run(async_main())
