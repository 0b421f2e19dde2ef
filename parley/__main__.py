"""
Parley Command Library

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import asyncio
import logging
import os
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any

from parley.builtin import register_builtin_commands
from parley.config import ParleyConfig, load_config
from parley.console import console
from parley.debug import register_debug_hooks
from parley.dispatcher import Dispatcher
from parley.event import Identity
from parley.exceptions import ConfigError
from parley.formatting import RichFormatter
from parley.shell import ParleyShell
from parley.utils import setup_logging
from parley.version import __version__


def find_parley_config() -> Path | None:
    candidates = [
        Path.cwd() / "parley.yaml",
        Path.cwd() / "parley.toml",
        Path.cwd() / ".parley.yaml",
        Path.cwd() / ".parley.toml",
        Path(os.environ.get("PARLEY_CONFIG", "parley.yaml")),
        Path.home() / ".config" / "parley" / "parley.yaml",
        Path.home() / ".config" / "parley" / "parley.toml",
    ]
    return next((p for p in candidates if p.exists()), None)


def bootstrap(config_path: Path | None) -> Path | None:
    config_path = config_path or find_parley_config()
    if config_path and str(config_path.parent) not in sys.path:
        sys.path.insert(0, str(config_path.parent))
    return config_path


def get_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="parley",
        description="Try out a Parley command set in a local chat shell.",
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML or TOML config file.")
    parser.add_argument(
        "--log-mode", choices=["cli", "json"], help="Console logging output format."
    )
    parser.add_argument("--user", default="local", help="Name of the local identity.")
    parser.add_argument("--debug-hooks", action="store_true", help="Log every dispatch.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_shell(config: ParleyConfig, args: Namespace) -> ParleyShell:
    registry = config.build_registry()
    formatter = RichFormatter()
    register_builtin_commands(registry, formatter, config.max_message_length)
    dispatcher = Dispatcher(
        registry,
        announce_unknown_command=config.announce_unknown_command,
        self_uid=config.self_uid,
        formatter=formatter,
    )
    if args.debug_hooks:
        register_debug_hooks(dispatcher.hooks)
    return ParleyShell(dispatcher, identity=Identity(uid=args.user, name=args.user))


def main(argv: list[str] | None = None) -> Any:
    args = get_parser().parse_args(argv)
    config_path = bootstrap(args.config)
    try:
        config = load_config(config_path) if config_path else ParleyConfig()
        setup_logging(
            mode=args.log_mode or config.log_mode,
            console_log_level=config.log_level.to_logging(),
        )
        shell = build_shell(config, args)
    except ConfigError as error:
        logging.getLogger("parley").error("Failed to load configuration: %s", error)
        console.print(f"Failed to load configuration: {error}", style="error", markup=False)
        sys.exit(1)
    return asyncio.run(shell.run())


if __name__ == "__main__":
    main()
