"""
Parley Command Library

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import logging

from .argument import ArgumentFactory, create_argument, create_group_argument
from .builtin import register_builtin_commands
from .command import Command, CommandGroup
from .config import ParleyConfig, build_registry, load_config
from .dispatcher import Dispatcher
from .event import Identity, MessageEvent, ReplyTarget
from .registry import Registry
from .throttle import Throttle

logger = logging.getLogger("parley")


__all__ = [
    "ArgumentFactory",
    "Command",
    "CommandGroup",
    "Dispatcher",
    "Identity",
    "MessageEvent",
    "ParleyConfig",
    "Registry",
    "ReplyTarget",
    "Throttle",
    "build_registry",
    "create_argument",
    "create_group_argument",
    "load_config",
    "register_builtin_commands",
]
