"""
Parley Command Library

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .base import Argument, ArgumentKind
from .factory import ArgumentFactory, create_argument, create_group_argument
from .group import GroupArgument, GroupMode
from .identity import (
    DiscordIdentityResolver,
    IdentityArgument,
    IdentityResolver,
    token_identity_resolver,
    ts3_identity_resolver,
)
from .number import NumberArgument
from .string import RestArgument, StringArgument

__all__ = [
    "Argument",
    "ArgumentKind",
    "ArgumentFactory",
    "create_argument",
    "create_group_argument",
    "GroupArgument",
    "GroupMode",
    "DiscordIdentityResolver",
    "IdentityArgument",
    "IdentityResolver",
    "token_identity_resolver",
    "ts3_identity_resolver",
    "NumberArgument",
    "RestArgument",
    "StringArgument",
]
