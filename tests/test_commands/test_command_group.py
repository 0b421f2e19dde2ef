import logging

import pytest

from parley.command import CommandGroup
from parley.event import Identity, MessageEvent
from parley.exceptions import PermissionDeniedError, SubCommandNotFoundError
from parley.registry import Registry

ALICE = Identity(uid="alice-uid", name="Alice")


def make_event(text: str = "", identity: Identity = ALICE) -> MessageEvent:
    return MessageEvent(text=text, identity=identity)


def money_group(calls: list) -> CommandGroup:
    group = Registry().register_command_group("money")
    group.add_command("add").add_argument(
        lambda arg: arg.number().set_name("amount").min(1)
    ).exec(lambda identity, args, reply, event: calls.append(("add", args)))
    group.add_command("remove").alias("rm").add_argument(
        lambda arg: arg.number().set_name("amount").min(1)
    ).exec(lambda identity, args, reply, event: calls.append(("remove", args)))
    return group


@pytest.mark.asyncio
async def test_routes_to_sub_command():
    calls = []
    group = money_group(calls)
    await group.dispatch("add 10", make_event(), print)
    await group.dispatch("RM   2", make_event(), print)
    assert calls == [("add", {"amount": 10.0}), ("remove", {"amount": 2.0})]


@pytest.mark.asyncio
async def test_empty_text_without_group_handler():
    group = money_group([])
    with pytest.raises(SubCommandNotFoundError) as error:
        await group.dispatch("", make_event(), print)
    assert str(error.value) == "No subcommand specified for Command !money"


@pytest.mark.asyncio
async def test_unknown_sub_command():
    group = money_group([])
    with pytest.raises(SubCommandNotFoundError) as error:
        await group.dispatch("steal 5", make_event(), print)
    assert str(error.value) == (
        'Command with name "steal" has not been found on Command !money!'
    )


@pytest.mark.asyncio
async def test_group_handler_runs_for_empty_text():
    calls = []
    group = money_group(calls)
    group.exec(lambda identity, args, reply, event: calls.append(("money", args)))
    await group.dispatch("  ", make_event(), print)
    assert calls == [("money", {})]


@pytest.mark.asyncio
async def test_group_permission_is_or_over_children():
    group = CommandGroup(name="admin")
    group.add_command("kick").check_permission(lambda identity: identity.uid == "mod")
    group.add_command("ban").check_permission(lambda identity: identity.uid == "root")
    assert await group.has_permission(Identity(uid="mod"))
    assert await group.has_permission(Identity(uid="root"))
    assert not await group.has_permission(ALICE)
    with pytest.raises(PermissionDeniedError):
        await group.dispatch("kick", make_event(), print)


@pytest.mark.asyncio
async def test_group_predicates_and_own_handler():
    group = CommandGroup(name="admin").check_permission(lambda identity: identity.uid == "root")
    group.add_command("kick").check_permission(lambda identity: False)
    assert not await group.has_permission(ALICE)
    assert not await group.has_permission(Identity(uid="root"))
    group.exec(lambda identity, args, reply, event: None)
    assert await group.has_permission(Identity(uid="root"))


@pytest.mark.asyncio
async def test_child_permission_is_checked_on_dispatch():
    group = CommandGroup(name="admin")
    group.add_command("kick")
    group.add_command("ban").check_permission(lambda identity: False)
    await group.dispatch("kick", make_event(), print)
    with pytest.raises(PermissionDeniedError):
        await group.dispatch("ban", make_event(), print)


@pytest.mark.asyncio
async def test_get_available_commands():
    group = money_group([])
    group.add_command("secret").check_permission(lambda identity: False)
    group.add_command("old").disable()
    names = [command.name for command in await group.get_available_commands()]
    assert names == ["add", "remove", "secret"]
    names = [command.name for command in await group.get_available_commands(ALICE)]
    assert names == ["add", "remove"]
    names = [command.name for command in await group.get_available_commands(ALICE, "rm")]
    assert names == ["remove"]


def test_usage():
    assert money_group([]).get_usage() == "!money add|remove"


def test_duplicate_sub_command_logs_warning(caplog):
    group = CommandGroup(name="money")
    group.add_command("add")
    with caplog.at_level(logging.WARNING):
        group.add_command("add")
    assert "already a sub command named 'add'" in caplog.text
    assert len(group.commands) == 2


def test_children_inherit_registry_prefix():
    registry = Registry(prefix="?")
    group = CommandGroup(name="money")
    child = group.add_command("add")
    registry.add(group)
    assert group.full_name == "?money"
    assert child.get_prefix() == "?"
