import logging

import pytest

from parley.command import Command
from parley.event import Identity, MessageEvent
from parley.exceptions import (
    CommandDisabledError,
    HandlerError,
    ParseError,
    PermissionDeniedError,
    ThrottleError,
)
from parley.hook_manager import HookType
from parley.registry import Registry
from parley.scheduler import ManualScheduler
from parley.throttle import Throttle

ALICE = Identity(uid="alice-uid", name="Alice")


def make_event(text: str = "", identity: Identity = ALICE) -> MessageEvent:
    return MessageEvent(text=text, identity=identity)


@pytest.mark.asyncio
async def test_handlers_receive_identity_args_reply_and_event():
    calls = []
    replies = []
    command = Command(name="ping").add_argument(
        lambda arg: arg.number().set_name("amount").optional(1)
    )
    command.exec(lambda identity, args, reply, event: calls.append((identity, args, event)))
    event = make_event("!ping 3")
    await command.dispatch("3", event, replies.append)
    assert calls == [(ALICE, {"amount": 3.0}, event)]


@pytest.mark.asyncio
async def test_sync_and_async_handlers_run_in_order():
    order = []

    async def second(identity, args, reply, event):
        order.append("second")
        reply("pong")

    replies = []
    command = (
        Command(name="ping")
        .exec(lambda identity, args, reply, event: order.append("first"))
        .exec(second)
    )
    results = await command.dispatch("", make_event(), replies.append)
    assert order == ["first", "second"]
    assert replies == ["pong"]
    assert len(results) == 2


@pytest.mark.asyncio
async def test_disabled_command_raises_before_permission_check():
    checked = []
    command = (
        Command(name="ping")
        .check_permission(lambda identity: checked.append(identity) or True)
        .disable()
    )
    with pytest.raises(CommandDisabledError, match="Command !ping is disabled!"):
        await command.dispatch("", make_event(), print)
    assert checked == []


@pytest.mark.asyncio
async def test_permission_denied_does_not_charge_throttle():
    throttle = Throttle(initial_points=1, scheduler=ManualScheduler())
    command = (
        Command(name="ping")
        .check_permission(lambda identity: identity.uid == "admin")
        .add_throttle(throttle)
    )
    with pytest.raises(PermissionDeniedError):
        await command.dispatch("", make_event(), print)
    assert len(throttle) == 0


@pytest.mark.asyncio
async def test_async_permission_predicates():
    async def is_alice(identity):
        return identity.uid == "alice-uid"

    command = Command(name="ping").check_permission(is_alice).check_permission(
        lambda identity: True
    )
    assert await command.is_allowed(ALICE)
    assert not await command.is_allowed(Identity(uid="bob"))


@pytest.mark.asyncio
async def test_throttle_is_charged_before_validation():
    throttle = Throttle(initial_points=2, scheduler=ManualScheduler())
    command = (
        Command(name="roll")
        .add_argument(lambda arg: arg.number().set_name("sides"))
        .add_throttle(throttle)
    )
    with pytest.raises(ParseError):
        await command.dispatch("abc", make_event(), print)
    assert throttle.points(ALICE) == 1


@pytest.mark.asyncio
async def test_throttle_allows_three_uses_then_raises():
    scheduler = ManualScheduler()
    throttle = Throttle(
        initial_points=3, penalty_per_use=1, tick_interval=1000, scheduler=scheduler
    )
    calls = []
    command = (
        Command(name="roll")
        .add_throttle(throttle)
        .exec(lambda identity, args, reply, event: calls.append(1))
    )
    for _ in range(3):
        await command.dispatch("", make_event(), print)
    with pytest.raises(ThrottleError) as error:
        await command.dispatch("", make_event(), print)
    assert len(calls) == 3
    assert error.value.retry_after == 1000
    assert str(error.value) == "You can use this command again in 1.0 seconds!"

    scheduler.advance(1000)
    await command.dispatch("", make_event(), print)
    assert len(calls) == 4


@pytest.mark.asyncio
async def test_all_handlers_run_and_failures_are_aggregated():
    ran = []

    def broken(identity, args, reply, event):
        raise RuntimeError("boom")

    command = (
        Command(name="ping")
        .exec(broken)
        .exec(lambda identity, args, reply, event: ran.append("second"))
    )
    with pytest.raises(HandlerError) as error:
        await command.dispatch("", make_event(), print)
    assert ran == ["second"]
    assert len(error.value.errors) == 1
    index, exception = error.value.errors[0]
    assert index == 0
    assert isinstance(exception, RuntimeError)


@pytest.mark.asyncio
async def test_command_hooks_wrap_handlers():
    seen = []
    command = Command(name="ping").exec(lambda identity, args, reply, event: "pong")
    command.hooks.register(HookType.BEFORE, lambda context: seen.append("before"))
    command.hooks.register(
        HookType.ON_SUCCESS, lambda context: seen.append(("success", context.result))
    )
    command.hooks.register("after", lambda context: seen.append("after"))
    await command.dispatch("", make_event(), print)
    assert seen == ["before", ("success", ["pong"]), "after"]


@pytest.mark.asyncio
async def test_command_error_hook_sees_handler_error():
    seen = []

    def broken(identity, args, reply, event):
        raise ValueError("bad")

    command = Command(name="ping").exec(broken)
    command.hooks.register("error", lambda context: seen.append(context.exception))
    with pytest.raises(HandlerError):
        await command.dispatch("", make_event(), print)
    assert isinstance(seen[0], HandlerError)


def test_duplicate_alias_logs_warning(caplog):
    registry = Registry()
    registry.register_command("ping")
    with caplog.at_level(logging.WARNING):
        registry.register_command("pong").alias("ping")
    assert "alias 'ping' is already in use" in caplog.text


def test_check_permission_requires_callable():
    with pytest.raises(TypeError):
        Command(name="ping").check_permission("admin")
