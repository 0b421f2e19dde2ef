# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""debug.py"""
from parley.context import ExecutionContext
from parley.hook_manager import HookManager, HookType
from parley.logger import logger


def log_before(context: ExecutionContext):
    """Log the start of a dispatch."""
    logger.info(
        "[%s] Starting for %s with %r",
        context.name,
        context.identity or "unknown",
        context.text,
    )


def log_success(context: ExecutionContext):
    """Log the successful completion of a dispatch."""
    arguments = repr(context.kwargs)
    if len(arguments) > 100:
        arguments = f"{arguments[:100]} ..."
    logger.debug("[%s] Success -> Arguments: %s", context.name, arguments)


def log_after(context: ExecutionContext):
    """Log the completion of a dispatch, regardless of success or failure."""
    logger.debug("%s", context.to_log_line())


def log_error(context: ExecutionContext):
    """Log an error that occurred during the dispatch."""
    logger.error(
        "[%s] Error (%s): %s",
        context.name,
        type(context.exception).__name__,
        context.exception,
        exc_info=context.exception,
    )


def register_debug_hooks(hooks: HookManager):
    hooks.register(HookType.BEFORE, log_before)
    hooks.register(HookType.AFTER, log_after)
    hooks.register(HookType.ON_SUCCESS, log_success)
    hooks.register(HookType.ON_ERROR, log_error)
