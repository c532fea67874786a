"""Invoke helpers: call sync or async business functions uniformly.

Business functions can be ``def`` or ``async def``.  Coroutine functions
run on the request task, so client-disconnect cancellation reaches them.
Plain functions run in an anyio worker thread so a blocking call never
stalls other in-flight requests.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(fn, request, typed_request)
"""

import functools
import inspect
from typing import Any

from anyio import to_thread


def is_async_callable(func: Any) -> bool:
    """True for ``async def`` functions, partials of them, and async ``__call__``."""
    while isinstance(func, functools.partial):
        func = func.func
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)  # noqa: B004
    return call is not None and inspect.iscoroutinefunction(call)


async def invoke(func: Any, *args: Any) -> Any:
    """Call *func* and return its result, awaiting or offloading as needed."""
    if is_async_callable(func):
        return await func(*args)
    result = await to_thread.run_sync(functools.partial(func, *args))
    if inspect.isawaitable(result):
        result = await result
    return result
