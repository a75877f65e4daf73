# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Convert an ordinary function into a function returning an awaitable.
For example::

    doubled = await func()(double)(42)

The function may also be given as an awaitable which resolves to the
function, and methods are adapted with for_property()::

    await func().for_property(conn, 'execute')(query)
"""
import asyncio
import inspect

from awaitify.base import resolve
from awaitify.adapters.generic import Adapter


class FuncAdapter(Adapter):
    def _start(self, fn, args, kwargs):
        future = asyncio.get_running_loop().create_future()
        try:
            value = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
            return future
        # a function that already returns an awaitable is awaited as well
        if inspect.isawaitable(value):
            return asyncio.ensure_future(value)
        future.set_result(value)
        return future


def func(transform=None):
    """Returns an adapter for plain functions. Calling the adapted function
    returns an awaitable for the return value. An exception raised by the
    function is raised when the awaitable is awaited.
    """
    return FuncAdapter(transform)


def then(fn):
    """Build a transform that applies fn to the resolved value. If fn returns
    an awaitable, that is awaited too::

        quadrupled = await func(then(double))(double)(45)
    """
    async def transform(awaitable):
        return await resolve(fn(await awaitable))
    return transform
