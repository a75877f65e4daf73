# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Generic adapter class, to be subclassed for the specific kinds of
asynchronous functions.
"""
import asyncio
import functools
import inspect

from awaitify.base import share, resolve


class Adapter:
    """An adapter converts a function (or a method, via for_property()) into
    a function returning an awaitable. Subclasses implement _start(), which
    calls the target function in whatever way the particular calling
    convention requires and returns an awaitable for the result.

    When called from a running event loop, the target function is called
    right away, like a promise, and the result is a future. If the function
    (or its object) was given as an awaitable, the call is made as soon as
    that resolves. Without a running loop, nothing happens until the result
    is awaited.

    If a transform is provided, it is called with the awaitable for each
    call and its return value is what the adapted function returns.
    """
    def __init__(self, transform=None):
        self.transform = transform

    def _start(self, fn, args, kwargs):
        raise NotImplementedError

    async def _call(self, lookup, args, kwargs):
        fn = await resolve(lookup())
        return await self._start(fn, args, kwargs)

    def _apply(self, lookup, args, kwargs):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # e.g. the result is passed to asyncio.run()
            return self._lazy(lookup, args, kwargs)
        fn = lookup()
        if inspect.isawaitable(fn):
            result = asyncio.ensure_future(self._call(lambda: fn, args, kwargs))
        else:
            result = self._start(fn, args, kwargs)
        if self.transform is not None:
            result = self.transform(result)
            if asyncio.iscoroutine(result):
                result = asyncio.ensure_future(result)
        return result

    def _lazy(self, lookup, args, kwargs):
        result = self._call(lookup, args, kwargs)
        if self.transform is not None:
            result = self.transform(result)
        return result

    def __call__(self, f):
        """Adapt f, which is either a callable or an awaitable that resolves
        to one.
        """
        f = share(f)
        def lookup():
            return f
        def adapted(*args, **kwargs):
            return self._apply(lookup, args, kwargs)
        if callable(f):
            functools.update_wrapper(adapted, f)
        return adapted

    def for_property(self, obj, name):
        """Adapt the method called name on obj. The object may be an
        awaitable. The method is looked up on the (resolved) object at call
        time, so it is called as a bound method of that object.
        """
        obj = share(obj)
        async def member():
            return getattr(await obj, name)
        def lookup():
            if inspect.isawaitable(obj):
                return member()
            return getattr(obj, name)
        def adapted(*args, **kwargs):
            return self._apply(lookup, args, kwargs)
        adapted.__name__ = name
        return adapted

    def __repr__(self):
        if self.transform is None:
            return '%s()' % self.__class__.__name__
        return '%s(transform=%r)' % (self.__class__.__name__, self.transform)
