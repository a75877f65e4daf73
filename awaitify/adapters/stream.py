# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Convert a readable stream into an async sequence. The stream can be an
OutputThing (anything emitting on_next/on_error/on_completed events), an
async iterable such as asyncio.StreamReader, or an awaitable resolving to
either of these. For example::

    async for chunk in read_stream()(stream):
        ...

    total = await read_stream()(stream).reduce(lambda acc, x: acc+x, '')

A read_stream() adapter can also be used as the transform of another
adapter, to adapt a function or method that returns a stream::

    lines = func(read_stream()).for_property(conn, 'lines')()
"""
import asyncio
import inspect
import logging
logger = logging.getLogger(__name__)

from awaitify.base import OutputThing, InputThing, StreamConsumedError,\
                          LazyAwaitable, resolve, share
from awaitify.internal import call_in_loop


_NEXT = 'next'
_ERROR = 'error'
_COMPLETED = 'completed'


class _QueueInputThing(InputThing):
    """Put the events from an OutputThing on a queue belonging to the given
    event loop.
    """
    def __init__(self, queue, loop):
        self.queue = queue
        self.loop = loop

    def on_next(self, x):
        call_in_loop(self.loop, self.queue.put_nowait, (_NEXT, x))

    def on_error(self, e):
        call_in_loop(self.loop, self.queue.put_nowait, (_ERROR, e))

    def on_completed(self):
        call_in_loop(self.loop, self.queue.put_nowait, (_COMPLETED, None))

    def __str__(self):
        return '_QueueInputThing()'


class StreamSequence:
    """The chunks of a stream as an async sequence. The sequence can only
    be drained once. Draining ends when the stream completes. If the stream
    reports an error, the first error is raised.

    An OutputThing is connected to as soon as the sequence is created (or,
    for an awaitable source, as soon as it resolves), so no events are
    lost before the sequence is drained. Events are buffered until then.
    """
    def __init__(self, source):
        self.source = source
        self.consumed = False
        self.events = None
        self.queue = None
        self.disconnect = None
        self.opening = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return # no loop yet, we connect when drained
        if isinstance(source, OutputThing):
            self._connect(source)
        elif inspect.isawaitable(source):
            self.opening = asyncio.ensure_future(self._open())

    def _connect(self, source):
        self.queue = asyncio.Queue()
        self.disconnect = \
            source.connect(_QueueInputThing(self.queue, asyncio.get_running_loop()))
        logger.debug("%s connected to %s" % (self, source))

    def _disconnect(self):
        if self.disconnect is not None:
            self.disconnect()
            self.disconnect = None

    async def _open(self):
        source = await resolve(self.source)
        if isinstance(source, OutputThing) and self.queue is None:
            self._connect(source)
        return source

    def __aiter__(self):
        if self.consumed:
            raise StreamConsumedError("%s has already been drained" % self)
        self.consumed = True
        self.events = self._events()
        return self.events

    async def _events(self):
        if self.opening is not None:
            source = await self.opening
        else:
            source = await self._open()
        if isinstance(source, OutputThing):
            try:
                while True:
                    (kind, value) = await self.queue.get()
                    if kind==_NEXT:
                        yield value
                    elif kind==_ERROR:
                        raise value
                    else:
                        return
            finally:
                self._disconnect()
        elif hasattr(source, '__aiter__'):
            iterator = source.__aiter__()
            try:
                async for chunk in iterator:
                    yield chunk
            finally:
                if hasattr(iterator, 'aclose'):
                    await iterator.aclose()
        else:
            raise TypeError("Cannot read a stream from %r, expecting an OutputThing or an async iterable" %
                            source)

    async def map(self, fn):
        """Drain the stream, calling fn on each chunk (and awaiting the result
        if it is awaitable). Returns the list of results once the stream has
        completed. If fn raises an exception, we stop reading the stream and
        the exception is propagated.
        """
        results = []
        events = self.__aiter__()
        try:
            async for chunk in events:
                results.append(await resolve(fn(chunk)))
        finally:
            await events.aclose()
        return results

    async def collect(self):
        return await self.map(lambda chunk: chunk)

    async def reduce(self, fn, initial):
        acc = initial
        events = self.__aiter__()
        try:
            async for chunk in events:
                acc = await resolve(fn(acc, chunk))
        finally:
            await events.aclose()
        return acc

    async def aclose(self):
        """Stop reading the stream and disconnect from it. If it was never
        drained, it now cannot be.
        """
        self.consumed = True
        if self.opening is not None and not self.opening.done():
            self.opening.cancel()
        if self.events is not None:
            await self.events.aclose()
        self._disconnect()

    def __repr__(self):
        return 'StreamSequence(%r)' % self.source


class ReadStreamAdapter:
    def __call__(self, stream):
        return StreamSequence(stream)

    def for_property(self, obj, name):
        """Read the stream which is the attribute name of obj (obj may be an
        awaitable).
        """
        obj = share(obj)
        async def lookup():
            target = await resolve(obj)
            return getattr(target, name)
        return StreamSequence(LazyAwaitable(lookup))

    def __repr__(self):
        return 'ReadStreamAdapter()'


def read_stream():
    """Returns an adapter which converts a stream (or an awaitable for one)
    into a StreamSequence.
    """
    return ReadStreamAdapter()
