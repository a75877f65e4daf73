# Copyright 2016,2017 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Base functionality for awaitify. The event stream abstractions and the
awaitable helpers used by all of the adapters are defined here.

The key abstractions are:

 * OutputThing - Base class and interface for things that emit an event
                 stream. This is what we call a readable stream: a
                 sequence of on_next() events followed by either
                 on_completed() or on_error().
 * InputThing  - interface for things that receive a stream of events.
 * Scheduler   - Feeds OutputThings that originate events (such as an
                 iterable) from a running asyncio event loop, one event per
                 iteration of the loop.
 * SharedAwaitable - wraps a single-shot awaitable (e.g. a coroutine) so that
                 it can be awaited any number of times.
"""

import asyncio
import inspect
import logging
logger = logging.getLogger(__name__)

from awaitify.internal import noop


class InputThing:
    """This is the interface for things that receive the events of a
    stream.
    """
    def on_next(self, x):
        pass

    def on_error(self, e):
        pass

    def on_completed(self):
        pass


class CallableAsInputThing(InputThing):
    """Wrap any callable with the InputThing interface.
    We only pass it the on_next() calls. on_error and on_completed
    can be passed in or default to noops.
    """
    def __init__(self, on_next=None, on_error=None, on_completed=None):
        self.on_next = on_next or noop
        self.on_error = on_error or self._default_error
        self.on_completed = on_completed or noop

    def _default_error(self, err):
        if isinstance(err, FatalError):
            raise err.with_traceback(err.__traceback__)
        else:
            logger.error("%s: Received on_error(%s)" % (self, err))

    def __str__(self):
        return 'CallableAsInputThing(%s)' % str(self.on_next)

    def __repr__(self):
        return 'CallableAsInputThing(on_next=%s, on_error=%s, on_completed=%s)' % \
            (repr(self.on_next), repr(self.on_error), repr(self.on_completed))


class FatalError(Exception):
    """This is the base class for exceptions that indicate a problem in the
    infrastructure rather than in the data flowing through it. Examples
    include connecting an object that is not an InputThing, dispatching on
    a stream that already ended, or draining a stream twice.
    Normal errors are delivered through the awaitable or the on_error()
    path instead.
    """
    pass

class InvalidPortError(FatalError):
    """The thing being connected does not have the InputThing methods."""
    pass

class PortAlreadyClosed(FatalError):
    pass


class ExcInDispatch(FatalError):
    """Dispatching an event should not raise an error, other than a
    fatal error.
    """
    pass


class ScheduleError(FatalError):
    pass


class StreamConsumedError(FatalError):
    """A stream sequence can only be drained once."""
    pass


class CallbackError(Exception):
    """Raised from an adapted callback-style function when the callback was
    given an error value that is not an exception (e.g. an error string).
    The original value is available as the `error` attribute.
    """
    def __init__(self, error):
        super().__init__("callback reported an error: %r" % (error,))
        self.error = error


# Internal representation of a connection. The first three fields
# are functions which dispatch to the InputThing. The InputThing itself
# is not needed at runtime, but helpful in debugging.
class _Connection:
    __slots__ = ('on_next', 'on_completed', 'on_error', 'input_thing')
    def __init__(self, on_next, on_completed, on_error, input_thing):
        self.on_next = on_next
        self.on_completed = on_completed
        self.on_error = on_error
        self.input_thing = input_thing

    def __repr__(self):
        return '_Connection(%s)' % repr(self.input_thing)


class OutputThing:
    """Base class for event generators (output things). The non-underscore
    methods are the public end-user interface. The methods starting with
    underscores are for the things themselves and for the scheduler.

    After on_completed() or on_error() has been dispatched, the stream is
    closed and dispatching anything else raises PortAlreadyClosed.
    """
    def __init__(self):
        self.__connections__ = []
        self.__closed__ = False

    def connect(self, input_thing):
        """Connect an InputThing to the events of this stream. A plain
        callable is wrapped so that it receives the on_next() events.

        This returns a fuction that can be called to remove the connection.
        """
        if self.__closed__:
            raise PortAlreadyClosed("Cannot connect %s to %s, which has already ended" %
                                    (input_thing, self))
        if not hasattr(input_thing, 'on_next') and callable(input_thing):
            input_thing = CallableAsInputThing(input_thing)
        try:
            connection = _Connection(on_next=input_thing.on_next,
                                     on_completed=input_thing.on_completed,
                                     on_error=input_thing.on_error,
                                     input_thing=input_thing)
        except AttributeError:
            raise InvalidPortError("%s is missing on_next(), on_error() or on_completed()" %
                                   input_thing)
        self.__connections__ = self.__connections__ + [connection]
        def disconnect():
            # We replace the list instead of changing it, so that disconnect()
            # can be called within a _dispatch method.
            self.__connections__ = [c for c in self.__connections__
                                    if c is not connection]
        return disconnect

    def _has_connections(self):
        """Used by the scheduler to see the thing has any more outgoing connections.
        If a scheduled thing no longer has output connections, it is descheduled.
        """
        return len(self.__connections__)>0

    def _get_connections(self):
        if self.__closed__:
            raise PortAlreadyClosed("OutputThing %s already had an on_completed or on_error event" %
                                    self)
        return self.__connections__

    def _close_port(self):
        """The stream will receive no more events."""
        self.__closed__ = True
        self.__connections__ = []

    def _dispatch_next(self, x):
        for s in self._get_connections():
            try:
                s.on_next(x)
            except FatalError:
                raise
            except Exception as e:
                raise ExcInDispatch("Unexpected exception when dispatching event '%s' to InputThing %s from OutputThing %s" %
                                    (repr(x), s.input_thing, self)) from e

    def _dispatch_completed(self):
        connections = self._get_connections()
        self._close_port()
        for s in connections:
            try:
                s.on_completed()
            except FatalError:
                raise
            except Exception as e:
                raise ExcInDispatch("Unexpected exception when dispatching completed to InputThing %s from OutputThing %s" %
                                    (s.input_thing, self)) from e

    def _dispatch_error(self, e):
        connections = self._get_connections()
        self._close_port()
        for s in connections:
            try:
                s.on_error(e)
            except FatalError:
                raise
            except Exception as exc:
                raise ExcInDispatch("Unexpected exception when dispatching error '%s' to InputThing %s from OutputThing %s" %
                                    (repr(e), s.input_thing, self)) from exc

    def __str__(self):
        return self.__class__.__name__ + '()'


class DirectOutputThingMixin:
    """This is the interface for OutputThings that should be directly
    scheduled by the scheduler (through schedule_recurring()).
    """
    def _observe(self):
        """Get an event and call the appropriate dispatch function.
        """
        raise NotImplementedError


class IterableAsOutputThing(OutputThing, DirectOutputThingMixin):
    """Convert any interable to an OutputThing. This can be
    used with the schedule_recurring() method of the scheduler.
    """
    def __init__(self, iterable, name=None):
        super().__init__()
        self.iterable = iterable
        self.name = name

    def _observe(self):
        try:
            event = self.iterable.__next__()
        except StopIteration:
            self._close()
            self._dispatch_completed()
        except FatalError:
            self._close()
            raise
        except Exception as e:
            # If the iterable throws an exception, we treat it as non-fatal.
            # The error is dispatched downstream and the stream closed.
            logger.exception("Iterable for %s raised an exception" % self)
            self._close()
            self._dispatch_error(e)
        else:
            self._dispatch_next(event)

    def _close(self):
        """This method is called when we stop the iteration, either due to
        reaching the end of the sequence or an error. It can be overridden by
        subclasses to clean up any state and release resources (e.g. closing
        open files/connections).
        """
        pass

    def __str__(self):
        if self.name:
            return self.name
        else:
            return super().__str__()

def from_iterable(i):
    return IterableAsOutputThing(i)

def from_list(l):
    return IterableAsOutputThing(iter(l))


class Scheduler:
    """Wrap an asyncio event loop and feed OutputThings from it, calling
    _observe() once per iteration of the loop (the analogue of "next tick").
    The scheduler does not run the loop itself: it is meant to be used from
    code already running on the loop (e.g. inside asyncio.run()).
    """
    def __init__(self, event_loop):
        self.event_loop = event_loop
        self.active_schedules = {} # mapping from OutputThing to loop handle

    def _deschedule(self, output_thing):
        del self.active_schedules[output_thing]
        if len(self.active_schedules)==0:
            logger.debug("No more active schedules")

    def schedule_recurring(self, output_thing):
        """Takes a DirectOutputThingMixin and calls _observe() once per
        iteration of the event loop to get events, starting on the next
        iteration. If, after the call, there are no downstream connections,
        the scheduler will deschedule the output thing.

        This is useful for something like an iterable. If the call to
        get the next event would block, don't use this!

        Returns a callable that can be used to remove the OutputThing from the
        scheduler.
        """
        def run():
            output_thing._observe()
            if output_thing not in self.active_schedules:
                return # cancelled from within _observe()
            if output_thing._has_connections():
                self.active_schedules[output_thing] = \
                    self.event_loop.call_soon(run)
            else:
                self._deschedule(output_thing)
        self.active_schedules[output_thing] = self.event_loop.call_soon(run)
        def cancel():
            try:
                handle = self.active_schedules[output_thing]
            except KeyError:
                raise ScheduleError("Attempt to de-schedule OutputThing %s, which does not have an active schedule" %
                                    output_thing)
            handle.cancel()
            self._deschedule(output_thing)
        return cancel


async def resolve(x):
    """Await x if it is awaitable, otherwise return it unchanged. Awaitables
    resolving to other awaitables are not unwrapped further.
    """
    if inspect.isawaitable(x):
        return await x
    return x


class SharedAwaitable:
    """Wrap an awaitable so that it can be awaited more than once. A coroutine
    can only be awaited a single time, so on the first await we turn it into a
    future (scheduled on the running loop) and every await after that waits
    on the same future.
    """
    def __init__(self, awaitable):
        self.awaitable = awaitable
        self.future = None

    def __await__(self):
        if self.future is None:
            self.future = asyncio.ensure_future(self.awaitable)
        return self.future.__await__()

    def __repr__(self):
        return 'SharedAwaitable(%r)' % self.awaitable


def share(x):
    """Return x as-is if it is not awaitable, otherwise wrap it (once) in
    a SharedAwaitable.
    """
    if isinstance(x, SharedAwaitable) or not inspect.isawaitable(x):
        return x
    return SharedAwaitable(x)


class LazyAwaitable(SharedAwaitable):
    """A SharedAwaitable whose underlying awaitable is only created, by
    calling factory(), when it is first awaited. Nothing is started (and no
    coroutine is left un-awaited) if it is never awaited.
    """
    def __init__(self, factory):
        super().__init__(None)
        self.factory = factory

    def __await__(self):
        if self.future is None:
            self.future = asyncio.ensure_future(self.factory())
        return self.future.__await__()

    def __repr__(self):
        return 'LazyAwaitable(%r)' % self.factory
