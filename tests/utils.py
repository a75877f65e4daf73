# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Common utilities for the tests
"""
import asyncio

from awaitify.base import IterableAsOutputThing, InputThing, FatalError


class CustomError(Exception):
    def __init__(self, message="Oh dear"):
        super().__init__(message)


def double(n):
    return n * 2


def _next_tick(fn, *args):
    asyncio.get_running_loop().call_soon(fn, *args)


def cb_identity(val, cb):
    """Callback-style identity function. The callback is called on the next
    iteration of the event loop.
    """
    _next_tick(cb, None, val)

def cb_error(cb):
    _next_tick(cb, CustomError())

def cb_identity_vo(val, cb):
    """Like cb_identity, but with a value-only callback"""
    _next_tick(cb, val)


def wrap_func(f, check):
    """Wrap a function in an object, as the method prop. When the method is
    called, it checks (using the check object from awaitify.testing.ptest)
    that it was called on the right object.
    """
    class Wrapper:
        def prop(self, *args):
            check.assertIs(self, obj)
            return f(*args)
        def __repr__(self):
            return 'Wrapper(%s)' % f.__name__
    obj = Wrapper()
    return obj


class ErrorIterator:
    """An iterator that thows an error after the initial stream
    (instead of StopIteration).
    """
    def __init__(self, expected_stream, exc_class=CustomError):
        self.expected_stream = expected_stream
        self.exc_class = exc_class
        self.idx = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self.idx==len(self.expected_stream):
            raise self.exc_class()
        else:
            v = self.expected_stream[self.idx]
            self.idx += 1
            return v


def make_read_stream(scheduler, values=('1', '2', '3', '4', '5')):
    """Make a simple stream, which emits one value per iteration of the
    event loop, starting on the next iteration.
    """
    stream = IterableAsOutputThing(iter(values), name='ReadStream')
    scheduler.schedule_recurring(stream)
    return stream


def make_error_stream(scheduler, values=('1', '2')):
    stream = IterableAsOutputThing(ErrorIterator(values), name='ErrorStream')
    scheduler.schedule_recurring(stream)
    return stream


class CaptureInputThing(InputThing):
    """Capture the sequence of events in a list for later use.
    """
    def __init__(self, expecting_error=False):
        self.events = []
        self.completed = False
        self.expecting_error = expecting_error
        self.errored = False
        self.error = None

    def on_next(self, x):
        self.events.append(x)

    def on_completed(self):
        self.completed = True

    def on_error(self, e):
        if self.expecting_error:
            self.errored = True
            self.error = e
        else:
            raise FatalError("Should not get on_error, got on_error(%s)" % e)


class ValidationInputThing(InputThing):
    """Compare the values in a event stream to the expected values.
    Use the test_case for the assertions (for proper error reporting in a unit
    test).
    """
    def __init__(self, expected_stream, test_case):
        self.expected_stream = expected_stream
        self.next_idx = 0
        self.test_case = test_case
        self.completed = False

    def on_next(self, x):
        tc = self.test_case
        tc.assertLess(self.next_idx, len(self.expected_stream),
                      "Got an event after reaching the end of the expected stream")
        tc.assertEqual(x, self.expected_stream[self.next_idx],
                       "Values for element %d of event stream mismatch" %
                       self.next_idx)
        self.next_idx += 1

    def on_completed(self):
        self.test_case.assertEqual(self.next_idx, len(self.expected_stream),
                                   "Got on_completed() before end of stream")
        self.completed = True

    def on_error(self, exc):
        self.test_case.assertTrue(False,
                                  "Got an unexpected on_error call with parameter: %s" %
                                  exc)

    def __repr__(self):
        return "ValidationInputThing(%s)" % self.test_case.__class__.__name__

