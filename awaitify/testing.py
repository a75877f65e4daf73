# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Support for writing unit tests against awaitables.

A test is a coroutine method taking a `check` argument, which stands in for
the test case when making assertions. The ptest() decorator runs it on a
fresh event loop with a time limit and verifies that the expected number
of assertions were made::

    class TestDouble(unittest.TestCase):
        @ptest()
        async def test_double(self, check):
            check.assertEqual(await func()(double)(42), 84)

Counting assertions catches tests which pass because an assertion was
never reached, e.g. the error handler of a call which unexpectedly
succeeded.
"""
import asyncio
import contextlib
import functools
import logging
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5 # seconds


class TestTimeoutError(Exception):
    __test__ = False # not a test case, despite the name

    def __init__(self, message="test timed out"):
        super().__init__(message)


async def promptly(val):
    """Resolve to val on the next iteration of the event loop."""
    await asyncio.sleep(0)
    return val


class ExpectedAssertions:
    """Wrap a unittest.TestCase, counting the calls to its assert methods.
    All other attributes are passed through unchanged.
    """
    def __init__(self, test_case, expecting):
        self.test_case = test_case
        self.expecting = expecting
        self.count = 0

    def __getattr__(self, name):
        attr = getattr(self.test_case, name)
        if not (name.startswith('assert') and callable(attr)):
            return attr
        def counted(*args, **kwargs):
            self.count += 1
            return attr(*args, **kwargs)
        return counted

    def done(self):
        self.test_case.assertEqual(self.count, self.expecting,
                                   "Expected %d assertion(s), but %d were made" %
                                   (self.expecting, self.count))


async def run_with_timeout(coro, timeout):
    """Await coro, raising TestTimeoutError if it takes longer than timeout
    seconds. The coroutine is cancelled in that case.
    """
    task = asyncio.ensure_future(coro)
    (done, pending) = await asyncio.wait([task], timeout=timeout)
    if not done:
        logger.error("Test %r did not finish within %s seconds" % (coro, timeout))
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        raise TestTimeoutError()
    return task.result()


def ptest(expecting=1, timeout=DEFAULT_TIMEOUT):
    """Decorator for coroutine test methods. The decorated method is an
    ordinary (synchronous) test method which runs the coroutine in a new
    event loop. It fails if the coroutine raises, takes longer than timeout
    seconds, or makes a number of assertions (through its check argument)
    different from expecting.
    """
    def decorator(test):
        @functools.wraps(test)
        def wrapper(self):
            check = ExpectedAssertions(self, expecting)
            asyncio.run(run_with_timeout(test(self, check), timeout))
            check.done()
        return wrapper
    return decorator
