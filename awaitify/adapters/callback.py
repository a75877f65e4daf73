# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Convert callback-style functions into functions returning awaitables.

A callback-style function takes a trailing callback instead of returning
its result. With cb_func() the callback has the "error first" signature
callback(err, value): a truthy err means the call failed. With
cb_func_value_only() the callback just receives the value(s).

The callback may be invoked later on the event loop or from another
thread (e.g. a network client's own thread). Only the first invocation
counts.
"""
import asyncio
import logging
logger = logging.getLogger(__name__)

from awaitify.base import CallbackError
from awaitify.internal import call_in_loop
from awaitify.adapters.generic import Adapter


def _values_to_result(values):
    if len(values)==0:
        return None
    elif len(values)==1:
        return values[0]
    else:
        return values


class CallbackAdapter(Adapter):
    """Adapter for functions taking a trailing callback(err, *values).
    """
    def _make_callback(self, settle):
        def callback(err=None, *values):
            settle(err, values)
        return callback

    def _start(self, fn, args, kwargs):
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        def settle_in_loop(err, values):
            if future.cancelled():
                logger.debug("Dropping callback for %s, caller cancelled" % fn)
                return
            elif future.done():
                logger.warning("Callback for %s called more than once, ignoring err=%r values=%r" %
                               (fn, err, values))
                return
            if err:
                if not isinstance(err, BaseException):
                    err = CallbackError(err)
                future.set_exception(err)
            else:
                future.set_result(_values_to_result(values))
        def settle(err, values):
            call_in_loop(loop, settle_in_loop, err, values)
        try:
            fn(*args, self._make_callback(settle), **kwargs)
        except Exception as e:
            if future.done():
                logger.exception("%s raised an exception after calling its callback" % fn)
            else:
                future.set_exception(e)
        return future


class ValueOnlyCallbackAdapter(CallbackAdapter):
    """Adapter for functions taking a trailing callback(*values), where the
    callback never reports an error.
    """
    def _make_callback(self, settle):
        def callback(*values):
            settle(None, values)
        return callback


def cb_func(transform=None):
    """Returns an adapter for callback-style functions with an error-first
    callback. The awaitable resolves to the value passed to the callback
    (None if there was none, a tuple if there were several). If the
    callback gets an error, the awaitable raises it. Errors which are not
    exceptions are raised as a CallbackError.
    """
    return CallbackAdapter(transform)


def cb_func_value_only(transform=None):
    """Returns an adapter for callback-style functions whose callback takes
    only the value.
    """
    return ValueOnlyCallbackAdapter(transform)
