# Copyright 2016,2017 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Internal definitions shared across the package. Not part of the public
API.
"""
import asyncio


def noop(*args, **kw):
    """No operation. Returns nothing"""
    pass


def call_in_loop(loop, fn, *args):
    """Run fn(*args) on the given event loop. If that loop is the one running
    in the current thread, the call is made directly. Otherwise (e.g. a
    callback from a client library's network thread) it is queued through
    call_soon_threadsafe().
    """
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        fn(*args)
    else:
        loop.call_soon_threadsafe(fn, *args)
