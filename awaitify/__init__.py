# Copyright 2016,2017 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
This is the main package for awaitify. Directly within this package you will
find the following modules:

 * `base` - the event stream abstractions (OutputThing, InputThing, the
   scheduler) and the shared awaitable helpers used by the adapters.
 * `testing` - a small harness for awaitable-based unit tests (time limits
   and expected assertion counts).

The adapters themselves are in the `adapters` sub-package:

 * `adapters.func` - plain functions to functions returning awaitables
 * `adapters.callback` - callback-style functions to functions returning
   awaitables
 * `adapters.stream` - event streams to async sequences
 * `adapters.objects` - adapt several methods of one object at once
 * `adapters.mqtt` - an MQTT subscription as an event stream
"""

__version__ = "1.0.0"

from awaitify.adapters.func import func, then
from awaitify.adapters.callback import cb_func, cb_func_value_only
from awaitify.adapters.stream import read_stream
from awaitify.adapters.objects import object

# object is left out so that a star import does not shadow the builtin
__all__ = ['func', 'then', 'cb_func', 'cb_func_value_only', 'read_stream']
