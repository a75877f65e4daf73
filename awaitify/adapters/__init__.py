# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
*Adapters* convert the different styles of asynchronous code into
awaitables. Each kind of adapter is created by a factory function, and
the adapter is then applied to a function (or, via for_property(), to a
member of an object):

 * `func()` - plain functions (the result is returned or raised directly)
 * `cb_func()` / `cb_func_value_only()` - functions taking a trailing
   callback
 * `read_stream()` - event streams, converted to async sequences
 * `object()` - several members of one object, each with its own adapter

The factories for func and the callback adapters take an optional
transform, which is given the awaitable for each call and returns what
the adapted function should return. Since read_stream() adapters accept
awaitables, they can be used as transforms for functions returning a
stream.
"""
