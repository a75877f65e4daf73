# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""
Adapt several members of one object at once. The spec maps member names
to adapters::

    conn = object({'query': cb_func(),
                   'close': func(),
                   'cursor': object({'fetch': cb_func()})})(raw_conn)
    rows = await conn.query('select 1')
    await conn.cursor.fetch()

Note that we call this function "object", shadowing the builtin within
this module, to keep the adapter names uniform.
"""
from awaitify.base import LazyAwaitable, resolve, share


class AdaptedObject:
    """The result of applying an ObjectAdapter. Each name in the spec is
    an attribute holding the adapted member. Other attributes are not
    available.
    """
    def __init__(self, target, spec):
        self.__target__ = target
        for (name, adapter) in spec.items():
            setattr(self, name, adapter.for_property(target, name))

    def __repr__(self):
        return 'AdaptedObject(%r)' % self.__target__


class ObjectAdapter:
    def __init__(self, spec):
        self.spec = dict(spec)

    def __call__(self, obj):
        """obj may be an awaitable which resolves to the object."""
        return AdaptedObject(share(obj), self.spec)

    def for_property(self, obj, name):
        """Adapt the nested object found in the name attribute of obj."""
        obj = share(obj)
        async def lookup():
            target = await resolve(obj)
            return getattr(target, name)
        return AdaptedObject(LazyAwaitable(lookup), self.spec)

    def __repr__(self):
        return 'ObjectAdapter(%s)' % ', '.join(sorted(self.spec.keys()))


def object(spec):
    """Returns an adapter for objects. spec is a mapping from member names to
    the adapters for those members (func(), cb_func(), read_stream(), or
    another object() for a nested object).
    """
    return ObjectAdapter(spec)
