# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Tests for adapting callback-style functions with cb_func() and
cb_func_value_only()
"""
import asyncio
import threading
import unittest

from awaitify.base import CallbackError
from awaitify.adapters.callback import cb_func, cb_func_value_only
from awaitify.adapters.func import then
from awaitify.testing import ptest, promptly
from utils import CustomError, double, wrap_func, cb_identity, cb_error,\
                  cb_identity_vo


def cb_twice(val, cb):
    loop = asyncio.get_running_loop()
    loop.call_soon(cb, None, val)
    loop.call_soon(cb, None, val + 1)

def cb_many(cb):
    asyncio.get_running_loop().call_soon(cb, None, 1, 2, 3)

def cb_no_value(cb):
    asyncio.get_running_loop().call_soon(cb)

def cb_string_error(cb):
    asyncio.get_running_loop().call_soon(cb, 'not found')

def cb_raises(cb):
    raise CustomError()

def cb_from_thread(val, cb):
    threading.Thread(target=cb, args=(None, val)).start()

def cb_kwargs(val, cb, scale=1):
    asyncio.get_running_loop().call_soon(cb, None, val * scale)


class TestCbFunc(unittest.TestCase):
    @ptest()
    async def test_cb_func(self, check):
        check.assertEqual(await cb_func()(cb_identity)(42), 42)

    @ptest()
    async def test_cb_func_awaitable(self, check):
        check.assertEqual(await cb_func()(promptly(cb_identity))(43), 43)

    @ptest(2)
    async def test_cb_func_awaitable_obj(self, check):
        obj = promptly(wrap_func(cb_identity, check))
        check.assertEqual(await cb_func().for_property(obj, 'prop')(44), 44)

    @ptest()
    async def test_cb_func_error(self, check):
        with check.assertRaises(CustomError):
            await cb_func()(cb_error)()

    @ptest()
    async def test_cb_func_awaitable_error(self, check):
        with check.assertRaises(CustomError):
            await cb_func()(promptly(cb_error))()

    @ptest(2)
    async def test_cb_func_awaitable_obj_error(self, check):
        obj = promptly(wrap_func(cb_error, check))
        with check.assertRaises(CustomError):
            await cb_func().for_property(obj, 'prop')()

    @ptest()
    async def test_cb_func_transform_result(self, check):
        check.assertEqual(await cb_func(then(double))(cb_identity)(42), 84)

    @ptest()
    async def test_cb_func_synchronous_exception(self, check):
        with check.assertRaises(CustomError):
            await cb_func()(cb_raises)()

    @ptest(2)
    async def test_cb_func_non_exception_error(self, check):
        with check.assertRaises(CallbackError) as ctx:
            await cb_func()(cb_string_error)()
        check.assertEqual(ctx.exception.error, 'not found')

    @ptest(3)
    async def test_cb_func_called_twice(self, check):
        """Only the first call of the callback counts"""
        with check.assertLogs('awaitify.adapters.callback', level='WARNING') as logs:
            check.assertEqual(await cb_func()(cb_twice)(1), 1)
            await asyncio.sleep(0)
        check.assertEqual(len(logs.records), 1)

    @ptest(2)
    async def test_cb_func_values(self, check):
        check.assertEqual(await cb_func()(cb_many)(), (1, 2, 3))
        check.assertIsNone(await cb_func()(cb_no_value)())

    @ptest()
    async def test_cb_func_from_thread(self, check):
        check.assertEqual(await cb_func()(cb_from_thread)(7), 7)

    @ptest(2)
    async def test_cb_func_called_before_await(self, check):
        calls = []
        def record(val, cb):
            calls.append(val)
            cb_identity(val, cb)
        result = cb_func()(record)(1)
        check.assertEqual(calls, [1])
        check.assertEqual(await result, 1)

    @ptest(2)
    async def test_cb_func_awaitable_called_once_resolved(self, check):
        calls = []
        def record(val, cb):
            calls.append(val)
            cb_identity(val, cb)
        result = cb_func()(promptly(record))(5)
        await asyncio.sleep(0.01)
        check.assertEqual(calls, [5])
        check.assertEqual(await result, 5)

    @ptest()
    async def test_cb_func_kwargs(self, check):
        """Keyword arguments follow the callback"""
        check.assertEqual(await cb_func()(cb_kwargs)(7, scale=3), 21)


class TestCbFuncValueOnly(unittest.TestCase):
    @ptest()
    async def test_cb_func_value_only(self, check):
        check.assertEqual(await cb_func_value_only()(cb_identity_vo)(42), 42)

    @ptest()
    async def test_cb_func_value_only_error_value(self, check):
        """An exception passed to a value-only callback is just a value"""
        err = CustomError()
        check.assertIs(await cb_func_value_only()(cb_identity_vo)(err), err)

    @ptest(2)
    async def test_cb_func_value_only_for_property(self, check):
        obj = wrap_func(cb_identity_vo, check)
        check.assertEqual(
            await cb_func_value_only().for_property(obj, 'prop')(45), 45)


if __name__ == '__main__':
    unittest.main()
