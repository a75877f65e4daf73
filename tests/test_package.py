# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Tests for the names exported by the awaitify package
"""
import unittest

import awaitify
from awaitify.adapters.objects import ObjectAdapter


class TestPackage(unittest.TestCase):
    def test_star_import_keeps_builtin_object(self):
        namespace = {}
        exec('from awaitify import *', namespace)
        self.assertNotIn('object', namespace)
        self.assertIn('cb_func', namespace)

    def test_object_adapter_available(self):
        self.assertIsInstance(awaitify.object({}), ObjectAdapter)


if __name__ == '__main__':
    unittest.main()
