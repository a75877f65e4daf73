#!/usr/bin/env python
# Copyright 2016,2017 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Setup script for the awaitify distribution. Note that we only
package up the python code. The tests are kept only in the full source
repository.
"""

import os.path
import re

from setuptools import setup


def read_version():
    # read it from the package rather than importing the package
    init_file = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             'awaitify', '__init__.py')
    with open(init_file) as f:
        return re.search(r'^__version__ = "([^"]+)"', f.read(), re.M).group(1)


DESCRIPTION =\
"""
awaitify converts callback-based and stream-based asynchronous code into
functions returning asyncio awaitables. There are adapters for plain
functions, for functions taking an error-first (or value-only) callback,
and for event streams, which become async sequences. The adapters
preserve the receiver of methods, forward the first error, and resolve
with the produced value or the accumulated stream output.

awaitify is pure Python (3.8 or later). The MQTT adapter needs the
paho-mqtt client, available through the "mqtt" extra.
"""

setup(name='awaitify',
      version=read_version(),
      description="Adapt callback and stream based functions to asyncio awaitables",
      long_description=DESCRIPTION,
      license="Apache 2.0",
      author="MPI-SWS and Data-Ken Research",
      packages=['awaitify', 'awaitify.internal', 'awaitify.adapters'],
      python_requires='>=3.8',
      extras_require={
          'mqtt': ['paho-mqtt>=2.0'],
          'test': ['paho-mqtt>=2.0', 'pytest'],
      },
      classifiers = [
          'Development Status :: 4 - Beta',
          'License :: OSI Approved :: Apache Software License',
          'Programming Language :: Python :: 3',
          'Framework :: AsyncIO',
          'Operating System :: OS Independent',
          'Intended Audience :: Developers' ,
      ],
      keywords = ['asyncio', 'callbacks', 'streams', 'promisify'],
)
