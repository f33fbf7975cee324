# -*- coding: utf-8 -*-
from setuptools import setup

from aerodramus import VERSION

install_requires = ['tornado>=6.0']

setup(name="aerodramus",
      version=VERSION,
      description="Callback lists and chainable promises with tornado and "
                  "twisted event loop helpers",
      packages=['aerodramus',
                'aerodramus.stack',
                'aerodramus.stack.network',
                'aerodramus.twisted_stack',
                'aerodramus.tornado_stack',
                'aerodramus.tornado_stack.network'],
      install_requires=install_requires,
      extras_require={
          'twisted': ['twisted'],
          'image': ['Pillow'],
          'tests': ['pytest', 'Pillow', 'twisted'],
      },
      python_requires='>=3.8',
      license='MIT'
      )
