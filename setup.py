#!/usr/bin/env python
# Copyright 2026 Taskboard
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
from setuptools import find_packages
from setuptools import setup

import taskboard


setup(
    name='taskboard',
    version=taskboard.__version__,
    provides=['taskboard'],
    author='Taskboard',
    description='Event sourced persistence for task board tasks and users',
    packages=find_packages(exclude=('tests', 'tests.*')),
    include_package_data=True,
    install_requires=[
        'boto3',
        'pyrsistent',
        'pyyaml',
    ],
    extras_require={
        'test': ['hypothesis', 'mock', 'pytest', 'pytest-mock'],
    }
)
