# NMEA0183 Logger - marine sentence logger and voyage analyzer
# Copyright (C) 2024 NMEA0183 Logger Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

from setuptools import setup, find_packages

setup(
    name='nmea0183-logger',
    version='1.0.0',
    description='NMEA0183 sentence logger with throttling, rotation and voyage analysis',
    author='NMEA0183 Logger Contributors',
    license='AGPL-3.0',
    packages=find_packages(exclude=['test', 'test.*']),
    py_modules=['config', 'nmealogger_cli'],
    install_requires=[
        'numpy',
        'matplotlib',
        'pynmea2',
        'aiohttp>=3.9',
    ],
    extras_require={
        'test': [
            'pytest',
            'pyais>=3',
        ],
    },
    entry_points={
        'console_scripts': [
            'nmealogger=nmealogger_cli:main',
        ],
    },
    python_requires='>=3.8',
)
