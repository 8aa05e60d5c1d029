#!/usr/bin/env python3
"""
Setup script for AutoPaste
"""

from setuptools import setup, find_packages
import os
import re

# Читаем версию без импорта пакета
def read_version():
    path = os.path.join(os.path.dirname(__file__), 'autopaste', '__version__.py')
    with open(path, encoding='utf-8') as f:
        match = re.search(r"^__version__\s*=\s*['\"]([^'\"]+)['\"]", f.read(), re.MULTILINE)
    if not match:
        raise RuntimeError('Unable to find __version__ in autopaste/__version__.py')
    return match.group(1)

# Читаем README для long_description
def read_file(filename):
    with open(os.path.join(os.path.dirname(__file__), filename), encoding='utf-8') as f:
        return f.read()

setup(
    name='autopaste',
    version=read_version(),
    description='Paste text into the focused application on macOS, Windows, X11 and Wayland',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={'autopaste': ['resources/bin/*']},
    python_requires='>=3.10',
    install_requires=[
        'pyperclip',     # Чтение/запись системного буфера обмена
    ],
    extras_require={
        'dev': [
            'pytest>=7.0',
            'pytest-asyncio>=0.21',
            'pytest-cov',
            'pytest-timeout',
        ],
    },
    entry_points={
        'console_scripts': [
            'autopaste=autopaste.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Utilities',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Operating System :: MacOS',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: POSIX :: Linux',
        'Environment :: X11 Applications',
        'Topic :: Desktop Environment',
    ],
)
