#!/usr/bin/env python
# -*- coding:utf-8 -*-

import setuptools
import re

with open('src/ldap_strategy/__init__.py', 'r') as fd:
    version = re.search(r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]', fd.read(), re.MULTILINE).group(1)

with open('README.md', 'r') as fd:
    long_description = fd.read()

setuptools.setup(
    name='ldap-strategy',
    version=version,
    description='Bind-then-search LDAP authentication strategy for falcon applications',
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'License :: OSI Approved :: BSD License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3'
    ],
    package_dir={'': 'src'},
    packages=setuptools.find_packages('src'),
    include_package_data=True,
    install_requires=[
        'falcon>=3.1',
        'falcon-cors',
        'gevent',
        'ujson',
        'PyYAML',
        'beaker',
        'cryptography',
        'python-ldap',
    ],
    extras_require={
        'dev': [
            'pytest',
            'pytest-mock',
            'gunicorn',
            'flake8',
        ],
    },
    entry_points={
        'console_scripts': [
            'ldap-strategy-dev = ldap_strategy.bin.run_server:main',
        ]
    }
)
