# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import pytest


class DirectoryDown(Exception):
    pass


class FakeConnection(object):
    def __init__(self, directory):
        self.directory = directory
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def bind(self, dn, password):
        self.directory.calls.append(('bind', dn, password))
        if self.directory.bind_error:
            raise self.directory.bind_error

    def search(self, base, spec):
        self.directory.calls.append(('search', base, spec))
        if self.directory.search_error:
            raise self.directory.search_error
        return iter(self.directory.events)


class FakeDirectory(object):
    errors = (DirectoryDown,)

    def __init__(self):
        self.calls = []
        self.connections = []
        self.events = []
        self.bind_error = None
        self.search_error = None
        self.connect_error = None

    def connect(self):
        self.calls.append(('connect',))
        if self.connect_error:
            raise self.connect_error
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    @property
    def searches(self):
        return [call for call in self.calls if call[0] == 'search']


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def unix_options():
    return {
        'server': {'url': 'ldap://127.0.0.1:389'},
        'base': ['ou=people', 'dc=example', 'dc=com'],
        'search': {'filter': '(&(objectClass=person)(uid=$uid$))', 'scope': 'base'},
    }


@pytest.fixture
def windows_options():
    return {
        'server': {'url': 'ldap://127.0.0.1:389'},
        'auth_mode': 'windows',
        'base': ['dc=ad', 'dc=sm', 'dc=else'],
        'search': {
            'filter': '(sAMAccountName=$uid$)',
            'scope': 'sub',
            'attributes': ['displayName'],
            'size_limit': 1,
        },
    }
