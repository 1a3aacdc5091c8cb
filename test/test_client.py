# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import ldap
import pytest

from ldap_strategy.client import (
    LDAPClient, SearchEntry, SearchEnd, SearchError, result_code, decode_attributes
)
from ldap_strategy.config import load_server, SearchSpec

NOT_READY = (None, None, None, None)


@pytest.fixture
def connection(mocker):
    conn = mocker.MagicMock(name='ldapConnection')
    mocker.patch('ldap_strategy.client.ldap.initialize', return_value=conn)
    return conn


@pytest.fixture
def client():
    return LDAPClient(load_server({'url': 'ldap://127.0.0.1:389', 'network_timeout': 3, 'poll_interval': 0.001}))


def test_connect_sets_options(connection, client):
    client.connect()
    ldap.initialize.assert_called_once_with('ldap://127.0.0.1:389')
    connection.set_option.assert_any_call(ldap.OPT_REFERRALS, 0)
    connection.set_option.assert_any_call(ldap.OPT_NETWORK_TIMEOUT, 3)
    connection.start_tls_s.assert_not_called()


def test_connect_start_tls(connection):
    client = LDAPClient(load_server({'url': 'ldap://127.0.0.1:389', 'start_tls': True}))
    client.connect()
    connection.start_tls_s.assert_called_once_with()


def test_unreadable_cert_path():
    with pytest.raises(IOError):
        LDAPClient(load_server({'url': 'ldaps://127.0.0.1', 'cert_path': '/nonexistent/ca.pem'}))


def test_bind_polls_until_result(connection, client):
    connection.simple_bind.return_value = 1
    connection.result3.side_effect = [NOT_READY, NOT_READY, (ldap.RES_BIND, [], 1, [])]
    client.connect().bind('uid=jdoe,dc=example,dc=com', 'secret')
    connection.simple_bind.assert_called_once_with('uid=jdoe,dc=example,dc=com', 'secret')
    assert connection.result3.call_count == 3
    connection.result3.assert_called_with(1, all=0, timeout=0)


def test_bind_rejected(connection, client):
    connection.simple_bind.return_value = 1
    connection.result3.side_effect = ldap.INVALID_CREDENTIALS({'result': 49, 'desc': 'Invalid credentials'})
    with pytest.raises(client.errors):
        client.connect().bind('uid=jdoe,dc=example,dc=com', 'wrong')


def test_close_unbinds(connection, client):
    with client.connect():
        pass
    connection.unbind_s.assert_called_once_with()


def test_close_ignores_unbind_errors(connection, client):
    connection.unbind_s.side_effect = ldap.SERVER_DOWN({'result': -1, 'desc': "Can't contact LDAP server"})
    client.connect().close()


def test_search_events(connection, client):
    connection.search_ext.return_value = 7
    connection.result3.side_effect = [
        NOT_READY,
        (ldap.RES_SEARCH_ENTRY, [('uid=jdoe,dc=example,dc=com', {
            'cn': [b'John Doe'],
            'mail': [b'jdoe@example.com', b'john@example.com'],
            'jpegPhoto': [b'\xff\xd8'],
        })], 7, []),
        (ldap.RES_SEARCH_RESULT, [], 7, []),
    ]
    spec = SearchSpec(filter='(uid=jdoe)', scope='sub', attributes=('cn', 'mail'), size_limit=1, time_limit=0)
    events = list(client.connect().search('dc=example,dc=com', spec))

    connection.search_ext.assert_called_once_with(
        'dc=example,dc=com', ldap.SCOPE_SUBTREE, '(uid=jdoe)', ['cn', 'mail'], timeout=-1, sizelimit=1)
    assert events == [
        SearchEntry('uid=jdoe,dc=example,dc=com', {
            'cn': 'John Doe',
            'mail': ['jdoe@example.com', 'john@example.com'],
            'jpegPhoto': '/9g=',
        }),
        SearchEnd(0),
    ]
    assert events[0].profile['dn'] == 'uid=jdoe,dc=example,dc=com'
    connection.abandon.assert_not_called()


def test_search_result_code_ends_stream(connection, client):
    connection.result3.side_effect = ldap.NO_SUCH_OBJECT({'result': 32, 'desc': 'No such object'})
    spec = SearchSpec(filter='(objectClass=*)', scope='base', attributes=None, size_limit=0, time_limit=5)
    events = list(client.connect().search('uid=jdoe,dc=example,dc=com', spec))
    assert events == [SearchEnd(32)]
    args, kwargs = connection.search_ext.call_args
    assert args[1] == ldap.SCOPE_BASE
    assert args[3] is None
    assert kwargs['timeout'] == 5


def test_search_client_error_is_error_event(connection, client):
    error = ldap.SERVER_DOWN({'result': -1, 'desc': "Can't contact LDAP server"})
    connection.result3.side_effect = error
    spec = SearchSpec(filter='(objectClass=*)', scope='one', attributes=None, size_limit=0, time_limit=0)
    assert list(client.connect().search('dc=example,dc=com', spec)) == [SearchError(error)]


def test_abandon_unfinished_search(connection, client):
    connection.search_ext.return_value = 3
    connection.result3.return_value = (ldap.RES_SEARCH_ENTRY, [('uid=jdoe,dc=example,dc=com', {})], 3, [])
    spec = SearchSpec(filter='(objectClass=*)', scope='sub', attributes=None, size_limit=0, time_limit=0)
    events = client.connect().search('dc=example,dc=com', spec)
    assert next(events) == SearchEntry('uid=jdoe,dc=example,dc=com', {})
    events.close()
    connection.abandon.assert_called_once_with(3)


def test_result_code():
    assert result_code(ldap.INVALID_CREDENTIALS({'result': 49})) == 49
    assert result_code(ldap.LDAPError('boom')) == -1


def test_decode_attributes():
    assert decode_attributes(None) == {}
    assert decode_attributes({'uid': [b'jdoe'], 'objectClass': [b'top', b'person']}) == {
        'uid': 'jdoe',
        'objectClass': ['top', 'person'],
    }
