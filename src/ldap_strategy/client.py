# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

'''
Directory client built on python-ldap.

Operations are issued asynchronously and their results polled without
blocking, yielding to other greenlets between polls, so a slow directory
only stalls the attempt waiting on it.
'''

import base64
import logging
import os
from collections import namedtuple

import gevent
import ldap

logger = logging.getLogger(__name__)

SCOPES = {
    'base': ldap.SCOPE_BASE,
    'one': ldap.SCOPE_ONELEVEL,
    'sub': ldap.SCOPE_SUBTREE,
}


class DirectoryError(Exception):
    pass


class SearchEntry(namedtuple('SearchEntry', ['dn', 'attributes'])):

    @property
    def profile(self):
        profile = dict(self.attributes)
        profile['dn'] = self.dn
        return profile


SearchEnd = namedtuple('SearchEnd', ['status'])
SearchError = namedtuple('SearchError', ['error'])


def result_code(err):
    '''
    LDAP result code carried by a python-ldap exception. Codes below zero are
    raised by libldap itself (server down, timeout, ...), not sent by the server.
    '''
    info = err.args[0] if err.args and isinstance(err.args[0], dict) else {}
    return info.get('result', -1)


def decode_value(value):
    if not isinstance(value, bytes):
        return value
    try:
        return value.decode('utf-8')
    except UnicodeDecodeError:
        return base64.b64encode(value).decode('ascii')


def decode_attributes(attrs):
    decoded = {}
    for key, values in (attrs or {}).items():
        values = [decode_value(v) for v in values]
        decoded[key] = values[0] if len(values) == 1 else values
    return decoded


class LDAPConnection(object):
    def __init__(self, connection, poll_interval):
        self._conn = connection
        self.poll_interval = poll_interval

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _result(self, msgid):
        while True:
            rtype, rdata, rmsgid, ctrls = self._conn.result3(msgid, all=0, timeout=0)
            if rtype is not None:
                return rtype, rdata
            gevent.sleep(self.poll_interval)

    def bind(self, dn, password):
        msgid = self._conn.simple_bind(dn, password)
        self._result(msgid)

    def search(self, base, spec):
        msgid = self._conn.search_ext(
            base,
            SCOPES[spec.scope],
            spec.filter,
            list(spec.attributes) if spec.attributes is not None else None,
            timeout=spec.time_limit or -1,
            sizelimit=spec.size_limit,
        )
        return self._events(msgid)

    def _events(self, msgid):
        done = False
        try:
            while True:
                try:
                    rtype, rdata = self._result(msgid)
                except ldap.LDAPError as err:
                    done = True
                    if result_code(err) > 0:
                        yield SearchEnd(result_code(err))
                    else:
                        yield SearchError(err)
                    return
                if rtype == ldap.RES_SEARCH_ENTRY:
                    for dn, attrs in rdata:
                        yield SearchEntry(dn, decode_attributes(attrs))
                elif rtype == ldap.RES_SEARCH_RESULT:
                    done = True
                    yield SearchEnd(0)
                    return
        finally:
            if not done:
                self._abandon(msgid)

    def _abandon(self, msgid):
        try:
            self._conn.abandon(msgid)
        except ldap.LDAPError as err:
            logger.debug('abandoning search %s failed: %s', msgid, err)

    def close(self):
        try:
            self._conn.unbind_s()
        except ldap.LDAPError as err:
            logger.debug('unbind failed: %s', err)


class LDAPClient(object):
    errors = (ldap.LDAPError,)

    def __init__(self, server):
        self.server = server
        if server.cert_path and not os.access(server.cert_path, os.R_OK):
            logger.error('Failed to read cert_path certificate %s', server.cert_path)
            raise IOError('cannot read %s' % server.cert_path)

    def connect(self):
        connection = ldap.initialize(self.server.url)
        connection.set_option(ldap.OPT_REFERRALS, 1 if self.server.referrals else 0)
        connection.set_option(ldap.OPT_PROTOCOL_VERSION, ldap.VERSION3)
        if self.server.network_timeout:
            connection.set_option(ldap.OPT_NETWORK_TIMEOUT, self.server.network_timeout)
        if self.server.cert_path:
            connection.set_option(ldap.OPT_X_TLS_CACERTFILE, self.server.cert_path)
            connection.set_option(ldap.OPT_X_TLS_NEWCTX, 0)
        if self.server.start_tls:
            try:
                connection.start_tls_s()
            except ldap.LDAPError:
                connection.unbind_s()
                raise
        return LDAPConnection(connection, self.server.poll_interval)
