# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

'''
LDAP authentication strategy.

Authenticates submitted credentials by binding to the directory as the user,
then searching for the user's entry and handing it to the application's
``verify`` callback::

    def verify(profile):
        return load_user(profile['uid']) or None

    strategy = Strategy({
        'server': {'url': 'ldap://ldap.example.com:389'},
        'base': 'ou=people,dc=example,dc=com',
        'search': {'filter': '(uid=$uid$)', 'scope': 'base'},
    }, verify)

    outcome = strategy.authenticate({'username': 'jdoe', 'password': 'secret'})

``authenticate`` never raises. It returns exactly one of
:class:`~ldap_strategy.outcome.Succeeded`, :class:`~ldap_strategy.outcome.Failed`
or :class:`~ldap_strategy.outcome.Errored`.

Command line equivalents of the two directory conventions:

- Active Directory: ``ldapsearch -H ldap://dc:389 -D 'CORP\\jdoe' -w ... -b dc=corp,dc=example,dc=com``
- OpenLDAP: ``ldapsearch -H ldap://ldap:389 -D uid=jdoe,dc=example,dc=com -w ... -b uid=jdoe,dc=example,dc=com``
'''

import logging
from collections.abc import Mapping

import gevent

from . import constants, dn
from .client import LDAPClient, DirectoryError, SearchEntry, SearchEnd, SearchError
from .config import load_config
from .outcome import OutcomeReporter, Accepted, Rejected, VerifyError, verification

logger = logging.getLogger(__name__)

START = 'start'
VALIDATING = 'validating'
BINDING = 'binding'
AUTH_ONLY_SUCCESS = 'auth_only_success'
SEARCHING = 'searching'
AWAITING_ENTRY = 'awaiting_entry'
VERIFYING = 'verifying'
SUCCEEDED = 'succeeded'
FAILED = 'failed'
ERRORED = 'errored'


class AttemptTimeout(Exception):
    pass


def default_challenge():
    return constants.DEFAULT_CHALLENGE


class Attempt(object):
    '''One authentication attempt. Owns its connection and its outcome.'''

    def __init__(self, strategy, fields):
        self.config = strategy.config
        self.client = strategy.client
        self.verify = strategy.verify
        self.challenge = strategy.challenge
        self.fields = fields if isinstance(fields, Mapping) else {}
        self.state = START
        self.resolution = None
        self.entry_seen = False
        self.reporter = OutcomeReporter(debug=self.config.debug)

    def trace(self, level, msg, *args):
        if self.config.debug:
            logger.log(level, msg, *args)

    def transition(self, state):
        self.trace(logging.DEBUG, '%s -> %s', self.state, state)
        self.state = state

    def success(self, user):
        if self.reporter.success(user):
            self.transition(SUCCEEDED)
            self.trace(logging.INFO, 'auth success: %s', user)

    def fail(self, reason):
        if self.reporter.fail(reason):
            self.transition(FAILED)
            self.trace(logging.INFO, 'auth failed: %s', reason)

    def error(self, err):
        if self.reporter.error(err):
            self.transition(ERRORED)
            self.trace(logging.ERROR, 'auth error: %r', err)

    def run(self):
        try:
            with gevent.Timeout(self.config.timeout, AttemptTimeout(self.config.timeout)):
                self.authenticate()
        except AttemptTimeout as e:
            self.error(e)
        except Exception as e:
            logger.exception('Unexpected error authenticating against %s', self.config.server.url)
            self.error(e)
        if not self.reporter.done:
            self.error(DirectoryError('search ended without a result'))
        return self.reporter.outcome

    def authenticate(self):
        self.transition(VALIDATING)
        username = self.fields.get(self.config.username_field)
        password = self.fields.get(self.config.password_field)
        if not (isinstance(username, str) and username and isinstance(password, str) and password):
            return self.fail(constants.MISSING_CREDENTIALS)

        try:
            self.resolution = dn.resolve(username, self.config)
        except dn.UnresolvableDN as e:
            self.trace(logging.WARNING, 'cannot resolve DN: %s', e)
            return self.fail(constants.MISSING_CREDENTIALS)

        self.transition(BINDING)
        try:
            connection = self.client.connect()
        except self.client.errors as e:
            self.trace(logging.ERROR, 'LDAP connection error: %s', e)
            return self.fail(constants.FORBIDDEN)

        with connection:
            try:
                connection.bind(self.resolution.bind_dn, password)
            except self.client.errors as e:
                self.trace(logging.ERROR, 'LDAP bind error: %s', e)
                return self.fail(constants.FORBIDDEN)

            if self.config.auth_only:
                self.transition(AUTH_ONLY_SUCCESS)
                return self.success({'uid': self.resolution.bind_dn})

            self.search(connection)

    def search(self, connection):
        self.transition(SEARCHING)
        spec = dn.search_spec(self.config.search, self.resolution.uid)
        try:
            events = connection.search(self.resolution.search_base, spec)
        except self.client.errors as e:
            self.trace(logging.ERROR, 'LDAP search error: %s', e)
            return self.fail(constants.FORBIDDEN)

        self.transition(AWAITING_ENTRY)
        try:
            for event in events:
                self.handle(event)
                if self.reporter.done:
                    break
        finally:
            close = getattr(events, 'close', None)
            if close is not None:
                close()

    def handle(self, event):
        if isinstance(event, SearchEntry):
            self.entry_seen = True
            self.verify_profile(event.profile)
        elif isinstance(event, SearchError):
            self.trace(logging.ERROR, 'network error: %s', event.error)
            self.error(event.error)
        elif isinstance(event, SearchEnd):
            if self.entry_seen:
                return
            self.trace(logging.WARNING, 'search ended without entries, status %s', event.status)
            self.fail(event.status or constants.NO_SUCH_OBJECT)

    def verify_profile(self, profile):
        self.transition(VERIFYING)
        result = verification(self.verify, profile)
        if isinstance(result, VerifyError):
            self.error(result.error)
        elif isinstance(result, Rejected):
            self.fail(self.challenge())
        elif isinstance(result, Accepted):
            self.success(result.user)


class Strategy(object):
    name = 'ldap'

    def __init__(self, config, verify, client=None, challenge=None):
        if not callable(verify):
            raise TypeError('LDAP authentication strategy requires a verify function')
        self.config = load_config(config)
        self.verify = verify
        self.client = client if client is not None else LDAPClient(self.config.server)
        self.challenge = challenge or default_challenge

    def authenticate(self, fields):
        '''
        Authenticate the submitted ``fields`` (a mapping holding the username
        and password fields) and return the attempt's outcome.
        '''
        return Attempt(self, fields).run()
