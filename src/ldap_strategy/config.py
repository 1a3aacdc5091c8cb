# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

'''
Validated, immutable strategy settings.

The ``auth`` section of the config file is normalised once by
:func:`load_config`; every authentication attempt only ever reads the
resulting :class:`Config`. Example::

    auth:
      server:
        url: ldap://ldap.example.com:389
      auth_mode: windows
      base: [dc=corp, dc=example, dc=com]
      search:
        filter: (sAMAccountName=$uid$)
        scope: sub
        attributes: [displayName, mail]
        size_limit: 1
'''

from collections import namedtuple

from . import constants

Config = namedtuple('Config', [
    'server',
    'username_field',
    'password_field',
    'auth_mode',
    'uid_attribute',
    'base',
    'search',
    'auth_only',
    'debug',
    'timeout',
])

SearchSpec = namedtuple('SearchSpec', ['filter', 'scope', 'attributes', 'size_limit', 'time_limit'])

ServerSpec = namedtuple('ServerSpec', [
    'url',
    'cert_path',
    'start_tls',
    'network_timeout',
    'referrals',
    'poll_interval',
])

SCOPE_ALIASES = {
    'base': constants.SCOPE_BASE,
    'one': constants.SCOPE_ONE,
    'onelevel': constants.SCOPE_ONE,
    'sub': constants.SCOPE_SUB,
    'subtree': constants.SCOPE_SUB,
}


class ConfigError(ValueError):
    pass


def _non_negative_int(value, name):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError('%s must be a non-negative integer, got %r' % (name, value))
    return value


def _seconds(value, name):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError('%s must be a positive number of seconds, got %r' % (name, value))
    return value


def check_filter(text):
    '''Reject filter text that is not a complete, parenthesised LDAP filter.'''
    if not isinstance(text, str) or not text.startswith('('):
        raise ConfigError('search filter must be parenthesised LDAP filter text, got %r' % (text,))
    opened = []
    escaped = False
    for pos, char in enumerate(text):
        if escaped:
            escaped = False
        elif char == '\\':
            escaped = True
        elif char == '(':
            opened.append(pos)
        elif char == ')':
            if not opened:
                raise ConfigError('unbalanced parentheses in search filter %r' % text)
            body = text[opened.pop() + 1:pos].strip()
            if body in ('', '&', '|', '!'):
                raise ConfigError('empty component in search filter %r' % text)
            if not opened and pos != len(text) - 1:
                raise ConfigError('search filter %r must be a single parenthesised filter' % text)
    if opened:
        raise ConfigError('unbalanced parentheses in search filter %r' % text)
    return text


def load_server(server):
    if isinstance(server, ServerSpec):
        return server
    if not isinstance(server, dict) or not server.get('url'):
        raise ConfigError('server.url is required')
    return ServerSpec(
        url=server['url'],
        cert_path=server.get('cert_path'),
        start_tls=bool(server.get('start_tls', False)),
        network_timeout=_seconds(server.get('network_timeout'), 'server.network_timeout'),
        referrals=bool(server.get('referrals', False)),
        poll_interval=_seconds(server.get('poll_interval') or constants.DEFAULT_POLL_INTERVAL,
                               'server.poll_interval'),
    )


def load_search(search):
    search = search or {}
    scope = SCOPE_ALIASES.get(search.get('scope', constants.SCOPE_SUB))
    if scope is None:
        raise ConfigError('search.scope must be one of %s, got %r' %
                          (', '.join(constants.SCOPES), search.get('scope')))
    attributes = search.get('attributes')
    if attributes is not None:
        if isinstance(attributes, str):
            attributes = [attributes]
        attributes = tuple(attributes)
    return SearchSpec(
        filter=check_filter(search.get('filter') or '(objectClass=*)'),
        scope=scope,
        attributes=attributes,
        size_limit=_non_negative_int(search.get('size_limit'), 'search.size_limit'),
        time_limit=_non_negative_int(search.get('time_limit'), 'search.time_limit'),
    )


def load_base(base):
    if base is None:
        return ''
    if isinstance(base, str):
        return base.strip()
    components = tuple(str(component).strip() for component in base)
    return tuple(component for component in components if component)


def load_config(options):
    if isinstance(options, Config):
        return options
    if not isinstance(options, dict):
        raise ConfigError('LDAP strategy options must be a mapping')

    auth_mode = options.get('auth_mode', constants.MODE_UNIX)
    if isinstance(auth_mode, str):
        auth_mode = auth_mode.lower()
    try:
        auth_mode = constants.AUTH_MODES[auth_mode]
    except (KeyError, TypeError):
        raise ConfigError('auth_mode must be "unix" or "windows", got %r' % (auth_mode,))

    auth_only = bool(options.get('auth_only', False))
    base = load_base(options.get('base'))
    if not base and not auth_only:
        raise ConfigError('base is required unless auth_only is set')

    return Config(
        server=load_server(options.get('server')),
        username_field=options.get('username_field') or 'username',
        password_field=options.get('password_field') or 'password',
        auth_mode=auth_mode,
        uid_attribute=options.get('uid_attribute') or 'uid',
        base=base,
        search=load_search(options.get('search')),
        auth_only=auth_only,
        debug=bool(options.get('debug', False)),
        timeout=_seconds(options.get('timeout', constants.DEFAULT_TIMEOUT), 'timeout'),
    )
