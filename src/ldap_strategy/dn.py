# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

from collections import namedtuple

from ldap.dn import escape_dn_chars
from ldap.filter import escape_filter_chars

from . import constants

Resolution = namedtuple('Resolution', ['bind_dn', 'search_base', 'uid'])


class UnresolvableDN(ValueError):
    pass


def join_base(base):
    if isinstance(base, str):
        return base
    return ','.join(base)


def split_windows_username(username):
    '''
    Split ``DOMAIN\\name`` into ``(domain, name)``.
    '''
    domain, sep, name = username.partition('\\')
    if not sep or not domain or not name:
        raise UnresolvableDN('expected DOMAIN\\name, got %r' % username)
    return domain, name


def windows_search_base(domain, base):
    if isinstance(base, str):
        return base
    dc = 'dc=' + domain.lower()
    components = list(base)
    if dc not in (component.replace(' ', '').lower() for component in components):
        components.insert(0, dc)
    return ','.join(components)


def resolve(username, config):
    '''
    Compute the bind DN, the search base and the value substituted for the
    filter placeholder. ``search_base`` is ``None`` in auth-only mode.

    Raises :class:`UnresolvableDN` for a Windows-style username without a
    domain part.
    '''
    if config.auth_mode == constants.MODE_WINDOWS:
        domain, name = split_windows_username(username)
        search_base = None if config.auth_only else windows_search_base(domain, config.base)
        return Resolution(bind_dn=username, search_base=search_base, uid=name)

    rdn = '%s=%s' % (config.uid_attribute, escape_dn_chars(username))
    base = join_base(config.base)
    bind_dn = '%s,%s' % (rdn, base) if base else rdn
    return Resolution(
        bind_dn=bind_dn,
        search_base=None if config.auth_only else bind_dn,
        uid=username,
    )


def search_spec(spec, uid):
    # copy, the configured search spec is shared by every attempt
    return spec._replace(filter=spec.filter.replace(constants.UID_PLACEHOLDER, escape_filter_chars(uid)))
