# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import logging
from falcon import HTTPUnauthorized, Request

from ..strategy import Strategy
from ..utils import import_custom_module

logger = logging.getLogger('ldap_strategy.auth')
strategy = None


def passthrough(profile):
    return profile


def authenticate_user(req):
    session = req.env['beaker.session']
    try:
        req.context.user = session['user']
    except KeyError:
        raise HTTPUnauthorized(title='Unauthorized', description='User must be logged in')


def login_required(function):
    def wrapper(*args, **kwargs):
        for arg in args:
            if isinstance(arg, Request):
                authenticate_user(arg)
                break
        return function(*args, **kwargs)

    return wrapper


def init(application, config):
    global strategy

    verify = import_custom_module('ldap_strategy.auth', config.get('verify', 'passthrough'))
    strategy = Strategy(config, verify)
    logger.info('LDAP strategy against %s, %s mode', strategy.config.server.url, strategy.config.auth_mode)

    from . import login, logout
    login.strategy = strategy
    application.add_route('/login', login)
    application.add_route('/logout', logout)
