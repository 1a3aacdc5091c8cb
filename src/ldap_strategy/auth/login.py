# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import logging
from beaker.exceptions import BeakerException
from falcon import HTTPUnauthorized, HTTPForbidden, HTTPInternalServerError, MEDIA_JSON
from ujson import dumps

from .. import constants
from ..outcome import Succeeded, Failed
from ..utils import load_json_body, load_form_body
from . import login_required

logger = logging.getLogger('ldap_strategy.auth.login')
strategy = None


def read_fields(req):
    if req.content_type and req.content_type.startswith(MEDIA_JSON):
        fields = load_json_body(req)
    else:
        fields = load_form_body(req)
    return fields if isinstance(fields, dict) else {}


def raise_for_failure(reason):
    if reason == constants.MISSING_CREDENTIALS:
        raise HTTPUnauthorized(title='Authentication failure', description='Missing user/password')
    if reason == constants.FORBIDDEN:
        raise HTTPForbidden(title='Authentication failure', description='bad login credentials')
    if isinstance(reason, str):
        raise HTTPUnauthorized(title='Authentication failure', description='bad login credentials',
                               challenges=[reason])
    raise HTTPUnauthorized(title='Authentication failure', description='user not found')


def session_identity(user):
    '''
    The part of the accepted user kept in the cookie session: the entry DN
    (or auth-only uid) for directory profiles, the user itself otherwise.
    '''
    if isinstance(user, dict):
        return user.get('dn') or user.get('uid')
    return user


def on_post(req, resp):
    outcome = strategy.authenticate(read_fields(req))

    if isinstance(outcome, Failed):
        raise_for_failure(outcome.reason)
    if not isinstance(outcome, Succeeded):
        logger.error('LDAP authentication error: %r', outcome.error)
        raise HTTPInternalServerError(title='Authentication error',
                                      description='directory unavailable, try again later')

    session = req.env['beaker.session']
    session['user'] = session_identity(outcome.user)
    try:
        session.save()
    except BeakerException as e:
        logger.error('Failed to save session for %r: %s', session['user'], e)
        session.delete()
        raise HTTPInternalServerError(title='Authentication error',
                                      description='user identity too large for the session')
    resp.content_type = MEDIA_JSON
    resp.text = dumps(outcome.user)


@login_required
def on_get(req, resp):
    resp.content_type = MEDIA_JSON
    resp.text = dumps(req.context.user)
