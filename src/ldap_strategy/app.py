# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import falcon
from beaker.middleware import SessionMiddleware
from falcon_cors import CORS

import logging
logger = logging.getLogger('ldap_strategy.app')

security_headers = [
    ('X-Frame-Options', 'SAMEORIGIN'),
    ('X-Content-Type-Options', 'nosniff'),
    ('X-XSS-Protection', '1; mode=block'),
    ('Strict-Transport-Security', 'max-age=31536000; includeSubDomains'),
]


def json_error_serializer(req, resp, exception):
    resp.text = exception.to_json()
    resp.content_type = falcon.MEDIA_JSON


class SecurityHeaderMiddleware(object):
    def process_request(self, req, resp):
        resp.set_headers(security_headers)


class ReqBodyMiddleware(object):
    '''
    The request stream can only be read once. Read the post body into the
    request context so the login handler and any later consumer see the same
    bytes.
    '''

    def process_request(self, req, resp):
        req.context.body = req.bounded_stream.read()


application = None


def init_falcon_api(config):
    global application
    cors = CORS(allow_origins_list=config.get('allow_origins_list', []))
    middlewares = [
        SecurityHeaderMiddleware(),
        ReqBodyMiddleware(),
        cors.middleware
    ]
    application = falcon.App(middleware=middlewares)
    application.req_options.auto_parse_form_urlencoded = False
    application.set_error_serializer(json_error_serializer)
    application.req_options.strip_url_path_trailing_slash = True

    from .auth import init as init_auth
    init_auth(application, config['auth'])

    return application


def init(config):
    if config.get('debug', False):
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    init_falcon_api(config)

    global application
    session_opts = {
        'session.type': 'cookie',
        'session.cookie_expires': True,
        'session.key': 'ldap-auth',
        'session.encrypt_key': config['session']['encrypt_key'],
        'session.validate_key': config['session']['sign_key'],
        'session.secure': not (config.get('debug', False) or config.get('allow_http', False)),
        'session.httponly': True,
        'session.crypto_type': 'cryptography'
    }
    application = SessionMiddleware(application, session_opts)
    logger.info('Login application ready, secure session cookies: %s', session_opts['session.secure'])
    return application


def get_wsgi_app():
    import sys
    from . import utils
    return init(utils.read_config(sys.argv[1]))
