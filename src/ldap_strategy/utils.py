# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

# -*- coding:utf-8 -*-

import yaml
from ujson import loads as json_loads
from falcon import HTTPBadRequest
from falcon.util import uri
from importlib import import_module


def read_config(config_path):
    with open(config_path, 'r', encoding='utf8') as config_file:
        return yaml.safe_load(config_file)


def import_custom_module(default_root, name):
    '''
    Resolve ``name`` to an attribute of a module. Dotted names are imported as
    ``package.module.attr``; bare names are looked up in ``default_root``.
    '''
    if '.' in name:
        module_path, name = name.rsplit('.', 1)
    else:
        module_path = default_root
    return getattr(import_module(module_path), name)


def load_json_body(req):
    try:
        return json_loads(req.context.body)
    except ValueError as e:
        raise HTTPBadRequest(title='invalid JSON', description='failed to decode json: %s' % str(e))


def load_form_body(req):
    fields = uri.parse_query_string(req.context.body.decode('utf-8'))
    return fields if fields else {}
