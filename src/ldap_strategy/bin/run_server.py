#!/usr/bin/env python

# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

import sys
import multiprocessing
import gunicorn.app.base
import ldap_strategy.utils


class StandaloneApplication(gunicorn.app.base.BaseApplication):

    def __init__(self, options=None):
        self.options = options or {}
        super(StandaloneApplication, self).__init__()

    def load_config(self):
        config = {key: value for key, value in self.options.items()
                  if key in self.cfg.settings and value is not None}
        for key, value in config.items():
            self.cfg.set(key.lower(), value)

    def load(self):
        import ldap_strategy.app
        return ldap_strategy.app.get_wsgi_app()


def main():
    if len(sys.argv) <= 1:
        sys.exit('USAGE: %s CONFIG_FILE' % sys.argv[0])

    config = ldap_strategy.utils.read_config(sys.argv[1])
    server = config['server']

    options = {
        'preload_app': False,
        'reload': True,
        'bind': '%s:%s' % (server['host'], server['port']),
        'worker_class': 'gevent',
        'accesslog': '-',
        'workers': server.get('workers', multiprocessing.cpu_count())
    }

    StandaloneApplication(options).run()


if __name__ == '__main__':
    main()
