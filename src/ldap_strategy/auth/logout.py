# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.


def on_post(req, resp):
    session = req.env['beaker.session']
    session.delete()
