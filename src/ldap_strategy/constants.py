# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

MODE_WINDOWS = 'windows'
MODE_UNIX = 'unix'

# legacy numeric auth_mode values
AUTH_MODES = {
    0: MODE_WINDOWS,
    1: MODE_UNIX,
    MODE_WINDOWS: MODE_WINDOWS,
    MODE_UNIX: MODE_UNIX,
}

UID_PLACEHOLDER = '$uid$'

SCOPE_BASE = 'base'
SCOPE_ONE = 'one'
SCOPE_SUB = 'sub'
SCOPES = (SCOPE_BASE, SCOPE_ONE, SCOPE_SUB)

# failure reasons
MISSING_CREDENTIALS = 401
FORBIDDEN = 403
NO_SUCH_OBJECT = 32
DEFAULT_CHALLENGE = 'LDAP'

DEFAULT_TIMEOUT = 30
DEFAULT_POLL_INTERVAL = 0.01
