# Copyright (c) LinkedIn Corporation. All rights reserved. Licensed under the BSD-2 Clause license.
# See LICENSE in the project root for license information.

from collections import namedtuple
import logging

logger = logging.getLogger(__name__)


class Tagged(object):
    '''Tuple results that only compare equal to results of the same type.'''
    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    __hash__ = tuple.__hash__


class Succeeded(Tagged, namedtuple('Succeeded', ['user'])):
    __slots__ = ()


class Failed(Tagged, namedtuple('Failed', ['reason'])):
    __slots__ = ()


class Errored(Tagged, namedtuple('Errored', ['error'])):
    __slots__ = ()


# verify callback results
class Accepted(Tagged, namedtuple('Accepted', ['user'])):
    __slots__ = ()


class Rejected(Tagged, namedtuple('Rejected', [])):
    __slots__ = ()


class VerifyError(Tagged, namedtuple('VerifyError', ['error'])):
    __slots__ = ()


def verification(verify, profile):
    '''
    Run the application's verify callback and tag its result.

    ``None`` and ``False`` reject the profile, a raised exception becomes a
    :class:`VerifyError`, any other value is the accepted user.
    '''
    try:
        result = verify(profile)
    except Exception as e:
        return VerifyError(e)
    if isinstance(result, (Accepted, Rejected, VerifyError)):
        return result
    if result is None or result is False:
        return Rejected()
    return Accepted(result)


class OutcomeReporter(object):
    '''
    Holds the single outcome of one authentication attempt. The first report
    wins; anything reported afterwards is dropped.
    '''

    def __init__(self, debug=False):
        self.debug = debug
        self.outcome = None

    @property
    def done(self):
        return self.outcome is not None

    def _report(self, outcome):
        if self.outcome is not None:
            if self.debug:
                logger.info('ignoring %r, attempt already resolved as %r', outcome, self.outcome)
            return False
        self.outcome = outcome
        return True

    def success(self, user):
        return self._report(Succeeded(user))

    def fail(self, reason):
        return self._report(Failed(reason))

    def error(self, err):
        return self._report(Errored(err))
