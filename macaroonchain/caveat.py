# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import base64
from collections import namedtuple

from macaroonchain.crypto import to_bytes

FIRST_PARTY = 'first-party'
THIRD_PARTY = 'third-party'


class Caveat(namedtuple('Caveat',
                        'kind, caveat_id, location, verification_id')):
    '''Caveat represents a restriction attached to a macaroon.

    The kind field holds the variant tag:

    FIRST_PARTY caveats hold only caveat_id, the predicate bytes that
    the verifier checks locally.

    THIRD_PARTY caveats hold caveat_id, the opaque identifier of the
    discharge macaroon the third party must issue, verification_id, the
    encrypted key that roots that discharge, and location, a hint of where
    the third party lives. The location is not covered by the signature.

    Use first_party_caveat and third_party_caveat to build them.
    '''
    __slots__ = ()

    def __new__(cls, kind, caveat_id, location=None, verification_id=None):
        caveat_id = to_bytes(caveat_id)
        if kind == FIRST_PARTY:
            if location is not None or verification_id is not None:
                raise ValueError(
                    'first party caveat cannot have a location or '
                    'verification id')
        elif kind == THIRD_PARTY:
            if verification_id is None:
                raise ValueError(
                    'third party caveat requires a verification id')
            if location is not None and not isinstance(location, str):
                raise ValueError(
                    'caveat location must be a string, not {}'.format(
                        type(location).__name__))
            verification_id = to_bytes(verification_id)
        else:
            raise ValueError('unknown caveat kind {!r}'.format(kind))
        return super(Caveat, cls).__new__(
            cls, kind, caveat_id, location, verification_id)

    @property
    def is_first_party(self):
        return self.kind == FIRST_PARTY

    @property
    def is_third_party(self):
        return self.kind == THIRD_PARTY

    @property
    def predicate(self):
        '''The predicate of a first party caveat.'''
        if not self.is_first_party:
            raise AttributeError('third party caveats have no predicate')
        return self.caveat_id

    def inspect(self):
        '''Return a human readable form of the caveat.'''
        cid = self.caveat_id.decode('utf-8', 'replace')
        if self.is_first_party:
            return 'cid {}'.format(cid)
        return 'cid {}\nvid {}\ncl {}'.format(
            cid,
            base64.urlsafe_b64encode(
                self.verification_id).rstrip(b'=').decode('ascii'),
            self.location)


def first_party_caveat(predicate):
    '''Return a first party caveat with the given predicate.

    @param predicate bytes or string
    '''
    return Caveat(FIRST_PARTY, predicate)


def third_party_caveat(location, caveat_id, verification_id):
    '''Return a third party caveat.

    @param location string hint of the discharging party, may be None.
    @param caveat_id bytes or string identifying the discharge.
    @param verification_id bytes holding the encrypted discharge key.
    '''
    return Caveat(THIRD_PARTY, caveat_id, location, verification_id)
