# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import binascii

from macaroonchain import codec
from macaroonchain.caveat import first_party_caveat, third_party_caveat
from macaroonchain.crypto import (
    KEY_LEN,
    bind_signature,
    derive_key,
    first_party_signature,
    initial_signature,
    third_party_signature,
    to_bytes,
)
from macaroonchain.verifier import Verifier

# MAX_CAVEAT_SIZE holds the exclusive upper bound on the length of a first
# party predicate.
MAX_CAVEAT_SIZE = 32768
# MAX_CAVEATS holds the exclusive upper bound on the number of caveats.
MAX_CAVEATS = 65536


class Macaroon(object):
    '''Macaroon is an immutable bearer credential.

    It holds a location hint, an identifier, an ordered tuple of caveats
    and the signature chained over the identifier and caveats. Adding a
    caveat returns a new Macaroon and leaves the receiver untouched, so a
    base macaroon can be attenuated in several directions at once.

    Use create to make a new macaroon from a root key.
    '''
    __slots__ = ('_location', '_identifier', '_caveats', '_signature')

    def __init__(self, location, identifier, caveats, signature):
        '''Assemble a macaroon from its parts.

        No signature is computed; this is what deserializers use.

        @param location string or None
        @param identifier bytes or string
        @param caveats iterable of Caveat
        @param signature bytes holding a 32 byte signature
        '''
        signature = to_bytes(signature)
        if len(signature) != KEY_LEN:
            raise ValueError('invalid signature length {}'.format(
                len(signature)))
        if location is not None and not isinstance(location, str):
            raise ValueError('location must be a string, not {}'.format(
                type(location).__name__))
        caveats = tuple(caveats)
        if len(caveats) >= MAX_CAVEATS:
            raise ValueError('too many caveats')
        self._location = location
        self._identifier = to_bytes(identifier)
        self._caveats = caveats
        self._signature = signature

    @property
    def location(self):
        return self._location

    @property
    def identifier(self):
        return self._identifier

    @property
    def caveats(self):
        return self._caveats

    @property
    def signature(self):
        return self._signature

    @property
    def signature_hex(self):
        return binascii.hexlify(self._signature).decode('ascii')

    def first_party_caveats(self):
        '''Return the first party caveats from this macaroon.'''
        return [c for c in self._caveats if c.is_first_party]

    def third_party_caveats(self):
        '''Return the third party caveats from this macaroon.'''
        return [c for c in self._caveats if c.is_third_party]

    def add_first_party_caveat(self, predicate):
        '''Return a copy of this macaroon restricted by predicate.

        @param predicate bytes or string (a Predicate is accepted too).
        @return Macaroon
        '''
        if not isinstance(predicate, (bytes, bytearray, str)):
            predicate = str(predicate)
        caveat = first_party_caveat(predicate)
        if len(caveat.caveat_id) >= MAX_CAVEAT_SIZE:
            raise ValueError('caveat is too large')
        return self._with_caveat(
            caveat, first_party_signature(self._signature, caveat.caveat_id))

    def add_third_party_caveat(self, location, verification_key, caveat_id):
        '''Return a copy of this macaroon requiring a discharge.

        The discharge macaroon must be created with identifier caveat_id
        and root key verification_key.

        @param location string hint of the discharging party.
        @param verification_key bytes or string shared with the third
        party.
        @param caveat_id bytes or string identifying the discharge.
        @return Macaroon
        '''
        vid = codec.encode_verification_id(self._signature, verification_key)
        caveat = third_party_caveat(location, caveat_id, vid)
        return self._with_caveat(
            caveat,
            third_party_signature(self._signature, vid, caveat.caveat_id))

    def add_caveats(self, predicates):
        '''Return a copy of this macaroon with all the given first party
        predicates added in order.
        '''
        m = self
        for predicate in predicates:
            m = m.add_first_party_caveat(predicate)
        return m

    def prepare_for_request(self, discharge):
        '''Return discharge bound to this macaroon.

        A discharge macaroon only verifies when presented with the
        macaroon that it was bound to.

        @param discharge the Macaroon discharging one of the third party
        caveats of this macaroon.
        @return Macaroon
        '''
        return Macaroon(
            discharge.location,
            discharge.identifier,
            discharge.caveats,
            bind_signature(self._signature, discharge.signature))

    def verify(self, root_key, verifier=None, discharges=None):
        '''Verify this macaroon, see Verifier.verify.

        @param root_key bytes or string used to create the macaroon.
        @param verifier Verifier holding the satisfiers, if any.
        @param discharges iterable of bound discharge macaroons.
        @return True
        @raise VerificationError
        '''
        if verifier is None:
            verifier = Verifier()
        if discharges:
            verifier = verifier.satisfy_discharges(discharges)
        return verifier.verify(self, root_key)

    def serialize(self):
        '''Return the base64url binary serialization as bytes.'''
        from macaroonchain import serializer
        return serializer.serialize(self)

    @classmethod
    def deserialize(cls, data):
        from macaroonchain import serializer
        return serializer.deserialize(data)

    def serialize_json(self):
        '''Return the JSON serialization as a string.'''
        from macaroonchain import json_serializer
        return json_serializer.serialize(self)

    @classmethod
    def deserialize_json(cls, data):
        from macaroonchain import json_serializer
        return json_serializer.deserialize(data)

    def inspect(self):
        '''Return a human readable form of the macaroon.'''
        lines = ['location {}'.format(self._location),
                 'identifier {}'.format(
                     self._identifier.decode('utf-8', 'replace'))]
        lines.extend(c.inspect() for c in self._caveats)
        lines.append('signature {}'.format(self.signature_hex))
        return '\n'.join(lines)

    def _with_caveat(self, caveat, signature):
        if len(self._caveats) + 1 >= MAX_CAVEATS:
            raise ValueError('too many caveats')
        return Macaroon(self._location, self._identifier,
                        self._caveats + (caveat,), signature)

    def __key(self):
        return (self._location, self._identifier, self._caveats,
                self._signature)

    def __eq__(self, other):
        if not isinstance(other, Macaroon):
            return NotImplemented
        return self.__key() == other.__key()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.__key())

    def __repr__(self):
        return 'Macaroon(location={!r}, identifier={!r}, caveats={}, ' \
               'signature={})'.format(self._location, self._identifier,
                                      len(self._caveats), self.signature_hex)


def create(location, identifier, root_key):
    '''Create a new macaroon with no caveats.

    @param location string or None, a hint of where the macaroon is used.
    @param identifier bytes or string, lets the issuer find root_key again.
    @param root_key bytes or string secret; it is not stored.
    @return Macaroon
    '''
    identifier = to_bytes(identifier)
    return Macaroon(location, identifier, (),
                    initial_signature(derive_key(root_key), identifier))
