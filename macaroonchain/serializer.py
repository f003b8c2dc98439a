# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging

from macaroonchain import utils
from macaroonchain.caveat import first_party_caveat, third_party_caveat
from macaroonchain.codec import decode_uvarint, encode_uvarint
from macaroonchain.crypto import KEY_LEN
from macaroonchain.error import MalformedMacaroonError
from macaroonchain.macaroon import Macaroon

log = logging.getLogger(__name__)

VERSION_2 = 2

# Field types of the binary format.
_EOS = 0
_LOCATION = 1
_IDENTIFIER = 2
_VID = 4
_SIGNATURE = 6


def serialize(macaroon):
    '''Serialize the macaroon in the version 2 binary format.

    The format is a version byte followed by sections of fields, each
    field being a field type, a length and the data, all lengths and types
    as unsigned varints:

        version 2 [1 byte]
        location (optional), identifier, end of section
        for each caveat: location (optional), identifier,
            verification id (optional), end of section
        end of section
        signature

    The result is base64url encoded without padding.

    @param macaroon the Macaroon to serialize.
    @return bytes
    '''
    data = bytearray()
    data.append(VERSION_2)
    if macaroon.location is not None:
        _append_field(data, _LOCATION, macaroon.location.encode('utf-8'))
    _append_field(data, _IDENTIFIER, macaroon.identifier)
    encode_uvarint(_EOS, data)
    for caveat in macaroon.caveats:
        if caveat.location is not None:
            _append_field(data, _LOCATION, caveat.location.encode('utf-8'))
        _append_field(data, _IDENTIFIER, caveat.caveat_id)
        if caveat.verification_id is not None:
            _append_field(data, _VID, caveat.verification_id)
        encode_uvarint(_EOS, data)
    encode_uvarint(_EOS, data)
    _append_field(data, _SIGNATURE, macaroon.signature)
    return utils.raw_urlsafe_b64encode(bytes(data))


def deserialize(serialized):
    '''Deserialize a macaroon serialized with serialize.

    @param serialized bytes or string, with or without base64 padding.
    @return Macaroon
    @raise MalformedMacaroonError if the data is not a valid macaroon.
    '''
    try:
        data = utils.raw_urlsafe_b64decode(serialized)
        return _Decoder(data).macaroon()
    except MalformedMacaroonError as exc:
        log.debug('cannot deserialize macaroon: %s', exc)
        raise
    except (ValueError, TypeError) as exc:
        log.debug('cannot deserialize macaroon: %s', exc)
        raise MalformedMacaroonError(
            'cannot deserialize macaroon: {}'.format(exc))


def _append_field(data, field_type, value):
    encode_uvarint(field_type, data)
    encode_uvarint(len(value), data)
    data.extend(value)


class _Decoder(object):
    def __init__(self, data):
        self._data = data
        self._pos = 0

    def macaroon(self):
        if not self._data:
            raise MalformedMacaroonError('empty macaroon data')
        version = self._data[0]
        self._pos = 1
        if version != VERSION_2:
            raise MalformedMacaroonError(
                'unsupported macaroon version {}'.format(version))
        location, identifier, vid = self._section()
        if identifier is None:
            raise MalformedMacaroonError('macaroon has no identifier')
        if vid is not None:
            raise MalformedMacaroonError(
                'unexpected verification id in macaroon header')
        caveats = []
        while self._peek() != _EOS:
            caveats.append(self._caveat())
        self._read_uvarint()
        field_type, signature = self._field()
        if field_type != _SIGNATURE:
            raise MalformedMacaroonError('macaroon has no signature')
        if len(signature) != KEY_LEN:
            raise MalformedMacaroonError(
                'signature has length {}, want {}'.format(
                    len(signature), KEY_LEN))
        if self._pos != len(self._data):
            raise MalformedMacaroonError('trailing data after signature')
        return Macaroon(location, identifier, caveats, signature)

    def _caveat(self):
        location, cid, vid = self._section()
        if cid is None:
            raise MalformedMacaroonError('caveat has no identifier')
        if vid is None:
            if location is not None:
                raise MalformedMacaroonError(
                    'first party caveat {!r} has a location'.format(cid))
            return first_party_caveat(cid)
        return third_party_caveat(location, cid, vid)

    def _section(self):
        '''Read the location, identifier and verification id fields of a
        section, in that order, up to and including its end marker.
        '''
        values = {}
        last = _EOS
        while True:
            field_type = self._peek()
            if field_type == _EOS:
                self._read_uvarint()
                break
            if field_type not in (_LOCATION, _IDENTIFIER, _VID):
                raise MalformedMacaroonError(
                    'unexpected field type {}'.format(field_type))
            if field_type <= last:
                raise MalformedMacaroonError(
                    'field type {} out of order'.format(field_type))
            last = field_type
            _, values[field_type] = self._field()
        location = values.get(_LOCATION)
        if location is not None:
            location = location.decode('utf-8')
        return location, values.get(_IDENTIFIER), values.get(_VID)

    def _field(self):
        field_type = self._read_uvarint()
        length = self._read_uvarint()
        end = self._pos + length
        if end > len(self._data):
            raise MalformedMacaroonError(
                'field data truncated: want {} bytes, have {}'.format(
                    length, len(self._data) - self._pos))
        value = bytes(self._data[self._pos:end])
        self._pos = end
        return field_type, value

    def _peek(self):
        n, _ = self._uvarint()
        return n

    def _read_uvarint(self):
        n, read = self._uvarint()
        self._pos += read
        return n

    def _uvarint(self):
        try:
            return decode_uvarint(self._data, self._pos)
        except ValueError as exc:
            raise MalformedMacaroonError(str(exc))
