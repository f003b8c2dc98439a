# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import json
import logging

from macaroonchain import utils
from macaroonchain.caveat import first_party_caveat, third_party_caveat
from macaroonchain.error import MalformedMacaroonError
from macaroonchain.macaroon import Macaroon

log = logging.getLogger(__name__)

VERSION_2 = 2


def serialize(macaroon):
    '''Serialize the macaroon in JSON format v2.

    @param macaroon the macaroon to serialize.
    @return JSON macaroon as a string.
    '''
    return json.dumps(macaroon_to_dict(macaroon))


def deserialize(serialized):
    '''Deserialize a JSON macaroon v2.

    @param serialized the macaroon in JSON format v2, as a string, bytes
    or an already decoded dictionary.
    @return the macaroon object.
    @raise MalformedMacaroonError if the data is not a valid macaroon.
    '''
    try:
        if isinstance(serialized, (bytes, bytearray)):
            serialized = serialized.decode('utf-8')
        if isinstance(serialized, str):
            serialized = json.loads(serialized)
        return macaroon_from_dict(serialized)
    except MalformedMacaroonError:
        raise
    except (ValueError, TypeError, AttributeError) as exc:
        log.debug('cannot deserialize JSON macaroon: %s', exc)
        raise MalformedMacaroonError(
            'cannot deserialize JSON macaroon: {}'.format(exc))


def macaroon_to_dict(macaroon):
    ''' Return a macaroon as a dictionary for export as the JSON
    macaroon v2 format.
    '''
    serialized = {'v': VERSION_2}
    if macaroon.location is not None:
        serialized['l'] = macaroon.location
    _add_bytes(serialized, 'i', macaroon.identifier)
    serialized['c'] = [caveat_to_dict(c) for c in macaroon.caveats]
    serialized['s64'] = _b64(macaroon.signature)
    return serialized


def caveat_to_dict(c):
    ''' Return a caveat as a dictionary for export as the JSON
    macaroon v2 format.
    '''
    serialized = {}
    _add_bytes(serialized, 'i', c.caveat_id)
    if c.verification_id is not None:
        serialized['v64'] = _b64(c.verification_id)
    if c.location is not None:
        serialized['l'] = c.location
    return serialized


def macaroon_from_dict(d):
    if d.get('v') != VERSION_2:
        raise MalformedMacaroonError(
            'unsupported JSON macaroon version {!r}'.format(d.get('v')))
    identifier = _get_bytes(d, 'i')
    if identifier is None:
        raise MalformedMacaroonError('macaroon has no identifier')
    signature = d.get('s64')
    if signature is None:
        raise MalformedMacaroonError('macaroon has no signature')
    caveats = [_caveat_from_dict(c) for c in d.get('c') or []]
    return Macaroon(_get_location(d), identifier, caveats,
                    utils.raw_urlsafe_b64decode(signature))


def _caveat_from_dict(c):
    cid = _get_bytes(c, 'i')
    if cid is None:
        raise MalformedMacaroonError('caveat has no identifier')
    vid = c.get('v64')
    if vid is None:
        if c.get('l') is not None:
            raise MalformedMacaroonError(
                'first party caveat {!r} has a location'.format(cid))
        return first_party_caveat(cid)
    return third_party_caveat(_get_location(c), cid,
                              utils.raw_urlsafe_b64decode(vid))


def _get_location(d):
    location = d.get('l')
    if location is not None and not isinstance(location, str):
        raise MalformedMacaroonError(
            'location must be a string, not {}'.format(
                type(location).__name__))
    return location


def _add_bytes(d, key, value):
    ''' Store value under key when it is valid UTF-8, or base64 encoded
    under key + '64' otherwise.
    '''
    try:
        d[key] = value.decode('utf-8')
    except UnicodeDecodeError:
        d[key + '64'] = _b64(value)


def _get_bytes(d, key):
    if key in d:
        if key + '64' in d:
            raise MalformedMacaroonError(
                'both {} and {}64 present'.format(key, key))
        return d[key].encode('utf-8')
    value = d.get(key + '64')
    if value is None:
        return None
    return utils.raw_urlsafe_b64decode(value)


def _b64(b):
    return utils.raw_urlsafe_b64encode(b).decode('ascii')
