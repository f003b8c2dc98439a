# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import nacl.exceptions
import nacl.hash
import nacl.secret
import nacl.utils
from nacl.encoding import RawEncoder

from macaroonchain.crypto import KEY_LEN, derive_key
from macaroonchain.error import VerificationIdError

NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE
_MAC_SIZE = nacl.secret.SecretBox.MACBYTES
_SALT_SIZE = 16
_PERSON_SIZE = 16

# VERIFICATION_ID_LEN holds the length of an encoded verification id:
# nonce, poly1305 tag and the encrypted 32 byte key.
VERIFICATION_ID_LEN = NONCE_SIZE + _MAC_SIZE + KEY_LEN


def encode_verification_id(signature, verification_key):
    '''Encrypt the key of a third party caveat.

    The plaintext is derive_key(verification_key), the key that roots the
    discharge macaroon's chain. It is sealed with NaCl secretbox under
    derive_key(signature), where signature is the chain signature just
    before the caveat is added.

    The format has the following packed binary fields:

        nonce [24 bytes]
        poly1305 tag [16 bytes]
        encrypted key [32 bytes]

    @param signature bytes holding the current chain signature.
    @param verification_key bytes or string holding the discharge root key.
    @return bytes
    '''
    plaintext = derive_key(verification_key)
    encryption_key = derive_key(signature)
    box = nacl.secret.SecretBox(encryption_key)
    nonce = _new_nonce(encryption_key, plaintext)
    return bytes(box.encrypt(plaintext, nonce))


def decode_verification_id(signature, verification_id):
    '''Recover the discharge root key from a verification id.

    @param signature bytes the chain signature before the caveat.
    @param verification_id bytes as produced by encode_verification_id.
    @return the 32 byte derived key of the discharge macaroon.
    @raise VerificationIdError if the verification id does not decrypt.
    '''
    if len(verification_id) != VERIFICATION_ID_LEN:
        raise VerificationIdError(
            'verification id has length {}, want {}'.format(
                len(verification_id), VERIFICATION_ID_LEN))
    box = nacl.secret.SecretBox(derive_key(signature))
    try:
        return box.decrypt(verification_id)
    except nacl.exceptions.CryptoError as exc:
        raise VerificationIdError(
            'cannot decrypt verification id: {}'.format(exc))


def _new_nonce(key, message):
    '''Return a 24 byte nonce for sealing message under key.

    The nonce is a keyed BLAKE2b digest of the message with a random salt
    and personalisation.
    '''
    return nacl.hash.blake2b(
        message,
        digest_size=NONCE_SIZE,
        key=key,
        salt=nacl.utils.random(_SALT_SIZE),
        person=nacl.utils.random(_PERSON_SIZE),
        encoder=RawEncoder)


def encode_uvarint(n, data):
    '''encodes integer into variable-length format into data.'''
    if n < 0:
        raise ValueError('only support positive integer')
    while True:
        this_byte = n & 127
        n >>= 7
        if n == 0:
            data.append(this_byte)
            break
        data.append(this_byte | 128)


def decode_uvarint(data, offset=0):
    '''Decode a variable-length integer.

    Reads a sequence of unsigned integer bytes from data starting at
    offset and returns the integer and the number of bytes read.

    @raise ValueError if data ends before the integer does or the
    integer does not fit in 64 bits.
    '''
    n = 0
    shift = 0
    length = 0
    for i in range(offset, len(data)):
        b = data[i]
        n |= (b & 0x7f) << shift
        length += 1
        if (b & 0x80) == 0:
            return n, length
        shift += 7
        if shift > 63:
            raise ValueError('varint overflows 64 bits')
    raise ValueError('truncated varint')
