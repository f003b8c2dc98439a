# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import nacl.utils
from nacl.public import Box, PrivateKey, PublicKey

from macaroonchain.crypto import KEY_LEN


def generate_secret_key():
    '''Return a new random 32 byte root key.'''
    return nacl.utils.random(KEY_LEN)


def generate_private_key():
    '''Return a new Curve25519 key pair as a nacl.public.PrivateKey.'''
    return PrivateKey.generate()


def shared_secret(public_key, private_key):
    '''Return the 32 byte secret shared by the owners of the two keys.

    It is the X25519 product of the keys passed through HSalsa20, so
    either party computes the same value from their private key and the
    other's public key. It is suitable as the verification key of a third
    party caveat.

    @param public_key nacl.public.PublicKey or 32 bytes of the other party.
    @param private_key nacl.public.PrivateKey or 32 bytes of our own.
    @return bytes
    '''
    if not isinstance(public_key, PublicKey):
        public_key = PublicKey(public_key)
    if not isinstance(private_key, PrivateKey):
        private_key = PrivateKey(private_key)
    return Box(private_key, public_key).shared_key()
