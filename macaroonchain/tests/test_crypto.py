# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import binascii
import hashlib
import hmac
from unittest import TestCase

from macaroonchain import crypto
from macaroonchain.caveat import first_party_caveat, third_party_caveat


def _hmac(key, data):
    return hmac.new(key, data, hashlib.sha256).digest()


class TestCrypto(TestCase):
    def test_derive_key(self):
        key = crypto.derive_key(b'root key')
        self.assertEqual(len(key), crypto.KEY_LEN)
        self.assertEqual(key, _hmac(b'macaroons-key-generator', b'root key'))
        self.assertEqual(crypto.derive_key('root key'), key)
        self.assertNotEqual(crypto.derive_key(b'other key'), key)

    def test_derive_key_rejects_other_types(self):
        with self.assertRaises(TypeError):
            crypto.derive_key(1234)

    def test_third_party_signature_is_nested(self):
        sig = b'\x01' * 32
        want = _hmac(sig, _hmac(sig, b'vid') + _hmac(sig, b'cid'))
        self.assertEqual(
            crypto.third_party_signature(sig, b'vid', b'cid'), want)

    def test_third_party_signature_fixes_field_boundaries(self):
        sig = b'\x01' * 32
        self.assertNotEqual(
            crypto.third_party_signature(sig, b'ab', b'c'),
            crypto.third_party_signature(sig, b'a', b'bc'))

    def test_chain_signatures(self):
        key = crypto.derive_key(b'k')
        caveats = [
            first_party_caveat('a = 1'),
            third_party_caveat('there', b'cid', b'vid'),
            first_party_caveat('b = 2'),
        ]
        sigs = list(crypto.chain_signatures(key, b'id', caveats))
        self.assertEqual(len(sigs), 4)
        self.assertEqual(sigs[0], _hmac(key, b'id'))
        self.assertEqual(sigs[1], _hmac(sigs[0], b'a = 1'))
        self.assertEqual(
            sigs[2], crypto.third_party_signature(sigs[1], b'vid', b'cid'))
        self.assertEqual(sigs[3], _hmac(sigs[2], b'b = 2'))
        self.assertEqual(
            crypto.compute_signature(key, b'id', caveats), sigs[3])

    def test_compute_signature_is_deterministic(self):
        key = crypto.derive_key(b'k')
        caveats = [first_party_caveat('a = 1'), first_party_caveat('b = 2')]
        self.assertEqual(crypto.compute_signature(key, b'id', caveats),
                         crypto.compute_signature(key, b'id', list(caveats)))

    def test_bind_signature(self):
        zero = bytes(32)
        root = b'\x02' * 32
        discharge = b'\x03' * 32
        want = _hmac(zero, _hmac(zero, root) + _hmac(zero, discharge))
        self.assertEqual(crypto.bind_signature(root, discharge), want)

    def test_libmacaroons_vectors(self):
        # These signatures are published with libmacaroons.
        key = crypto.derive_key(
            b'this is our super secret key; only we should know it')
        sig = crypto.initial_signature(key, b'we used our secret key')
        self.assertEqual(
            binascii.hexlify(sig),
            b'e3d9e02908526c4c0039ae15114115d97fdd68bf2ba379b342aaf0f617d0552f')
        sig = crypto.first_party_signature(sig, b'account = 3735928559')
        self.assertEqual(
            binascii.hexlify(sig),
            b'1efe4763f290dbce0c1d08477367e11f4eee456a64933cf662d79772dbb82128')

    def test_signatures_equal(self):
        self.assertTrue(crypto.signatures_equal(b'a' * 32, b'a' * 32))
        self.assertFalse(crypto.signatures_equal(b'a' * 32, b'b' * 32))
