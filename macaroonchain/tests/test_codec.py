# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from unittest import TestCase

import nacl.secret

from macaroonchain import codec
from macaroonchain.crypto import derive_key
from macaroonchain.error import VerificationIdError


class TestCodec(TestCase):
    def setUp(self):
        self.signature = b'\x07' * 32

    def test_verification_id_round_trip(self):
        vid = codec.encode_verification_id(self.signature, b'third party key')
        self.assertEqual(len(vid), codec.VERIFICATION_ID_LEN)
        key = codec.decode_verification_id(self.signature, vid)
        self.assertEqual(key, derive_key(b'third party key'))

    def test_verification_id_is_sealed_under_derived_signature(self):
        vid = codec.encode_verification_id(self.signature, b'k')
        box = nacl.secret.SecretBox(derive_key(self.signature))
        self.assertEqual(box.decrypt(vid), derive_key(b'k'))

    def test_verification_id_nonce_differs(self):
        vid1 = codec.encode_verification_id(self.signature, b'k')
        vid2 = codec.encode_verification_id(self.signature, b'k')
        self.assertNotEqual(vid1[:codec.NONCE_SIZE], vid2[:codec.NONCE_SIZE])

    def test_wrong_signature(self):
        vid = codec.encode_verification_id(self.signature, b'k')
        with self.assertRaises(VerificationIdError):
            codec.decode_verification_id(b'\x08' * 32, vid)

    def test_tampered_verification_id(self):
        vid = bytearray(codec.encode_verification_id(self.signature, b'k'))
        vid[-1] ^= 1
        with self.assertRaises(VerificationIdError):
            codec.decode_verification_id(self.signature, bytes(vid))

    def test_truncated_verification_id(self):
        vid = codec.encode_verification_id(self.signature, b'k')
        with self.assertRaises(VerificationIdError):
            codec.decode_verification_id(self.signature, vid[:-1])
        with self.assertRaises(VerificationIdError):
            codec.decode_verification_id(self.signature, b'')

    def test_encode_decode_varint(self):
        tests = [
            (0, [0]),
            (12, [12]),
            (127, [127]),
            (128, [128, 1]),
            (129, [129, 1]),
            (1234567, [135, 173, 75]),
            (12131231231312, [208, 218, 233, 173, 136, 225, 2])
        ]
        for test in tests:
            data = bytearray()
            codec.encode_uvarint(test[0], data)
            self.assertEqual(data, bytearray(test[1]))
            val = codec.decode_uvarint(bytes(data))
            self.assertEqual(test[0], val[0])
            self.assertEqual(len(test[1]), val[1])

    def test_decode_varint_offset(self):
        self.assertEqual(codec.decode_uvarint(b'\x05\x80\x01\x09', 1), (128, 2))

    def test_decode_varint_reads_in_place(self):
        data = _NoSliceBytes(b'\x00' * 100000 + b'\x80\x01')
        self.assertEqual(codec.decode_uvarint(data, 100000), (128, 2))

    def test_decode_varint_truncated(self):
        with self.assertRaises(ValueError):
            codec.decode_uvarint(b'\x80\x80')
        with self.assertRaises(ValueError):
            codec.decode_uvarint(b'')

    def test_decode_varint_overflow(self):
        with self.assertRaises(ValueError):
            codec.decode_uvarint(b'\xff' * 10 + b'\x01')

    def test_encode_negative_varint(self):
        with self.assertRaises(ValueError):
            codec.encode_uvarint(-1, bytearray())


class _NoSliceBytes(bytes):
    '''Bytes that fail when sliced, so a decoder copying the remainder of
    its input is caught.
    '''
    def __getitem__(self, index):
        if isinstance(index, slice):
            raise AssertionError('unexpected slice {!r}'.format(index))
        return super(_NoSliceBytes, self).__getitem__(index)
