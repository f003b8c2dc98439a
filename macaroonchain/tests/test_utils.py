# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from unittest import TestCase

from macaroonchain import utils


class TestB64Decode(TestCase):
    def test_decode(self):
        test_cases = [{
            'about': 'empty string',
            'input': '',
            'expect': '',
        }, {
            'about': 'standard encoding, padded',
            'input': 'Z29+IQ==',
            'expect': 'go~!',
        }, {
            'about': 'URL encoding, padded',
            'input': 'Z29-IQ==',
            'expect': 'go~!',
        }, {
            'about': 'standard encoding, not padded',
            'input': 'Z29+IQ',
            'expect': 'go~!',
        }, {
            'about': 'URL encoding, not padded',
            'input': b'Z29-IQ',
            'expect': 'go~!',
        }, {
            'about': 'impossible length',
            'input': 'Z29-I',
            'expect_error': True,
        }, {
            'about': 'character outside the alphabet',
            'input': 'Z2*-IQ',
            'expect_error': True,
        }]
        for test in test_cases:
            if test.get('expect_error'):
                with self.assertRaises(ValueError, msg=test['about']):
                    utils.raw_urlsafe_b64decode(test['input'])
            else:
                self.assertEqual(utils.raw_urlsafe_b64decode(test['input']),
                                 test['expect'].encode('utf-8'),
                                 msg=test['about'])

    def test_encode_has_no_padding(self):
        self.assertEqual(utils.raw_urlsafe_b64encode(b'go~!'), b'Z29-IQ')
        self.assertEqual(utils.raw_urlsafe_b64encode(b''), b'')
