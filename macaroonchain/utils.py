# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import base64
import binascii


def add_base64_padding(b):
    '''Add padding to base64 encoded bytes.

    Macaroons are serialized without base64 padding.

    @param bytes b to be padded.
    @return a padded bytes.
    '''
    return b + b'=' * (-len(b) % 4)


def remove_base64_padding(b):
    '''Remove padding from base64 encoded bytes.

    @param bytes b to be stripped.
    @return bytes without padding.
    '''
    return b.rstrip(b'=')


def raw_urlsafe_b64decode(s):
    '''Base64 decode with added padding and convertion to bytes.

    Both the URL-safe and the standard alphabets are accepted.

    @param s string or bytes to decode
    @return bytes decoded
    @raise ValueError if s is not valid base64.
    '''
    if isinstance(s, str):
        s = s.encode('ascii')
    s = add_base64_padding(remove_base64_padding(s.strip()))
    s = s.replace(b'+', b'-').replace(b'/', b'_')
    try:
        return base64.b64decode(s, altchars=b'-_', validate=True)
    except binascii.Error as exc:
        raise ValueError('invalid base64: {}'.format(exc))


def raw_urlsafe_b64encode(b):
    '''Base64 encode with padding removed.

    @param b bytes to encode
    @return bytes encoded
    '''
    return remove_base64_padding(base64.urlsafe_b64encode(b))
