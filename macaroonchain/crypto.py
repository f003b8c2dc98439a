# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import hashlib
import hmac

KEY_LEN = 32

# The libmacaroons key generator constant. Root keys are never used as
# HMAC keys directly; they go through derive_key first.
MAGIC_KEY = b'macaroons-key-generator'

_EMPTY_KEY = bytes(KEY_LEN)


def to_bytes(s):
    '''Return s as bytes, encoding it as UTF-8 if it is a string.

    @param s bytes or string
    @return bytes
    '''
    if isinstance(s, bytes):
        return s
    if isinstance(s, (bytearray, memoryview)):
        return bytes(s)
    if isinstance(s, str):
        return s.encode('utf-8')
    raise TypeError('expected bytes or string, got {}'.format(
        type(s).__name__))


def hmac_digest(key, data):
    '''HMAC-SHA256 of data keyed with key.'''
    return hmac.new(key, data, hashlib.sha256).digest()


def hmac_digest2(key, data1, data2):
    '''Bind two variable length messages into one signature.

    Each message is hashed on its own first so that the concatenation
    only ever joins two fixed length values.
    '''
    return hmac_digest(
        key, hmac_digest(key, data1) + hmac_digest(key, data2))


def derive_key(root_key):
    '''Return the 32 byte key used to start a signature chain.

    @param root_key bytes or string of any length.
    @return bytes
    '''
    return hmac_digest(MAGIC_KEY, to_bytes(root_key))


def initial_signature(key, identifier):
    '''Start a signature chain from an already derived key.'''
    return hmac_digest(key, identifier)


def first_party_signature(signature, predicate):
    return hmac_digest(signature, predicate)


def third_party_signature(signature, verification_id, caveat_id):
    return hmac_digest2(signature, verification_id, caveat_id)


def caveat_signature(signature, caveat):
    '''Return the signature that follows signature once caveat is
    appended to the chain.
    '''
    if caveat.is_third_party:
        return third_party_signature(
            signature, caveat.verification_id, caveat.caveat_id)
    return first_party_signature(signature, caveat.caveat_id)


def chain_signatures(key, identifier, caveats):
    '''Replay a signature chain.

    Yields the initial signature and then the signature after each caveat,
    so the last value yielded is the final signature of the macaroon.

    @param key the derived key (see derive_key) rooting the chain.
    @param identifier bytes
    @param caveats iterable of Caveat.
    '''
    signature = initial_signature(key, identifier)
    yield signature
    for caveat in caveats:
        signature = caveat_signature(signature, caveat)
        yield signature


def compute_signature(key, identifier, caveats):
    '''Return the final signature of a chain rooted at the derived key.

    This is exported for issuers that hold the root key and want to
    recompute a macaroon's signature without checking any caveats, for
    example to audit a stored macaroon.

    @param key the derived key (see derive_key) rooting the chain.
    @param identifier bytes
    @param caveats iterable of Caveat.
    @return bytes
    '''
    signature = None
    for signature in chain_signatures(key, identifier, caveats):
        pass
    return signature


def bind_signature(root_signature, discharge_signature):
    '''Bind a discharge macaroon signature to the signature of the
    macaroon it is authorising.
    '''
    return hmac_digest2(_EMPTY_KEY, root_signature, discharge_signature)


def signatures_equal(a, b):
    '''Constant time comparison of two signatures.'''
    return hmac.compare_digest(a, b)
