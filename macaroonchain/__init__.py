# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

from macaroonchain.crypto import (
    KEY_LEN,
    compute_signature,
    derive_key,
)
from macaroonchain.error import (
    DISCHARGE_CHAIN_TOO_DEEP,
    MISSING_DISCHARGE,
    SIGNATURE_MISMATCH,
    UNSATISFIED_CAVEAT,
    DischargeChainTooDeepError,
    MacaroonError,
    MalformedMacaroonError,
    MissingDischargeError,
    SignatureMismatchError,
    UnsatisfiedCaveatError,
    VerificationError,
    VerificationIdError,
)
from macaroonchain.caveat import (
    FIRST_PARTY,
    THIRD_PARTY,
    Caveat,
    first_party_caveat,
    third_party_caveat,
)
from macaroonchain.codec import (
    decode_verification_id,
    encode_verification_id,
)
from macaroonchain.keys import (
    generate_private_key,
    generate_secret_key,
    shared_secret,
)
from macaroonchain.macaroon import (
    MAX_CAVEAT_SIZE,
    MAX_CAVEATS,
    Macaroon,
    create,
)
from macaroonchain.predicates import (
    CollectionSatisfier,
    FieldSatisfier,
    Predicate,
    field,
)
from macaroonchain.verifier import (
    DEFAULT_MAX_DISCHARGE_DEPTH,
    Verifier,
)
from macaroonchain.discharge import (
    discharge,
    discharge_all,
)

__all__ = [
    'Caveat',
    'CollectionSatisfier',
    'DEFAULT_MAX_DISCHARGE_DEPTH',
    'DISCHARGE_CHAIN_TOO_DEEP',
    'DischargeChainTooDeepError',
    'FIRST_PARTY',
    'FieldSatisfier',
    'KEY_LEN',
    'MAX_CAVEATS',
    'MAX_CAVEAT_SIZE',
    'MISSING_DISCHARGE',
    'Macaroon',
    'MacaroonError',
    'MalformedMacaroonError',
    'MissingDischargeError',
    'Predicate',
    'SIGNATURE_MISMATCH',
    'SignatureMismatchError',
    'THIRD_PARTY',
    'UNSATISFIED_CAVEAT',
    'UnsatisfiedCaveatError',
    'VerificationError',
    'VerificationIdError',
    'Verifier',
    'compute_signature',
    'create',
    'decode_verification_id',
    'derive_key',
    'discharge',
    'discharge_all',
    'encode_verification_id',
    'field',
    'first_party_caveat',
    'generate_private_key',
    'generate_secret_key',
    'shared_secret',
    'third_party_caveat',
]
