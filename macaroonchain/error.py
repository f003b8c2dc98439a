# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

SIGNATURE_MISMATCH = 'signature mismatch'
UNSATISFIED_CAVEAT = 'unsatisfied caveat'
MISSING_DISCHARGE = 'missing discharge'
DISCHARGE_CHAIN_TOO_DEEP = 'discharge chain too deep'


class MacaroonError(Exception):
    pass


class VerificationError(MacaroonError):
    '''Raised when a macaroon does not verify.

    The reason attribute holds one of SIGNATURE_MISMATCH,
    UNSATISFIED_CAVEAT, MISSING_DISCHARGE or DISCHARGE_CHAIN_TOO_DEEP.
    '''
    reason = None

    def __init__(self, message=None):
        if message is None:
            message = self.reason
        super(VerificationError, self).__init__(message)


class SignatureMismatchError(VerificationError):
    reason = SIGNATURE_MISMATCH


class UnsatisfiedCaveatError(VerificationError):
    reason = UNSATISFIED_CAVEAT

    def __init__(self, caveat):
        self.caveat = caveat
        super(UnsatisfiedCaveatError, self).__init__(
            'caveat {!r} not satisfied'.format(caveat.caveat_id))


class MissingDischargeError(VerificationError):
    reason = MISSING_DISCHARGE

    def __init__(self, caveat):
        self.caveat = caveat
        super(MissingDischargeError, self).__init__(
            'no discharge macaroon found for caveat {!r}'.format(
                caveat.caveat_id))


class DischargeChainTooDeepError(VerificationError):
    reason = DISCHARGE_CHAIN_TOO_DEEP

    def __init__(self, depth):
        self.depth = depth
        super(DischargeChainTooDeepError, self).__init__(
            'discharge chain deeper than {}'.format(depth))


class VerificationIdError(MacaroonError):
    ''' Raised when a third party verification id cannot be decrypted.
    '''


class MalformedMacaroonError(MacaroonError, ValueError):
    ''' Raised when serialized macaroon data cannot be decoded.
    '''
