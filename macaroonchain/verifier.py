# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from macaroonchain import codec
from macaroonchain.crypto import (
    bind_signature,
    chain_signatures,
    derive_key,
    signatures_equal,
    to_bytes,
)
from macaroonchain.error import (
    DischargeChainTooDeepError,
    MissingDischargeError,
    SignatureMismatchError,
    UnsatisfiedCaveatError,
    VerificationError,
    VerificationIdError,
)
from macaroonchain.predicates import CollectionSatisfier, FieldSatisfier

# DEFAULT_MAX_DISCHARGE_DEPTH holds how many levels of discharge macaroons
# are followed below the macaroon being verified.
DEFAULT_MAX_DISCHARGE_DEPTH = 10


class Verifier(object):
    '''Verifier checks a macaroon against a root key.

    A Verifier holds a set of satisfiers for first party caveats and the
    discharge macaroons for third party caveats. It is immutable: each
    satisfy_* method returns a new Verifier, so a base configuration can be
    shared between threads and extended per request.

    A first party caveat is satisfied when its predicate is one of the
    exact predicates, or when any general satisfier (called with the
    predicate bytes) or caveat satisfier (called with the Caveat) returns
    True. The order in which satisfiers are registered never matters.
    '''

    def __init__(self, predicates=(), general=(), caveat_checks=(),
                 discharges=(),
                 max_discharge_depth=DEFAULT_MAX_DISCHARGE_DEPTH):
        '''
        @param predicates iterable of bytes or strings matched exactly.
        @param general iterable of callables taking the predicate bytes.
        @param caveat_checks iterable of callables taking the Caveat.
        @param discharges iterable of bound discharge macaroons.
        @param max_discharge_depth int bound on nested discharges.
        '''
        if max_discharge_depth < 0:
            raise ValueError('max_discharge_depth must not be negative')
        self._predicates = frozenset(to_bytes(p) for p in predicates)
        self._general = tuple(general)
        self._caveat_checks = tuple(caveat_checks)
        self._discharges = {}
        for m in discharges:
            self._add_discharge(self._discharges, m)
        self._max_discharge_depth = max_discharge_depth

    @property
    def max_discharge_depth(self):
        return self._max_discharge_depth

    def satisfy_exact(self, *predicates):
        '''Return a verifier that also accepts the given exact predicates.

        @param predicates bytes or strings.
        '''
        return self._replace(predicates=self._predicates.union(
            to_bytes(p) for p in predicates))

    def satisfy_general(self, *funcs):
        '''Return a verifier that also accepts any first party predicate
        for which one of funcs returns True.

        @param funcs callables taking the predicate as bytes.
        '''
        return self._replace(general=self._general + funcs)

    def satisfy_caveat(self, *funcs):
        '''Return a verifier that also accepts any first party caveat for
        which one of funcs returns True.

        This is the hook for capability checks such as accepting every
        first party caveat (lambda caveat: caveat.is_first_party).

        @param funcs callables taking a Caveat.
        '''
        return self._replace(caveat_checks=self._caveat_checks + funcs)

    def satisfy_field(self, field, value):
        '''Return a verifier that accepts comparisons of field against
        value, such as "account > 10" when value is 15.

        A list, tuple, set or frozenset value accepts collection
        predicates ("actions in read,write") instead.
        '''
        if isinstance(value, (list, tuple, set, frozenset)):
            satisfier = CollectionSatisfier(field, value)
        else:
            satisfier = FieldSatisfier(field, value)
        return self.satisfy_general(satisfier)

    def satisfy_discharges(self, discharges):
        '''Return a verifier that also holds the given discharge macaroons.

        Discharges must already be bound to the macaroon being verified
        (see Macaroon.prepare_for_request).

        @raise ValueError if two discharges share an identifier.
        '''
        merged = dict(self._discharges)
        for m in discharges:
            self._add_discharge(merged, m)
        return self._replace(discharges=merged.values())

    def satisfy_discharge(self, discharge):
        return self.satisfy_discharges([discharge])

    def with_max_discharge_depth(self, depth):
        '''Return a verifier that follows at most depth levels of
        discharge macaroons.
        '''
        return self._replace(max_discharge_depth=depth)

    def verify(self, macaroon, root_key):
        '''Verify macaroon against root_key.

        The signature chain is replayed and compared first; only then are
        the caveats checked, in order, descending into the discharge
        macaroon of each third party caveat.

        @param macaroon the Macaroon to verify.
        @param root_key bytes or string that the macaroon was created with.
        @return True
        @raise SignatureMismatchError, UnsatisfiedCaveatError,
        MissingDischargeError or DischargeChainTooDeepError.
        '''
        self._verify(macaroon, macaroon, derive_key(root_key), 0)
        return True

    def is_valid(self, macaroon, root_key):
        '''Like verify but return False instead of raising.'''
        try:
            return self.verify(macaroon, root_key)
        except VerificationError:
            return False

    def _verify(self, root, macaroon, key, depth):
        signatures = list(chain_signatures(
            key, macaroon.identifier, macaroon.caveats))
        signature = signatures[-1]
        if depth > 0:
            signature = bind_signature(root.signature, signature)
        if not signatures_equal(signature, macaroon.signature):
            raise SignatureMismatchError(
                'signature mismatch after caveat verification')

        for caveat, previous in zip(macaroon.caveats, signatures):
            if caveat.is_third_party:
                self._verify_discharge(root, caveat, previous, depth)
            elif not self._satisfied(caveat):
                raise UnsatisfiedCaveatError(caveat)

    def _verify_discharge(self, root, caveat, signature, depth):
        discharge = self._discharges.get(caveat.caveat_id)
        if discharge is None:
            raise MissingDischargeError(caveat)
        if depth + 1 > self._max_discharge_depth:
            raise DischargeChainTooDeepError(self._max_discharge_depth)
        try:
            key = codec.decode_verification_id(
                signature, caveat.verification_id)
        except VerificationIdError as exc:
            raise SignatureMismatchError(
                'cannot recover discharge key for caveat {!r}: {}'.format(
                    caveat.caveat_id, exc))
        self._verify(root, discharge, key, depth + 1)

    def _satisfied(self, caveat):
        predicate = caveat.caveat_id
        if predicate in self._predicates:
            return True
        if any(f(predicate) for f in self._general):
            return True
        return any(f(caveat) for f in self._caveat_checks)

    def _replace(self, **kwargs):
        args = dict(predicates=self._predicates,
                    general=self._general,
                    caveat_checks=self._caveat_checks,
                    discharges=self._discharges.values(),
                    max_discharge_depth=self._max_discharge_depth)
        args.update(kwargs)
        return Verifier(**args)

    @staticmethod
    def _add_discharge(discharges, m):
        if m.identifier in discharges:
            raise ValueError(
                'duplicate discharge macaroon for caveat {!r}'.format(
                    m.identifier))
        discharges[m.identifier] = m
