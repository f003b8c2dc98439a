# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import datetime
import re
from collections import namedtuple

import pyrfc3339

# Constants for the comparison operators understood by the predicate
# satisfiers. A predicate has the form "<field> <operator> <value>".
EQUAL = '='
NOT_EQUAL = '!='
GREATER_THAN = '>'
GREATER_OR_EQUAL = '>='
LESS_THAN = '<'
LESS_OR_EQUAL = '<='
IN = 'in'
NOT_IN = '!in'

# Longest first so that the regular expression never stops at a prefix.
_OPERATORS = (NOT_IN, IN, NOT_EQUAL, GREATER_OR_EQUAL, LESS_OR_EQUAL,
              EQUAL, GREATER_THAN, LESS_THAN)


def field(name):
    '''Return a Field used to build predicates on name, for example
    field('account').eq(1234) is the predicate "account = 1234".
    '''
    return Field(name)


class Field(namedtuple('Field', 'name')):
    __slots__ = ()

    def eq(self, value):
        return Predicate(self.name, EQUAL, value)

    def ne(self, value):
        return Predicate(self.name, NOT_EQUAL, value)

    def gt(self, value):
        return Predicate(self.name, GREATER_THAN, value)

    def ge(self, value):
        return Predicate(self.name, GREATER_OR_EQUAL, value)

    def lt(self, value):
        return Predicate(self.name, LESS_THAN, value)

    def le(self, value):
        return Predicate(self.name, LESS_OR_EQUAL, value)

    def contains(self, *values):
        return self.contains_all(values)

    def contains_all(self, values):
        '''The field must hold every one of values.'''
        return Predicate(self.name, IN, list(values))

    def not_contains(self, *values):
        return self.not_contains_all(values)

    def not_contains_all(self, values):
        return Predicate(self.name, NOT_IN, list(values))


class Predicate(namedtuple('Predicate', 'field, operator, value')):
    '''Predicate holds a comparison of a field against a value.

    Its string form is what gets added to a macaroon as a first party
    caveat.
    '''
    __slots__ = ()

    def __str__(self):
        if isinstance(self.value, (list, tuple)):
            value = ','.join(format_value(v) for v in self.value)
        else:
            value = format_value(self.value)
        return '{} {} {}'.format(self.field, self.operator, value)


def format_value(value):
    '''Return the predicate text for value.

    Booleans are written as "true" or "false" and datetimes as RFC 3339
    in UTC. Anything else uses str.
    '''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, datetime.datetime):
        return pyrfc3339.generate(value, microseconds=True)
    return str(value)


def parse_value(raw, kind):
    '''Parse predicate text into a value of type kind.

    @raise ValueError if raw is not a valid kind.
    '''
    if kind is bool:
        if raw == 'true':
            return True
        if raw == 'false':
            return False
        raise ValueError('cannot parse {!r} as a boolean'.format(raw))
    if issubclass(kind, datetime.datetime):
        return pyrfc3339.parse(raw)
    return kind(raw)


class _FieldMatcher(object):
    def __init__(self, field):
        self.field = field
        self._matcher = re.compile(
            r'\A{} (?P<operator>{}) (?P<value>.*)\Z'.format(
                re.escape(field), '|'.join(re.escape(op)
                                           for op in _OPERATORS)),
            re.DOTALL)

    def _match(self, predicate):
        if isinstance(predicate, bytes):
            try:
                predicate = predicate.decode('utf-8')
            except UnicodeDecodeError:
                return None
        m = self._matcher.match(predicate)
        if m is None:
            return None
        return m.group('operator'), m.group('value')


class FieldSatisfier(_FieldMatcher):
    '''Satisfies predicates comparing field against a known value.

    For example FieldSatisfier('account', 15) accepts "account > 10" and
    "account = 15" but not "account < 10". The predicate value is parsed
    with the type of value.
    '''
    def __init__(self, field, value):
        super(FieldSatisfier, self).__init__(field)
        self.value = value

    def __call__(self, predicate):
        match = self._match(predicate)
        if match is None:
            return False
        operator, raw = match
        try:
            bound = parse_value(raw, type(self.value))
            return _compare(operator, self.value, bound)
        except (ValueError, TypeError):
            return False

    def __repr__(self):
        return 'FieldSatisfier({!r}, {!r})'.format(self.field, self.value)


class CollectionSatisfier(_FieldMatcher):
    '''Satisfies "in" and "!in" predicates on field.

    CollectionSatisfier('actions', ['read']) accepts "actions in read,write"
    because the predicate holds every required value, and rejects
    "actions !in read".
    '''
    def __init__(self, field, values):
        super(CollectionSatisfier, self).__init__(field)
        self.values = frozenset(values)
        kinds = set(type(v) for v in self.values)
        if len(kinds) > 1:
            raise ValueError('collection values must share one type')
        self._kind = kinds.pop() if kinds else str

    def __call__(self, predicate):
        match = self._match(predicate)
        if match is None:
            return False
        operator, raw = match
        try:
            held = set(parse_value(v, self._kind) for v in raw.split(','))
        except (ValueError, TypeError):
            return False
        if operator == IN:
            return held.issuperset(self.values)
        if operator == NOT_IN:
            return not held.issuperset(self.values)
        return False

    def __repr__(self):
        return 'CollectionSatisfier({!r}, {!r})'.format(
            self.field, sorted(self.values, key=str))


def _compare(operator, value, bound):
    if operator == EQUAL:
        return value == bound
    if operator == NOT_EQUAL:
        return value != bound
    if operator == GREATER_THAN:
        return value > bound
    if operator == GREATER_OR_EQUAL:
        return value >= bound
    if operator == LESS_THAN:
        return value < bound
    if operator == LESS_OR_EQUAL:
        return value <= bound
    return False
