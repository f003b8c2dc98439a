# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging

from macaroonchain.macaroon import create

log = logging.getLogger(__name__)


def discharge(caveat, key, predicates=()):
    ''' Creates a macaroon to discharge a third party caveat.

    This is what the third party does once it has checked whatever the
    caveat id asks of it.

    :param caveat: the third party Caveat to discharge.
    :param key: the verification key the caveat was added with.
    :param predicates: first party predicates to restrict the discharge
    with, such as a short expiry time.
    :return: the unbound discharge Macaroon; bind it with
    Macaroon.prepare_for_request before sending it.
    '''
    if not caveat.is_third_party:
        raise ValueError('cannot discharge a first party caveat')
    m = create(caveat.location, caveat.caveat_id, key)
    return m.add_caveats(predicates)


def discharge_all(m, get_discharge):
    '''Gathers discharge macaroons for all the third party caveats in m
    (and any subsequent caveats required by those) using get_discharge to
    acquire each discharge macaroon.

    It returns a list of macaroon with m as the first element, followed by
    all the discharge macaroons.
    All the discharge macaroons will be bound to the primary macaroon.

    The get_discharge function is passed the third party Caveat to be
    discharged and must return a Macaroon whose identifier is the caveat
    id. How it obtains it (a local key, an HTTP call) is up to the caller.
    '''
    primary = m
    discharges = [primary]
    need = list(m.third_party_caveats())
    seen = set()
    while len(need) > 0:
        cav = need[0]
        need = need[1:]
        if cav.caveat_id in seen:
            continue
        seen.add(cav.caveat_id)
        log.debug('discharging third party caveat %r at %s',
                  cav.caveat_id, cav.location)
        dm = get_discharge(cav)
        if dm.identifier != cav.caveat_id:
            raise ValueError(
                'discharge macaroon has identifier {!r}, want {!r}'.format(
                    dm.identifier, cav.caveat_id))
        discharges.append(primary.prepare_for_request(dm))
        need.extend(dm.third_party_caveats())
    return discharges
