"""
ARES company registry lookup

Basic subject data comes from the economic subjects endpoint; directors,
shareholders and the file mark come from the commercial register (VR)
endpoint, which does not exist for every subject.
"""
import logging
import re

import requests
from django.conf import settings

from .exceptions import IntegrationError, SubjectNotFound

logger = logging.getLogger(__name__)

COURT_NAMES = {
    'MSPH': 'Městský soud v Praze',
    'KSCB': 'Krajský soud v Českých Budějovicích',
    'KSPL': 'Krajský soud v Plzni',
    'KSUL': 'Krajský soud v Ústí nad Labem',
    'KSHK': 'Krajský soud v Hradci Králové',
    'KSBR': 'Krajský soud v Brně',
    'KSOS': 'Krajský soud v Ostravě',
}

ICO_PATTERN = re.compile(r'^\d{8}$')


def _get(path):
    url = f"{settings.ARES_BASE_URL.rstrip('/')}/{path}"
    try:
        return requests.get(url, timeout=settings.INTEGRATIONS_TIMEOUT, headers={'Accept': 'application/json'})
    except requests.exceptions.RequestException as e:
        logger.warning(f"ARES request failed for {url}: {str(e)}")
        raise IntegrationError(f"ARES is not reachable: {str(e)}") from e


def _person_name(person):
    person = person or {}
    first_name = person.get('jmeno')
    last_name = person.get('prijmeni')
    if first_name and last_name:
        return f"{first_name.strip().title()} {last_name.strip().title()}"
    return None


def _member_person(member):
    return member.get('fyzickaOsoba') or member.get('clenstvi', {}).get('fyzickaOsoba') or member


def _contribution(shareholder):
    contribution = shareholder.get('vklad') or shareholder.get('podil', {}).get('vklad') or {}
    return (contribution.get('souhrn') or {}).get('hodnota') or 0


def parse_people(record):
    """Directors and shareholders of a VR record, largest owners first"""
    director_names = []
    for organ in record.get('statutarniOrgan') or []:
        for member in organ.get('clenove') or []:
            name = _person_name(_member_person(member))
            if name and name not in director_names:
                director_names.append(name)

    shareholders = record.get('spolecnici') or []
    total = sum(_contribution(s) for s in shareholders)
    ownership = {}
    for shareholder in shareholders:
        name = _person_name(shareholder.get('fyzickaOsoba') or shareholder)
        if name:
            ownership[name] = round(_contribution(shareholder) / total * 100) if total > 0 else None

    people = []
    for name in director_names + [n for n in ownership if n not in director_names]:
        is_director = name in director_names
        is_shareholder = name in ownership
        if is_director and is_shareholder:
            role = 'director, shareholder'
        elif is_director:
            role = 'director'
        else:
            role = 'shareholder'
        people.append({'name': name, 'role': role, 'ownership_percent': ownership.get(name)})
    return sorted(people, key=lambda p: p['ownership_percent'] or 0, reverse=True)


def parse_file_mark(record):
    for mark in record.get('spisovaZnacka') or []:
        section, insert = mark.get('oddil'), mark.get('vlozka')
        if section and insert:
            court = COURT_NAMES.get(mark.get('soud'), mark.get('soud') or '')
            return f"{section} {insert}, {court}" if court else f"{section} {insert}"
    return None


def _street(seat):
    if seat.get('nazevUlice') or seat.get('cisloDomovni'):
        number = ''
        if seat.get('cisloDomovni'):
            number = str(seat['cisloDomovni'])
            if seat.get('cisloOrientacni'):
                number += f"/{seat['cisloOrientacni']}"
        return ' '.join(part for part in [seat.get('nazevUlice'), number] if part) or None
    return seat.get('textovaAdresa') or None


def lookup_company(ico):
    """
    Company data for an 8 digit ICO.

    Raises SubjectNotFound for unknown subjects and IntegrationError when
    ARES fails.
    """
    ico = (ico or '').strip()
    if not ICO_PATTERN.match(ico):
        raise SubjectNotFound(f"Invalid ICO: {ico}")

    response = _get(f"ekonomicke-subjekty/{ico}")
    if response.status_code == 404:
        raise SubjectNotFound(f"Company {ico} not found in ARES")
    if not response.ok:
        raise IntegrationError(f"ARES returned HTTP {response.status_code}")
    basic = response.json()
    seat = basic.get('sidlo') or {}
    nace = basic.get('czNace') or []

    company = {
        'ico': ico,
        'company_name': basic.get('obchodniJmeno') or basic.get('nazev') or '',
        'dic': basic.get('dic'),
        'street': _street(seat),
        'city': seat.get('nazevObce'),
        'zip': str(seat['psc']) if seat.get('psc') else None,
        'country': 'Česká republika',
        'legal_form': basic.get('pravniForma'),
        'founded_date': basic.get('datumVzniku'),
        'nace': nace[0] if nace else None,
        'directors': [],
        'file_mark': None,
    }

    try:
        vr_response = _get(f"ekonomicke-subjekty-vr/{ico}")
    except IntegrationError:
        vr_response = None
    if vr_response is not None and vr_response.ok:
        records = vr_response.json().get('zaznamy') or []
        if records:
            company['directors'] = parse_people(records[0])
            company['file_mark'] = parse_file_mark(records[0])
    else:
        logger.info(f"No commercial register record for {ico}")

    return company
