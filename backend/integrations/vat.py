"""
Unreliable VAT payer check (Ministry of Finance SOAP service)
"""
import logging
import xml.etree.ElementTree as ET

import requests
from django.conf import settings

from .exceptions import IntegrationError

logger = logging.getLogger(__name__)

STATUS_MAP = {
    'NE': 'reliable',
    'ANO': 'unreliable',
}

SOAP_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:roz="http://adis.mfcr.cz/rozhraniCRPDPH/">
  <soapenv:Header/>
  <soapenv:Body>
    <roz:StatusNespolehlivyPlatceRequest>
      <roz:dic>{dic}</roz:dic>
    </roz:StatusNespolehlivyPlatceRequest>
  </soapenv:Body>
</soapenv:Envelope>"""


def normalize_dic(dic):
    """Upper-case VAT id without spaces and without the CZ prefix"""
    dic = (dic or '').replace(' ', '').strip().upper()
    return dic[2:] if dic.startswith('CZ') else dic


def parse_reliability_response(xml_text):
    """Raw ``nespolehlivyPlatce`` flag of the first payer in the answer, or None"""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise IntegrationError(f"Could not parse VAT registry response: {str(e)}") from e

    for element in root.iter():
        if element.tag.rsplit('}', 1)[-1] == 'faultstring':
            raise IntegrationError(f"VAT registry fault: {element.text}")
    for element in root.iter():
        if 'nespolehlivyPlatce' in element.attrib:
            return element.attrib['nespolehlivyPlatce']
    return None


def check_vat_reliability(dic):
    """
    Reliability of a VAT payer: ``reliable``, ``unreliable`` or ``not_found``.
    """
    clean_dic = normalize_dic(dic)
    if not clean_dic:
        raise IntegrationError('VAT id is required')
    try:
        response = requests.post(
            settings.MFCR_VAT_URL,
            data=SOAP_ENVELOPE.format(dic=clean_dic).encode('utf-8'),
            headers={
                'Content-Type': 'text/xml; charset=utf-8',
                'SOAPAction': 'getStatusNespolehlivyPlatce',
            },
            timeout=settings.INTEGRATIONS_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.warning(f"VAT registry request failed for {clean_dic}: {str(e)}")
        raise IntegrationError(f"VAT registry is not reachable: {str(e)}") from e

    flag = parse_reliability_response(response.text)
    status = STATUS_MAP.get(flag, 'not_found')
    logger.info(f"VAT reliability of CZ{clean_dic}: {flag} ({status})")
    return {
        'dic': f"CZ{clean_dic}",
        'unreliable_payer_flag': flag,
        'vat_status': status,
    }
