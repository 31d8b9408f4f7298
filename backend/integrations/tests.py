"""
Test suite for Integrations module
Tests: ARES company lookup, VAT payer reliability
"""
from unittest import mock
import requests
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.integrations import ares, vat
from backend.integrations.exceptions import IntegrationError, SubjectNotFound


def fake_response(status_code=200, json_data=None, text=''):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data or {}
    response.text = text
    return response


BASIC = {
    'ico': '27074358',
    'obchodniJmeno': 'Example s.r.o.',
    'dic': 'CZ27074358',
    'pravniForma': '112',
    'datumVzniku': '2003-07-29',
    'czNace': ['62010', '73110'],
    'sidlo': {
        'nazevUlice': 'Vodičkova',
        'cisloDomovni': 681,
        'cisloOrientacni': 14,
        'nazevObce': 'Praha',
        'psc': 11000,
        'textovaAdresa': 'Vodičkova 681/14, Nové Město, 11000 Praha 1',
    },
}

VR = {
    'zaznamy': [{
        'statutarniOrgan': [{
            'clenove': [
                {'fyzickaOsoba': {'jmeno': 'JAN', 'prijmeni': 'NOVÁK'}},
                {'fyzickaOsoba': {'jmeno': 'EVA', 'prijmeni': 'MALÁ'}},
            ],
        }],
        'spolecnici': [
            {'fyzickaOsoba': {'jmeno': 'JAN', 'prijmeni': 'NOVÁK'}, 'vklad': {'souhrn': {'hodnota': 150000}}},
            {'fyzickaOsoba': {'jmeno': 'PETR', 'prijmeni': 'SVOBODA'}, 'vklad': {'souhrn': {'hodnota': 50000}}},
        ],
        'spisovaZnacka': [{'oddil': 'C', 'vlozka': 96803, 'soud': 'MSPH'}],
    }],
}

VAT_RELIABLE = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
  <soapenv:Body>
    <StatusNespolehlivyPlatceResponse xmlns="http://adis.mfcr.cz/rozhraniCRPDPH/">
      <status statusCode="0" statusText="OK"/>
      <statusPlatceDPH dic="27074358" nespolehlivyPlatce="NE" cisloFu="451"/>
    </StatusNespolehlivyPlatceResponse>
  </soapenv:Body>
</soapenv:Envelope>"""

VAT_FAULT = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
  <soapenv:Body>
    <soapenv:Fault>
      <faultcode>soapenv:Server</faultcode>
      <faultstring>Service unavailable</faultstring>
    </soapenv:Fault>
  </soapenv:Body>
</soapenv:Envelope>"""


@override_settings(ARES_BASE_URL='https://ares.test/rest', INTEGRATIONS_TIMEOUT=5)
class AresTests(TestCase):
    """Test company registry lookup"""

    @mock.patch('backend.integrations.ares.requests.get')
    def test_lookup_company(self, mock_get):
        mock_get.side_effect = [fake_response(json_data=BASIC), fake_response(json_data=VR)]
        company = ares.lookup_company('27074358')

        self.assertEqual(company['company_name'], 'Example s.r.o.')
        self.assertEqual(company['dic'], 'CZ27074358')
        self.assertEqual(company['street'], 'Vodičkova 681/14')
        self.assertEqual(company['zip'], '11000')
        self.assertEqual(company['nace'], '62010')
        self.assertEqual(company['file_mark'], 'C 96803, Městský soud v Praze')
        mock_get.assert_any_call(
            'https://ares.test/rest/ekonomicke-subjekty/27074358', timeout=5, headers={'Accept': 'application/json'}
        )

    @mock.patch('backend.integrations.ares.requests.get')
    def test_directors_and_shareholders(self, mock_get):
        mock_get.side_effect = [fake_response(json_data=BASIC), fake_response(json_data=VR)]
        people = {p['name']: p for p in ares.lookup_company('27074358')['directors']}

        self.assertEqual(people['Jan Novák']['role'], 'director, shareholder')
        self.assertEqual(people['Jan Novák']['ownership_percent'], 75)
        self.assertEqual(people['Petr Svoboda']['role'], 'shareholder')
        self.assertEqual(people['Petr Svoboda']['ownership_percent'], 25)
        self.assertEqual(people['Eva Malá']['role'], 'director')
        self.assertIsNone(people['Eva Malá']['ownership_percent'])

    @mock.patch('backend.integrations.ares.requests.get')
    def test_missing_commercial_register_record(self, mock_get):
        mock_get.side_effect = [fake_response(json_data=BASIC), fake_response(status_code=404)]
        company = ares.lookup_company('27074358')
        self.assertEqual(company['directors'], [])
        self.assertIsNone(company['file_mark'])

    @mock.patch('backend.integrations.ares.requests.get')
    def test_unknown_company(self, mock_get):
        mock_get.return_value = fake_response(status_code=404)
        with self.assertRaises(SubjectNotFound):
            ares.lookup_company('12345678')

    def test_invalid_ico(self):
        with self.assertRaises(SubjectNotFound):
            ares.lookup_company('12AB')

    @mock.patch('backend.integrations.ares.requests.get')
    def test_unreachable_registry(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError('boom')
        with self.assertRaises(IntegrationError):
            ares.lookup_company('27074358')


class VatReliabilityTests(TestCase):
    """Test unreliable VAT payer check"""

    def test_normalize_dic(self):
        self.assertEqual(vat.normalize_dic(' cz 27074358 '), '27074358')
        self.assertEqual(vat.normalize_dic('27074358'), '27074358')

    def test_parse_statuses(self):
        self.assertEqual(vat.parse_reliability_response(VAT_RELIABLE), 'NE')
        self.assertIsNone(vat.parse_reliability_response('<root><empty/></root>'))

    def test_fault_raises(self):
        with self.assertRaises(IntegrationError):
            vat.parse_reliability_response(VAT_FAULT)

    @mock.patch('backend.integrations.vat.requests.post')
    def test_reliable_payer(self, mock_post):
        mock_post.return_value = fake_response(text=VAT_RELIABLE)
        result = vat.check_vat_reliability('CZ27074358')
        self.assertEqual(result['vat_status'], 'reliable')
        self.assertEqual(result['dic'], 'CZ27074358')
        self.assertIn(b'<roz:dic>27074358</roz:dic>', mock_post.call_args.kwargs['data'])

    @mock.patch('backend.integrations.vat.requests.post')
    def test_unreliable_and_unknown_payer(self, mock_post):
        mock_post.return_value = fake_response(text=VAT_RELIABLE.replace('nespolehlivyPlatce="NE"', 'nespolehlivyPlatce="ANO"'))
        self.assertEqual(vat.check_vat_reliability('CZ27074358')['vat_status'], 'unreliable')

        mock_post.return_value = fake_response(text=VAT_RELIABLE.replace('nespolehlivyPlatce="NE"', 'nespolehlivyPlatce="NENALEZEN"'))
        self.assertEqual(vat.check_vat_reliability('CZ27074358')['vat_status'], 'not_found')


class IntegrationsAPITests(TestCase):
    """Test integration endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    @mock.patch('backend.integrations.views.lookup_company')
    def test_company_lookup(self, mock_lookup):
        mock_lookup.return_value = {'ico': '27074358', 'company_name': 'Example s.r.o.'}
        response = self.client.get('/api/v1/integrations/company/27074358/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['company_name'], 'Example s.r.o.')

    @mock.patch('backend.integrations.views.lookup_company')
    def test_company_not_found(self, mock_lookup):
        mock_lookup.side_effect = SubjectNotFound('not found')
        response = self.client.get('/api/v1/integrations/company/12345678/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @mock.patch('backend.integrations.views.lookup_company')
    def test_company_registry_error(self, mock_lookup):
        mock_lookup.side_effect = IntegrationError('down')
        response = self.client.get('/api/v1/integrations/company/27074358/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_vat_reliability_requires_dic(self):
        response = self.client.get('/api/v1/integrations/vat-reliability/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.integrations.views.check_vat_reliability')
    def test_vat_reliability(self, mock_check):
        mock_check.return_value = {'dic': 'CZ27074358', 'unreliable_payer_flag': 'NE', 'vat_status': 'reliable'}
        response = self.client.get('/api/v1/integrations/vat-reliability/?dic=CZ27074358')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_check.assert_called_once_with('CZ27074358')
