import unittest
from unittest import mock
import urllib.parse

from openid_ax import ax, consumer, fetchers
from openid_ax.discover import DiscoveryFailure
from openid_ax.message import OPENID2_NS, IDENTIFIER_SELECT, AX_NS
from . import support


def parseQuery(url):
    return urllib.parse.parse_qs(urllib.parse.urlsplit(url).query, keep_blank_values=True)


class BuildRedirectURL(unittest.TestCase):
    endpoint = 'https://www.example.com/openid/server'
    return_to = 'http://rp.example.com/process?token=abc'

    def build(self, op_local_id='', claimed_id='', realm='', extra=None, endpoint=None):
        return consumer.build_redirect_url(
            endpoint or self.endpoint, op_local_id, claimed_id, self.return_to, realm, extra)

    def test_core_fields(self):
        query = parseQuery(self.build())
        self.assertEqual(query['openid.ns'], [OPENID2_NS])
        self.assertEqual(query['openid.mode'], ['checkid_setup'])
        self.assertEqual(query['openid.return_to'], [self.return_to])

    def test_identifier_select(self):
        url = self.build()
        self.assertTrue(url.startswith(self.endpoint + '?'))
        query = parseQuery(url)
        self.assertEqual(query['openid.identity'], [IDENTIFIER_SELECT])
        self.assertNotIn('openid.claimed_id', query)
        self.assertNotIn('openid.realm', query)

    def test_local_id_without_claimed_id(self):
        query = parseQuery(self.build(op_local_id='http://smoker.example.com/'))
        self.assertEqual(query['openid.identity'], [IDENTIFIER_SELECT])
        self.assertNotIn('openid.claimed_id', query)

    def test_claimed_id(self):
        query = parseQuery(self.build(claimed_id='http://example.com/'))
        self.assertEqual(query['openid.claimed_id'], ['http://example.com/'])
        self.assertEqual(query['openid.identity'], [IDENTIFIER_SELECT])

    def test_claimed_and_local_id(self):
        query = parseQuery(self.build('http://smoker.example.com/', 'http://example.com/'))
        self.assertEqual(query['openid.claimed_id'], ['http://example.com/'])
        self.assertEqual(query['openid.identity'], ['http://smoker.example.com/'])

    def test_realm(self):
        query = parseQuery(self.build(realm='http://*.example.com/'))
        self.assertEqual(query['openid.realm'], ['http://*.example.com/'])

    def test_each_pair_once(self):
        url = self.build('http://smoker.example.com/', 'http://example.com/', 'http://rp.example.com/')
        pairs = urllib.parse.parse_qsl(urllib.parse.urlsplit(url).query)
        self.assertEqual(len(pairs), 6)
        self.assertEqual(len(set(k for k, v in pairs)), 6)

    def test_deterministic(self):
        self.assertEqual(self.build(realm='http://rp.example.com/'), self.build(realm='http://rp.example.com/'))

    def test_endpoint_with_query(self):
        url = self.build(endpoint='http://www.example.com/server?foo=bar')
        self.assertEqual(url.count('?'), 1)
        self.assertTrue(url.startswith('http://www.example.com/server?foo=bar&openid.'))
        self.assertEqual(parseQuery(url)['foo'], ['bar'])

    def test_extra_appended_in_order(self):
        extra = ax.fetch_request({'b': 'B'}, {'a': 'A'})
        url = self.build(extra=extra)
        core, _, tail = url.partition('&openid.ns.ax=')
        self.assertEqual(
            'openid.ns.ax=' + tail,
            urllib.parse.urlencode([
                ('openid.ns.ax', AX_NS),
                ('openid.ax.mode', 'fetch_request'),
                ('openid.ax.type.b', 'B'),
                ('openid.ax.type.a', 'A'),
                ('openid.ax.required', 'b'),
                ('openid.ax.if_available', 'a'),
            ]),
        )
        self.assertIn('openid.mode=checkid_setup', core)

    def test_extra_string(self):
        url = self.build(extra='openid.ns.ext1=x&z=1')
        self.assertTrue(url.endswith('&openid.ns.ext1=x&z=1'))

    def test_extra_mapping(self):
        query = parseQuery(self.build(extra={'openid.ext1.key': 'value', 'openid.ext1.list': ['1', '2']}))
        self.assertEqual(query['openid.ext1.key'], ['value'])
        self.assertEqual(query['openid.ext1.list'], ['1', '2'])

    def test_empty_extra(self):
        self.assertEqual(self.build(extra={}), self.build())
        self.assertFalse(self.build().endswith('&'))

    def test_logs_request(self):
        with self.assertLogs('', 'INFO') as cm:
            self.build()
        self.assertIn('checkid_setup', cm.output[0])
        self.assertIn(self.endpoint, cm.output[0])


@mock.patch('urllib.request.urlopen', support.urlopen)
class RedirectURL(unittest.TestCase):
    return_to = 'http://rp.example.com/process'

    def test_html(self):
        url = consumer.redirect_url('http://unittest/openid2.html', self.return_to, 'http://rp.example.com/')
        self.assertTrue(url.startswith('http://www.example.com/openid/server?'))
        query = parseQuery(url)
        self.assertEqual(query['openid.claimed_id'], ['http://unittest/openid2.html'])
        self.assertEqual(query['openid.identity'], ['http://smoker.example.com/'])
        self.assertEqual(query['openid.realm'], ['http://rp.example.com/'])

    def test_op_identifier(self):
        url = consumer.redirect_url('unittest/op_identifier.xrds', self.return_to)
        self.assertTrue(url.startswith('https://www.example.com/openid/login?'))
        query = parseQuery(url)
        self.assertEqual(query['openid.identity'], [IDENTIFIER_SELECT])
        self.assertNotIn('openid.claimed_id', query)

    def test_endpoint_query_and_extra(self):
        extra = ax.fetch_request({'email': ax.SCHEMA['contact/internet/email']})
        url = consumer.redirect_url('http://unittest/openid2_no_local.html', self.return_to, extra=extra)
        self.assertTrue(url.startswith('http://www.example.com/openid/server?type=html&openid.'))
        query = parseQuery(url)
        self.assertEqual(query['openid.identity'], [IDENTIFIER_SELECT])
        self.assertEqual(query['openid.ax.required'], ['email'])
        self.assertEqual(query['openid.ax.type.email'], [ax.SCHEMA['contact/internet/email']])

    def test_custom_fetch(self):
        fetch = mock.Mock(wraps=fetchers.fetch)
        consumer.redirect_url('http://unittest/openid2.html', self.return_to, fetch=fetch)
        self.assertEqual(fetch.call_args[0][0], 'http://unittest/openid2.html')

    def test_discovery_failure(self):
        self.assertRaises(DiscoveryFailure, consumer.redirect_url, 'http://unittest/junk.txt', self.return_to)


if __name__ == '__main__':
    unittest.main()
