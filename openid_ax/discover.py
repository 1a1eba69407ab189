'''
Functions to discover OpenID 2.0 endpoints from identifiers.

Discovery follows Yadis first: the identifier URL is fetched asking for
an XRDS document, following an X-XRDS-Location header or its HTML meta
equivalent. If the result isn't an XRDS document, it is treated as HTML
and searched for OpenID 2.0 link tags.
'''
import email.message
import logging
import urllib.parse
from xml.etree import ElementTree as ET

import html5lib

from openid_ax import fetchers

OPENID_IDP_2_0_TYPE = 'http://specs.openid.net/auth/2.0/server'
OPENID_2_0_TYPE = 'http://specs.openid.net/auth/2.0/signon'

# OpenID service type URIs, listed in order of preference.
SERVICE_TYPES = [
    OPENID_IDP_2_0_TYPE,
    OPENID_2_0_TYPE,
]

HEADER = 'x-xrds-location'

NAMESPACES = {
    'xrd': 'xri://$xrd*($v*2.0)',
    'xrds': 'xri://$xrds',
    'xhtml': 'http://www.w3.org/1999/xhtml',
}


def t(prefixed_name):
    prefix, name = prefixed_name.split(':')
    return '{%s}%s' % (NAMESPACES[prefix], name)


class DiscoveryFailure(Exception):
    pass


class XRDSError(Exception):
    '''
    General error with the XRDS document.
    '''
    pass


class Service(object):
    """Object representing an OpenID service endpoint.

    @ivar server_url: the provider's endpoint URL.
    @ivar claimed_id: the identifier the user claims, None for an OP
        identifier.
    @ivar local_id: the identifier the provider knows the user by, if
        different from claimed_id.
    """

    def __init__(self, types=None, server_url=None, claimed_id=None, local_id=None):
        self.types = types if types is not None else [OPENID_2_0_TYPE]
        self.server_url = server_url
        self.claimed_id = claimed_id
        self.local_id = local_id

    def is_op_identifier(self):
        return OPENID_IDP_2_0_TYPE in self.types

    def __str__(self):
        return '<%s server_url=%s claimed_id=%s local_id=%s>' % (
            self.__class__.__name__,
            self.server_url,
            self.claimed_id,
            self.local_id,
        )


def _charset(response):
    message = email.message.Message()
    message['content-type'] = response.getheader('content-type') or ''
    return message.get_content_charset('utf-8')


def http_equiv(content):
    root = html5lib.parse(content)
    for meta in root.findall('%s/%s' % (t('xhtml:head'), t('xhtml:meta'))):
        if meta.get('http-equiv', '').lower() == HEADER:
            return meta.get('content')


def _yadis_location(response, body):
    '''
    Checks if the HTTP response refers to a Yadis document in its
    headers or in the HTML meta.

    Returns the location found or None.
    '''
    location = response.getheader(HEADER)
    if location:
        return location
    return http_equiv(body.decode(_charset(response), 'replace'))


def fetch_data(url, fetch=None):
    '''
    Fetches unparsed text of the Yadis document.
    Returns the URL after redirects and the text
    '''
    fetch = fetch or fetchers.fetch
    response = fetch(url, headers={'Accept': 'application/xrds+xml'})
    text = response.read()
    location = _yadis_location(response, text)
    if location:
        logging.info('Following Yadis location %s for %s' % (location, url))
        text = fetch(location).read()
    return response.url, text


def parse_xrds(text):
    """Parse the given text as an XRDS document.

    @return: the root XRDS element

    @raises XRDSError: When there is a parse error or the document does
        not contain an XRDS.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        raise XRDSError('Error parsing document as XML')
    if root.tag != t('xrds:XRDS'):
        raise XRDSError('Not an XRDS document')
    return root


def _priority(element):
    '''
    Sort key for elements sorted by priority attribute. Represented as tuple
    to ensure None is sorted after int values.
    '''
    value = element.get('priority')
    if not value:
        return (1, 0)
    try:
        return (0, int(value))
    except ValueError:
        raise XRDSError('Invalid priority: %r' % value)


def parse_service(element, claimed_id):
    types = [e.text for e in element.findall(t('xrd:Type'))]
    uris = sorted(element.findall(t('xrd:URI')), key=_priority)
    result = Service(types, uris[0].text)
    if not result.is_op_identifier():
        result.claimed_id = claimed_id
        result.local_id = element.findtext(t('xrd:LocalID'))
    return result


def parse_services(claimed_id, text):
    '''
    Returns OpenID 2.0 services listed in the last XRD of an XRDS
    document, sorted by priority.
    '''
    xrd_list = parse_xrds(text).findall(t('xrd:XRD'))
    if not xrd_list:
        raise XRDSError('No XRD elements found')
    elements = sorted(xrd_list[-1].findall(t('xrd:Service')), key=_priority)
    return [
        parse_service(e, claimed_id) for e in elements
        if e.find(t('xrd:URI')) is not None
        and set(SERVICE_TYPES).intersection(x.text for x in e.findall(t('xrd:Type')))
    ]


def parse_html(url, html):
    root = html5lib.parse(html)
    links = root.findall('%s/%s' % (t('xhtml:head'), t('xhtml:link')))
    hrefs = {}
    for link in links:
        for rel in link.get('rel', '').split():
            hrefs.setdefault(rel, link.get('href'))

    if 'openid2.provider' not in hrefs:
        return []
    return [Service([OPENID_2_0_TYPE], hrefs['openid2.provider'], url, hrefs.get('openid2.local_id'))]


def normalize(identifier):
    '''
    Turns a user-entered identifier into the URL to run discovery on.
    '''
    parsed = urllib.parse.urlparse(identifier)
    if not parsed.scheme or not parsed.netloc:
        # checking both scheme and netloc as things like 'server:80/' put 'server' in scheme
        parsed = urllib.parse.urlparse('http://' + identifier)
    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        raise DiscoveryFailure('Not an HTTP or HTTPS identifier: %s' % identifier)
    return urllib.parse.urlunparse(parsed._replace(
        scheme=parsed.scheme.lower(),
        netloc=parsed.netloc.lower(),
        path=parsed.path or '/',
        fragment='',
    ))


def discoverall(identifier, fetch=None):
    url, data = fetch_data(normalize(identifier), fetch)
    try:
        services = parse_services(url, data)
    except XRDSError as e:
        logging.info('No XRDS at %s (%s), trying HTML discovery' % (url, e))
        services = parse_html(url, data)
    return sorted(services, key=lambda s: min(SERVICE_TYPES.index(x) for x in s.types if x in SERVICE_TYPES))


def discover(identifier, fetch=None):
    services = discoverall(identifier, fetch)
    if not services:
        raise DiscoveryFailure('No services found for %s' % identifier)
    logging.info('Discovered %s for %s' % (services[0], identifier))
    return services[0]
