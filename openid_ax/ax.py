# -*- test-case-name: openid_ax.test.test_ax -*-
"""Attribute Exchange 1.0 support for Relying Parties.

A fetch request asks the OpenID provider for user attributes alongside
the authentication response::

    extra = ax.fetch_request(
        required={'email': ax.SCHEMA['contact/internet/email']},
        optional={'nickname': ax.SCHEMA['namePerson/friendly']},
    )
    url = consumer.build_redirect_url(
        op_endpoint, op_local_id, claimed_id, return_to, realm, extra)

When the user comes back, the attributes are read from the full
callback URL under the aliases used in the request::

    attributes = ax.parse_fetch_response(callback_url)
    attributes.get('email')

Multi-valued attributes (the C{count} mechanism) are not requested.
Providers answering a single-valued request in the indexed form
(C{value.<alias>.1}) are understood; further indexed values are
ignored.

@see: U{https://openid.net/specs/openid-attribute-exchange-1_0.html}
@see: U{https://openid.net/specs/openid-attribute-properties-list-1_0-01.html}
"""
import urllib.parse

from openid_ax.message import AX_NS, get_arg, parse_query


FETCH_REQUEST = 'fetch_request'
FETCH_RESPONSE = 'fetch_response'

NS_PREFIX = 'openid.ns.'

SCHEMA_PREFIX = 'http://openid.net/schema/'

# Attribute type URIs from the OpenID attribute properties list, keyed
# by their path under SCHEMA_PREFIX, e.g. SCHEMA['contact/internet/email'].
SCHEMA = {
    uri[len(SCHEMA_PREFIX):]: uri for uri in [
        'http://openid.net/schema/namePerson/prefix',
        'http://openid.net/schema/namePerson/first',
        'http://openid.net/schema/namePerson/last',
        'http://openid.net/schema/namePerson/middle',
        'http://openid.net/schema/namePerson/suffix',
        'http://openid.net/schema/namePerson/friendly',
        'http://openid.net/schema/person/guid',
        'http://openid.net/schema/birthDate/birthYear',
        'http://openid.net/schema/birthDate/birthMonth',
        'http://openid.net/schema/birthDate/birthday',
        'http://openid.net/schema/gender',
        'http://openid.net/schema/language/pref',
        'http://openid.net/schema/contact/phone/default',
        'http://openid.net/schema/contact/phone/home',
        'http://openid.net/schema/contact/phone/business',
        'http://openid.net/schema/contact/phone/cell',
        'http://openid.net/schema/contact/phone/fax',
        'http://openid.net/schema/contact/postaladdress/home',
        'http://openid.net/schema/contact/postaladdressadditional/home',
        'http://openid.net/schema/contact/city/home',
        'http://openid.net/schema/contact/state/home',
        'http://openid.net/schema/contact/country/home',
        'http://openid.net/schema/contact/postalcode/home',
        'http://openid.net/schema/contact/postaladdress/business',
        'http://openid.net/schema/contact/postaladdressadditional/business',
        'http://openid.net/schema/contact/city/business',
        'http://openid.net/schema/contact/state/business',
        'http://openid.net/schema/contact/country/business',
        'http://openid.net/schema/contact/postalcode/business',
        'http://openid.net/schema/contact/IM/default',
        'http://openid.net/schema/contact/IM/AIM',
        'http://openid.net/schema/contact/IM/ICQ',
        'http://openid.net/schema/contact/IM/MSN',
        'http://openid.net/schema/contact/IM/Yahoo',
        'http://openid.net/schema/contact/IM/Jabber',
        'http://openid.net/schema/contact/IM/Skype',
        'http://openid.net/schema/contact/internet/email',
        'http://openid.net/schema/contact/web/default',
    ]
}


class AXError(ValueError):
    '''
    Base class for errors decoding an Attribute Exchange response.

    @ivar query: the decoded query parameters of the response, or None
        if the URL couldn't be parsed at all.
    '''
    def __init__(self, message, query=None):
        super().__init__(message)
        self.query = query


class MalformedURIError(AXError):
    pass


class MalformedQueryError(AXError):
    pass


class MissingNamespaceError(AXError):
    pass


class AmbiguousNamespaceError(AXError):
    """More than one namespace alias is declared for Attribute Exchange.
    """


class UnexpectedModeError(AXError):
    pass


def _declare(args, attributes):
    for alias, type_uri in attributes.items():
        args['openid.ax.type.' + alias] = [type_uri]
    return ','.join(sorted(attributes))


def fetch_request(required=None, optional=None):
    """Build the extension arguments of a fetch request.

    @param required: attributes the provider is asked to return,
        mapping an alias to the attribute type URI. The alias is the key
        the value will be found under in the response.

    @param optional: attributes the provider may return if it can, in
        the same form. An alias present in both mappings is declared
        with the type URI from C{optional}.

    @returns: parameter bag suitable as C{extra} for
        L{build_redirect_url<openid_ax.consumer.build_redirect_url>}
    @rtype: {str: [str]}
    """
    args = {
        'openid.ns.ax': [AX_NS],
        'openid.ax.mode': [FETCH_REQUEST],
    }
    required_list = _declare(args, required or {})
    optional_list = _declare(args, optional or {})
    if required_list:
        args['openid.ax.required'] = [required_list]
    if optional_list:
        args['openid.ax.if_available'] = [optional_list]
    return args


def get_ax_alias(query):
    '''
    Finds the alias the response uses for the Attribute Exchange
    namespace.
    '''
    aliases = [
        key[len(NS_PREFIX):] for key, values in query.items()
        if key.startswith(NS_PREFIX) and values == [AX_NS]
    ]
    if not aliases:
        raise MissingNamespaceError('Attribute Exchange namespace is not declared', query)
    if len(aliases) > 1:
        raise AmbiguousNamespaceError(
            'Attribute Exchange namespace is declared more than once: %s' % ', '.join(sorted(aliases)),
            query)
    return aliases[0]


def parse_fetch_response(url):
    """Extract attribute values from the full URL of a callback request.

    @param url: the URL the provider redirected the user agent to,
        including its query string.

    @returns: attribute values keyed by the aliases given to
        L{fetch_request}. Attributes the provider didn't return are
        absent; an empty dict is a valid result.
    @rtype: {str: str}

    @raises MalformedURIError: when the URL can't be parsed.
    @raises MalformedQueryError: when the query string can't be decoded.
    @raises MissingNamespaceError: when no Attribute Exchange namespace
        is declared.
    @raises AmbiguousNamespaceError: when it is declared more than once.
    @raises UnexpectedModeError: when the extension mode is missing or
        isn't C{fetch_response}.
    """
    try:
        parts = urllib.parse.urlsplit(url)
        # raises ValueError on a non-numeric or out of range port
        parts.port
    except ValueError as why:
        raise MalformedURIError('Malformed URL %r: %s' % (url, why))
    try:
        query = parse_query(parts.query)
    except ValueError as why:
        raise MalformedQueryError('Malformed query: %s' % why)

    alias = get_ax_alias(query)
    mode = get_arg(query, 'openid.%s.mode' % alias)
    if mode != FETCH_RESPONSE:
        raise UnexpectedModeError('Extension mode is not %s: %s' % (FETCH_RESPONSE, mode), query)

    prefix = 'openid.%s.value.' % alias
    result = {}
    for key, values in query.items():
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):]
        if '.' in name:
            # indexed form of a single value, only the first one counts
            if not name.endswith('.1'):
                continue
            name = name.split('.', 1)[0]
        result[name] = values[0]
    return result
