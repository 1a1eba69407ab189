# -*- test-case-name: openid_ax.test.test_consumer -*-
"""OpenID 2.0 authentication requests for Relying Parties.

The authentication flow, as visible to the user of this library:

    1. The user enters their OpenID into a field on the relying
       party's site and hits a login button.

    2. The site discovers the user's OpenID provider, see
       L{openid_ax.discover}.

    3. The site sends the browser a redirect to the provider. The URL
       is built by L{build_redirect_url} (or L{redirect_url} which
       performs discovery first), optionally carrying extension
       arguments such as an Attribute Exchange fetch request from
       L{openid_ax.ax.fetch_request}.

    4. The provider sends the browser back to the C{return_to} URL
       with its response in the query. Attributes are read from it with
       L{openid_ax.ax.parse_fetch_response}.

Verifying the signature of the positive assertion in step 4 is not
done by this library.
"""
import logging

from openid_ax import discover
from openid_ax.message import OPENID2_NS, IDENTIFIER_SELECT, to_url_encoded


CHECKID_SETUP = 'checkid_setup'


def build_redirect_url(op_endpoint, op_local_id, claimed_id, return_to, realm='', extra=None):
    """Returns a URL with an encoded OpenID 2.0 C{checkid_setup} request.

    @param op_endpoint: the provider's endpoint URL. It may already have
        a query of its own.

    @param op_local_id: the identifier the provider knows the user by,
        or an empty string.

    @param claimed_id: the identifier the user claims, or an empty
        string to let the provider select one.

    @param return_to: the URL the provider sends the user back to.

    @param realm: the URL (or URL pattern) that identifies your web site
        to the user when they are authorizing it. Omitted when empty.

    @param extra: extension arguments appended after the core ones in
        the given order. Either a parameter bag, a mapping of strings, or
        an already encoded query string.

    @returntype: str
    """
    args = {
        'openid.ns': OPENID2_NS,
        'openid.mode': CHECKID_SETUP,
        'openid.return_to': return_to,
    }
    if claimed_id:
        args['openid.claimed_id'] = claimed_id
        args['openid.identity'] = op_local_id or IDENTIFIER_SELECT
    else:
        args['openid.identity'] = IDENTIFIER_SELECT
    if realm:
        args['openid.realm'] = realm

    query = to_url_encoded(args, sort=True)
    if extra:
        query += '&' + (extra if isinstance(extra, str) else to_url_encoded(extra))

    logging.info('Generated %s request to %s for %s' %
                 (CHECKID_SETUP, op_endpoint, args['openid.identity']))

    separator = '&' if '?' in op_endpoint else '?'
    return op_endpoint + separator + query


def redirect_url(identifier, return_to, realm='', extra=None, fetch=None):
    """Discovers the provider for a user-supplied identifier and returns
    the URL to redirect the user agent to.

    @param identifier: the OpenID the user entered. It is normalized
        before discovery, so C{example.com} is the same as
        C{http://example.com/}.

    @param fetch: callable used for HTTP requests during discovery,
        defaults to L{openid_ax.fetchers.fetch}.

    @see: L{build_redirect_url} for the rest of the parameters.

    @raises openid_ax.discover.DiscoveryFailure: when no OpenID 2.0
        service is found for the identifier.
    @raises urllib.error.URLError: on HTTP errors during discovery.
    """
    service = discover.discover(identifier, fetch)
    return build_redirect_url(
        service.server_url,
        service.local_id or '',
        service.claimed_id or '',
        return_to,
        realm,
        extra,
    )
