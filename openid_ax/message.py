'''
Namespace constants and helpers for OpenID query parameters.

A parameter bag is a plain dict mapping each key to a list of values,
the same shape `urllib.parse.parse_qs` returns.
'''
import re
import urllib.parse


OPENID2_NS = 'http://specs.openid.net/auth/2.0'
IDENTIFIER_SELECT = 'http://specs.openid.net/auth/2.0/identifier_select'
AX_NS = 'http://openid.net/srv/ax/1.0'

BAD_ESCAPE_RE = re.compile(r'%(?![0-9A-Fa-f]{2})')


def to_bag(args):
    '''
    Normalizes a mapping of keys to either single strings or lists of
    strings into a parameter bag. Key order is preserved.
    '''
    return {
        key: [value] if isinstance(value, str) else list(value)
        for key, value in args.items()
    }


def parse_query(query):
    '''
    Decodes a query string into a parameter bag, keeping blank values.

    @raises ValueError: on a malformed percent-escape, an escape
        sequence that isn't valid UTF-8 or an unescaped semicolon.
    '''
    if ';' in query:
        raise ValueError('Unescaped semicolon at position %s' % query.index(';'))
    match = BAD_ESCAPE_RE.search(query)
    if match:
        raise ValueError('Invalid escape at position %s: %r' %
                         (match.start(), query[match.start():match.start() + 3]))
    return urllib.parse.parse_qs(query, keep_blank_values=True, errors='strict')


def to_url_encoded(args, sort=False):
    '''
    Form-urlencodes a parameter bag (or a mapping of strings), one pair
    per value. Keys keep their order unless `sort` is set.
    '''
    items = list(to_bag(args).items())
    if sort:
        items.sort()
    return urllib.parse.urlencode(items, doseq=True)


def get_arg(args, key, default=None):
    '''
    Returns the only value of `key` in a bag or `default` when the key is
    absent or repeated.
    '''
    values = args.get(key, [])
    return values[0] if len(values) == 1 else default
