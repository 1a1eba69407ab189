'''
Wrapper around urlopen providing default parameters and safety checkings.
'''
import urllib.request
import urllib.error
import urllib.parse
import sys

import openid_ax


USER_AGENT = 'openid-ax/%s (%s) Python-urllib/%s' % (
    openid_ax.__version__,
    sys.platform,
    urllib.request.__version__,
)

# seconds
TIMEOUT = 30


def fetch(url, body=None, headers=None, timeout=TIMEOUT):
    if urllib.parse.urlparse(url).scheme not in ('http', 'https'):
        raise urllib.error.URLError('Bad URL scheme: %r' % url)

    headers = dict(headers or {})
    headers.setdefault('User-Agent', USER_AGENT)

    request = urllib.request.Request(url, data=body, headers=headers)
    return urllib.request.urlopen(request, timeout=timeout)
