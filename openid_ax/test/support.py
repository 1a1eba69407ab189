import urllib.request
import urllib.error
import urllib.parse
import io
import os


DATAPATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


class HTTPResponse:
    def __init__(self, url, status, headers=None, body=None):
        self.url = url
        self.status = status
        self.headers = headers or {}
        self._body = io.BytesIO(body)

    def read(self, *args):
        return self._body.read(*args)

    def getheader(self, name):
        return {k.lower(): v for k, v in self.headers.items()}.get(name.lower())


def gentests(cls):
    '''
    TestCase class decorator for data-driven tests.

    Reads a list of (name, args) pairs from cls.data and generates a separate
    test method named 'test_<name>' for each pair. The test method would call
    the method '_test' defined in a class to perform actual testing, passing it
    the args.
    '''
    for name, args in cls.data:
        def g(*args):
            def test_method(self):
                self._test(*args)
            return test_method
        method = g(*args)
        method.__name__ = 'test_' + name
        setattr(cls, method.__name__, method)
    return cls


def urlopen(request, data=None, timeout=None):
    '''
    Stands in for urllib.request.urlopen serving files from DATAPATH for the
    host "unittest". A numeric path returns that status, a "header" query
    argument adds a response header and a "redirect" argument pretends the
    request was redirected to that URL.
    '''
    if isinstance(request, str):
        request = urllib.request.Request(request)
    # track the last call arguments
    urlopen.request = request
    urlopen.data = data
    urlopen.timeout = timeout

    url = request.get_full_url()
    parts = urllib.parse.urlparse(url)
    query = urllib.parse.parse_qs(parts.query)
    if 'redirect' in query:
        url = query['redirect'][0]
        parts = urllib.parse.urlparse(url)
    if parts.netloc.split(':')[0] != 'unittest':
        raise urllib.error.URLError('Wrong host: %s' % parts.netloc)
    path = parts.path.lstrip('/') or 'index.html'
    if path.isdigit():
        status = int(path)
        if 300 <= status < 400:
            raise urllib.error.HTTPError(url, 400, 'Can\'t return 3xx status', {}, io.BytesIO())
        if 400 <= status:
            raise urllib.error.HTTPError(url, status, 'Requested status: %s' % status, {}, io.BytesIO())
        body = b'OK'
    else:
        try:
            status = 200
            with open(os.path.join(DATAPATH, path), 'rb') as f:
                body = f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise urllib.error.HTTPError(url, 404, '%s not found' % path, {}, io.BytesIO())

    headers = {
        'Server': 'Urlopen-Mock',
        'Date': 'Mon, 21 Jul 2014 19:52:42 GMT',
        'Content-type': 'text/plain',
        'Content-length': len(body),
    }
    headers.update(h.split(': ', 1) for h in query.get('header', []))
    return HTTPResponse(url, status, headers, body)
