#!/usr/bin/env python
"""
Simple example for an OpenID relying party requesting user attributes.

It redirects the user to their OpenID provider with an Attribute
Exchange fetch request and shows the attributes the provider sends
back. The response signature is not verified here, so don't log anyone
in on the strength of this example.
"""
from html import escape
from http.server import HTTPServer, BaseHTTPRequestHandler
import logging
import urllib.error
import urllib.parse

from openid_ax import ax, consumer
from openid_ax.discover import DiscoveryFailure


REQUIRED = {
    'email': ax.SCHEMA['contact/internet/email'],
}
OPTIONAL = {
    'nickname': ax.SCHEMA['namePerson/friendly'],
    'first': ax.SCHEMA['namePerson/first'],
    'last': ax.SCHEMA['namePerson/last'],
    'language': ax.SCHEMA['language/pref'],
}


class OpenIDHTTPServer(HTTPServer):
    """
    HTTP server that knows its base URL.
    """
    def __init__(self, *args, **kwargs):
        super(OpenIDHTTPServer, self).__init__(*args, **kwargs)

        if self.server_port != 80:
            self.base_url = 'http://{}:{}/'.format(self.server_name, self.server_port)
        else:
            self.base_url = 'http://{}/'.format(self.server_name)


class OpenIDRequestHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        """
        Dispatching logic. There are three paths defined:

          / - Display an empty form asking for an identifier
          /verify - Handle form submission, redirecting to the provider
          /process - Handle a redirect from an OpenID provider

        Any other path gets a 404 response.
        """
        parsed = urllib.parse.urlparse(self.path)
        self.query = dict(urllib.parse.parse_qsl(parsed.query))
        if parsed.path == '/':
            self.render()
        elif parsed.path == '/verify':
            self.doVerify()
        elif parsed.path == '/process':
            self.doProcess()
        else:
            self.render('The path <q>%s</q> was not understood by this server.' % escape(self.path),
                        'error', status=404)

    def doVerify(self):
        openid_url = self.query.get('openid_identifier')
        if not openid_url:
            self.render('Enter an OpenID Identifier to verify.', 'error')
            return

        extra = ax.fetch_request(REQUIRED, OPTIONAL)
        try:
            url = consumer.redirect_url(
                openid_url,
                urllib.parse.urljoin(self.server.base_url, 'process'),
                realm=self.server.base_url,
                extra=extra,
            )
        except (DiscoveryFailure, urllib.error.URLError) as exc:
            self.render('Error in discovery: %s' % escape(str(exc)), 'error', openid_url)
            return

        self.send_response(302)
        self.send_header('Location', url)
        self.end_headers()

    def doProcess(self):
        mode = self.query.get('openid.mode')
        if mode == 'cancel':
            self.render('Verification cancelled')
            return
        if mode != 'id_res':
            self.render('Verification failed: %s' % escape(self.query.get('openid.error', str(mode))), 'error')
            return

        url = urllib.parse.urljoin(self.server.base_url, self.path)
        try:
            attributes = ax.parse_fetch_response(url)
        except ax.AXError as exc:
            self.render('No attributes: %s' % escape(str(exc)), 'error')
            return

        rows = ''.join(
            '<tr><td>{}</td><td>{}</td></tr>'.format(escape(alias), escape(value))
            for alias, value in sorted(attributes.items())
        )
        message = 'Provider asserted <code>%s</code>.<table>%s</table>' % (
            escape(self.query.get('openid.claimed_id', '')), rows)
        self.render(message)

    def render(self, message=None, css_class='alert', form_contents=None, status=200):
        """Render a page."""
        self.send_response(status)
        self.send_header('Content-type', 'text/html; charset=utf-8')
        self.end_headers()
        body = '<html><head><title>OpenID Attribute Exchange Example</title></head><body>'
        if message:
            body += "<div class='{}'>{}</div>".format(css_class, message)
        body += '''
    <form method="get" accept-charset="UTF-8" action="{}">
      Identifier:
      <input type="text" name="openid_identifier" value="{}" />
      <input type="submit" value="Verify" />
    </form>
  </body>
</html>'''.format(escape(urllib.parse.urljoin(self.server.base_url, 'verify')), escape(form_contents or ''))
        self.wfile.write(body.encode('utf-8'))


def main(host, port):
    """
    Start the sample server.
    """
    server = OpenIDHTTPServer((host, port), OpenIDRequestHandler)

    print('Server running at:')
    print(server.base_url)
    server.serve_forever()

if __name__ == '__main__':
    import optparse

    parser = optparse.OptionParser('Usage:\n %prog [options]')
    parser.add_option(
        '-p', '--port', dest='port', type='int', default=8001,
        help='Port on which to listen for HTTP requests. '
        'Defaults to port %default.')
    parser.add_option(
        '-s', '--host', dest='host', default='localhost',
        help='Host on which to listen for HTTP requests. '
        'Also used for generating URLs. Defaults to %default.')

    options, args = parser.parse_args()
    if args:
        parser.error('Expected no arguments. Got %r' % args)

    logging.basicConfig(level=logging.INFO)
    main(options.host, options.port)
