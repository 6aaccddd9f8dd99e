from flask import redirect, request

from request_logger import RequestLogger
from visitor_identity import VisitorIdentityCodec

EXEMPT_ENDPOINTS = {'robots_txt', 'favicon', 'health_check'}


def get_real_ip(trusted_header=None):
    if trusted_header and request.headers.get(trusted_header):
        return request.headers.get(trusted_header).split(',')[0].strip()
    return request.remote_addr


def get_original_url():
    if request.query_string:
        return f"{request.path}?{request.query_string.decode('utf-8', 'replace')}"
    return request.path


class TrafficTracker:
    """Logs every request that reaches the tracking hosts and redirects it.

    Requests for the viewer host pass through untouched: they are not
    logged and never read or receive the visitor cookie.
    """

    def __init__(self, app=None, settings=None, store=None):
        self.settings = settings
        self.codec = None
        self.request_logger = None
        if app is not None:
            self.init_app(app, settings, store)

    def init_app(self, app, settings=None, store=None):
        self.settings = settings or self.settings
        self.codec = VisitorIdentityCodec(self.settings.secret_key)
        self.request_logger = RequestLogger(store)
        app.before_request(self.before_request)

    def before_request(self):
        if self.settings.viewer_host and request.host == self.settings.viewer_host:
            return None

        if request.endpoint in EXEMPT_ENDPOINTS:
            return None

        visitor_id = self.resolve_visitor_id()

        self.request_logger.record(
            ip=get_real_ip(self.settings.trusted_ip_header),
            url=get_original_url(),
            method=request.method,
            user_agent=request.headers.get('User-Agent', ''),
            visitor_id=visitor_id,
            host=request.host,
        )

        response = redirect(self.settings.redirect_url)
        response.set_cookie(
            self.settings.cookie_name,
            self.codec.sign(visitor_id),
            max_age=self.settings.cookie_max_age,
            httponly=True,
            domain=self.settings.cookie_domain,
        )
        return response

    def resolve_visitor_id(self):
        cookie_value = request.cookies.get(self.settings.cookie_name)
        return self.codec.verify(cookie_value) or self.codec.issue()
