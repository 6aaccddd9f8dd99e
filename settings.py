import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))

DEFAULT_SECRET_KEY = 'dev-key-change-in-production'
DEFAULT_REDIRECT_URL = 'https://www.youtube.com/watch?v=dQw4w9WgXcQ&autoplay=1'


def _split_list(value):
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(',') if item.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration, handed to every component on construction."""

    port: int = 8080
    domain: str = 'example.com'
    redirect_url: str = DEFAULT_REDIRECT_URL
    cookie_name: str = 'visitor_id'
    cookie_max_age: int = 365 * 24 * 60 * 60
    secret_key: str = DEFAULT_SECRET_KEY
    database_uri: str = f'sqlite:///{os.path.join(basedir, "tracker.db")}'

    viewer_host: str | None = None
    viewer_path: str = '/'
    viewer_ips: tuple = field(default_factory=tuple)
    viewer_page_size: int = 20

    proxycheck_api_key: str | None = None
    reputation_ttl: timedelta = timedelta(days=1)
    reputation_timeout: float = 5.0

    trusted_ip_header: str | None = None
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls):
        load_dotenv()

        return cls(
            port=int(os.getenv('PORT', 8080)),
            domain=os.getenv('DOMAIN', 'example.com'),
            redirect_url=os.getenv('REDIRECT_URL', DEFAULT_REDIRECT_URL),
            cookie_name=os.getenv('VISITOR_ID_COOKIE_NAME', 'visitor_id'),
            cookie_max_age=int(os.getenv('VISITOR_ID_MAX_AGE', 365 * 24 * 60 * 60)),
            secret_key=os.getenv('SECRET_KEY', DEFAULT_SECRET_KEY),
            database_uri=os.getenv('DATABASE_URL', cls.database_uri),
            viewer_host=os.getenv('WEBVIEWER_HOST') or None,
            viewer_path=os.getenv('WEBVIEWER_PATH') or '/',
            viewer_ips=_split_list(os.getenv('WEBVIEWER_IPS')),
            viewer_page_size=int(os.getenv('WEBVIEWER_MAX_SHOWN', 20)),
            proxycheck_api_key=os.getenv('PROXYCHECK_API_KEY') or None,
            reputation_ttl=timedelta(seconds=int(os.getenv('REPUTATION_TTL_SECONDS', 86400))),
            reputation_timeout=float(os.getenv('REPUTATION_TIMEOUT', 5)),
            trusted_ip_header=os.getenv('TRUSTED_IP_HEADER') or None,
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

    @property
    def cookie_domain(self):
        return f'.{self.domain}' if self.domain else None
