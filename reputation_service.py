import logging
from datetime import datetime

import requests
from sqlalchemy.exc import SQLAlchemyError

from models import UNKNOWN_REPUTATION, ReputationData

logger = logging.getLogger(__name__)


class ReputationService:
    """Read-through cache in front of the proxycheck.io reputation API.

    Entries older than the TTL count as absent. Stale entries are only
    swept after a successful cache hit, and the sweep covers the whole
    table rather than the IP that was looked up. Concurrent misses for the
    same IP may both write an entry; reads take the earliest one.
    """

    base_url = 'https://proxycheck.io/v2'

    def __init__(self, store, settings, clock=datetime.utcnow):
        self.store = store
        self.api_key = settings.proxycheck_api_key
        self.cache_duration = settings.reputation_ttl
        self.timeout = settings.reputation_timeout
        self.clock = clock

        self.lookup_enabled = bool(self.api_key)
        if not self.lookup_enabled:
            logger.warning("PROXYCHECK_API_KEY not set; IP reputation lookups disabled")

    def lookup(self, ip):
        """Resolve country/city/provider/VPN status for an IP, via cache or API"""
        now = self.clock()

        entry = self.store.fresh_reputation_entry(ip, self.cache_duration, now)
        if entry is not None:
            logger.debug(f"Using cached reputation for {ip}")
            reputation = entry.to_reputation()
            self.sweep(now)
            return reputation

        if not self.lookup_enabled:
            return UNKNOWN_REPUTATION

        logger.debug(f"Reputation cache miss for {ip}, querying proxycheck.io")
        reputation = self._fetch(ip)
        if reputation is None:
            return UNKNOWN_REPUTATION

        try:
            self.store.insert_reputation_entry(ip, reputation, now)
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception(f"Failed to cache reputation for {ip}")

        return reputation

    def sweep(self, now=None):
        """Delete every cached entry older than the TTL"""
        try:
            deleted = self.store.delete_stale_reputation_entries(self.cache_duration, now or self.clock())
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("Failed to sweep stale reputation entries")
            return 0

        if deleted:
            logger.debug(f"Swept {deleted} stale reputation entries")
        return deleted

    def _fetch(self, ip):
        try:
            response = requests.get(
                f'{self.base_url}/{ip}',
                params={'key': self.api_key, 'vpn': 1, 'asn': 1},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"proxycheck.io request error for {ip}: {e}")
            return None

        if not 200 <= response.status_code < 300:
            logger.warning(f"proxycheck.io lookup for {ip} failed: {response.status_code}")
            return None

        try:
            return self.parse_payload(ip, response.json())
        except ValueError as e:
            logger.warning(f"proxycheck.io returned malformed payload for {ip}: {e}")
            return None

    @staticmethod
    def parse_payload(ip, payload):
        if not isinstance(payload, dict) or not isinstance(payload.get(ip), dict):
            raise ValueError(f"no result for {ip}")

        data = payload[ip]
        return ReputationData(
            country=data.get('country') or 'N/A',
            city=data.get('city') or 'N/A',
            provider=data.get('provider') or 'N/A',
            vpn=data.get('proxy') == 'yes',
        )
