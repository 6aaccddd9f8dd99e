import logging

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class RequestLogger:
    """Appends one request event per tracked request; failures never reach the caller."""

    def __init__(self, store):
        self.store = store

    def record(self, ip, url, method, user_agent, visitor_id, host):
        try:
            return self.store.insert_request_event(
                ip=ip,
                url=url,
                method=method,
                user_agent=user_agent,
                visitor_id=visitor_id,
                host=host,
            )
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception(f"Failed to record request from {ip} for {host}{url}")
            return None
