from datetime import datetime

from sqlalchemy import desc, func

from models import ReputationEntry, RequestEvent


class TrafficStore:
    """Persistence for request events and cached IP reputation entries.

    Search columns are passed in as model attributes, never as names, so
    nothing supplied by a caller ends up in an identifier position.
    """

    def __init__(self, db):
        self.db = db

    def insert_request_event(self, ip, url, method, user_agent, visitor_id, host, timestamp=None):
        event = RequestEvent(
            ip=ip,
            url=url,
            method=method,
            user_agent=user_agent,
            visitor_id=visitor_id,
            host=host,
            timestamp=timestamp or datetime.utcnow(),
        )
        self.db.session.add(event)
        self.db.session.commit()
        return event

    def query_request_events(self, column, value, limit, offset, fragment=False):
        if fragment:
            condition = self._contains(column, value)
        else:
            condition = column == value

        return RequestEvent.query.filter(condition).order_by(
            desc(RequestEvent.timestamp), desc(RequestEvent.id)
        ).limit(limit).offset(offset).all()

    def _contains(self, column, value):
        # SQLite LIKE ignores ASCII case, instr() does not
        if self.db.engine.dialect.name == 'sqlite':
            return func.instr(column, value) > 0
        return column.contains(value, autoescape=True)

    def insert_reputation_entry(self, ip, reputation, timestamp):
        entry = ReputationEntry(
            ip=ip,
            country=reputation.country,
            city=reputation.city,
            provider=reputation.provider,
            vpn=reputation.vpn,
            timestamp=timestamp,
        )
        self.db.session.add(entry)
        self.db.session.commit()
        return entry

    def fresh_reputation_entry(self, ip, ttl, now):
        return ReputationEntry.query.filter(
            ReputationEntry.ip == ip,
            ReputationEntry.timestamp > now - ttl
        ).order_by(ReputationEntry.id).first()

    def delete_stale_reputation_entries(self, ttl, now):
        deleted = ReputationEntry.query.filter(
            ReputationEntry.timestamp <= now - ttl
        ).delete(synchronize_session=False)
        self.db.session.commit()
        return deleted

    def rollback(self):
        self.db.session.rollback()
