from dataclasses import asdict, dataclass
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


@dataclass(frozen=True)
class ReputationData:
    country: str
    city: str
    provider: str
    vpn: bool

    def to_dict(self):
        return asdict(self)


UNKNOWN_REPUTATION = ReputationData(country='N/A', city='N/A', provider='N/A', vpn=False)


class RequestEvent(db.Model):
    __tablename__ = 'requests'

    id = db.Column(db.Integer, primary_key=True)
    ip = db.Column(db.String(45), nullable=False, index=True)
    url = db.Column(db.Text, nullable=False)
    method = db.Column(db.String(10), nullable=False)
    user_agent = db.Column(db.Text, nullable=False, default='')
    visitor_id = db.Column(db.String(64), nullable=False, index=True)
    host = db.Column(db.String(255), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'ip': self.ip,
            'url': self.url,
            'method': self.method,
            'user_agent': self.user_agent,
            'visitor_id': self.visitor_id,
            'host': self.host,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }


class ReputationEntry(db.Model):
    __tablename__ = 'ip_reputation'

    id = db.Column(db.Integer, primary_key=True)
    ip = db.Column(db.String(45), nullable=False, index=True)
    country = db.Column(db.String(100), nullable=False, default='N/A')
    city = db.Column(db.String(100), nullable=False, default='N/A')
    provider = db.Column(db.String(255), nullable=False, default='N/A')
    vpn = db.Column(db.Boolean, nullable=False, default=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_reputation(self):
        return ReputationData(
            country=self.country,
            city=self.city,
            provider=self.provider,
            vpn=bool(self.vpn),
        )
