from dataclasses import dataclass, field
from enum import Enum

from models import RequestEvent


# keeps the computed OFFSET inside a 64-bit integer
MAX_PAGE = 1_000_000


class InvalidSearchField(ValueError):
    pass


class SearchField(str, Enum):
    VISITOR = 'visitor'
    HOST = 'host'
    USER_AGENT = 'useragent'
    IP = 'ip'

    @property
    def column(self):
        return {
            SearchField.VISITOR: RequestEvent.visitor_id,
            SearchField.HOST: RequestEvent.host,
            SearchField.USER_AGENT: RequestEvent.user_agent,
            SearchField.IP: RequestEvent.ip,
        }[self]


@dataclass
class SearchResult:
    search_field: SearchField
    value: str
    page: int
    rows: list = field(default_factory=list)
    more: bool = False

    def to_dict(self):
        return {'rows': self.rows, 'more': self.more}


class SearchEngine:
    def __init__(self, store, reputation, page_size=20):
        self.store = store
        self.reputation = reputation
        self.page_size = page_size

    def search(self, search_field, value, page=1, fragment=False):
        """Paginated lookup of request events, newest first, each joined with IP reputation.

        ``more`` only says the page was full; a final page of exactly
        ``page_size`` rows still reports more.
        """
        try:
            search_field = SearchField(search_field)
        except ValueError:
            raise InvalidSearchField(f"Unsupported search field: {search_field!r}") from None

        page = min(max(page, 1), MAX_PAGE)
        events = self.store.query_request_events(
            search_field.column,
            value,
            limit=self.page_size,
            offset=(page - 1) * self.page_size,
            fragment=fragment,
        )

        rows = []
        for event in events:
            row = event.to_dict()
            row['reputation'] = self.reputation.lookup(event.ip).to_dict()
            rows.append(row)

        return SearchResult(
            search_field=search_field,
            value=value,
            page=page,
            rows=rows,
            more=len(rows) == self.page_size,
        )
