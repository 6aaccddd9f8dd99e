from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import NumberRange, Optional

from search import MAX_PAGE


class SearchForm(FlaskForm):
    """Base viewer search form; subclasses add the field named after the search route."""

    class Meta:
        # viewer access is gated by the IP allowlist
        csrf = False

    value_field = None

    page = IntegerField('Page', default=1, validators=[Optional(), NumberRange(min=1, max=MAX_PAGE)])

    def search_value(self):
        return (getattr(self, self.value_field).data or '').strip()

    def page_number(self):
        """Requested page, or 1 when it is missing, malformed or out of range"""
        if not self.page.validate(self) or not self.page.data:
            return 1
        return self.page.data


class VisitorSearchForm(SearchForm):
    value_field = 'visitor'
    visitor = StringField('Visitor ID')


class HostSearchForm(SearchForm):
    value_field = 'host'
    host = StringField('Host')


class UserAgentSearchForm(SearchForm):
    value_field = 'useragent'
    useragent = StringField('User agent contains')


class IpSearchForm(SearchForm):
    value_field = 'ip'
    ip = StringField('IP address')
