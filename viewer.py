import logging

from flask import Blueprint, jsonify, render_template, request

from forms import HostSearchForm, IpSearchForm, UserAgentSearchForm, VisitorSearchForm
from search import SearchField
from traffic_tracker import get_real_ip

logger = logging.getLogger(__name__)


def create_viewer_blueprint(settings, search_engine, reputation):
    """Operator-facing search UI, only reachable on the viewer host."""
    viewer = Blueprint(
        'viewer',
        __name__,
        static_folder='static/viewer',
        static_url_path='/assets',
    )

    @viewer.before_request
    def restrict_to_allowlist():
        ip = get_real_ip(settings.trusted_ip_header)
        if settings.viewer_ips and ip not in settings.viewer_ips:
            logger.warning(f"Rejected viewer access from {ip}")
            return 'Forbidden', 403
        return None

    def run_search(form, search_field, fragment=False):
        result = search_engine.search(
            search_field,
            form.search_value(),
            form.page_number(),
            fragment=fragment,
        )
        return render_template('viewer/results.html', result=result, form_field=form.value_field)

    @viewer.route('/')
    def index():
        return render_template('viewer/index.html')

    @viewer.route('/visitor', methods=['POST'])
    def search_visitor():
        return run_search(VisitorSearchForm(), SearchField.VISITOR)

    @viewer.route('/host', methods=['POST'])
    def search_host():
        return run_search(HostSearchForm(), SearchField.HOST)

    @viewer.route('/useragent', methods=['POST'])
    def search_useragent():
        # user agents are only ever searched by fragment
        return run_search(UserAgentSearchForm(), SearchField.USER_AGENT, fragment=True)

    @viewer.route('/ip', methods=['POST'])
    def search_ip():
        return run_search(IpSearchForm(), SearchField.IP)

    @viewer.route('/ipinfo', methods=['POST'])
    def ipinfo():
        payload = request.get_json(silent=True) or {}
        ip = payload.get('ip') if isinstance(payload, dict) else None
        if not ip:
            return jsonify({'error': 'ip is required'}), 400

        return jsonify(reputation.lookup(ip).to_dict())

    return viewer
