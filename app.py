import logging
from datetime import datetime

from flask import Flask, Response, redirect

from models import db
from reputation_service import ReputationService
from search import SearchEngine
from settings import DEFAULT_SECRET_KEY, Settings
from storage import TrafficStore
from traffic_tracker import TrafficTracker
from viewer import create_viewer_blueprint

logger = logging.getLogger(__name__)


def create_app(settings=None):
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    if settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning("SECRET_KEY not set; visitor cookies are signed with the development key")

    # static files are served by the viewer blueprint only
    app = Flask(__name__, static_folder=None)
    app.config['SQLALCHEMY_DATABASE_URI'] = settings.database_uri
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    db.init_app(app)
    store = TrafficStore(db)

    # the tracker hook must be registered before any other request hook
    tracker = TrafficTracker(app, settings=settings, store=store)
    reputation = ReputationService(store, settings)
    search_engine = SearchEngine(store, reputation, page_size=settings.viewer_page_size)

    app.extensions['visitor_tracker'] = {
        'settings': settings,
        'store': store,
        'tracker': tracker,
        'reputation': reputation,
        'search': search_engine,
    }

    # keeps search engines from indexing or following tracking links
    @app.route('/robots.txt')
    def robots_txt():
        return Response("User-agent: *\nDisallow: /", mimetype='text/plain')

    @app.route('/favicon.ico')
    def favicon():
        return redirect(f'https://www.google.com/s2/favicons?domain={settings.domain}')

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'timestamp': datetime.utcnow().isoformat()}

    if settings.viewer_host:
        app.register_blueprint(
            create_viewer_blueprint(settings, search_engine, reputation),
            url_prefix=settings.viewer_path,
        )
    else:
        logger.info("WEBVIEWER_HOST not set; viewer disabled")

    # Create database tables on startup
    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    settings = Settings.from_env()
    create_app(settings).run(host='0.0.0.0', port=settings.port)
