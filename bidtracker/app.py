# bidtracker/app.py
import os
import logging
from flask import Flask, request, jsonify
from flask_login import LoginManager
from flask_cors import CORS
from sqlalchemy import text

from .config import config, get_config_name
from .errors import BidTrackerError
from .models import db, User


def create_app(config_name=None):
    """
    Application factory: configuration, database, CORS, login manager,
    blueprints and JSON error handlers.
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    try:
        config_instance = config[config_name]()
        app.config.from_object(config_instance)
    except Exception as config_error:
        app.logger.error(f"Configuration loading failed: {config_error}")
        raise

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    if config_name == 'production' and not app.debug:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
        logging.getLogger('bidtracker').setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    app.logger.info(f"✓ Configuration loaded for {config_name} environment")

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if db_uri.startswith('sqlite:///') and ':memory:' not in db_uri:
        os.makedirs(os.path.dirname(db_uri[len('sqlite:///'):]) or '.', exist_ok=True)

    db.init_app(app)

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'Accept', 'Origin'])

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = app.config.get('SESSION_PROTECTION', 'strong')

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """JSON 401 instead of a login redirect"""
        app.logger.warning(f"Unauthorized API access attempt to {request.path} from {request.remote_addr}")
        return jsonify({'error': 'Authentication required'}), 401

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError) as e:
            app.logger.warning(f"Invalid user_id provided to user_loader: {user_id} - {e}")
            return None

    from .routes import BLUEPRINTS
    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        app.logger.debug(f"✓ Registered {blueprint.name} blueprint at {url_prefix}")

    @app.errorhandler(BidTrackerError)
    def handle_service_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            app.logger.error(f"{type(error).__name__} on {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method Not Allowed'}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'error': 'File too large'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal Server Error'}), 500

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            db.create_all()
            app.logger.info("✓ Database tables created/verified successfully")
        except Exception as db_error:
            app.logger.error(f"Database initialization error: {db_error}")
            if config_name != 'production':
                raise

    app.logger.info(f"✓ Bid Tracker API created ({len(list(app.url_map.iter_rules()))} routes)")
    return app


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
