"""Flask application factory."""
import logging
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from praiaflow.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    logging.getLogger('praiaflow').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Production: Enable ProxyFix for HTTPS behind a reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # Order store (sql | supabase)
    from praiaflow.services.store import init_store
    init_store(app)

    # Error Handlers
    from praiaflow.exceptions import PraiaFlowError

    @app.errorhandler(PraiaFlowError)
    def handle_praiaflow_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"PraiaFlowError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"PraiaFlowError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'status': 'error', 'message': error.description}), error.code

        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from praiaflow.blueprints.main import main_bp
    from praiaflow.blueprints.menu import menu_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(menu_bp)

    # Register CLI commands
    from praiaflow.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"STORE_BACKEND={app.config.get('STORE_BACKEND')}")

    return app
