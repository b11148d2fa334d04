"""Flask application factory."""
import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from huastex.database import init_db


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('huastex').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = False
    
    _configure_logging(app)
    
    # Sentry error tracking in production
    sentry_dsn = app.config.get('SENTRY_DSN')
    if sentry_dsn and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )
    
    # Prometheus metrics instrumentation
    from huastex.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)
    
    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=1,      # Trust X-Forwarded-For with 1 proxy
            x_proto=1,    # Trust X-Forwarded-Proto
            x_host=1,     # Trust X-Forwarded-Host
            x_port=1,     # Trust X-Forwarded-Port
            x_prefix=0
        )
    
    # Initialize database
    init_db(app)
    
    # Error Handlers
    from huastex.exceptions import HuastexError

    @app.errorhandler(HuastexError)
    def handle_huastex_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"HuastexError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"HuastexError [{error.status_code}] {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'status': 'error', 'message': error.name}), error.code
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500
    
    # Register blueprints
    from huastex.blueprints.formulas import formulas_bp
    from huastex.blueprints.inventory import inventory_bp
    from huastex.blueprints.sales import sales_bp
    from huastex.blueprints.payments import payments_bp
    from huastex.blueprints.transactions import transactions_bp
    from huastex.blueprints.reports import reports_bp
    from huastex.blueprints.metrics import metrics_bp
    
    app.register_blueprint(formulas_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(metrics_bp)
    
    # Register CLI commands
    from huastex.cli_commands import init_cli_commands
    init_cli_commands(app)
    
    app.logger.info(f"Huastex started: env={app.config.get('ENV')}, "
                    f"percent_mode={app.config.get('FORMULA_PERCENT_MODE')}")
    
    return app
