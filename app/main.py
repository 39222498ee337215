import os
from flask import Flask, jsonify
from config.config import config
from app.database import init_db
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(config_name: str = None) -> Flask:
    """Application factory"""
    config_name = config_name or os.environ.get('FLASK_ENV', 'default')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    init_db()

    from app.routes import reviews, admin
    app.register_blueprint(reviews.bp, url_prefix='/api/reviews')
    app.register_blueprint(admin.bp, url_prefix='/api/admin')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'healthy'}), 200

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500

    logger.info(f"GigMarket app created with '{config_name}' configuration")

    return app
