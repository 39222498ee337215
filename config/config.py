import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    DATABASE_URL = os.environ.get('DATABASE_URL') or 'sqlite:///gigmarket.db'
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # API Keys
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    SENDGRID_FROM_EMAIL = os.environ.get('SENDGRID_FROM_EMAIL', 'noreply@gigmarket.com')

    # Application Settings
    APP_URL = os.environ.get('APP_URL', 'http://localhost:5000')

    # Token Settings
    ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours

    # Review Settings
    REVIEW_EDIT_WINDOW_DAYS = int(os.environ.get('REVIEW_EDIT_WINDOW_DAYS', '30'))
    REVIEW_COMMENT_MIN_LENGTH = 10

    # Notifications are handed to a background scheduler unless disabled
    NOTIFICATIONS_ASYNC = os.environ.get('NOTIFICATIONS_ASYNC', 'true').lower() == 'true'

    # Logging
    LOG_FILE = os.environ.get('LOG_FILE', 'logs/gigmarket.log')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    DEBUG = True
    TESTING = True


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
