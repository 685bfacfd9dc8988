#!/usr/bin/env python3
"""
Concert Stream - concert listings, ticket sales and a gated live stream.
A Flask application selling streaming tickets through Stripe Checkout.
"""

import os
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_mail import Mail
from flask_migrate import Migrate

# Import our modules
from models import db
from utils.banner import print_startup_banner
from routes import register_blueprints
from commands import register_commands

# Load environment variables from .env file
load_dotenv()

mail = Mail()
migrate = Migrate()


def create_app(config=None):
    """Application factory pattern"""
    # Print startup banner (will show in both dev and production)
    print_startup_banner()

    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///concerts.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['BASE_URL'] = os.environ.get('BASE_URL', 'http://localhost:5000')
    app.config['DEFAULT_LOCALE'] = os.environ.get('DEFAULT_LOCALE', 'sl')

    # Stripe
    app.config['STRIPE_SECRET_KEY'] = os.environ.get('STRIPE_SECRET_KEY', '')
    app.config['STRIPE_WEBHOOK_SECRET'] = os.environ.get('STRIPE_WEBHOOK_SECRET', '')

    # Live stream
    app.config['STREAM_PLAYBACK_URL'] = os.environ.get('STREAM_PLAYBACK_URL', '')
    app.config['STREAM_PROBE_TIMEOUT'] = float(os.environ.get('STREAM_PROBE_TIMEOUT', '2.5'))

    # Identity provider
    app.config['IDENTITY_API_URL'] = os.environ.get('IDENTITY_API_URL', '')
    app.config['IDENTITY_API_KEY'] = os.environ.get('IDENTITY_API_KEY', '')
    app.config['IDENTITY_TIMEOUT'] = float(os.environ.get('IDENTITY_TIMEOUT', '3'))
    app.config['IDENTITY_TOKEN_SECRET'] = os.environ.get('IDENTITY_TOKEN_SECRET', app.config['SECRET_KEY'])

    # Mail
    app.config['SUPPORT_EMAIL'] = os.environ.get('SUPPORT_EMAIL', '')
    app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER', '')
    app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', '587'))
    app.config['MAIL_USE_TLS'] = os.environ.get('MAIL_USE_TLS', 'true').lower() == 'true'
    app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
    app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
    app.config['MAIL_DEFAULT_SENDER'] = os.environ.get('MAIL_DEFAULT_SENDER')

    if config:
        app.config.update(config)

    # Handle PostgreSQL URL format for SQLAlchemy 2.0+
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = (
            app.config['SQLALCHEMY_DATABASE_URI'].replace('postgres://', 'postgresql://', 1)
        )

    # Initialize extensions
    db.init_app(app)
    mail.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints and CLI commands
    register_blueprints(app)
    register_commands(app)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'not_found', 'message': 'Not found'}), 404

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        return jsonify({'error': 'server_error', 'message': 'Internal server error'}), 500

    # Database migrations are handled by Flask-Migrate
    # Run: flask db upgrade (in production)

    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5000)
