import logging
import os
from datetime import timedelta

from flask import Flask, render_template
from flask_migrate import Migrate
from dotenv import load_dotenv

from .extensions import db, csrf, auth

load_dotenv()  # This will load variables from .env into the environment


def create_app(test_config=None):
    app = Flask(__name__)

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///db.sqlite3')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = os.getenv('FLASK_SECRET_KEY', 'default-secret')
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(
        minutes=int(os.getenv('SESSION_LIFETIME_MINUTES', '480'))
    )

    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    csrf.init_app(app)
    auth.init_app(app)
    Migrate(app, db)

    from chess_signup.models import auth as _auth_models  # noqa: F401
    from chess_signup.models import registrations as _registration_models  # noqa: F401

    from chess_signup.blueprints.registration.registration import registration_bp
    from chess_signup.blueprints.auth.auth import auth_bp
    from chess_signup.blueprints.admin.admin import admin_bp

    app.register_blueprint(registration_bp, url_prefix='/')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.errorhandler(404)
    def page_not_found(error):
        return render_template('404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return render_template('500.html'), 500

    with app.app_context():
        db.create_all()

    app.logger.info(f"Using database: {app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0]}")
    return app
