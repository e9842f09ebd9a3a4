import logging
import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from .extensions import db, migrate
from .config import Config
from .errors import ReservationError
from .http import jerror
from .blueprints.auth import bp as auth_bp
from .blueprints.reservations import bp as reservations_bp
from .blueprints.admin import bp as admin_bp
from .models import DiningTable, ROLE_ADMIN
from .identity import IdentityStore
from .ledger import ReservationLedger
from .utils.time import today


def _configure_logging(app):
    logger = logging.getLogger("tablebook")
    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


def _register_error_handlers(app):
    @app.errorhandler(ReservationError)
    def handle_reservation_error(e: ReservationError):
        return jerror(e.status, e.code, e.message, details=e.details)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jerror(e.code or 500, (e.name or "error").upper().replace(" ", "_"), e.description or "")


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    _configure_logging(app)
    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(reservations_bp, url_prefix="/api/reservations")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    _register_error_handlers(app)

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("seed")
    @with_appcontext
    def seed_command():
        """Creates the default tables and an admin account."""
        db.create_all()
        created = 0
        for number, capacity in app.config["SEED_TABLES"]:
            if db.session.query(DiningTable).filter_by(table_number=number).one_or_none():
                continue
            db.session.add(DiningTable(table_number=number, capacity=capacity))
            created += 1
        db.session.commit()
        click.echo(f"Created {created} tables.")

        identity = IdentityStore()
        email = app.config["SEED_ADMIN_EMAIL"]
        if identity.by_email(email) is None:
            identity.register("Administrator", email, app.config["SEED_ADMIN_PASSWORD"], ROLE_ADMIN)
            click.echo(f"Created admin {email}.")
        click.echo("Database seeded!")

    @click.command("complete-past")
    @with_appcontext
    def complete_past_command():
        """Marks confirmed reservations dated before today as completed."""
        count = ReservationLedger().complete_before(today())
        click.echo(f"Completed {count} reservations.")

    app.cli.add_command(seed_command)
    app.cli.add_command(complete_past_command)

    return app
