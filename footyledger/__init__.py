"""Initialize the Flask app and its extensions."""

import datetime
import json
import os

import firebase_admin
from firebase_admin import credentials, firestore
from flask import Flask, current_app, g, jsonify, session
from werkzeug.middleware.proxy_fix import ProxyFix

from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, USERS_COLLECTION
from .errors import StoreUnavailableError
from .extensions import csrf
from .store import DocumentStore
from .user.models import Principal

STORE_EXTENSION = "document_store"


def _env_flag(name, default="false"):
    return (os.environ.get(name) or default).lower() in ["true", "1", "t"]


def get_store():
    """Return the document store of the current app."""
    store = current_app.extensions.get(STORE_EXTENSION)
    if store is None:
        raise StoreUnavailableError("The data store is not configured.")
    return store


def _init_firebase(app):
    """Initialize the Firebase Admin SDK from the first credentials found."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fall back to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except (ValueError, OSError) as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    if cred and not firebase_admin._apps:
        options = {}
        if project_id:
            options["projectId"] = project_id
        try:
            firebase_admin.initialize_app(cred, options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")


def create_app(test_config=None, db=None):
    """Create and configure an instance of the Flask application.

    ``db`` is the Firestore client to use. When it is omitted and the app is
    not in testing mode, the Firebase Admin SDK client is used.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=_env_flag("SESSION_COOKIE_SECURE"),
        PERMANENT_SESSION_LIFETIME=datetime.timedelta(hours=2),
        DEFAULT_PAGE_SIZE=int(os.environ.get("DEFAULT_PAGE_SIZE") or DEFAULT_PAGE_SIZE),
        MAX_PAGE_SIZE=int(os.environ.get("MAX_PAGE_SIZE") or MAX_PAGE_SIZE),
        ALLOW_ELEVATED_REGISTRATION=_env_flag("ALLOW_ELEVATED_REGISTRATION"),
        APP_VERSION=os.environ.get("APP_VERSION", "dev"),
    )

    if test_config:
        app.config.update(test_config)

    # Initialize Firebase Admin SDK only if not in testing mode
    if db is None and not app.config.get("TESTING"):
        _init_firebase(app)
        db = firestore.client()

    if db is not None:
        app.extensions[STORE_EXTENSION] = DocumentStore(db)

    # Initialize extensions
    csrf.init_app(app)

    # Register blueprints
    from . import auth as auth_bp

    app.register_blueprint(auth_bp.bp)

    from . import tournament as tournament_bp

    app.register_blueprint(tournament_bp.bp)

    from . import match as match_bp

    app.register_blueprint(match_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    @app.before_request
    def load_logged_in_user():
        """If a user_id is in the session, load the user and store it in g."""
        user_id = session.get("user_id")
        g.user = None
        if user_id is None:
            return

        store = current_app.extensions.get(STORE_EXTENSION)
        if store is None:
            return
        user = store.find_by_id(USERS_COLLECTION, user_id)
        if user is None:
            # User ID in session but no user in the store. Clear the session.
            session.clear()
            current_app.logger.warning(
                f"User {user_id} in session but not found in Firestore."
            )
            return
        user["uid"] = user_id
        g.user = Principal(user)

    @app.route("/api/version")
    def version():
        """Report the service name and version."""
        return jsonify(
            {"service": "footyledger", "version": current_app.config["APP_VERSION"]}
        )

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
