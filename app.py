from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config.config import Config
from extensions import db, login_manager, migrate

# Route Imports
from routes.auth_routes import auth_bp
from routes.admin_routes import admin_bp
from routes.teacher_routes import teacher_bp
from routes.student_routes import student_bp
from routes.parent_routes import parent_bp
from routes.files_routes import files_bp

from models import User
from services.storage import ObjectStore


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "error": "You must be logged in."}), 401

    app.extensions["object_store"] = ObjectStore(
        app.config["STORAGE_ROOT"],
        app.config["SECRET_KEY"],
        expires_in=app.config.get("SIGNED_URL_EXPIRES", 3600)
    )

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(teacher_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(parent_bp)
    app.register_blueprint(files_bp)

    register_error_handlers(app)

    @app.cli.command("seed")
    def seed():
        """Create the admin account and a small demo course."""
        from utils.seed_data import run_seed
        run_seed()

    return app


def register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"success": False, "error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception("Unhandled error")
        return jsonify({
            "success": False,
            "error": "An unexpected error occurred. Please try again."
        }), 500


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=True)
