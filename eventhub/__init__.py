from flask import Flask, jsonify
from typing import Optional, Dict, Any
from .config import Config
from .extensions import db, login_manager
from .models import User
from .security import csrf
from . import passes

def create_app(config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)

    if config_overrides:
        app.config.update(config_overrides)

    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    passes.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "message": "Invalid or expired session"}), 401

    from .routes.student import student_bp
    app.register_blueprint(student_bp)

    from .routes.internal import internal_bp
    csrf.exempt(internal_bp)
    app.register_blueprint(internal_bp)

    from .cli import passes_cli
    app.cli.add_command(passes_cli)

    @app.get("/")
    def home():
        return jsonify({"ok": True, "service": "eventhub"})

    @app.cli.command("init-db")
    def init_db():
        """Create tables if they don't exist."""
        with app.app_context():
            db.create_all()
        print("Database initialised.")

    return app
