from flask import Flask
from configs import Config, db, login
from db.models.user import User
from blueprint import blue_print
from admin.setup import init_admin
from logging_config import setup_logging
from utils.http import register_error_handlers


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if not app.config.get("TESTING"):
        setup_logging(app.config["LOG_LEVEL"], app.config["JSON_LOGS"])

    db.init_app(app)
    login.init_app(app)

    @login.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    register_error_handlers(app)
    init_admin(app)  # /manage back office
    blue_print(app)
    return app


app = create_app()

if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
