from index import main_bp
from routes.auth import auth_bp
from routes.supplier import supplier_bp
from routes.recommendation import recommendation_bp
from routes.assignment import assignment_bp
from routes.job import job_bp
from routes.settings import settings_bp


def blue_print(app):
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(supplier_bp)
    app.register_blueprint(recommendation_bp)
    app.register_blueprint(assignment_bp)
    app.register_blueprint(job_bp)
    app.register_blueprint(settings_bp)
