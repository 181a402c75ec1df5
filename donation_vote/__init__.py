from dotenv import load_dotenv
from flask import Flask
from flasgger import Swagger

from .config import Config
from .errors import register_error_handlers
from .extensions import db, migrate, jwt, ma, mail
from .middleware.request_id import init_request_id
from .swagger_config import swagger_template

load_dotenv()

def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    Swagger(app, template=swagger_template(app))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    mail.init_app(app)

    # Middleware + errors
    init_request_id(app)
    register_error_handlers(app)

    # Blueprint imports
    from . import models  # noqa: F401
    from .api.tokens.routes import tokens_bp
    from .api.gate.routes import gate_bp
    from .api.voting.routes import voting_bp
    from .api.results.routes import results_bp

    # Blueprints
    app.register_blueprint(tokens_bp, url_prefix="/api/tokens")
    app.register_blueprint(gate_bp, url_prefix="/api/gate")
    app.register_blueprint(voting_bp, url_prefix="/api/votes")
    app.register_blueprint(results_bp, url_prefix="/api/results")

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
