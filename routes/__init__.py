from .concerts import concerts_bp
from .purchase import purchase_bp
from .account import account_bp
from .support import support_bp

def register_blueprints(app):
    """Register all blueprints with the Flask app"""
    app.register_blueprint(concerts_bp)
    app.register_blueprint(purchase_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(support_bp)
