from wevote.routes.admin import register_admin_routes
from wevote.routes.auth import register_auth_routes
from wevote.routes.ballots import register_ballot_routes
from wevote.routes.transparency import register_transparency_routes


def register_routes(app):
    register_auth_routes(app)
    register_admin_routes(app)
    register_ballot_routes(app)
    register_transparency_routes(app)
