import click
from flask import request
from flask_login import current_user, login_required

from wevote.extensions import db
from wevote.models import TIER_ORDER, User
from wevote.services.users import set_user_tier


def register_admin_routes(app):
    @app.route("/api/admin/users/tier", methods=["POST"])
    @login_required
    def set_tier_route():
        data = request.get_json(silent=True) or {}
        tier = set_user_tier(current_user, data.get("targetUid"), data.get("tier"))
        return {"ok": True, "tier": tier}

    # First admin has to be granted from the shell.
    @app.cli.command("set-tier")
    @click.argument("username")
    @click.argument("tier", type=click.Choice(TIER_ORDER))
    def set_tier_command(username, tier):
        user = User.query.filter_by(username=username).first()
        if user is None:
            raise click.ClickException(f"No user named {username}")
        user.tier = tier
        db.session.commit()
        click.echo(f"{username} is now {tier}")
