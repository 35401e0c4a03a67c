from flask import request
from flask_login import current_user, login_required

from wevote.services.ballots import (
    cast_vote,
    create_ballot,
    export_ballot_report,
    get_ballot,
)
from wevote.services.concerns import create_concern
from wevote.services.tally import tally_ballot


def register_ballot_routes(app):
    @app.route("/api/concerns", methods=["POST"])
    @login_required
    def create_concern_route():
        concern = create_concern(current_user, request.get_json(silent=True))
        return {
            "ok": True,
            "concern": {"concernId": concern.concern_id, "title": concern.title},
        }, 201

    @app.route("/api/ballots", methods=["POST"])
    @login_required
    def create_ballot_route():
        ballot = create_ballot(current_user, request.get_json(silent=True))
        return {"ok": True, "ballotId": ballot.ballot_id}, 201

    @app.route("/api/ballots/<ballot_id>")
    def ballot_detail(ballot_id):
        return {"ok": True, "ballot": get_ballot(ballot_id).to_dict()}

    @app.route("/api/ballots/<ballot_id>/vote", methods=["POST"])
    @login_required
    def vote_route(ballot_id):
        receipt = cast_vote(current_user, ballot_id, request.get_json(silent=True))
        return {"ok": True, **receipt}

    @app.route("/api/ballots/<ballot_id>/tally", methods=["POST"])
    @login_required
    def tally_route(ballot_id):
        outcome = tally_ballot(ballot_id, current_user)
        return {"ok": True, **outcome}

    @app.route("/api/ballots/<ballot_id>/export")
    @login_required
    def export_route(ballot_id):
        return {"ok": True, **export_ballot_report(ballot_id)}
