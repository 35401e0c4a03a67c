from wevote.services.voting.results import compute_tally_hash


def test_signup_login_and_logout(client):
    response = client.post(
        "/api/signup",
        json={"username": "newbie", "email": "Newbie@Example.com", "password": "long-enough"},
    )
    assert response.status_code == 201
    uid = response.get_json()["uid"]

    duplicate = client.post(
        "/api/signup",
        json={"username": "newbie", "email": "other@example.com", "password": "long-enough"},
    )
    assert duplicate.status_code == 412
    assert duplicate.get_json()["error"] == "failed-precondition"

    short = client.post(
        "/api/signup", json={"username": "x", "email": "x@example.com", "password": "short"}
    )
    assert short.status_code == 400

    bad_login = client.post("/api/login", json={"username": "newbie", "password": "wrong-pass"})
    assert bad_login.status_code == 401

    login = client.post("/api/login", json={"username": "newbie", "password": "long-enough"})
    assert login.status_code == 200
    assert login.get_json()["uid"] == uid

    concern = client.post("/api/concerns", json={"title": "Bus stop shelter"})
    assert concern.status_code == 201

    assert client.post("/api/logout").status_code == 200
    assert client.post("/api/concerns", json={"title": "Again"}).status_code == 401


def test_mutating_routes_require_login(client):
    response = client.post("/api/ballots", json={})

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthenticated"


def test_ballot_lifecycle_over_http(app, auth_client, client_for, voters):
    concern = auth_client.post("/api/concerns", json={"title": "Library hours"}).get_json()
    created = auth_client.post(
        "/api/ballots",
        json={
            "concernId": concern["concern"]["concernId"],
            "type": "rcv",
            "options": [{"id": "A", "label": "Alpha"}, {"id": "B"}, {"id": "C"}],
            "durationMinutes": 30,
        },
    )
    assert created.status_code == 201
    ballot_id = created.get_json()["ballotId"]

    detail = app.test_client().get(f"/api/ballots/{ballot_id}").get_json()["ballot"]
    assert detail["status"] == "open"
    assert [option["id"] for option in detail["options"]] == ["A", "B", "C"]

    receipts = []
    for voter, ranking in zip(voters, [["A"], ["B", "A"], ["C"], ["C"]]):
        response = client_for(voter).post(
            f"/api/ballots/{ballot_id}/vote", json={"ranking": ranking}
        )
        assert response.status_code == 200
        receipts.append(response.get_json())

    forbidden = client_for(voters[0]).post(f"/api/ballots/{ballot_id}/tally")
    assert forbidden.status_code == 403
    assert forbidden.get_json()["error"] == "permission-denied"

    tally = auth_client.post(f"/api/ballots/{ballot_id}/tally").get_json()
    assert tally["ok"] is True
    assert tally["alreadyTallied"] is False
    assert tally["results"]["winner"] == "A"

    late = client_for(voters[4]).post(f"/api/ballots/{ballot_id}/vote", json={"ranking": ["B"]})
    assert late.status_code == 412

    export = auth_client.get(f"/api/ballots/{ballot_id}/export").get_json()["export"]
    ballot = export["ballot"]
    assert ballot["tallyHash"] == compute_tally_hash(ballot_id, "rcv", ballot["results"])
    assert export["algorithm"]["tieBreak"] == "lexicographically-last-of-lowest"

    ledger = app.test_client().get("/api/ledger/verify").get_json()
    assert ledger == {"ok": True, "checked": 1, "issues": []}

    entries = app.test_client().get("/api/ledger?limit=5").get_json()["entries"]
    assert entries[0]["ledgerId"] == tally["ledgerId"]

    check = app.test_client().post(
        "/api/receipts/verify", json={"receiptHash": receipts[0]["receiptHash"]}
    )
    assert check.get_json()["valid"] is True
    assert check.get_json()["voteShape"] == {"rankingLength": 1}


def test_errors_render_as_json(app, auth_client):
    missing = app.test_client().get("/api/ballots/nope")
    assert missing.status_code == 404
    assert missing.get_json() == {"ok": False, "error": "not-found", "message": "Ballot not found"}

    invalid = auth_client.post("/api/ballots", json={"concernId": "c", "options": []})
    assert invalid.status_code == 400
    assert invalid.get_json()["error"] == "invalid-argument"


def test_ledger_listing_and_public_audit(app, auth_client, creator, ballot_factory):
    ballot_ids = [ballot_factory().ballot_id for _ in range(3)]
    for ballot_id in ballot_ids:
        assert auth_client.post(f"/api/ballots/{ballot_id}/tally").status_code == 200

    public = app.test_client()
    latest = public.get("/api/ledger?limit=2").get_json()["entries"]
    assert [entry["seq"] for entry in latest] == [3, 2]
    fallback = public.get("/api/ledger?limit=-4").get_json()["entries"]
    assert [entry["seq"] for entry in fallback] == [3, 2, 1]

    audit = public.get(f"/api/ballots/{ballot_ids[0]}/audit").get_json()["audit"]
    assert audit["ballotId"] == ballot_ids[0]
    assert audit["ledgerId"] == fallback[-1]["ledgerId"]
    assert public.get("/api/ballots/nope/audit").status_code == 404

    export = auth_client.get(f"/api/ballots/{ballot_ids[0]}/export").get_json()
    assert set(export) == {"ok", "export", "signature"}


def test_admin_tier_route(app, client_for, make_user, voters):
    admin = make_user("admin1", tier="admin")

    denied = client_for(voters[0]).post(
        "/api/admin/users/tier", json={"targetUid": voters[1].uid, "tier": "expert"}
    )
    assert denied.status_code == 403

    granted = client_for(admin).post(
        "/api/admin/users/tier", json={"targetUid": voters[1].uid, "tier": "expert"}
    )
    assert granted.get_json() == {"ok": True, "tier": "expert"}


def test_set_tier_cli_command(app, db_session, voters):
    result = app.test_cli_runner().invoke(args=["set-tier", voters[0].username, "admin"])

    assert result.exit_code == 0, result.output
    db_session.expire_all()
    assert voters[0].tier == "admin"
