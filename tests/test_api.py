"""HTTP tests for the /v1 routes."""

import pytest
from fastapi.testclient import TestClient

from brokerage.db.database import get_db
from brokerage.main import app
from conftest import seed_buyer, seed_lot


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def lot(run):
    async def scenario(db):
        lot, items = await seed_lot(db, title="Dell R740 servers")
        a = await seed_buyer(db, "Alpha", tags=["dell", "r740"], credit_ok=True)
        b = await seed_buyer(db, "Beta", tags=["dell"])
        c = await seed_buyer(db, "Cisco shop", tags=["cisco"])
        return {"id": lot.id, "items": [i.id for i in items], "buyers": [a.id, b.id, c.id]}
    return run(scenario)


def invite(client, lot):
    response = client.post(f"/v1/lots/{lot['id']}/invites", json={"buyer_ids": lot["buyers"][:2]})
    assert response.status_code == 200
    return {i["buyer_id"]: i["token"] for i in response.json()}


class TestHealth:
    def test_ok(self, client):
        assert client.get("/v1/health/").json() == {"status": "ok"}


class TestRounds:
    def test_current_round_and_list(self, client, lot):
        first = client.post(f"/v1/lots/{lot['id']}/rounds/current").json()
        again = client.post(f"/v1/lots/{lot['id']}/rounds/current").json()
        assert first["id"] == again["id"]
        assert (first["round_number"], first["scope"], first["status"]) == (1, "all", "live")

        listing = client.get(f"/v1/lots/{lot['id']}/rounds").json()
        assert listing["current_round_id"] == first["id"]
        assert len(listing["rounds"]) == 1

    def test_new_round_patch_and_close(self, client, lot):
        client.post(f"/v1/lots/{lot['id']}/rounds/current")
        created = client.post(f"/v1/lots/{lot['id']}/rounds")
        assert created.status_code == 201
        second = created.json()
        assert (second["round_number"], second["scope"], second["notes"]) == (2, "unsold", "Leftovers round")

        patched = client.patch(f"/v1/rounds/{second['id']}", json={"scope": "all"}).json()
        assert patched["scope"] == "all"

        closed = client.post(f"/v1/rounds/{second['id']}/close").json()
        assert closed["status"] == "closed"
        assert closed["closed_at"] is not None
        assert client.get(f"/v1/lots/{lot['id']}/rounds").json()["current_round_id"] is None

    def test_bad_scope_rejected(self, client, lot):
        response = client.post(f"/v1/lots/{lot['id']}/rounds", json={"scope": "everything"})
        assert response.status_code == 422

    def test_unknown_lot(self, client):
        response = client.post("/v1/lots/999/rounds/current")
        assert response.status_code == 404
        assert response.json()["detail"]["message"] == "Lot 999 not found"
        assert response.json()["detail"]["details"] == {"entity": "Lot", "id": 999}


class TestBuyers:
    def test_ranked(self, client, lot):
        body = client.get(f"/v1/lots/{lot['id']}/buyers/ranked").json()
        assert [row["buyer"]["name"] for row in body["buyers"]] == ["Alpha", "Beta"]
        assert body["buyers"][0]["match_count"] == 2
        assert body["total_matched"] == 2
        assert "dell" in body["tokens"]

    def test_ranked_limit(self, client, lot):
        body = client.get(f"/v1/lots/{lot['id']}/buyers/ranked", params={"limit": 1}).json()
        assert len(body["buyers"]) == 1
        assert body["total_matched"] == 2

    def test_browse_includes_non_matching(self, client, lot):
        body = client.get("/v1/buyers/", params={"q": "cisco"}).json()
        assert body["total"] == 1
        assert body["buyers"][0]["name"] == "Cisco shop"


class TestOfferFlow:
    def test_invite_offer_optimize_award(self, client, lot):
        tokens = invite(client, lot)
        a, b = lot["buyers"][:2]
        line1, line2 = lot["items"]

        def offer(token, prices):
            lines = [{"line_item_id": item_id, "unit_price": price} for item_id, price in prices.items()]
            return client.post(f"/v1/invite/{token}/offer", json={"payload": {"mode": "lines", "lines": lines}})

        assert offer(tokens[a], {line1: 100, line2: 50}).status_code == 200
        assert offer(tokens[b], {line1: 90, line2: "60"}).status_code == 200

        allocation = client.get(f"/v1/lots/{lot['id']}/optimize").json()
        assert {l["line_item_id"]: l["best"]["buyer_id"] for l in allocation["lines"]} == {line1: a, line2: b}
        assert {x["buyer_id"]: x["total"] for x in allocation["buyers"]} == {a: 100.0, b: 60.0}
        assert (allocation["priced_lines"], allocation["total_lines"]) == (2, 2)
        assert allocation["currency"] == "USD"

        award = client.post(f"/v1/lots/{lot['id']}/award").json()
        assert award["status"] == "success"
        assert [(l["line_item_id"], l["buyer_id"]) for l in award["awarded"]] == [(line1, a), (line2, b)]

        status = client.get(f"/v1/invite/{tokens[b]}/status").json()
        assert status["is_winner"] is True
        assert status["lot_status"] == "awarded"

    def test_duplicate_offer_is_409(self, client, lot):
        token = invite(client, lot)[lot["buyers"][0]]
        body = {"payload": {"mode": "take_all", "take_all_total": "1,000"}}
        assert client.post(f"/v1/invite/{token}/offer", json=body).status_code == 200

        response = client.post(f"/v1/invite/{token}/offer", json=body)
        assert response.status_code == 409
        assert response.json()["detail"]["details"]["constraint"] == "uq_offers_lot_buyer"

    def test_invalid_price_is_422_with_field(self, client, lot):
        token = invite(client, lot)[lot["buyers"][0]]
        body = {"payload": {"mode": "take_all", "take_all_total": "-5"}}
        response = client.post(f"/v1/invite/{token}/offer", json=body)
        assert response.status_code == 422
        assert response.json()["detail"]["details"] == {"field": "take_all_total"}

    def test_accept_take_all(self, client, lot):
        token = invite(client, lot)[lot["buyers"][0]]
        offer_id = client.post(
            f"/v1/invite/{token}/offer", json={"payload": {"mode": "take_all", "take_all_total": 900}}
        ).json()["offer_id"]
        response = client.post(f"/v1/lots/{lot['id']}/offers/{offer_id}/accept")
        assert response.status_code == 200
        assert len(response.json()["awarded"]) == 2

    def test_optimize_without_offers(self, client, lot):
        body = client.get(f"/v1/lots/{lot['id']}/optimize", params={"hide_no_bids": True}).json()
        assert body["lines"] == []
        assert body["buyers"] == []
        assert body["best_take_all"] is None


class TestInvites:
    def test_list_and_delete(self, client, lot):
        invite(client, lot)
        round_id = client.get(f"/v1/lots/{lot['id']}/rounds").json()["current_round_id"]
        invites = client.get(f"/v1/rounds/{round_id}/invites").json()["invites"]
        assert len(invites) == 2

        assert client.delete(f"/v1/invites/{invites[0]['id']}").json() == {"status": "success"}
        assert len(client.get(f"/v1/rounds/{round_id}/invites").json()["invites"]) == 1
        assert client.delete(f"/v1/invites/{invites[0]['id']}").status_code == 404

    def test_blocked_buyer(self, client, run, lot):
        blocked = run(lambda db: seed_buyer(db, "Blocked", do_not_invite=True)).id
        response = client.post(f"/v1/lots/{lot['id']}/invites", json={"buyer_ids": [blocked]})
        assert response.status_code == 422


class TestInviteViews:
    def test_lot_view(self, client, lot):
        token = invite(client, lot)[lot["buyers"][0]]
        body = client.get(f"/v1/invite/{token}/lot").json()
        assert body["lot"]["id"] == lot["id"]
        assert body["round_number"] == 1
        assert [i["id"] for i in body["line_items"]] == lot["items"]
        assert body["invite"]["token"] == token

    def test_results_after_award(self, client, lot):
        tokens = invite(client, lot)
        a, b = lot["buyers"][:2]
        lines = [{"line_item_id": item_id, "unit_price": 40} for item_id in lot["items"]]
        client.post(f"/v1/invite/{tokens[a]}/offer", json={"payload": {"mode": "lines", "lines": lines}})
        client.post(f"/v1/lots/{lot['id']}/award")

        winner = client.get(f"/v1/invite/{tokens[a]}/results").json()
        assert winner["is_winner"] is True
        assert winner["awards_total"] == 80.0
        assert len(winner["awards"]) == 2

        other = client.get(f"/v1/invite/{tokens[b]}/results").json()
        assert (other["is_winner"], other["awards"], other["awards_total"]) == (False, [], 0.0)

    def test_unknown_token(self, client):
        assert client.get("/v1/invite/missing/results").status_code == 404
