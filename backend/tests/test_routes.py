from conftest import auth_headers
from providers.base import BaseProvider
from services.food_analysis import FoodAnalysisService, get_food_analysis


def _register(client, username="alice", password="hunter22"):
    resp = client.post("/api/v1/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201
    body = resp.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


def test_health_check(client):
    assert client.get("/api/v1/health-check").json()["status"] == "ok"


def test_register_login_and_profile(client):
    headers, profile = _register(client)
    assert profile["level"] == 1
    assert profile["game_coins"] == 500
    assert profile["streak"]["current"] == 1

    assert client.post("/api/v1/auth/register", json={"username": "alice", "password": "x"}).status_code == 400
    assert client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"}).status_code == 401
    login = client.post("/api/v1/auth/login", json={"username": "alice", "password": "hunter22"})
    assert login.status_code == 200

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {login.json()['token']}"})
    assert me.json()["username"] == "alice"
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 200


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/v1/missions").status_code == 401
    assert client.get("/api/v1/daily", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_streak_advances_through_any_authenticated_request(client, db, make_user):
    from datetime import timedelta
    from services.dates import local_now

    user = make_user(streak_current=6, streak_last_log_date=local_now() - timedelta(days=1))
    headers = auth_headers(user)

    body = client.get("/api/v1/auth/me", headers=headers).json()
    assert body["streak"]["current"] == 7
    assert client.get("/api/v1/auth/me", headers=headers).json()["streak"]["current"] == 7


def test_food_requests_also_update_the_streak(client, db, make_user):
    from datetime import datetime
    from models.user import User

    user = make_user(streak_current=4, streak_last_log_date=datetime(2020, 1, 1, 9, 0))

    assert client.get("/api/v1/food/log", headers=auth_headers(user)).status_code == 200

    db.expire_all()
    assert db.get(User, user.id).streak_current == 1


def test_mission_lifecycle(client):
    headers, _ = _register(client)

    created = client.post("/api/v1/missions", headers=headers,
                          json={"title": "Push-ups", "target": 20, "unit": "reps"})
    assert created.status_code == 201
    mission_id = created.json()["id"]

    progress = client.put(f"/api/v1/missions/{mission_id}/progress", headers=headers, json={"amount": 25})
    assert progress.status_code == 200
    body = progress.json()
    assert body["mission"]["progress"] == 20
    assert body["progress_only"] is False
    assert body["user"]["xp"] == 50

    again = client.put(f"/api/v1/missions/{mission_id}/progress", headers=headers, json={})
    assert again.json()["already_completed"] is True

    daily = client.get("/api/v1/daily", headers=headers).json()
    assert daily["mission_stats"]["completed"] == 1
    assert daily["mission_stats"]["total"] == 1

    edited = client.put(f"/api/v1/missions/{mission_id}", headers=headers, json={"difficulty": "epic"})
    assert edited.json()["mission"]["xp_reward"] == 150

    listed = client.get("/api/v1/missions", headers=headers).json()
    assert [m["id"] for m in listed] == [mission_id]

    assert client.delete(f"/api/v1/missions/{mission_id}", headers=headers).json()["message"] == "Deleted"
    assert client.get("/api/v1/missions", headers=headers).json() == []


def test_domain_errors_map_to_status_codes(client):
    alice, _ = _register(client, "alice")
    bob, bob_profile = _register(client, "bob")

    assert client.post("/api/v1/missions", headers=alice, json={"title": ""}).status_code == 400
    assert client.put("/api/v1/missions/999/progress", headers=alice, json={}).status_code == 404

    coop = client.post("/api/v1/missions", headers=alice,
                       json={"title": "Run", "is_coop": True, "friend_id": bob_profile["id"]}).json()
    pending = client.put(f"/api/v1/missions/{coop['id']}/progress", headers=alice, json={"amount": 1})
    assert pending.status_code == 400
    assert "partner" in pending.json()["detail"]

    assert client.delete(f"/api/v1/missions/{coop['id']}", headers=bob).status_code == 403

    requests = client.get("/api/v1/missions/requests", headers=bob).json()
    assert [r["id"] for r in requests] == [coop["id"]]
    resp = client.post("/api/v1/missions/respond", headers=bob, json={"mission_id": coop["id"], "action": "accept"})
    assert resp.json()["mission"]["invitation_status"] == "active"


def test_nuke_route_is_not_shadowed_by_mission_id(client):
    headers, _ = _register(client)
    client.post("/api/v1/missions", headers=headers, json={"title": "A"})
    client.post("/api/v1/missions", headers=headers, json={"title": "B"})

    resp = client.delete("/api/v1/missions/nuke", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["deleted"] == 2


def test_daily_widgets_and_history(client):
    headers, _ = _register(client)
    client.put("/api/v1/daily", headers=headers, json={"type": "weight", "value": 80.5, "date": "2025-03-01"})
    client.put("/api/v1/daily", headers=headers, json={"type": "weight", "value": 79.9, "date": "2025-03-02"})

    assert client.get("/api/v1/daily/history", headers=headers).json() == [
        {"date": "2025-03-01", "weight": 80.5},
        {"date": "2025-03-02", "weight": 79.9},
    ]
    assert client.get("/api/v1/daily/specific?date=2024-01-01", headers=headers).json() is None
    assert client.get("/api/v1/daily/specific", headers=headers).status_code == 400
    assert client.get("/api/v1/daily/specific?date=2025-03-02", headers=headers).json()["weight"] == 79.9


def test_food_log_routes(client):
    headers, _ = _register(client)
    log = client.get("/api/v1/food/log?date=2025-03-01", headers=headers).json()
    meal_id = log["meals"][0]["id"]

    added = client.post(f"/api/v1/food/log/{meal_id}?date=2025-03-01", headers=headers,
                        json={"name": "Rice", "calories": 130.4, "carbs": 28.2})
    assert added.json()["total_calories"] == 130
    food_id = added.json()["meals"][0]["foods"][0]["id"]

    removed = client.delete(f"/api/v1/food/log/{meal_id}/{food_id}?date=2025-03-01", headers=headers)
    assert removed.json()["total_calories"] == 0

    saved = client.post("/api/v1/food/saved", headers=headers, json={"name": "Tofu", "calories": 76})
    assert saved.status_code == 201
    assert [f["name"] for f in client.get("/api/v1/food/search?query=tof", headers=headers).json()] == ["Tofu"]


class _ScriptedProvider(BaseProvider):
    @property
    def name(self) -> str:
        return "scripted"

    async def chat(self, messages, model=None):
        return self.result(model, text='{"name": "Apple", "calories": 95.4, "protein": 0.5}')


def test_food_analysis_route_uses_injected_service(client):
    from main import app

    headers, _ = _register(client)
    app.dependency_overrides[get_food_analysis] = lambda: FoodAnalysisService(_ScriptedProvider(), models=["m"])

    resp = client.post("/api/v1/food/analyze-text", headers=headers, json={"text": "an apple"})

    assert resp.status_code == 200
    assert resp.json()["calories"] == 95


def test_food_analysis_unconfigured_is_503(client):
    headers, _ = _register(client)
    resp = client.post("/api/v1/food/analyze-text", headers=headers, json={"text": "an apple"})
    assert resp.status_code == 503


def test_shop_routes(client):
    headers, _ = _register(client)
    items = client.get("/api/v1/shop", headers=headers).json()
    zeus = next(i for i in items if i["name"] == "Zeus")

    bought = client.post("/api/v1/shop/buy", headers=headers, json={"item_id": zeus["id"]})
    assert bought.json()["user"]["game_coins"] == 490

    used = client.post("/api/v1/shop/use", headers=headers, json={"item_id": zeus["id"]})
    assert used.json()["user"]["avatar"] == zeus["icon"]

    poor = client.post("/api/v1/shop/exchange", headers=headers, json={"amount_game_coins": 5000})
    assert poor.status_code == 400
