import pytest

from conftest import NOW
from models.daily_log import DailyLog
from services.daily_service import DailyLogService
from services.dates import date_key
from services.errors import ValidationError
from services.mission_service import MissionService
from services.nutrition_service import NutritionService

TODAY = date_key(NOW)  # Wednesday, weekday index 3


def test_ensure_creates_once_and_is_idempotent(db, make_user):
    user = make_user(streak_current=4)
    MissionService.create(db, user.id, {"title": "Walk"})

    first, _ = DailyLogService.ensure(db, user.id, TODAY)
    snapshot = first.to_dict()
    second, _ = DailyLogService.ensure(db, user.id, TODAY)

    assert second.to_dict() == snapshot
    assert db.query(DailyLog).filter_by(user_id=user.id, date=TODAY).count() == 1
    assert snapshot["streak_current"] == 4
    assert snapshot["mission_stats"] == {"completed": 0, "total": 1, "list_completed": []}
    assert snapshot["gains"] == {"coins": 0, "xp": 0, "lives": 0}


def test_applicable_count_respects_schedule_and_invitations(db, make_user):
    user, friend = make_user(), make_user()
    MissionService.create(db, user.id, {"title": "Every day"})
    MissionService.create(db, user.id, {"title": "Wednesdays", "specific_days": [3]})
    MissionService.create(db, user.id, {"title": "Weekends", "specific_days": [0, 6]})
    MissionService.create(db, user.id, {"title": "Weekly", "frequency": "weekly"})
    MissionService.create(db, user.id, {"title": "Pending", "is_coop": True, "friend_id": friend.id})
    shared = MissionService.create(db, friend.id, {"title": "Shared", "is_coop": True, "friend_id": user.id})
    MissionService.respond_invite(db, user.id, shared.id, "accept")

    assert DailyLogService.count_applicable_missions(db, user.id, TODAY) == 3
    assert DailyLogService.count_applicable_missions(db, user.id, "2025-03-15") == 3  # Saturday


def test_ensure_heals_stale_mission_total(db, make_user):
    user = make_user()
    log, _ = DailyLogService.ensure(db, user.id, TODAY)
    assert log.mission_stats["total"] == 0

    MissionService.create(db, user.id, {"title": "New habit"})
    log, _ = DailyLogService.ensure(db, user.id, TODAY)

    assert log.mission_stats["total"] == 1


def test_ensure_clamps_completed_when_total_shrinks(db, make_user):
    user = make_user()
    m = MissionService.create(db, user.id, {"title": "Walk"})
    MissionService.update_progress(db, user.id, m.id, 1, now=NOW)
    MissionService.delete(db, user.id, m.id)

    log, _ = DailyLogService.ensure(db, user.id, TODAY)

    assert log.mission_stats["total"] == 0
    assert log.mission_stats["completed"] == 0
    assert len(log.mission_stats["list_completed"]) == 1


def test_ensure_clamps_completed_above_unchanged_total(db, make_user):
    user = make_user()
    quest = MissionService.create(db, user.id, {"title": "Marathon", "type": "quest", "frequency": "yearly"})
    MissionService.update_progress(db, user.id, quest.id, 1, now=NOW)

    log, _ = DailyLogService.ensure(db, user.id, TODAY)

    assert log.mission_stats["total"] == 0
    assert log.mission_stats["completed"] == 0
    assert log.mission_stats["list_completed"][0]["title"] == "Marathon"


def test_ensure_heals_nutrition_total(db, make_user):
    user = make_user()
    DailyLogService.ensure(db, user.id, TODAY)
    nutrition = NutritionService.get_or_create(db, user.id, TODAY)
    nutrition.total_calories = 640
    db.commit()

    log, nutrition_log = DailyLogService.ensure(db, user.id, TODAY)

    assert log.nutrition["total_kcal"] == 640
    assert nutrition_log.id == nutrition.id


def test_weight_carries_forward_from_earlier_days(db, make_user):
    user = make_user()
    DailyLogService.update_widget(db, user.id, "weight", 81.5, "2025-03-01")
    DailyLogService.update_widget(db, user.id, "weight", 80.2, "2025-03-08")
    DailyLogService.update_widget(db, user.id, "weight", 90, "2025-03-20")

    log, _ = DailyLogService.ensure(db, user.id, TODAY)

    assert log.weight == 80.2


def test_get_for_date_includes_meals(db, make_user):
    user = make_user()
    log = NutritionService.get_or_create(db, user.id, TODAY)
    NutritionService.add_food(db, user.id, log.meals[0].id, {"name": "Eggs", "calories": 155, "protein": 13}, TODAY)

    data = DailyLogService.get_for_date(db, user.id, TODAY)

    assert data["total_kcal"] == 155
    assert data["nutrition"]["total_protein"] == 13
    assert [m["name"] for m in data["nutrition"]["meals"]][0] == "BREAKFAST"
    assert data["nutrition"]["meals"][0]["foods"][0]["name"] == "Eggs"


def test_get_by_date_never_creates(db, make_user):
    user = make_user()
    assert DailyLogService.get_by_date(db, user.id, "2025-01-01") is None
    assert db.query(DailyLog).count() == 0

    DailyLogService.ensure(db, user.id, "2025-01-01")
    assert DailyLogService.get_by_date(db, user.id, "2025-01-01")["date"] == "2025-01-01"


@pytest.mark.parametrize("day", [None, "", "01/02/2025"])
def test_get_by_date_requires_a_valid_date(db, make_user, day):
    user = make_user()
    with pytest.raises(ValidationError):
        DailyLogService.get_by_date(db, user.id, day)


def test_update_widget_dispatches_aliases(db, make_user):
    user = make_user()
    DailyLogService.update_widget(db, user.id, "sleepHours", "7.5", TODAY)
    DailyLogService.update_widget(db, user.id, "steps", 9000, TODAY)
    DailyLogService.update_widget(db, user.id, "mood", "happy", TODAY)
    data = DailyLogService.update_widget(db, user.id, "training", [{"name": "Squat", "sets": 5}], TODAY)

    assert data["sleep_hours"] == 7.5
    assert data["steps"] == 9000
    assert data["mood"] == "happy"
    assert data["gym_workouts"] == [{"name": "Squat", "sets": 5}]


def test_update_widget_merges_nutrition(db, make_user):
    user = make_user()
    DailyLogService.update_widget(db, user.id, "nutrition", {"water_ml": 500}, TODAY)
    data = DailyLogService.update_widget(db, user.id, "nutrition", {"notes": "cheat day"}, TODAY)
    assert data["nutrition"] == {"total_kcal": 0, "water_ml": 500, "notes": "cheat day"}


def test_update_widget_protects_identity_columns(db, make_user):
    user = make_user()
    data = DailyLogService.update_widget(db, user.id, "user_id", 999, TODAY)
    assert data["user_id"] == user.id
    data = DailyLogService.update_widget(db, user.id, "favourite_colour", "blue", TODAY)
    assert "favourite_colour" not in data


def test_update_widget_validates_values(db, make_user):
    user = make_user()
    with pytest.raises(ValidationError):
        DailyLogService.update_widget(db, user.id, "steps", "lots", TODAY)
    with pytest.raises(ValidationError):
        DailyLogService.update_widget(db, user.id, "sport", "football", TODAY)
    with pytest.raises(ValidationError):
        DailyLogService.update_widget(db, user.id, "", 1, TODAY)


def test_weight_history_is_sorted_and_skips_empty_days(db, make_user):
    user, other = make_user(), make_user()
    DailyLogService.update_widget(db, user.id, "weight", 80, "2025-03-05")
    DailyLogService.update_widget(db, user.id, "weight", 82, "2025-03-01")
    DailyLogService.ensure(db, user.id, "2025-02-01")
    DailyLogService.update_widget(db, other.id, "weight", 60, "2025-03-02")

    assert DailyLogService.weight_history(db, user.id) == [
        {"date": "2025-03-01", "weight": 82},
        {"date": "2025-03-05", "weight": 80},
    ]
