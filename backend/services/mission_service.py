"""
mission_service.py — Missions (habits & quests, solo or coop)

Listing with a lazy daily reset, creation with computed rewards, coop invitations,
progress with linked-mission sync, completion rewards, edit/delete/purge.

Daily habits move between three states:
    armed            -> not completed
    completed_today  -> completed, last touched today
    stale_completed  -> completed on an earlier day; `reconcile` re-arms it
"""

import logging
import math
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models.mission import Mission, MissionParticipant
from services.daily_service import DailyLogService
from services.dates import date_key, local_now, same_day
from services.errors import (
    ConflictError,
    ForbiddenError,
    MissionStateError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from services.identity import contains_identity, normalize_id, same_identity, to_pk
from services.level_service import LevelService
from services.rewards import FREQUENCY_MULTIPLIERS, REWARD_TABLE, apply_rewards
from services.user_service import UserService

logger = logging.getLogger(__name__)

MISSION_TYPES = ("habit", "quest")
INVITE_ACTIONS = ("accept", "reject")

ARMED = "armed"
COMPLETED_TODAY = "completed_today"
STALE_COMPLETED = "stale_completed"


def _to_number(value, default: float = 1) -> float:
    """Numeric coercion where missing, garbage and zero all mean `default`."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number) or number == 0:
        return default
    return number


def _clean_days(days) -> list[int]:
    if not isinstance(days, list):
        return []
    cleaned = []
    for d in days:
        try:
            day = int(d)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid weekday '{d}'")
        if not 0 <= day <= 6:
            raise ValidationError(f"Invalid weekday '{d}'")
        if day not in cleaned:
            cleaned.append(day)
    return sorted(cleaned)


def _check_choice(value, choices, field: str):
    if value not in choices:
        raise ValidationError(f"Invalid {field} '{value}'")
    return value


def _contributions(mission: Mission) -> dict:
    """Copy of the contribution map; legacy rows without one start empty."""
    if isinstance(mission.contributions, dict):
        return {normalize_id(k): v for k, v in mission.contributions.items()}
    return {}


def _reset_progress(mission: Mission):
    contributions = {k: 0 for k in mission.contributions}
    for pid in mission.participant_ids:
        contributions[normalize_id(pid)] = 0
    mission.progress = 0
    mission.completed = False
    mission.contributions = contributions


def habit_state(mission: Mission, now: datetime) -> str:
    if not mission.completed:
        return ARMED
    # no timestamp on record: count it as touched today
    if mission.last_updated is None or same_day(mission.last_updated, now):
        return COMPLETED_TODAY
    return STALE_COMPLETED


def reconcile(mission: Mission, now: datetime) -> bool:
    """Re-arm a daily habit completed on an earlier day. Returns True if it changed."""
    if mission.type != "habit" or mission.frequency != "daily":
        return False
    if habit_state(mission, now) != STALE_COMPLETED:
        return False
    if not isinstance(mission.contributions, dict):
        raise ValueError(f"mission {mission.id} has malformed contributions {mission.contributions!r}")
    _reset_progress(mission)
    return True


class MissionService:
    @staticmethod
    def _for_user(db: Session, user_pk: int):
        return db.query(Mission).filter(or_(
            Mission.owner_id == user_pk,
            Mission.participant_links.any(MissionParticipant.user_id == user_pk),
        ))

    @staticmethod
    def _get(db: Session, mission_id) -> Mission:
        pk = to_pk(mission_id)
        mission = db.get(Mission, pk) if pk is not None else None
        if not mission:
            raise NotFoundError("Mission not found")
        return mission

    @staticmethod
    def _is_member(mission: Mission, user_id) -> bool:
        return same_identity(mission.owner_id, user_id) or contains_identity(mission.participant_ids, user_id)

    @staticmethod
    def list_for_user(db: Session, user_id, now: datetime | None = None) -> list[Mission]:
        """All missions the user owns or shares, incomplete first, newest first, reset for today."""
        now = now or local_now()
        pk = to_pk(user_id)

        def fetch():
            return MissionService._for_user(db, pk).order_by(
                Mission.completed.asc(), Mission.created_at.desc(), Mission.id.desc()
            ).all()

        missions = fetch()
        reset_any = False
        for mission in missions:
            try:
                if reconcile(mission, now):
                    db.commit()
                    reset_any = True
            except Exception:
                db.rollback()
                logger.exception(f"Skipping daily reset for mission {mission.id}")

        # Re-read so callers never see a half-reset list
        return fetch() if reset_any else missions

    @staticmethod
    def create(db: Session, user_id, data: dict) -> Mission:
        pk = to_pk(user_id)
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")

        frequency = _check_choice(data.get("frequency") or "daily", FREQUENCY_MULTIPLIERS, "frequency")
        difficulty = _check_choice(data.get("difficulty") or "easy", REWARD_TABLE, "difficulty")
        mission_type = _check_choice(data.get("type") or "habit", MISSION_TYPES, "type")
        target = _to_number(data.get("target"), 1)
        if target < 0:
            target = 1
        unit = data.get("unit") or ""
        is_coop = bool(data.get("is_coop"))

        friend_pk = to_pk(data.get("friend_id")) if is_coop else None
        if is_coop and data.get("friend_id") is not None:
            if friend_pk is None or not UserService.get(db, friend_pk):
                raise NotFoundError("Friend not found")
            if friend_pk == pk:
                raise ValidationError("You cannot invite yourself")

        mission = Mission(
            owner_id=pk,
            title=title.strip(),
            type=mission_type,
            difficulty=difficulty,
            frequency=frequency,
            specific_days=_clean_days(data.get("specific_days")),
            target=target,
            progress=0,
            unit=unit.strip() if isinstance(unit, str) else str(unit),
            completed=False,
            last_updated=local_now(),
            is_coop=is_coop,
            invitation_status="pending" if friend_pk else "none",
            contributions={normalize_id(pk): 0},
        )
        apply_rewards(mission)
        mission.participant_links.append(MissionParticipant(user_id=pk, position=0))
        if friend_pk:
            mission.participant_links.append(MissionParticipant(user_id=friend_pk, position=1))

        db.add(mission)
        db.flush()
        if friend_pk:
            UserService.push_mission_request(db, friend_pk, mission.id)
        db.commit()
        db.refresh(mission)
        logger.info(f"User {pk} created mission {mission.id} '{mission.title}'")
        return mission

    @staticmethod
    def respond_invite(db: Session, user_id, mission_id, action: str) -> dict:
        if mission_id is None or mission_id == "":
            raise ValidationError("Missing mission id")
        _check_choice(action, INVITE_ACTIONS, "action")
        pk = to_pk(user_id)

        mission_pk = to_pk(mission_id)
        mission = db.get(Mission, mission_pk) if mission_pk is not None else None
        if not mission:
            UserService.pull_mission_request(db, pk, mission_id)
            db.commit()
            logger.warning(f"User {pk} answered invitation to missing mission {mission_id}; request cleared")
            raise NotFoundError("This mission no longer exists")

        if not contains_identity(mission.participant_ids, pk) or same_identity(mission.owner_id, pk):
            raise NotAuthorizedError("You were not invited to this mission")

        if mission.invitation_status != "pending":
            UserService.pull_mission_request(db, pk, mission.id)
            db.commit()
            raise MissionStateError("This invitation was already answered")

        if action == "accept":
            mission.invitation_status = "active"
            contributions = _contributions(mission)
            contributions[normalize_id(pk)] = 0
            mission.contributions = contributions
            UserService.pull_mission_request(db, pk, mission.id)
            db.commit()
            db.refresh(mission)
            return {"message": "Accepted", "mission": mission.to_dict()}

        # A rejected coop mission is gone for everybody
        db.delete(mission)
        UserService.pull_mission_request(db, pk, mission_pk)
        db.commit()
        return {"message": "Rejected"}

    @staticmethod
    def _sync_linked(db: Session, linked: Mission, user_pk: int, amount: float, now: datetime):
        if linked.is_coop and linked.invitation_status == "pending":
            return
        contributions = _contributions(linked)
        key = normalize_id(user_pk)
        contributions[key] = contributions.get(key, 0) + amount
        linked.contributions = contributions
        linked.last_updated = now

        new_progress = (linked.progress or 0) + amount
        if new_progress >= linked.target:
            linked.completed = True
            linked.progress = linked.target
            LevelService.add_rewards(db, user_pk, linked.xp_reward, linked.coin_reward,
                                     linked.game_coin_reward, commit=False)
            DailyLogService.record_completion(db, user_pk, linked, date_key(now))
            logger.info(f"Linked mission {linked.id} completed through shared progress")
        else:
            linked.progress = max(0, new_progress)
        db.flush()

    @staticmethod
    def update_progress(db: Session, user_id, mission_id, amount=None, now: datetime | None = None) -> dict:
        now = now or local_now()
        pk = to_pk(user_id)
        key = normalize_id(pk)

        mission = MissionService._get(db, mission_id)
        if not MissionService._is_member(mission, pk):
            raise NotAuthorizedError("You are not allowed to update this mission")
        if mission.is_coop and mission.invitation_status == "pending":
            raise MissionStateError("Your partner has not accepted yet")

        if not isinstance(mission.contributions, dict):
            mission.contributions = {}

        if mission.type == "habit" and mission.completed:
            if habit_state(mission, now) == COMPLETED_TODAY:
                return {"message": "Already completed today", "already_completed": True,
                        "mission": mission.to_dict()}
            _reset_progress(mission)
        elif mission.completed:
            raise MissionStateError("This quest is already completed")

        add_amount = _to_number(amount, 1)

        try:
            # Same title + same unit = the same activity tracked twice
            linked_missions = db.query(Mission).filter(
                Mission.owner_id == pk,
                Mission.title == mission.title,
                Mission.unit == mission.unit,
                Mission.id != mission.id,
                Mission.completed.is_(False),
            ).all()
            for linked in linked_missions:
                try:
                    with db.begin_nested():
                        MissionService._sync_linked(db, linked, pk, add_amount, now)
                except Exception:
                    logger.exception(f"Failed to sync linked mission {linked.id}")

            contributions = _contributions(mission)
            contributions[key] = contributions.get(key, 0) + add_amount
            mission.contributions = contributions
            mission.last_updated = now

            rewards, leveled_up, user_result = None, False, None
            new_progress = (mission.progress or 0) + add_amount
            if new_progress >= mission.target:
                mission.completed = True
                mission.progress = mission.target
                # Every participant gets the full reward, the coop bonus already pays for sharing
                payees = list(mission.participant_ids or [])
                if not contains_identity(payees, mission.owner_id):
                    payees.insert(0, mission.owner_id)
                for pid in payees:
                    r = LevelService.add_rewards(db, pid, mission.xp_reward, mission.coin_reward,
                                                 mission.game_coin_reward, commit=False)
                    if same_identity(pid, pk):
                        user_result, leveled_up = r["user"], r["leveled_up"]
                        rewards = {"xp": mission.xp_reward, "coins": mission.coin_reward,
                                   "game_coins": mission.game_coin_reward}
                DailyLogService.record_completion(db, pk, mission, date_key(now))
                logger.info(f"Mission {mission.id} completed by user {pk}")
            else:
                mission.progress = max(0, new_progress)

            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConflictError("Mission was updated by another request, please retry")

        db.refresh(mission)
        return {
            "message": "Completed!" if mission.completed else "Updated",
            "mission": mission.to_dict(),
            "user": user_result.to_profile() if user_result else None,
            "leveled_up": leveled_up,
            "rewards": rewards,
            "progress_only": not mission.completed,
        }

    @staticmethod
    def edit(db: Session, user_id, mission_id, data: dict) -> Mission:
        """Change only the fields present; rewards follow frequency/difficulty."""
        mission = MissionService._get(db, mission_id)
        if not MissionService._is_member(mission, user_id):
            raise NotAuthorizedError("You are not allowed to edit this mission")

        if data.get("title") is not None:
            title = str(data["title"]).strip()
            if not title:
                raise ValidationError("Title is required")
            mission.title = title
        if data.get("target") is not None:
            try:
                target = float(data["target"])
            except (TypeError, ValueError):
                raise ValidationError("Target must be a number")
            if not target > 0 or math.isinf(target):
                raise ValidationError("Target must be positive")
            mission.target = target
        if data.get("frequency") is not None:
            mission.frequency = _check_choice(data["frequency"], FREQUENCY_MULTIPLIERS, "frequency")
        if data.get("difficulty") is not None:
            mission.difficulty = _check_choice(data["difficulty"], REWARD_TABLE, "difficulty")
        if data.get("unit") is not None:
            mission.unit = str(data["unit"]).strip()
        if isinstance(data.get("specific_days"), list):
            mission.specific_days = _clean_days(data["specific_days"])

        if data.get("frequency") is not None or data.get("difficulty") is not None:
            apply_rewards(mission)

        if mission.progress > mission.target or mission.completed:
            mission.progress = mission.target

        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise ConflictError("Mission was updated by another request, please retry")
        db.refresh(mission)
        return mission

    @staticmethod
    def _release_invites(db: Session, mission: Mission):
        if mission.invitation_status != "pending":
            return
        for pid in mission.participant_ids:
            if not same_identity(pid, mission.owner_id):
                UserService.pull_mission_request(db, pid, mission.id)

    @staticmethod
    def delete(db: Session, user_id, mission_id) -> dict:
        mission = MissionService._get(db, mission_id)
        if not same_identity(mission.owner_id, user_id):
            raise ForbiddenError("Only the creator can cancel this mission")
        MissionService._release_invites(db, mission)
        mission_pk = mission.id
        db.delete(mission)
        db.commit()
        return {"id": mission_pk, "message": "Deleted"}

    @staticmethod
    def purge(db: Session, user_id) -> int:
        """Delete every mission the user owns or shares, whatever its state."""
        pk = to_pk(user_id)
        missions = MissionService._for_user(db, pk).all()
        for mission in missions:
            MissionService._release_invites(db, mission)
            db.delete(mission)
        db.commit()
        logger.info(f"Purged {len(missions)} missions for user {pk}")
        return len(missions)

    @staticmethod
    def pending_requests(db: Session, user_id) -> list[Mission]:
        user = UserService.get(db, user_id)
        if not user:
            return []
        ids = [to_pk(r) for r in (user.mission_requests or [])]
        ids = [i for i in ids if i is not None]
        if not ids:
            return []
        return db.query(Mission).filter(Mission.id.in_(ids)).all()
