"""
user_service.py — User lookups and the pending mission-request set.
"""

from sqlalchemy.orm import Session

from models.user import User
from services.identity import normalize_id, to_pk


class UserService:
    @staticmethod
    def get(db: Session, user_id) -> User | None:
        pk = to_pk(user_id)
        if pk is None:
            return None
        return db.get(User, pk)

    @staticmethod
    def push_mission_request(db: Session, user_id, mission_id) -> bool:
        user = UserService.get(db, user_id)
        if not user:
            return False
        requests = list(user.mission_requests or [])
        key = normalize_id(mission_id)
        if key not in [normalize_id(r) for r in requests]:
            requests.append(int(key))
            user.mission_requests = requests  # reassign so the JSON column is flagged dirty
        return True

    @staticmethod
    def pull_mission_request(db: Session, user_id, mission_id) -> bool:
        user = UserService.get(db, user_id)
        if not user:
            return False
        key = normalize_id(mission_id)
        requests = [r for r in (user.mission_requests or []) if normalize_id(r) != key]
        if len(requests) != len(user.mission_requests or []):
            user.mission_requests = requests
        return True
