from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, Union, List
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from services.mission_service import MissionService
from streak import get_active_user

router = APIRouter(prefix="/api/v1/missions", tags=["Missions"])

Identifier = Union[int, str]


class MissionCreate(BaseModel):
    title: Optional[str] = None
    frequency: Optional[str] = "daily"
    type: Optional[str] = "habit"
    difficulty: Optional[str] = "easy"
    target: Optional[Union[float, str]] = None
    specific_days: Optional[List[int]] = None
    unit: Optional[str] = ""
    is_coop: bool = False
    friend_id: Optional[Identifier] = None


class MissionEdit(BaseModel):
    title: Optional[str] = None
    target: Optional[Union[float, str]] = None
    frequency: Optional[str] = None
    difficulty: Optional[str] = None
    unit: Optional[str] = None
    specific_days: Optional[List[int]] = None


class ProgressUpdate(BaseModel):
    amount: Optional[Union[float, str]] = None


class InviteResponse(BaseModel):
    mission_id: Optional[Identifier] = None
    action: str


@router.get("")
async def list_missions(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    missions = MissionService.list_for_user(db, user.id)
    return [m.to_dict() for m in missions]


@router.post("", status_code=201)
async def create_mission(body: MissionCreate, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    mission = MissionService.create(db, user.id, body.model_dump())
    return mission.to_dict()


@router.get("/requests")
async def list_mission_requests(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return [m.to_dict() for m in MissionService.pending_requests(db, user.id)]


@router.post("/respond")
async def respond_mission_invite(body: InviteResponse, user: User = Depends(get_active_user),
                                 db: Session = Depends(get_db)):
    return MissionService.respond_invite(db, user.id, body.mission_id, body.action)


# Declared before "/{mission_id}" so "nuke" is not read as an id
@router.delete("/nuke")
async def nuke_my_missions(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    deleted = MissionService.purge(db, user.id)
    return {"message": "Purged", "deleted": deleted}


@router.put("/{mission_id}/progress")
async def update_mission_progress(mission_id: int, body: ProgressUpdate, user: User = Depends(get_active_user),
                                  db: Session = Depends(get_db)):
    return MissionService.update_progress(db, user.id, mission_id, body.amount)


@router.put("/{mission_id}")
async def edit_mission(mission_id: int, body: MissionEdit, user: User = Depends(get_active_user),
                       db: Session = Depends(get_db)):
    mission = MissionService.edit(db, user.id, mission_id, body.model_dump(exclude_unset=True))
    return {"message": "Mission updated", "mission": mission.to_dict()}


@router.delete("/{mission_id}")
async def delete_mission(mission_id: int, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return MissionService.delete(db, user.id, mission_id)
