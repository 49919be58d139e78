from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ..auth_utils import hash_password_async
from ..errors import AlreadyExists, AuthFailure, RoomSyncError, StorageError
from ..schemas import (
    CreateRoomRequest,
    CreateRoomResponse,
    HealthResponse,
    JoinRoomRequest,
    JoinRoomResponse,
    RoomSummary,
)
from ..service import RoomSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["rooms"])


def get_service(request: Request) -> RoomSyncService:
    return request.app.state.service


@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(service: RoomSyncService = Depends(get_service)):
    try:
        return await service.store.list_rooms()
    except StorageError:
        logger.exception("Error fetching rooms")
        raise HTTPException(status_code=500, detail="Failed to fetch rooms")


@router.post("/rooms", response_model=CreateRoomResponse)
async def create_room(
    req: CreateRoomRequest = Body(default=CreateRoomRequest()),
    service: RoomSyncService = Depends(get_service),
):
    if not req.name:
        raise HTTPException(status_code=400, detail="Room name is required")
    try:
        password_hash = await hash_password_async(req.password) if req.password else None
        room = await service.store.create_room(req.name, password_hash)
    except AlreadyExists:
        raise HTTPException(status_code=400, detail="Room name already exists")
    except StorageError:
        logger.exception("Error creating room %s", req.name)
        raise HTTPException(status_code=500, detail="Failed to create room")
    logger.info("Created room %s (password: %s)", room.name, "yes" if password_hash else "no")
    return CreateRoomResponse(room_name=room.name)


@router.post("/rooms/join", response_model=JoinRoomResponse)
async def join_room(
    req: JoinRoomRequest = Body(default=JoinRoomRequest()),
    service: RoomSyncService = Depends(get_service),
):
    try:
        room_name = await service.authenticator.authenticate(req.room_name, req.password)
    except AuthFailure as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    except RoomSyncError as exc:
        if exc.status_code == 400:
            raise HTTPException(status_code=400, detail=exc.message)
        raise HTTPException(status_code=500, detail="Failed to join room")
    return JoinRoomResponse(success=True, room_name=room_name)


@router.get("/health", response_model=HealthResponse)
async def health(service: RoomSyncService = Depends(get_service)):
    return HealthResponse(active_rooms=service.hub.active_rooms())
