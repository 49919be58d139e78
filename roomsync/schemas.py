"""Pydantic data schemas used across the backend service.

Wire payloads use camelCase keys (``screenId``, ``xRatio``, ``roomName``);
the models expose snake_case attributes and accept either spelling.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ComponentId = Union[int, str]
# Bounded to the database integer range so oversized ids fail validation.
ScreenId = Annotated[int, Field(ge=1, le=2**31 - 1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# Persisted state
# -----------------------------

class Device(CamelModel):
    """Target device descriptor of a screen (replaced as a whole)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class Component(CamelModel):
    """A positioned UI element. Extra keys (type, props, ...) are kept as-is."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: ComponentId
    x_ratio: float = Field(ge=0.0, le=1.0)
    y_ratio: float = Field(ge=0.0, le=1.0)


class ScreenDraft(CamelModel):
    """Payload of ``addScreen``."""

    name: str = Field(min_length=1)
    device: Device
    components: List[Component] = Field(default_factory=list)


class ScreenState(BaseModel):
    """One screen as stored and as sent to clients."""

    id: int
    name: str
    device: Dict[str, Any]
    components: List[Dict[str, Any]]


class RoomSummary(BaseModel):
    id: int
    name: str


# -----------------------------
# Realtime client events
# -----------------------------

class AddComponentEvent(CamelModel):
    screen_id: ScreenId
    component: Component


class MoveComponentEvent(CamelModel):
    screen_id: ScreenId
    component_id: ComponentId
    x_ratio: float = Field(ge=0.0, le=1.0)
    y_ratio: float = Field(ge=0.0, le=1.0)


class DeleteComponentEvent(CamelModel):
    screen_id: ScreenId
    component_id: ComponentId


class DeleteScreenEvent(CamelModel):
    screen_id: ScreenId


class RenameScreenEvent(CamelModel):
    screen_id: ScreenId
    new_name: str = Field(min_length=1)


class ChangeDeviceEvent(CamelModel):
    screen_id: ScreenId
    device: Device


# -----------------------------
# REST request / response models
# -----------------------------

class CreateRoomRequest(CamelModel):
    # Optional so a missing name is answered with 400 rather than 422.
    name: Optional[str] = None
    password: Optional[str] = None


class CreateRoomResponse(CamelModel):
    room_name: str


class JoinRoomRequest(CamelModel):
    room_name: Optional[str] = None
    password: Optional[str] = None


class JoinRoomResponse(CamelModel):
    success: bool = True
    room_name: str


class HealthResponse(CamelModel):
    status: str = "ok"
    active_rooms: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "ComponentId",
    "ScreenId",
    "Device",
    "Component",
    "ScreenDraft",
    "ScreenState",
    "RoomSummary",
    "AddComponentEvent",
    "MoveComponentEvent",
    "DeleteComponentEvent",
    "DeleteScreenEvent",
    "RenameScreenEvent",
    "ChangeDeviceEvent",
    "CreateRoomRequest",
    "CreateRoomResponse",
    "JoinRoomRequest",
    "JoinRoomResponse",
    "HealthResponse",
]
