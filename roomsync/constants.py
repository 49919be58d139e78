from typing import Any, Dict

# Screen inserted together with every new room.
DEFAULT_SCREEN: Dict[str, Any] = {
    "name": "Pantalla 1",
    "device": {"name": "iPhone 14", "width": 375, "height": 667},
    "components": [],
}

# Server -> client events
EVENT_INIT = "init"
EVENT_UPDATE_SCREENS = "updateScreens"
EVENT_CONNECT_ERROR = "connect_error"
EVENT_ERROR = "error"

# Client -> server events
EVENT_JOIN = "join"
EVENT_ADD_COMPONENT = "addComponent"
EVENT_MOVE_COMPONENT = "moveComponent"
EVENT_DELETE_COMPONENT = "deleteComponent"
EVENT_ADD_SCREEN = "addScreen"
EVENT_DELETE_SCREEN = "deleteScreen"
EVENT_RENAME_SCREEN = "renameScreen"
EVENT_CHANGE_DEVICE = "changeDevice"

# Websocket close codes used when a handshake is refused.
CLOSE_ROOM_NAME_REQUIRED = 4000
CLOSE_PASSWORD_REQUIRED = 4001
CLOSE_INVALID_PASSWORD = 4003
CLOSE_ROOM_NOT_FOUND = 4004
CLOSE_INTERNAL_ERROR = 1011

__all__ = [
    "DEFAULT_SCREEN",
    "EVENT_INIT",
    "EVENT_UPDATE_SCREENS",
    "EVENT_CONNECT_ERROR",
    "EVENT_ERROR",
    "EVENT_JOIN",
    "EVENT_ADD_COMPONENT",
    "EVENT_MOVE_COMPONENT",
    "EVENT_DELETE_COMPONENT",
    "EVENT_ADD_SCREEN",
    "EVENT_DELETE_SCREEN",
    "EVENT_RENAME_SCREEN",
    "EVENT_CHANGE_DEVICE",
    "CLOSE_ROOM_NAME_REQUIRED",
    "CLOSE_PASSWORD_REQUIRED",
    "CLOSE_INVALID_PASSWORD",
    "CLOSE_ROOM_NOT_FOUND",
    "CLOSE_INTERNAL_ERROR",
]
