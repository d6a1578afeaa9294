from .entity import Room, RoomSummary, RoomSnapshot
from .registry import RoomRegistry, CreateStatus

__all__ = ["Room", "RoomSummary", "RoomSnapshot", "RoomRegistry", "CreateStatus"]
