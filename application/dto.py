"""
应用层数据传输对象（DTO）- 房间的公开投影
"""
from typing import List

from pydantic import BaseModel, Field

from domain.room.entity import RoomSnapshot, RoomSummary


class RoomSummaryDTO(BaseModel):
    """房间列表项"""
    name: str
    members: List[str] = Field(default_factory=list, description="成员标识（无序）")

    @classmethod
    def from_domain(cls, summary: RoomSummary) -> "RoomSummaryDTO":
        return cls(name=summary.name, members=sorted(summary.members))


class RoomDetailDTO(BaseModel):
    """房间详情"""
    name: str
    members: List[str] = Field(default_factory=list, description="成员标识（无序）")
    comments: List[str] = Field(default_factory=list, description="按到达顺序排列的评论")

    @classmethod
    def from_domain(cls, snapshot: RoomSnapshot) -> "RoomDetailDTO":
        return cls(
            name=snapshot.name,
            members=sorted(snapshot.members),
            comments=list(snapshot.comments),
        )
