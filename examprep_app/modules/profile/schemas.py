# File: examprep_app/modules/profile/schemas.py
import datetime
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from examprep_app.modules.shared.utils.time_utils import parse_datetime, to_iso


@dataclass
class UserProfile:
    id: str
    name: str
    created_at: datetime.datetime
    last_active_at: datetime.datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'createdAt': to_iso(self.created_at),
            'lastActiveAt': to_iso(self.last_active_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            created_at=parse_datetime(data['createdAt']),
            last_active_at=parse_datetime(data['lastActiveAt']),
        )


class ProfilePayload(BaseModel):
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
