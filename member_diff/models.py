from dataclasses import dataclass, field
from typing import Optional, TypedDict


class RawProfile(TypedDict, total=False):
    real_name: str
    display_name: str
    email: str


class RawUser(TypedDict, total=False):
    id: str
    name: str
    real_name: str
    is_bot: bool
    profile: RawProfile


@dataclass(frozen=True)
class User(object):
    id: str
    name: str
    real_name: str
    email: str
    display_name: str

    @classmethod
    def from_api(cls, user_info: RawUser, user_id: Optional[str] = None) -> 'User':
        profile = user_info.get('profile') or {}
        return cls(
            id=user_info.get('id') or user_id,
            name=user_info.get('name') or 'unknown',
            real_name=user_info.get('real_name') or profile.get('real_name') or 'Unknown User',
            email=profile.get('email') or 'No email',
            display_name=(
                profile.get('display_name')
                or user_info.get('real_name')
                or user_info.get('name')
                or 'Unknown'
            ),
        )

    def __repr__(self):
        return '@' + self.name


@dataclass
class Channel(object):
    id: str
    name: str
    is_private: bool = False
    member_count: Optional[int] = None

    @classmethod
    def from_api(cls, channel_obj: dict) -> 'Channel':
        return cls(
            id=channel_obj['id'],
            name=channel_obj.get('name', ''),
            is_private=bool(channel_obj.get('is_private', False)),
        )

    def __repr__(self):
        return '#' + self.name


@dataclass
class MemberPage(object):
    members: list[str]
    next_cursor: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None


@dataclass
class ComparisonResult(object):
    channel_a: Channel
    channel_b: Channel
    unique_to_a: list[User]
    unique_to_b: list[User]
    common_count: int = 0
    warnings: list = field(default_factory=list)

    @property
    def channel_a_name(self) -> str:
        return self.channel_a.name

    @property
    def channel_b_name(self) -> str:
        return self.channel_b.name

    @property
    def total_unique_count(self) -> int:
        return len(self.unique_to_a) + len(self.unique_to_b)


@dataclass
class ConnectionStatus(object):
    ok: bool
    user: Optional[str] = None
    team: Optional[str] = None
