from unittest.mock import AsyncMock

from slack_sdk.errors import SlackApiError

from member_diff.models import Channel, User


def slack_error(error: str) -> SlackApiError:
    return SlackApiError('The request to the Slack API failed.', {'ok': False, 'error': error})


def raw_user(user_id: str, **fields) -> dict:
    user = {
        'id': user_id,
        'name': f'user.{user_id}',
        'real_name': f'User {user_id}',
        'profile': {'email': f'{user_id}@example.com', 'display_name': user_id},
    }
    user.update(fields)
    return user


def user(user_id: str) -> User:
    return User.from_api(raw_user(user_id))


def channel(channel_id: str, name: str, member_count=None) -> Channel:
    return Channel(id=channel_id, name=name, member_count=member_count)


def member_pages(member_ids: list[str], page_size: int) -> dict:
    """Splits member IDs into cursor-linked pages: {cursor: response}."""
    pages = {}
    chunks = [member_ids[i:i + page_size] for i in range(0, len(member_ids), page_size)] or [[]]
    for index, chunk in enumerate(chunks):
        cursor = '' if index == 0 else f'cursor-{index}'
        next_cursor = f'cursor-{index + 1}' if index + 1 < len(chunks) else ''
        pages[cursor] = {'ok': True, 'members': chunk, 'response_metadata': {'next_cursor': next_cursor}}
    return pages


class FakeSlackClient(object):
    """Stands in for AsyncWebClient, serving canned channels, members and users."""

    def __init__(self, channels=(), members=None, users=None, failing_users=None, page_size=1000):
        self.channels = list(channels)
        self.pages = {
            channel_id: member_pages(ids, page_size)
            for channel_id, ids in (members or {}).items()
        }
        self.users = {u['id']: u for u in (users or [])}
        self.failing_users = dict(failing_users or {})

        self.conversations_list = AsyncMock(side_effect=self._conversations_list)
        self.conversations_members = AsyncMock(side_effect=self._conversations_members)
        self.users_info = AsyncMock(side_effect=self._users_info)
        self.auth_test = AsyncMock(return_value={'ok': True, 'user': 'member-bot', 'team': 'Acme'})

    async def _conversations_list(self, types=None, limit=None, cursor=None):
        return {'ok': True, 'channels': self.channels, 'response_metadata': {'next_cursor': ''}}

    async def _conversations_members(self, channel, cursor=None, limit=None):
        return self.pages[channel][cursor or '']

    async def _users_info(self, user):
        if user in self.failing_users:
            raise self.failing_users[user]
        if user not in self.users:
            raise slack_error('user_not_found')
        return {'ok': True, 'user': self.users[user]}
