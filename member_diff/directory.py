import asyncio
import logging
from typing import Optional

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from member_diff.config import DEFAULT_PAGE_SIZE
from member_diff.errors import DirectoryUnavailableError
from member_diff.models import Channel, MemberPage, RawUser


logger = logging.getLogger(__name__)

CHANNEL_TYPES = 'public_channel,private_channel'

AUTH_ERRORS = {
    'invalid_auth',
    'not_authed',
    'account_inactive',
    'token_revoked',
    'token_expired',
    'missing_scope',
}

TRANSPORT_ERRORS = (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError)


def api_error_code(error: Exception) -> str:
    if isinstance(error, SlackApiError):
        return error.response.get('error') or str(error)
    return str(error) or type(error).__name__


def _next_cursor(response) -> Optional[str]:
    return (response.get('response_metadata') or {}).get('next_cursor') or None


class SlackDirectory(object):
    """Read-only view of a Slack workspace's channels and users."""

    def __init__(self, token: Optional[str] = None, client: Optional[AsyncWebClient] = None):
        if client is None:
            if not token:
                raise ValueError('A Slack token is required')
            client = AsyncWebClient(token=token)
        self.client = client

    async def list_channels(self, types: str = CHANNEL_TYPES, page_size: int = DEFAULT_PAGE_SIZE) -> list[Channel]:
        channels = []
        seen_cursors = set()
        cursor = None

        while True:
            try:
                response = await self.client.conversations_list(types=types, limit=page_size, cursor=cursor)
            except TRANSPORT_ERRORS as e:
                logger.error(f'Error fetching channels: {api_error_code(e)}')
                raise DirectoryUnavailableError('listing channels', api_error_code(e)) from e

            if not response.get('ok', False):
                raise DirectoryUnavailableError('listing channels', response.get('error', 'unknown_error'))

            channels.extend(Channel.from_api(c) for c in response.get('channels', []))

            cursor = _next_cursor(response)
            if not cursor:
                break
            if cursor in seen_cursors:
                logger.error(f'Channel list cursor {cursor!r} returned twice')
                raise DirectoryUnavailableError('listing channels', f'pagination cursor {cursor!r} returned twice')
            seen_cursors.add(cursor)

        logger.debug(f'Found {len(channels)} visible channels')
        return channels

    async def list_members(self, channel_id: str, cursor: Optional[str] = None,
                           page_size: int = DEFAULT_PAGE_SIZE) -> MemberPage:
        try:
            response = await self.client.conversations_members(channel=channel_id, cursor=cursor, limit=page_size)
        except SlackApiError as e:
            error = api_error_code(e)
            if error in AUTH_ERRORS:
                raise DirectoryUnavailableError('fetching members', error) from e
            return MemberPage(members=[], ok=False, error=error)
        except TRANSPORT_ERRORS as e:
            raise DirectoryUnavailableError('fetching members', api_error_code(e)) from e

        if not response.get('ok', False):
            return MemberPage(members=[], ok=False, error=response.get('error', 'unknown_error'))

        return MemberPage(members=list(response.get('members') or []), next_cursor=_next_cursor(response))

    async def get_user(self, user_id: str) -> Optional[RawUser]:
        response = await self.client.users_info(user=user_id)
        if not response.get('ok', False):
            return None
        return response.get('user') or None

    async def test_credential(self) -> dict:
        response = await self.client.auth_test()
        return {
            'ok': bool(response.get('ok', False)),
            'user': response.get('user'),
            'team': response.get('team'),
        }
