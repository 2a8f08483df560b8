import logging
from typing import Iterable, Optional

from member_diff.batching import RateLimitedBatcher
from member_diff.config import DEFAULT_PAGE_SIZE
from member_diff.directory import SlackDirectory, TRANSPORT_ERRORS, api_error_code
from member_diff.errors import (
    ChannelNotFoundError,
    DirectoryUnavailableError,
    MembershipFetchError,
    ProfileLookupWarning,
)
from member_diff.models import Channel, ComparisonResult, ConnectionStatus, User


logger = logging.getLogger(__name__)


def clean_channel_name(channel_name: str) -> str:
    return channel_name.strip().lstrip('#')


async def find_channel(directory: SlackDirectory, channel_name: str, page_size: int = DEFAULT_PAGE_SIZE) -> Channel:
    clean_name = clean_channel_name(channel_name)

    try:
        channels = await directory.list_channels(page_size=page_size)
    except DirectoryUnavailableError as e:
        raise DirectoryUnavailableError(f"{e.stage} for '{channel_name}'", e.cause) from e

    for channel in channels:
        # Exact, case-sensitive match on the name Slack returns.
        if channel.name == clean_name:
            logger.info(f"Found channel '{clean_name}' with ID: {channel.id}")
            return channel

    logger.error(f"Channel '{clean_name}' not found among {len(channels)} visible channels")
    raise ChannelNotFoundError(channel_name)


async def list_member_ids(directory: SlackDirectory, channel: Channel, page_size: int = DEFAULT_PAGE_SIZE) -> list[str]:
    """Drains the paginated member list of a channel, first-seen order, no duplicates."""
    member_ids = []
    seen_cursors = set()
    cursor = None

    while True:
        try:
            page = await directory.list_members(channel.id, cursor=cursor, page_size=page_size)
        except DirectoryUnavailableError as e:
            raise DirectoryUnavailableError(f"{e.stage} for '#{channel.name}'", e.cause) from e

        if not page.ok:
            logger.error(f'Error fetching members of #{channel.name}: {page.error}')
            raise MembershipFetchError(channel.name, f'Failed to fetch members: {page.error}')

        member_ids.extend(page.members)

        cursor = page.next_cursor
        if not cursor:
            break
        if cursor in seen_cursors:
            raise MembershipFetchError(channel.name, f'Pagination cursor {cursor!r} returned twice')
        seen_cursors.add(cursor)

    unique_ids = list(dict.fromkeys(member_ids))
    if len(unique_ids) != len(member_ids):
        logger.info(f'Dropped {len(member_ids) - len(unique_ids)} duplicate member IDs in #{channel.name}')

    return unique_ids


async def resolve_profiles(directory: SlackDirectory, user_ids: Iterable[str],
                           batcher: Optional[RateLimitedBatcher] = None,
                           warnings: Optional[list] = None) -> list[User]:
    """Looks up the profile of every user ID, leaving out the ones that fail.

    Failed lookups are logged and, when ``warnings`` is given, recorded there
    as ``ProfileLookupWarning``s. This never raises for a single user.
    """
    batcher = batcher or RateLimitedBatcher()
    users = []

    for user_id, result in await batcher.run(user_ids, directory.get_user):
        if isinstance(result, BaseException):
            reason = api_error_code(result)
        elif not result:
            reason = 'no user returned'
        else:
            users.append(User.from_api(result, user_id))
            continue

        warning = ProfileLookupWarning(user_id, reason)
        logger.warning(str(warning))
        if warnings is not None:
            warnings.append(warning)

    return users


async def fetch_membership(directory: SlackDirectory, channel_name: str,
                           batcher: Optional[RateLimitedBatcher] = None,
                           warnings: Optional[list] = None,
                           page_size: int = DEFAULT_PAGE_SIZE) -> tuple[list[User], Channel]:
    channel = await find_channel(directory, channel_name, page_size=page_size)
    member_ids = await list_member_ids(directory, channel, page_size=page_size)
    logger.info(f'#{channel.name} has {len(member_ids)} members')

    users = await resolve_profiles(directory, member_ids, batcher=batcher, warnings=warnings)
    logger.info(f'Resolved {len(users)} of {len(member_ids)} profiles in #{channel.name}')

    # Counts raw membership, not how many profiles resolved.
    channel.member_count = len(member_ids)
    return users, channel


def _unique_by_id(users: list[User]) -> list[User]:
    by_id = {}
    for u in users:
        by_id.setdefault(u.id, u)
    return list(by_id.values())


def compare(users_a: list[User], users_b: list[User], channel_a: Channel, channel_b: Channel,
            warnings: Iterable = ()) -> ComparisonResult:
    users_a = _unique_by_id(users_a)
    users_b = _unique_by_id(users_b)
    ids_a = {u.id for u in users_a}
    ids_b = {u.id for u in users_b}

    unique_to_a = [u for u in users_a if u.id not in ids_b]
    unique_to_b = [u for u in users_b if u.id not in ids_a]

    return ComparisonResult(
        channel_a=channel_a,
        channel_b=channel_b,
        unique_to_a=unique_to_a,
        unique_to_b=unique_to_b,
        common_count=len(ids_a & ids_b),
        warnings=list(warnings),
    )


async def compare_channels(directory: SlackDirectory, channel_a_name: str, channel_b_name: str,
                           batcher: Optional[RateLimitedBatcher] = None,
                           page_size: int = DEFAULT_PAGE_SIZE) -> ComparisonResult:
    warnings = []

    logger.info(f'Fetching members from #{clean_channel_name(channel_a_name)}...')
    users_a, channel_a = await fetch_membership(directory, channel_a_name, batcher, warnings, page_size)

    logger.info(f'Fetching members from #{clean_channel_name(channel_b_name)}...')
    users_b, channel_b = await fetch_membership(directory, channel_b_name, batcher, warnings, page_size)

    return compare(users_a, users_b, channel_a, channel_b, warnings)


async def test_connection(directory: SlackDirectory) -> ConnectionStatus:
    try:
        result = await directory.test_credential()
    except TRANSPORT_ERRORS as e:
        logger.debug(f'Connection test failed: {api_error_code(e)}')
        return ConnectionStatus(ok=False)

    if not result.get('ok'):
        return ConnectionStatus(ok=False)

    return ConnectionStatus(
        ok=True,
        user=result.get('user') or 'Unknown',
        team=result.get('team') or 'Unknown',
    )
