from member_diff.models import ComparisonResult, User


MAX_LISTED_USERS = 25


def usage_message(command: str) -> dict:
    return {'text': f'Usage: `{command} #channel-a #channel-b`'}


def _user_lines(users: list[User]) -> str:
    lines = [f'• {u.real_name} (<@{u.id}>)' for u in users[:MAX_LISTED_USERS]]
    if len(users) > MAX_LISTED_USERS:
        lines.append(f'_...and {len(users) - MAX_LISTED_USERS} more_')
    return '\n'.join(lines)


def comparison_message(result: ComparisonResult) -> dict:
    channel_a = result.channel_a_name
    channel_b = result.channel_b_name

    if result.total_unique_count == 0:
        message = f'Perfect match! *#{channel_a}* and *#{channel_b}* have identical members.'
    else:
        message = f'''*{len(result.unique_to_a)}* members only in *#{channel_a}*, *{len(result.unique_to_b)}* only in *#{channel_b}* (*{result.total_unique_count}* total).'''

        if result.unique_to_a:
            message += f'\n\n*Only in #{channel_a}:*\n{_user_lines(result.unique_to_a)}'
        if result.unique_to_b:
            message += f'\n\n*Only in #{channel_b}:*\n{_user_lines(result.unique_to_b)}'

    if result.warnings:
        message += f'\n\n:warning: {len(result.warnings)} profiles could not be looked up and were left out.'

    return {'text': message}


def error_message(error: Exception) -> dict:
    return {'text': f':x: {error}'}
