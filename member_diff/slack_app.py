import asyncio
import logging
import re
from typing import Optional

from slack_bolt import App

from member_diff.batching import RateLimitedBatcher
from member_diff.config import Config
from member_diff.directory import SlackDirectory
from member_diff.errors import MemberDiffError
from member_diff.members import compare_channels
from member_diff.messages import comparison_message, error_message, usage_message


COMMAND = '/compare_members'

# Escaped channel mention as Slack sends it, e.g. <#C0123|general>.
CHANNEL_MENTION = re.compile(r'^<#\w+\|([^>]*)>$')


def parse_channel_names(text: str) -> Optional[tuple[str, str]]:
    names = []
    for token in (text or '').split():
        mention = CHANNEL_MENTION.match(token)
        name = mention.group(1) if mention else token
        if not name.lstrip('#'):
            return None
        names.append(name)

    if len(names) != 2:
        return None
    return names[0], names[1]


def handle_compare_command(text: str, directory: SlackDirectory, batcher: RateLimitedBatcher,
                           page_size: int, command: str = COMMAND) -> dict:
    channel_names = parse_channel_names(text)
    if not channel_names:
        return usage_message(command)

    try:
        result = asyncio.run(compare_channels(directory, *channel_names, batcher=batcher, page_size=page_size))
    except MemberDiffError as e:
        logging.error(f'{command} {text} failed: {e}')
        return error_message(e)

    return comparison_message(result)


def create_app(config: Config, **app_kwargs) -> App:
    app = App(
        token=config.slack_token,
        signing_secret=config.signing_secret,
        process_before_response=True,
        **app_kwargs
    )

    def acknowledge(ack, body):
        if parse_channel_names(body.get('text', '')):
            ack(text='Comparing channel members, this can take a moment...')
        else:
            ack(**usage_message(body.get('command', COMMAND)))

    def run_comparison(body, respond):
        if not parse_channel_names(body.get('text', '')):
            return
        message = handle_compare_command(
            body.get('text', ''),
            SlackDirectory(token=config.slack_token),
            RateLimitedBatcher(config.batch_size, config.batch_delay),
            config.page_size,
            body.get('command', COMMAND),
        )
        respond(response_type='ephemeral', **message)

    app.command(COMMAND)(ack=acknowledge, lazy=[run_comparison])
    return app
