import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from member_diff import __version__
from member_diff.batching import RateLimitedBatcher
from member_diff.config import Config
from member_diff.directory import SlackDirectory
from member_diff.errors import MemberDiffError
from member_diff.members import compare_channels, test_connection
from member_diff.models import ComparisonResult, User


PROG = 'slack-member-comparer'
KNOWN_COMMANDS = ('compare', 'help')

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description='Compare members between Slack channels')
    parser.add_argument('-V', '--version', action='version', version=__version__)
    subparsers = parser.add_subparsers(dest='command')

    compare = subparsers.add_parser('compare', help='Compare members between two Slack channels')
    compare.add_argument('channel_a', help='First channel name (with or without # prefix)')
    compare.add_argument('channel_b', help='Second channel name (with or without # prefix)')
    compare.add_argument('-v', '--verbose', action='store_true', help='Show detailed output')

    subparsers.add_parser('help', help='Show this help message')
    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    # `slack-member-comparer general random` means `compare general random`.
    if argv and not argv[0].startswith('-') and argv[0] not in KNOWN_COMMANDS:
        return ['compare'] + argv
    return argv


def _users_table(title: str, users: list[User]) -> Table:
    table = Table(title=title, title_justify='left')
    table.add_column('Name', style='cyan')
    table.add_column('Email', style='white')
    table.add_column('Username', style='bright_black')
    for user in users:
        table.add_row(escape(user.real_name), escape(user.email), escape(f'@{user.name}'))
    return table


def display_comparison_results(result: ComparisonResult, verbose: bool = False) -> None:
    channel_a = escape(result.channel_a_name)
    channel_b = escape(result.channel_b_name)

    console.print('[bold]Comparison Results[/bold]\n')

    if result.total_unique_count == 0:
        console.print('[green]Perfect match! Both channels have identical members.[/green]')
    else:
        console.print('Summary:')
        console.print(f'   • Members only in #{channel_a}: {len(result.unique_to_a)}')
        console.print(f'   • Members only in #{channel_b}: {len(result.unique_to_b)}')
        console.print(f'   • Total unique members: {result.total_unique_count}\n')

        if result.unique_to_a:
            console.print(f'Members only in #{channel_a}:')
            console.print(_users_table(f'Only in #{channel_a}', result.unique_to_a))
            console.print()

        if result.unique_to_b:
            console.print(f'Members only in #{channel_b}:')
            console.print(_users_table(f'Only in #{channel_b}', result.unique_to_b))

    if verbose:
        console.print('\nAdditional Details:')
        for channel, unique in ((result.channel_a, result.unique_to_a), (result.channel_b, result.unique_to_b)):
            console.print(
                f'   • Total members processed from #{escape(channel.name)}: '
                f'{len(unique) + result.common_count} of {channel.member_count}'
            )
        for warning in result.warnings:
            console.print(f'   • [yellow]{escape(str(warning))}[/yellow]')


async def execute_compare(config: Config, channel_a: str, channel_b: str, verbose: bool = False) -> int:
    directory = SlackDirectory(token=config.slack_token)

    if verbose:
        console.print('Testing Slack connection...')
        status = await test_connection(directory)
        if not status.ok:
            err_console.print('[red]Failed to connect to Slack. Please check your token.[/red]')
            return 1
        console.print(f'Connected to Slack as {escape(status.user)} on {escape(status.team)}\n')

    console.print(f'Comparing members between #{escape(channel_a.lstrip("#"))} and #{escape(channel_b.lstrip("#"))}...\n')

    batcher = RateLimitedBatcher(config.batch_size, config.batch_delay)
    try:
        result = await compare_channels(directory, channel_a, channel_b, batcher=batcher, page_size=config.page_size)
    except MemberDiffError as e:
        err_console.print(f'[red]Error:[/red] {escape(str(e))}')
        return 1

    display_comparison_results(result, verbose)
    return 0


def main(argv: Optional[list[str]] = None, config: Optional[Config] = None) -> int:
    argv = normalize_argv(sys.argv[1:] if argv is None else list(argv))
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != 'compare':
        console.print('[bold]Slack Member Comparer[/bold]\n')
        parser.print_help()
        return 0

    try:
        config = config or Config.from_env()
    except ValueError as e:
        err_console.print(f'[red]Error:[/red] {escape(str(e))}')
        return 1

    logging.basicConfig(level=logging.DEBUG if args.verbose else config.log_level)

    if not config.slack_token:
        err_console.print('[red]SLACK_TOKEN environment variable is required[/red]')
        err_console.print('   Please set your Slack Bot User OAuth Token in .env file')
        return 1

    return asyncio.run(execute_compare(config, args.channel_a, args.channel_b, args.verbose))


if __name__ == '__main__':
    sys.exit(main())
