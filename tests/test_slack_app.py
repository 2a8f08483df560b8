import unittest
from unittest.mock import AsyncMock

from slack_bolt import App

from member_diff.batching import RateLimitedBatcher
from member_diff.config import Config
from member_diff.directory import SlackDirectory
from member_diff.messages import MAX_LISTED_USERS, comparison_message
from member_diff.models import Channel, ComparisonResult
from member_diff.slack_app import create_app, handle_compare_command, parse_channel_names

from tests.support import FakeSlackClient, raw_user, user


class TestParseChannelNames(unittest.TestCase):

    def test_plain_names(self):
        self.assertEqual(parse_channel_names('#general random'), ('#general', 'random'))

    def test_channel_mentions(self):
        self.assertEqual(parse_channel_names('<#C1|general> <#C2|random>'), ('general', 'random'))

    def test_rejects_wrong_arity(self):
        for text in ('', 'general', 'a b c', None):
            self.assertIsNone(parse_channel_names(text))

    def test_rejects_mentions_without_names(self):
        self.assertIsNone(parse_channel_names('<#C1|> random'))
        self.assertIsNone(parse_channel_names('# random'))


class TestHandleCompareCommand(unittest.TestCase):

    def setUp(self):
        self.directory = SlackDirectory(client=FakeSlackClient(
            channels=[{'id': 'C1', 'name': 'general'}, {'id': 'C2', 'name': 'random'}],
            members={'C1': ['U1', 'U2'], 'C2': ['U2']},
            users=[raw_user('U1'), raw_user('U2')],
        ))
        self.batcher = RateLimitedBatcher(sleep=AsyncMock())

    def test_reports_differences(self):
        message = handle_compare_command('#general #random', self.directory, self.batcher, 1000)

        self.assertIn('*1* members only in *#general*', message['text'])
        self.assertIn('<@U1>', message['text'])
        self.assertNotIn('<@U2>', message['text'])

    def test_usage(self):
        message = handle_compare_command('general', self.directory, self.batcher, 1000)

        self.assertIn('Usage: `/compare_members #channel-a #channel-b`', message['text'])

    def test_errors_are_reported(self):
        message = handle_compare_command('general missing', self.directory, self.batcher, 1000)

        self.assertIn("Channel 'missing' not found", message['text'])


class TestComparisonMessage(unittest.TestCase):

    def make_result(self, unique_to_a, unique_to_b, warnings=()):
        return ComparisonResult(
            channel_a=Channel(id='C1', name='general'),
            channel_b=Channel(id='C2', name='random'),
            unique_to_a=unique_to_a,
            unique_to_b=unique_to_b,
            warnings=list(warnings),
        )

    def test_perfect_match(self):
        message = comparison_message(self.make_result([], []))

        self.assertIn('Perfect match!', message['text'])

    def test_long_lists_are_truncated(self):
        many = [user(f'U{n}') for n in range(MAX_LISTED_USERS + 5)]

        message = comparison_message(self.make_result(many, []))

        self.assertIn('...and 5 more', message['text'])
        self.assertNotIn('Only in #random', message['text'])

    def test_mentions_dropped_profiles(self):
        message = comparison_message(self.make_result([user('U1')], [], warnings=['w1', 'w2']))

        self.assertIn('2 profiles could not be looked up', message['text'])


class TestCreateApp(unittest.TestCase):

    def test_builds_bolt_app(self):
        app = create_app(Config(slack_token='xoxb-test', signing_secret='secret'), token_verification_enabled=False)

        self.assertIsInstance(app, App)
