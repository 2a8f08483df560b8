import logging

from slack_bolt.adapter.aws_lambda import SlackRequestHandler

from member_diff.config import Config
from member_diff.slack_app import create_app


config = Config.from_env()

logging.basicConfig(level=config.log_level)

app = create_app(config)


def lambda_handler(event, context):
    return SlackRequestHandler(app=app).handle(event, context)
