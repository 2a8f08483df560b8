class MemberDiffError(Exception):
    pass


class ChannelNotFoundError(MemberDiffError):

    def __init__(self, channel_name: str):
        self.channel_name = channel_name
        super().__init__(
            f"Channel '{channel_name}' not found. "
            "Make sure the bot is added to the channel if it's private."
        )


class DirectoryUnavailableError(MemberDiffError):

    def __init__(self, stage: str, cause):
        self.stage = stage
        self.cause = cause
        super().__init__(f'Slack unavailable while {stage}: {cause}')


class MembershipFetchError(MemberDiffError):

    def __init__(self, channel_name: str, reason: str):
        self.channel_name = channel_name
        self.reason = reason
        super().__init__(f"Failed to get members for channel '{channel_name}': {reason}")


class ProfileLookupWarning(UserWarning):
    """A member whose profile could not be resolved and was left out."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f'Failed to get info for user {user_id}: {reason}')
