class ChannelTestingError(Exception):
    """Base class for channel testing errors."""


class ChannelNotFoundError(ChannelTestingError):
    def __init__(self, channel_id: str):
        super().__init__(f"Channel not found: {channel_id}")
        self.channel_id = channel_id
