from enum import Enum


class ChannelStatus(Enum):
    ACTIVE = "active"
    ERROR = "error"
    DISABLED = "disabled"
