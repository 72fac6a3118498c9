"""Explorer raid protocol and samples."""

from .protocol import ExplorerRaid
from .samples import FaultyBot, LumberjackBot, ScoutBot, SleepyBot, StopBot

__all__ = ["ExplorerRaid", "StopBot", "LumberjackBot", "ScoutBot", "FaultyBot", "SleepyBot"]
