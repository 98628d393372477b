"""Exception types shared by the scan, settlement and backtest runs."""


class TrueLineError(Exception):
    """Base class for engine errors."""


class UpstreamUnavailable(TrueLineError):
    """A games, odds or injury fetch failed or came back empty."""


class MissingTeamStats(TrueLineError):
    """A team has no aggregated stats, so its matchup cannot be modelled."""

    def __init__(self, team: str):
        super().__init__(f"No stats available for {team}")
        self.team = team


class MalformedLine(TrueLineError):
    """A market outcome did not have the expected shape."""


class PersistenceFailure(TrueLineError):
    """The pick store could not complete a read or write."""


class InvalidTransition(TrueLineError):
    """A pick that is no longer PENDING was asked to change."""
