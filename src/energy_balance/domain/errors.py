"""Domain errors for energy balance computations."""

from collections.abc import Mapping


class EnergyBalanceError(Exception):
    """Base error for the energy balance package."""


class UnreconciledDaysError(EnergyBalanceError):
    """Raised when a range contains days no source could reconcile."""

    def __init__(
        self, dates: list[str | None], diagnostics: Mapping[str, object] | None = None
    ) -> None:
        self.dates = list(dates)
        self.diagnostics: dict[str, object] = dict(diagnostics or {})
        joined = ", ".join(str(day) for day in self.dates)
        super().__init__(f"Unable to reconcile burned calories for: {joined}")

    def with_diagnostics(self, **extra: object) -> "UnreconciledDaysError":
        """Return a copy carrying additional diagnostic context."""
        return UnreconciledDaysError(self.dates, {**self.diagnostics, **extra})


class UpstreamError(EnergyBalanceError):
    """Raised when an external data source fails."""


class CronoCommandError(UpstreamError):
    """Raised when the export command fails, times out or returns bad output."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details: dict[str, object] = dict(details or {})


class NoExportDataError(EnergyBalanceError):
    """Raised when the export returns no rows for a request."""


class InvalidRequestError(EnergyBalanceError, ValueError):
    """Raised when request arguments cannot be turned into a CLI call."""
