"""Read-only passthroughs for diary, weight and export data."""

import logging
from dataclasses import dataclass

from energy_balance.adapters.crono_cli import EXPORT_TYPES, NutritionExportClient
from energy_balance.domain.errors import InvalidRequestError

_logger = logging.getLogger(__name__)


@dataclass
class RecordsService:
    """Service returning CLI read output without reshaping it."""

    export_client: NutritionExportClient

    async def diary(
        self, date: str | None = None, range_expr: str | None = None
    ) -> object:
        """Return diary entries for a date or range."""
        _check_window(date, range_expr)
        return await self.export_client.read_records(
            "diary", date=date, range_expr=range_expr
        )

    async def weight(
        self, date: str | None = None, range_expr: str | None = None
    ) -> object:
        """Return weight entries for a date or range."""
        _check_window(date, range_expr)
        return await self.export_client.read_records(
            "weight", date=date, range_expr=range_expr
        )

    async def export(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
        csv: bool = False,
    ) -> object:
        """Return an export as decoded JSON, or as CSV text when requested."""
        if export_type not in EXPORT_TYPES:
            raise InvalidRequestError("Invalid export type")
        _check_window(date, range_expr)
        _logger.info("Export passthrough: type=%s csv=%s", export_type, csv)
        if csv:
            return await self.export_client.export_csv(
                export_type, date=date, range_expr=range_expr
            )
        return await self.export_client.export_json(
            export_type, date=date, range_expr=range_expr
        )

    def crono_version(self) -> str | None:
        return self.export_client.version()


def _check_window(date: str | None, range_expr: str | None) -> None:
    if date and range_expr:
        raise InvalidRequestError("date and range are mutually exclusive")
