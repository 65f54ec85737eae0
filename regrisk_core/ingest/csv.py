"""
CSV ingestion into calculation inputs.

Trade files hold one row per trade with camelCase (or snake_case) column
names matching the record fields. Netting set and collateral columns are
read from the first row only. VaR files hold one price observation per
row and become price histories plus one position per asset.
"""

import json
import logging
from pathlib import Path
from typing import IO, Any, Mapping

import pandas as pd

from regrisk_core.config.models import (
    GridScheduleInput,
    PFEInput,
    SACCRInput,
    SIMMInput,
    VaRInput,
    VaRParameters,
)
from regrisk_core.exceptions import CalculationInputError, coerce_model
from regrisk_core.market.history import HistoricalMarketData

logger = logging.getLogger(__name__)

CsvSource = str | Path | IO[str]

VAR_REQUIRED_COLUMNS = ("date", "assetIdentifier", "assetType", "price", "currency")

_COLLATERAL_COLUMNS = ("collateralAmount", "collateral_amount")


def read_rows(source: CsvSource) -> list[dict[str, Any]]:
    """
    Read a CSV file into row dictionaries.

    All cells are read as text with surrounding whitespace removed; empty
    cells become ``None`` so record defaults apply.

    Raises
    ------
    CalculationInputError
        If the file holds no data rows
    """
    frame = pd.read_csv(source, dtype=str, skipinitialspace=True)
    frame.columns = [str(c).strip() for c in frame.columns]
    frame = frame.dropna(how="all")
    if frame.empty:
        raise CalculationInputError("CSV file contains no data rows")
    frame = frame.apply(lambda col: col.str.strip())
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")


def _collateral(row: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    if any(row.get(c) is not None for c in _COLLATERAL_COLUMNS):
        return [row]
    return []


def _trade_envelope(source: CsvSource) -> dict[str, Any]:
    rows = read_rows(source)
    first = rows[0]
    logger.debug("Read %d trade rows from CSV", len(rows))
    return {"trades": rows, "netting_set": first, "collateral": _collateral(first)}


def parse_saccr_csv(source: CsvSource) -> SACCRInput:
    """
    Parse an SA-CCR trade file.

    Required columns: id, assetClass, transactionType, positionType,
    notionalAmount, currency, maturityDate. Asset-class columns
    (referenceCurrency, currencyPair, referenceEntity, issuer,
    commodityType, ...) and option columns are optional. The first row's
    nettingAgreementId, marginType, thresholdAmount, ... and
    collateralAmount, haircut, ... columns seed the netting set and
    collateral.

    Parameters
    ----------
    source : str | Path | IO[str]
        File path or text buffer

    Returns
    -------
    SACCRInput
        Validated calculation input
    """
    return coerce_model(SACCRInput, _trade_envelope(source))


def parse_grid_schedule_csv(source: CsvSource) -> GridScheduleInput:
    """Parse a Grid/Schedule trade file (assetClass, notionalAmount, maturityBucket or maturityDate)."""
    return coerce_model(GridScheduleInput, _trade_envelope(source))


def parse_simm_csv(source: CsvSource) -> SIMMInput:
    """
    Parse an ISDA SIMM trade file.

    The ``riskFactors`` column holds a JSON list of
    ``{"type", "bucket", "label", "value"}`` objects per trade.

    Raises
    ------
    CalculationInputError
        If a risk factor cell is not valid JSON
    """
    envelope = _trade_envelope(source)
    trades = []
    for row in envelope["trades"]:
        row = dict(row)
        raw = row.pop("riskFactors", None) or row.pop("risk_factors", None)
        if raw is not None:
            try:
                row["riskFactors"] = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise CalculationInputError(
                    f"invalid JSON: {exc.msg}",
                    record_id=row.get("id"),
                    field="riskFactors",
                ) from exc
        trades.append(row)
    envelope["trades"] = trades
    return coerce_model(SIMMInput, envelope)


def parse_pfe_csv(source: CsvSource) -> PFEInput:
    """Parse a PFE trade file; the first row also carries timeHorizon, confidenceLevel and calculationMethod."""
    return coerce_model(PFEInput, _trade_envelope(source))


def parse_var_csv(
    source: CsvSource,
    parameters: VaRParameters | Mapping[str, Any] | None = None,
) -> VaRInput:
    """
    Parse a price-history file into a VaR input.

    Each row is one observation: date, assetIdentifier, assetType, price,
    currency and an optional volume. Observations are grouped per
    (assetIdentifier, assetType) into a price history, and each asset
    becomes a position of quantity 1 at its latest price.

    Parameters
    ----------
    source : str | Path | IO[str]
        File path or text buffer
    parameters : VaRParameters | Mapping | None
        Calculation parameters (defaults when None)

    Returns
    -------
    VaRInput
        Positions, parameters and price histories

    Raises
    ------
    CalculationInputError
        If required columns are missing or a value fails validation
    """
    rows = read_rows(source)
    missing = [c for c in VAR_REQUIRED_COLUMNS if c not in rows[0]]
    if missing:
        raise CalculationInputError(
            f"CSV file is missing required columns: {', '.join(missing)}",
            field=missing[0],
        )

    groups: dict[tuple[str, str], list[dict[str, Any]]] = {}
    for row in rows:
        key = (row["assetIdentifier"], row["assetType"])
        groups.setdefault(key, []).append(row)

    history = []
    positions = []
    for i, ((identifier, asset_type), observations) in enumerate(groups.items(), start=1):
        series = coerce_model(
            HistoricalMarketData,
            {
                "assetIdentifier": identifier,
                "assetType": asset_type,
                "currency": observations[0]["currency"],
                "data": observations,
                "dataSource": "csv_upload",
            },
            record_id=identifier,
        )
        latest = max(series.data, key=lambda p: p.date)
        history.append(series)
        positions.append(
            {
                "id": f"pos_{i}",
                "assetIdentifier": identifier,
                "assetType": series.asset_type,
                "quantity": 1,
                "currentPrice": latest.price,
                "currency": series.currency,
            }
        )

    logger.debug("Read %d price rows for %d assets from CSV", len(rows), len(groups))

    return coerce_model(
        VaRInput,
        {
            "positions": positions,
            "parameters": parameters if parameters is not None else {},
            "historical_data": history,
        },
    )
