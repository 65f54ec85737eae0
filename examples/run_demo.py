#!/usr/bin/env python3
"""
Regulatory Risk Engines - Demo Script

This script runs every engine on a small sample portfolio:
1. Define a netting set of IR, FX, credit and equity trades
2. Calculate SA-CCR exposure at default
3. Calculate Grid/Schedule and ISDA SIMM initial margin
4. Calculate PFE with the standardised and Monte Carlo methods
5. Calculate VaR on a two-asset portfolio with simulated prices
6. Export results

Usage:
    python examples/run_demo.py
"""

import json
import logging
from datetime import date, timedelta
from pathlib import Path

import numpy as np

from regrisk_core import (
    PFECalculator,
    SACCRCalculator,
    calculate_grid_schedule_im,
    calculate_simm_im,
    calculate_var,
    create_saccr_table,
)
from regrisk_core.reporting import (
    create_addon_breakdown_table,
    create_im_breakdown_table,
    create_pfe_profile_table,
    create_var_contribution_table,
)

VALUATION_DATE = date(2025, 1, 1)


def price_series(identifier: str, asset_type: str, vol: float, seed: int) -> dict:
    """Simulated daily closes for one year."""
    rng = np.random.default_rng(seed)
    prices = 100.0 * np.cumprod(1.0 + rng.normal(0.0, vol, 253))
    return {
        "assetIdentifier": identifier,
        "assetType": asset_type,
        "data": [
            {"date": (VALUATION_DATE - timedelta(days=253 - i)).isoformat(), "price": float(p)}
            for i, p in enumerate(prices)
        ],
    }


def main() -> None:
    """Run the regulatory risk demo."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Regulatory Risk Engines - Demo")
    print("=" * 60)
    print()

    # =========================================================================
    # 1. Define Portfolio
    # =========================================================================
    print("1. Defining portfolio...")

    trades = [
        {
            "id": "IRS-1",
            "assetClass": "INTEREST_RATE",
            "transactionType": "LINEAR",
            "positionType": "LONG",
            "notionalAmount": 10_000_000,
            "maturityDate": "2030-01-01",
            "currentMarketValue": 150_000,
            "referenceCurrency": "USD",
        },
        {
            "id": "IRS-2",
            "assetClass": "INTEREST_RATE",
            "transactionType": "LINEAR",
            "positionType": "SHORT",
            "notionalAmount": 15_000_000,
            "maturityDate": "2028-01-01",
            "currentMarketValue": -80_000,
            "referenceCurrency": "USD",
        },
        {
            "id": "FXF-1",
            "assetClass": "FOREIGN_EXCHANGE",
            "transactionType": "LINEAR",
            "positionType": "LONG",
            "notionalAmount": 5_000_000,
            "maturityDate": "2026-01-01",
            "currentMarketValue": 40_000,
            "currencyPair": "EURUSD",
        },
        {
            "id": "CDS-1",
            "assetClass": "CREDIT",
            "transactionType": "LINEAR",
            "positionType": "LONG",
            "notionalAmount": 3_000_000,
            "maturityDate": "2029-06-30",
            "referenceEntity": "ACME CORP",
            "creditQuality": "BBB",
        },
        {
            "id": "EQO-1",
            "assetClass": "EQUITY",
            "transactionType": "OPTION",
            "positionType": "LONG",
            "notionalAmount": 2_000_000,
            "maturityDate": "2026-01-01",
            "issuer": "ACME CORP",
            "optionType": "CALL",
            "strikePrice": 105,
            "underlyingPrice": 100,
            "volatility": 0.25,
        },
    ]
    netting_set = {
        "nettingAgreementId": "ISDA-DEMO",
        "marginType": "MARGINED",
        "thresholdAmount": 250_000,
        "minimumTransferAmount": 50_000,
        "variationMargin": 60_000,
        "marginPeriodOfRisk": 10,
    }
    collateral = [{"collateralAmount": 100_000, "haircut": 0.02}]

    total_notional = sum(t["notionalAmount"] for t in trades)
    print(f"   Portfolio: {len(trades)} trades")
    print(f"   Total notional: ${total_notional:,.0f}")
    print()

    # =========================================================================
    # 2. SA-CCR
    # =========================================================================
    print("2. Calculating SA-CCR exposure at default...")

    saccr_result = SACCRCalculator(valuation_date=VALUATION_DATE).calculate(
        {"trades": trades, "nettingSet": netting_set, "collateral": collateral}
    )

    print()
    print(saccr_result.summary())
    print()
    print(create_addon_breakdown_table(saccr_result).to_string(index=False))
    print()

    # =========================================================================
    # 3. Initial Margin
    # =========================================================================
    print("3. Calculating initial margin...")

    grid_result = calculate_grid_schedule_im(
        {
            "trades": [
                {k: t[k] for k in ("id", "assetClass", "notionalAmount", "maturityDate")}
                for t in trades
            ],
            "nettingSet": {"thresholdAmount": 500_000, "minimumTransferAmount": 50_000},
        },
        valuation_date=VALUATION_DATE,
    )
    simm_result = calculate_simm_im(
        {
            "trades": [
                {
                    "id": "IRS-1",
                    "assetClass": "INTEREST_RATE",
                    "notionalAmount": 10_000_000,
                    "riskFactors": [
                        {"type": "interest_rate", "bucket": 1, "label": "USD-5Y", "value": 4_500},
                        {"type": "interest_rate", "bucket": 1, "label": "USD-10Y", "value": 1_200},
                    ],
                    "sensitivityValue": 100,
                },
                {
                    "id": "EQO-1",
                    "assetClass": "EQUITY",
                    "notionalAmount": 2_000_000,
                    "riskFactors": [
                        {"type": "equity", "bucket": 1, "label": "ACME", "value": 1_100_000},
                    ],
                },
            ],
        },
        valuation_date=VALUATION_DATE,
    )

    print()
    print(grid_result.summary())
    print()
    print(simm_result.summary())
    print()
    print(create_im_breakdown_table(simm_result).to_string(index=False))
    print()

    # =========================================================================
    # 4. PFE
    # =========================================================================
    print("4. Calculating PFE...")

    pfe_input = {
        "trades": trades,
        "nettingSet": {**netting_set, "timeHorizon": "1_year", "confidenceLevel": "97.5%"},
    }
    pfe_calc = PFECalculator(n_simulations=5000, seed=42, valuation_date=VALUATION_DATE)
    pfe_standardised = pfe_calc.calculate(pfe_input)
    pfe_monte_carlo = pfe_calc.calculate(
        {
            **pfe_input,
            "nettingSet": {**pfe_input["nettingSet"], "calculationMethod": "monte_carlo_simulation"},
        }
    )

    print()
    print(pfe_standardised.summary())
    print()
    print(pfe_monte_carlo.summary())
    print()

    # =========================================================================
    # 5. VaR
    # =========================================================================
    print("5. Calculating VaR...")

    var_result = calculate_var(
        {
            "positions": [
                {
                    "id": "EQ",
                    "assetType": "EQUITY",
                    "assetIdentifier": "ACME",
                    "quantity": 10_000,
                    "currentPrice": 102.5,
                },
                {
                    "id": "FX",
                    "assetType": "FOREIGN_EXCHANGE",
                    "assetIdentifier": "EURUSD",
                    "quantity": 500_000,
                    "currentPrice": 1.09,
                },
            ],
            "parameters": {
                "timeHorizon": "10_days",
                "confidenceLevel": "99%",
                "calculationMethod": "historical_simulation",
            },
            "historicalData": [
                price_series("ACME", "EQUITY", 0.015, seed=1),
                price_series("EURUSD", "FOREIGN_EXCHANGE", 0.006, seed=2),
            ],
        }
    )

    print()
    print(var_result.summary())
    print()
    print(create_var_contribution_table(var_result).to_string(index=False))
    print()

    # =========================================================================
    # 6. Export Results
    # =========================================================================
    print("6. Exporting results...")

    output_dir = Path(__file__).parent / "outputs"
    output_dir.mkdir(exist_ok=True)

    results = {
        "saccr": saccr_result,
        "grid_schedule": grid_result,
        "simm": simm_result,
        "pfe_standardised": pfe_standardised,
        "pfe_monte_carlo": pfe_monte_carlo,
        "var": var_result,
    }
    for name, result in results.items():
        path = output_dir / f"demo_{name}.json"
        path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        print(f"   Saved: {path}")

    tables = {
        "saccr": create_saccr_table(saccr_result),
        "pfe_profile": create_pfe_profile_table(pfe_monte_carlo),
    }
    for name, df in tables.items():
        path = output_dir / f"demo_{name}.csv"
        df.to_csv(path, index=False)
        print(f"   Saved: {path}")

    print()
    print("=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
