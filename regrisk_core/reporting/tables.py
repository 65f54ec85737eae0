"""
Table generation utilities for risk reporting.

Creates formatted pandas DataFrames for display and export.
"""

import pandas as pd

from regrisk_core.exposure.pfe import PFEResult
from regrisk_core.margin._common import InitialMarginResult
from regrisk_core.margin.simm import SIMMResult
from regrisk_core.reg.saccr import SACCRResult
from regrisk_core.var.calculator import VaRResult


def create_saccr_table(
    saccr_result: SACCRResult,
) -> pd.DataFrame:
    """
    Create SA-CCR summary table.

    Parameters
    ----------
    saccr_result : SACCRResult
        SA-CCR calculation result

    Returns
    -------
    pd.DataFrame
        One row per EAD component
    """
    pfe = saccr_result.potential_future_exposure
    data = [
        {"Component": "Replacement Cost (RC)", "Value": saccr_result.replacement_cost.value},
        {"Component": "Aggregate Add-On", "Value": pfe.aggregate_addon},
        {"Component": "Multiplier", "Value": pfe.multiplier},
        {"Component": "PFE", "Value": pfe.value},
        {"Component": f"EAD (alpha={saccr_result.alpha})", "Value": saccr_result.ead},
    ]

    return pd.DataFrame(data)


def create_addon_breakdown_table(
    saccr_result: SACCRResult,
) -> pd.DataFrame:
    """
    Create per-trade SA-CCR add-on table.

    Parameters
    ----------
    saccr_result : SACCRResult
        SA-CCR calculation result

    Returns
    -------
    pd.DataFrame
        One row per trade plus a TOTAL row
    """
    hedging_sets = saccr_result.potential_future_exposure.add_on.hedging_sets
    data = []

    for ta in saccr_result.trade_addons:
        data.append(
            {
                "Trade": ta.trade_id,
                "Asset Class": ta.asset_class.value,
                "Hedging Set": ta.hedging_set,
                "Notional": ta.notional,
                "Maturity (Y)": ta.maturity,
                "MF": ta.maturity_factor,
                "Delta": ta.supervisory_delta,
                "Effective Notional": ta.effective_notional,
                "SF": ta.supervisory_factor,
                "Hedging Set Add-On": hedging_sets[f"{ta.asset_class.value}/{ta.hedging_set}"],
            }
        )

    # Summary row
    data.append(
        {
            "Trade": "TOTAL",
            "Asset Class": "-",
            "Hedging Set": "-",
            "Notional": sum(ta.notional for ta in saccr_result.trade_addons),
            "Maturity (Y)": None,
            "MF": None,
            "Delta": None,
            "Effective Notional": None,
            "SF": None,
            "Hedging Set Add-On": saccr_result.potential_future_exposure.aggregate_addon,
        }
    )

    return pd.DataFrame(data)


def create_im_breakdown_table(
    im_result: InitialMarginResult,
) -> pd.DataFrame:
    """
    Create initial margin breakdown table.

    Works for both Grid/Schedule and SIMM results.

    Parameters
    ----------
    im_result : InitialMarginResult
        Grid/Schedule or SIMM result

    Returns
    -------
    pd.DataFrame
        Margin per risk class, followed by totals
    """
    data = [
        {"Risk Class": rf.value, "Margin": margin}
        for rf, margin in im_result.components.items()
    ]

    if isinstance(im_result, SIMMResult):
        data.append(
            {"Risk Class": "Diversification Benefit", "Margin": -im_result.diversification_benefit}
        )

    data += [
        {"Risk Class": "Initial Margin", "Margin": im_result.initial_margin},
        {"Risk Class": "Collateral Value", "Margin": im_result.collateral_value},
        {"Risk Class": "Net Initial Margin", "Margin": im_result.net_initial_margin},
    ]

    return pd.DataFrame(data)


def create_pfe_profile_table(
    pfe_result: PFEResult,
) -> pd.DataFrame:
    """
    Create PFE exposure profile table.

    Parameters
    ----------
    pfe_result : PFEResult
        PFE calculation result

    Returns
    -------
    pd.DataFrame
        Columns Day, Date, Exposure; one row per profile point
    """
    return pd.DataFrame(
        [
            {"Day": p.day, "Date": p.date, "Exposure": p.exposure}
            for p in pfe_result.exposure_profile
        ],
        columns=["Day", "Date", "Exposure"],
    )


def create_var_contribution_table(
    var_result: VaRResult,
) -> pd.DataFrame:
    """
    Create VaR contribution table.

    Parameters
    ----------
    var_result : VaRResult
        VaR calculation result

    Returns
    -------
    pd.DataFrame
        Standalone VaR and % contribution per position, sorted by VaR
    """
    df = pd.DataFrame(
        [
            {
                "Asset": c.asset_identifier,
                "Position": c.position_id,
                "VaR": c.value_at_risk,
                "Contribution (%)": c.contribution,
            }
            for c in var_result.contributions
        ],
        columns=["Asset", "Position", "VaR", "Contribution (%)"],
    )

    return df.sort_values("VaR", ascending=False).reset_index(drop=True)


def create_stress_scenario_table(
    var_result: VaRResult,
) -> pd.DataFrame:
    """
    Create stress scenario table.

    Parameters
    ----------
    var_result : VaRResult
        VaR calculation result

    Returns
    -------
    pd.DataFrame
        Loss and loss as % of portfolio value per scenario
    """
    value = abs(var_result.portfolio_value)
    return pd.DataFrame(
        [
            {"Scenario": name, "Loss": loss, "Loss (%)": loss / value * 100.0}
            for name, loss in var_result.stress_scenarios.items()
        ],
        columns=["Scenario", "Loss", "Loss (%)"],
    )
