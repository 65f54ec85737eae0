"""
Netting set margin terms.

Margined-only terms (threshold, MTA, independent collateral, variation
margin) only apply when the set is margined; the ``effective_*``
properties read as zero for unmargined sets.
"""

from pydantic import Field

from regrisk_core.instruments.base import IdField, MarginType, Record


class NettingSet(Record):
    """
    Margining context for a group of trades.

    Attributes
    ----------
    netting_agreement_id : str
        Agreement identifier
    margin_type : MarginType
        Margined or unmargined
    threshold_amount : float
        Threshold (TH)
    minimum_transfer_amount : float
        Minimum transfer amount (MTA)
    independent_collateral_amount : float
        Net independent collateral amount (NICA)
    variation_margin : float
        Variation margin held (VM)
    margin_period_of_risk : int
        MPOR in business days

    Example
    -------
    >>> ns = NettingSet(netting_agreement_id="NS-1", margin_type="MARGINED",
    ...                 threshold_amount=1e6, minimum_transfer_amount=1e5)
    >>> ns.effective_threshold
    1000000.0
    """

    netting_agreement_id: IdField = "DEFAULT"
    margin_type: MarginType = MarginType.UNMARGINED
    threshold_amount: float = Field(default=0.0, ge=0)
    minimum_transfer_amount: float = Field(default=0.0, ge=0)
    independent_collateral_amount: float = 0.0
    variation_margin: float = 0.0
    margin_period_of_risk: int = Field(default=10, gt=0)

    @property
    def is_margined(self) -> bool:
        return self.margin_type is MarginType.MARGINED

    @property
    def effective_threshold(self) -> float:
        return self.threshold_amount if self.is_margined else 0.0

    @property
    def effective_mta(self) -> float:
        return self.minimum_transfer_amount if self.is_margined else 0.0

    @property
    def effective_nica(self) -> float:
        return self.independent_collateral_amount if self.is_margined else 0.0

    @property
    def effective_variation_margin(self) -> float:
        return self.variation_margin if self.is_margined else 0.0


class IMNettingSet(Record):
    """
    Netting set terms used by the initial margin engines.

    The IM threshold and MTA apply to the computed margin regardless of
    whether variation margin is exchanged.
    """

    netting_agreement_id: IdField = "DEFAULT"
    margin_type: MarginType = MarginType.MARGINED
    threshold_amount: float = Field(default=0.0, ge=0)
    minimum_transfer_amount: float = Field(default=0.0, ge=0)
