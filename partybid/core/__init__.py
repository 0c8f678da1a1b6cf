"""Pooled-bid settlement core"""
from partybid.core.config import PartyConfig, load_party_config
from partybid.core.fees import FeeSplit, compute_fee_split
from partybid.core.bid_controller import BidController, BidOutcome, BidResult
from partybid.core.settlement import SettlementEngine, FinalizeResult

__all__ = [
    "PartyConfig",
    "load_party_config",
    "FeeSplit",
    "compute_fee_split",
    "BidController",
    "BidOutcome",
    "BidResult",
    "SettlementEngine",
    "FinalizeResult",
]
