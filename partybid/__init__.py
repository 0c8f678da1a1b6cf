"""
PartyBid

Pooled bidding on reserve auctions:
- Contribution ledger with redeemable shares
- Uniform adapters over external auction houses
- Minimal-bid controller
- One-shot settlement with basis-point fee splits
"""
