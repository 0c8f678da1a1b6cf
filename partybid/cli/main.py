"""
PartyBid CLI - Command Line Interface for pooled auction bidding

Main entry point for all CLI commands.
"""

import click

from partybid.utils.logger import setup_logging, get_logger
from partybid.utils.units import eth, wei_to_eth


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug):
    """PartyBid - pool funds, bid as one, settle fairly"""
    import logging

    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level)

    ctx.ensure_object(dict)


# =============================================================================
# Demo Command
# =============================================================================


def _build_house(market, nft, balances, clock, seller, reserve_price):
    """Open an auction on a simulated house. Returns (house, auction_id, asset_id)."""
    from partybid.core.market import (
        MockFoundationMarket,
        MockZoraAuctionHouse,
        MockNounsAuctionHouse,
    )
    from partybid.core.config import FORTY_EIGHT_HOURS_IN_SECONDS

    if market in ("nouns", "koans"):
        house = MockNounsAuctionHouse(nft, balances, clock, reserve_price=reserve_price)
        noun_id = house.auction()["noun_id"]
        return house, noun_id, noun_id

    house_cls = MockFoundationMarket if market == "foundation" else MockZoraAuctionHouse
    house = house_cls(nft, balances, clock)
    token_id = 95
    nft.mint(seller, token_id)
    auction_id = house.create_reserve_auction(seller, token_id, reserve_price, FORTY_EIGHT_HOURS_IN_SECONDS // 2)
    return house, auction_id, token_id


@cli.command("demo")
@click.option(
    "--scenario",
    type=click.Choice(["won", "lost", "paused"]),
    default="won",
    help="Demo scenario to run",
)
@click.option(
    "--market",
    type=click.Choice(["nouns", "koans", "zora", "foundation"]),
    default="nouns",
    help="Auction house to bid on",
)
def demo(scenario, market):
    """Run a simulated party from contribution to redemption"""
    from partybid.crypto import random_address
    from partybid.core import PartyConfig, SettlementEngine
    from partybid.core.config import FORTY_EIGHT_HOURS_IN_SECONDS
    from partybid.core.market import MockNFT, SimulatedClock, create_adapter
    from partybid.core.state import EthLedger
    from partybid.errors import PartyBidError

    click.echo("=" * 60)
    click.echo(f"  PARTYBID DEMO - {scenario.upper()} on {market}")
    click.echo("=" * 60)
    click.echo()

    clock = SimulatedClock()
    balances = EthLedger()
    nft = MockNFT()
    seller, alice, bob, rival = (random_address() for _ in range(4))
    multisig = random_address()
    party_address = random_address()

    house, auction_id, asset_id = _build_house(market, nft, balances, clock, seller, eth(1))
    config = PartyConfig(
        party_address=party_address,
        fee_recipient=multisig,
        market=market,
        auction_id=auction_id,
        asset_id=asset_id,
        auction_reserve_price=eth(1),
    )
    adapter = create_adapter(market, house=house, nft=nft, bidder=party_address)
    party = SettlementEngine(config, adapter, balances, clock=clock)
    click.echo(f"📦 Party {party_address[:12]}... targeting auction {auction_id}")

    party.contribute(alice, eth(6))
    party.contribute(bob, eth(4))
    click.echo("  ✓ Alice contributed 6 ETH, Bob contributed 4 ETH")
    click.echo()

    if scenario == "paused":
        house.pause()
        click.echo("⏸️  Auction house paused")

    try:
        result = party.bid(alice)
        click.echo(f"🔨 Party bid {wei_to_eth(result.amount)} ETH")
    except PartyBidError as err:
        click.echo(f"❌ Bid refused: {type(err).__name__}: {err}")

    if scenario == "lost" and party.highest_bid():
        balances.credit(rival, eth(100))
        if market == "foundation":
            house.place_bid(auction_id, eth(20), sender=rival)
        else:
            house.create_bid(auction_id, eth(20), sender=rival)
        click.echo("🥊 A rival outbid the party with 20 ETH")

    clock.advance(FORTY_EIGHT_HOURS_IN_SECONDS)
    click.echo("⏩ 48 hours later...")
    click.echo()

    try:
        outcome = party.finalize()
    except PartyBidError as err:
        click.echo(f"❌ Finalize failed: {type(err).__name__}: {err}")
        return

    click.echo(f"⚖️  Party {outcome.status.name}")
    click.echo(f"  ✓ Total spent: {wei_to_eth(outcome.total_spent)} ETH")
    click.echo(f"  ✓ Fee recipient received: {wei_to_eth(balances.balance_of(multisig))} ETH")
    click.echo(f"  ✓ Redeemable: {wei_to_eth(outcome.redeemable_eth)} ETH")
    click.echo()

    click.echo("💸 Redemptions:")
    for name, holder in (("Alice", alice), ("Bob", bob), ("Fee recipient", multisig)):
        held = party.balance_of(holder)
        if held:
            paid = party.redeem(holder, held)
            click.echo(f"  ✓ {name}: {held} shares -> {wei_to_eth(paid)} ETH")
    click.echo()
    click.echo(f"📊 Final: {party.stats()}")
    click.echo("✅ Demo complete!")


# =============================================================================
# Fees Command
# =============================================================================


@cli.command("fees")
@click.option("--bid", "bid", required=True, help="Winning bid in ETH (e.g. 8.5)")
@click.option("--supply", default="0", help="Contributor share supply")
@click.option("--eth-fee-bps", default=None, type=int, help="ETH fee in basis points")
@click.option("--token-fee-bps", default=None, type=int, help="Token fee in basis points")
@click.option("--split-bps", default=0, type=int, help="Split recipient basis points")
def fees(bid, supply, eth_fee_bps, token_fee_bps, split_bps):
    """Show the fee split for a winning bid"""
    from partybid.core.config import ETH_FEE_BASIS_POINTS, TOKEN_FEE_BASIS_POINTS
    from partybid.core.fees import compute_fee_split

    try:
        split = compute_fee_split(
            winning_bid=eth(bid),
            share_supply=int(supply),
            eth_fee_basis_points=ETH_FEE_BASIS_POINTS if eth_fee_bps is None else eth_fee_bps,
            token_fee_basis_points=TOKEN_FEE_BASIS_POINTS if token_fee_bps is None else token_fee_bps,
            split_basis_points=split_bps,
        )
    except (TypeError, ValueError) as err:
        raise click.BadParameter(str(err))

    click.echo("Fee Split")
    click.echo("-" * 40)
    click.echo(f"  Winning bid: {wei_to_eth(split.winning_bid)} ETH")
    click.echo(f"  ETH fee: {wei_to_eth(split.eth_fee)} ETH")
    click.echo(f"  Total spent: {wei_to_eth(split.total_spent)} ETH")
    click.echo(f"  Token fee: {split.token_fee} shares")
    click.echo(f"  Split recipient: {split.split_recipient_share} shares")


# =============================================================================
# Config Command
# =============================================================================


@cli.command("config")
@click.option("--env-file", default=None, help="dotenv file to load")
def config(env_file):
    """Show the party configuration resolved from the environment"""
    from pydantic import ValidationError
    from partybid.core.config import load_party_config

    logger = get_logger("cli")
    try:
        party_config = load_party_config(env_file)
    except ValidationError as err:
        logger.error(f"Invalid configuration: {err.error_count()} error(s)")
        click.echo(f"❌ Invalid configuration:\n{err}")
        raise SystemExit(1)

    for key, value in party_config.model_dump().items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    cli()
