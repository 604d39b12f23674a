from __future__ import annotations

from typing import Optional, Sequence

import click


@click.group("offer", help="Make and inspect offers")
@click.pass_context
def offer_cmd(ctx: click.Context) -> None:
    pass


@offer_cmd.command("make", help="Create a signed offer and print its offer string")
@click.option(
    "--mnemonic-file",
    "-m",
    help="File holding the mnemonic words",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
)
@click.option(
    "--offer",
    "-o",
    "offers",
    help="A wallet asset to give up, as ASSET:AMOUNT in mojos. ASSET is xch, a CAT symbol or asset id",
    multiple=True,
)
@click.option(
    "--request",
    "-r",
    "requests",
    help="An asset to ask for in return, as ASSET:AMOUNT in mojos",
    multiple=True,
)
@click.option("--fee", "-f", help="Fee in mojos to attach", type=int, default=0, show_default=True)
@click.option("--filepath", "-p", help="Also write the offer string to this file", type=click.Path(), default=None)
@click.option("--rpc-port", help="Full node RPC port, defaults to the configured one", type=int, default=None)
@click.pass_context
def make_offer_cmd(
    ctx: click.Context,
    mnemonic_file: str,
    offers: Sequence[str],
    requests: Sequence[str],
    fee: int,
    filepath: Optional[str],
    rpc_port: Optional[int],
) -> None:
    import asyncio
    from pathlib import Path

    from offerkit.util.errors import OfferError

    from .offer_funcs import make_offer

    if len(offers) == 0 and len(requests) == 0:
        raise click.UsageError("pass at least one --offer or --request")
    try:
        asyncio.run(
            make_offer(
                ctx.obj["root_path"],
                Path(mnemonic_file),
                offers,
                requests,
                fee,
                None if filepath is None else Path(filepath),
                rpc_port,
            )
        )
    except OfferError as e:
        raise click.ClickException(f"{e.code.name}: {e.message}") from e


@offer_cmd.command("show", help="Decode an offer string or offer file and summarize it")
@click.argument("offer", type=str)
@click.option("--json", "-j", help="Print the whole bundle as JSON", default=False, show_default=True, is_flag=True)
@click.pass_context
def show_offer_cmd(ctx: click.Context, offer: str, json: bool) -> None:
    from offerkit.util.errors import OfferError

    from .offer_funcs import show_offer

    try:
        show_offer(offer, json)
    except OfferError as e:
        raise click.ClickException(f"{e.code.name}: {e.message}") from e
