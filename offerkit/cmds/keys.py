from __future__ import annotations

from typing import Optional

import click


@click.group("keys", help="Inspect the wallet key derived from a mnemonic")
@click.pass_context
def keys_cmd(ctx: click.Context) -> None:
    pass


@keys_cmd.command("show", help="Displays the wallet puzzle hash and address of a mnemonic")
@click.option(
    "--mnemonic-file",
    "-m",
    help="File holding the mnemonic words",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
)
@click.option("--index", "-i", help="Derivation index, defaults to the configured one", type=int, default=None)
@click.option(
    "--hardened/--unhardened",
    help="Hardened or observer derivation, defaults to the configured one",
    default=None,
)
@click.option("--json", "-j", help="Displays the key as JSON", default=False, show_default=True, is_flag=True)
@click.pass_context
def show_cmd(
    ctx: click.Context,
    mnemonic_file: str,
    index: Optional[int],
    hardened: Optional[bool],
    json: bool,
) -> None:
    from pathlib import Path

    from .offer_funcs import show_keys

    show_keys(ctx.obj["root_path"], Path(mnemonic_file), index, hardened, json)
