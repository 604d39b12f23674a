from __future__ import annotations

import click

from offerkit import __version__
from offerkit.cmds.keys import keys_cmd
from offerkit.cmds.offer import offer_cmd
from offerkit.util.default_root import DEFAULT_ROOT_PATH

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(
    help=f"\n  Build and inspect Chia offers ({__version__})\n",
    epilog="Try 'offerkit init', 'offerkit keys show -m words.txt' or 'offerkit offer show offer1...'",
    context_settings=CONTEXT_SETTINGS,
)
@click.option("--root-path", default=DEFAULT_ROOT_PATH, help="Config file root", type=click.Path(), show_default=True)
@click.pass_context
def cli(ctx: click.Context, root_path: str) -> None:
    from pathlib import Path

    ctx.ensure_object(dict)
    ctx.obj["root_path"] = Path(root_path)


@cli.command("version", help="Show offerkit version")
def version_cmd() -> None:
    print(__version__)


@cli.command("init", short_help="Create the configuration")
@click.option("--testnet", is_flag=True, help="Select testnet11 instead of mainnet")
@click.pass_context
def init_cmd(ctx: click.Context, testnet: bool) -> None:
    """
    Create a new configuration under the root path. An existing configuration is left alone.
    """
    from offerkit.util.config import (
        CONFIG_FILENAME,
        config_path_for_filename,
        create_default_offerkit_config,
        lock_and_load_config,
        save_config,
    )

    root_path = ctx.obj["root_path"]
    path = config_path_for_filename(root_path, CONFIG_FILENAME)
    if path.is_file():
        print(f"{path} already exists, no update is required")
    else:
        create_default_offerkit_config(root_path)
        print(f"Created {path}")

    if testnet:
        with lock_and_load_config(root_path, CONFIG_FILENAME) as config:
            config["selected_network"] = "testnet11"
            save_config(root_path, CONFIG_FILENAME, config)
        print("Selected network testnet11")


cli.add_command(keys_cmd)
cli.add_command(offer_cmd)


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
