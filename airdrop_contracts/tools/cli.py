#!/usr/bin/env python3
"""
airdrop_contracts.tools.cli
===========================

Build allowlist distributions, look up and check proofs, compute reveal
commitments, and dry-run a whole drop against the in-process chain.

Examples:
  airdrop build addresses.txt --out dist.json
  airdrop proof dist.json 0x5b38da6a701c568545dcfcb03fcb875f56beddc4
  airdrop verify dist.json 0x5b38da6a701c568545dcfcb03fcb875f56beddc4
  airdrop commitment 42
  airdrop simulate --count 8 --variant bitmap
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from airdrop_vm.errors import VmError
from airdrop_vm.runtime.context import to_hex
from airdrop_vm.runtime.host import LocalChain
from airdrop_vm.version import __version__

from airdrop_contracts import BITMAP_CONTRACT, MAPPING_CONTRACT
from airdrop_contracts.stdlib.reveal import commitment_for_seed
from airdrop_contracts.tools.merkle_tree import Allowlist, build_allowlist

log = logging.getLogger(__name__)

LOG_LEVEL_ENV = "AIRDROP_LOG_LEVEL"
VARIANTS = {"mapping": MAPPING_CONTRACT, "bitmap": BITMAP_CONTRACT}

app = typer.Typer(
    name="airdrop",
    help="Merkle airdrop tooling: distributions, proofs, commitments, simulation.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def _die(msg: str, code: int = 2) -> None:
    sys.stderr.write(msg.rstrip() + "\n")
    raise typer.Exit(code)


def _read_addresses(path: Path) -> List[str]:
    """One address per line (``#`` comments allowed), or a JSON list."""
    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        obj = json.loads(text)
        if not all(isinstance(a, str) for a in obj):
            raise ValueError("JSON address list must contain strings")
        return obj
    out: List[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            out.append(line)
    return out


def _load_dist(path: Path) -> Allowlist:
    try:
        return Allowlist.from_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"cannot read {path}: {e}") from e


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar=LOG_LEVEL_ENV,
        help=f"Logging level (env {LOG_LEVEL_ENV}).",
    ),
) -> None:
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        _die(f"unknown log level: {log_level}")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""
    console.print(__version__)


@app.command()
def build(
    addresses_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Address list."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write distribution JSON here."),
) -> None:
    """Build the tree; print the root and write the distribution."""
    try:
        dist = build_allowlist(_read_addresses(addresses_file))
    except (ValueError, TypeError, VmError) as e:
        _die(f"build failed: {e}")
        return
    log.info("built allowlist with %d entries", len(dist))
    if out is None:
        typer.echo(dist.to_json())
        return
    out.write_text(dist.to_json() + "\n", encoding="utf-8")
    meta = Table.grid(padding=(0, 2))
    meta.add_row("Root", to_hex(dist.root))
    meta.add_row("Entries", str(len(dist)))
    meta.add_row("Written", str(out))
    console.print(Panel(meta, title="Distribution", expand=False))


@app.command()
def proof(
    dist_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(...),
    index: Optional[int] = typer.Option(None, "--index", help="Disambiguate repeated addresses."),
    as_json: bool = typer.Option(False, "--json", help="Machine-readable output."),
) -> None:
    """Print the index and proof for ADDRESS."""
    try:
        claim = _load_dist(dist_file).claim_for(address, index)
    except (ValueError, TypeError, KeyError, VmError) as e:
        _die(f"proof lookup failed: {e}")
        return
    if as_json:
        typer.echo(json.dumps(claim.to_dict(), indent=2))
        return
    t = Table(title=f"Claim #{claim.index}", box=box.SIMPLE)
    t.add_column("Field")
    t.add_column("Value")
    t.add_row("address", to_hex(claim.address))
    t.add_row("index", str(claim.index))
    t.add_row("leaf", to_hex(claim.leaf))
    for i, node in enumerate(claim.proof):
        t.add_row(f"proof[{i}]", to_hex(node))
    console.print(t)


@app.command()
def verify(
    dist_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(...),
    index: Optional[int] = typer.Option(None, "--index"),
) -> None:
    """Recompute the leaf for ADDRESS and check its proof against the root."""
    try:
        dist = _load_dist(dist_file)
        claim = dist.claim_for(address, index)
    except (ValueError, TypeError, KeyError, VmError) as e:
        _die(f"verify failed: {e}")
        return
    if not dist.verify(claim):
        console.print(f"[red]INVALID[/red] proof for {to_hex(claim.address)} index {claim.index}")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] {to_hex(claim.address)} index {claim.index} root {to_hex(dist.root)}")


@app.command()
def commitment(seed: str = typer.Argument(..., help="Decimal uint256 seed.")) -> None:
    """Print keccak256(str(seed)), the value to pass to commit()."""
    try:
        value = int(seed, 10)
        digest = commitment_for_seed(value)
    except ValueError as e:
        _die(f"bad seed: {e}")
        return
    typer.echo(to_hex(digest))


@app.command()
def simulate(
    count: int = typer.Option(5, "--count", "-n", min=1, help="Allowlist size."),
    variant: str = typer.Option("mapping", "--variant", help="mapping | bitmap"),
) -> None:
    """Deploy a fungible drop locally, claim every entry and report gas."""
    contract = VARIANTS.get(variant)
    if contract is None:
        _die(f"unknown variant {variant!r}; choose one of: {', '.join(sorted(VARIANTS))}")
        return

    chain = LocalChain()
    owner = chain.account("owner")
    claimants = [chain.account(f"claimant-{i}") for i in range(count)]
    dist = build_allowlist(claimants)
    drop = chain.deploy(contract, dist.root, sender=owner)

    t = Table(title=f"{variant} airdrop, {count} claims", box=box.SIMPLE)
    t.add_column("Index", justify="right")
    t.add_column("Claimant")
    t.add_column("Block", justify="right")
    t.add_column("Gas", justify="right")
    total = 0
    for claim in dist.claims:
        try:
            rcpt = chain.transact(drop, "claim", list(claim.proof), claim.index, sender=claim.address)
        except VmError as e:
            _die(f"claim {claim.index} failed: {e}", code=1)
            return
        total += rcpt.gas_used
        t.add_row(str(claim.index), to_hex(claim.address), str(rcpt.block_height), str(rcpt.gas_used))
    console.print(t)
    console.print(f"total gas {total}, mean {total // count}")


def run(argv: Optional[List[str]] = None) -> Any:
    return app(args=argv)


if __name__ == "__main__":  # pragma: no cover
    run()
