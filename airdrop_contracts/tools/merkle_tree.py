# -*- coding: utf-8 -*-
"""
airdrop_contracts.tools.merkle_tree
===================================

Off-chain allowlist tree builder.

Layers are built the way merkletreejs builds them with ``sortPairs: true``
and no leaf sorting: adjacent nodes are hashed as ``keccak(min || max)``, and
an odd trailing node is promoted to the next layer unchanged (not paired with
itself). Proofs are plain sibling lists, so they fold with
:func:`airdrop_contracts.stdlib.merkle.process_proof`.

Distribution file (JSON)::

    {
      "root": "0x…",
      "claims": [
        {"address": "0x…", "index": 0, "leaf": "0x…", "proof": ["0x…", …]},
        …
      ]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from airdrop_vm.runtime.context import to_address, to_hex

from airdrop_contracts.stdlib.merkle import HASH_LEN, hash_pair, leaf_for, verify

HexOrBytes = Union[str, bytes, bytearray]


def _from_hex(value: Any, *, length: int, what: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        s = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            raw = bytes.fromhex(s)
        except ValueError:
            raise ValueError(f"{what} is not hex: {value!r}") from None
    else:
        raise TypeError(f"{what} must be hex or bytes, got {type(value).__name__}")
    if len(raw) != length:
        raise ValueError(f"{what} must be {length} bytes, got {len(raw)}")
    return raw


class MerkleTree:
    """Sorted-pair Keccak tree over pre-hashed leaves."""

    def __init__(self, leaves: Sequence[bytes]) -> None:
        if not leaves:
            raise ValueError("tree needs at least one leaf")
        base = [_from_hex(leaf, length=HASH_LEN, what="leaf") for leaf in leaves]
        self._layers: List[List[bytes]] = [base]
        while len(self._layers[-1]) > 1:
            self._layers.append(self._next_layer(self._layers[-1]))

    @staticmethod
    def _next_layer(nodes: List[bytes]) -> List[bytes]:
        out: List[bytes] = []
        for i in range(0, len(nodes), 2):
            if i + 1 == len(nodes):
                out.append(nodes[i])
            else:
                out.append(hash_pair(nodes[i], nodes[i + 1]))
        return out

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def leaves(self) -> List[bytes]:
        return list(self._layers[0])

    @property
    def layers(self) -> List[List[bytes]]:
        return [list(layer) for layer in self._layers]

    def index_of(self, leaf: HexOrBytes) -> int:
        raw = _from_hex(leaf, length=HASH_LEN, what="leaf")
        try:
            return self._layers[0].index(raw)
        except ValueError:
            raise ValueError(f"leaf not in tree: {to_hex(raw)}") from None

    def proof_at(self, position: int) -> List[bytes]:
        """Sibling path for the leaf at ``position`` (bottom-up)."""
        if not 0 <= position < len(self._layers[0]):
            raise IndexError(f"leaf position out of range: {position}")
        proof: List[bytes] = []
        idx = position
        for layer in self._layers[:-1]:
            sib = idx ^ 1
            if sib < len(layer):
                proof.append(layer[sib])
            idx //= 2
        return proof

    def proof(self, leaf: HexOrBytes) -> List[bytes]:
        return self.proof_at(self.index_of(leaf))

    def __len__(self) -> int:
        return len(self._layers[0])


@dataclass(frozen=True)
class Claim:
    address: bytes
    index: int
    leaf: bytes
    proof: Tuple[bytes, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": to_hex(self.address),
            "index": self.index,
            "leaf": to_hex(self.leaf),
            "proof": [to_hex(p) for p in self.proof],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Claim":
        try:
            index = d["index"]
            proof = d["proof"]
            address, leaf = d["address"], d["leaf"]
        except KeyError as e:
            raise ValueError(f"claim entry missing field {e.args[0]!r}") from None
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ValueError(f"bad claim index: {index!r}")
        if not isinstance(proof, list):
            raise TypeError("claim proof must be a list")
        return cls(
            address=_from_hex(address, length=20, what="address"),
            index=index,
            leaf=_from_hex(leaf, length=HASH_LEN, what="leaf"),
            proof=tuple(_from_hex(p, length=HASH_LEN, what="proof node") for p in proof),
        )


@dataclass(frozen=True)
class Allowlist:
    """A built distribution: root plus one :class:`Claim` per entry."""

    root: bytes
    claims: Tuple[Claim, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.claims)

    def for_address(self, address: HexOrBytes) -> List[Claim]:
        addr = to_address(address)
        return [c for c in self.claims if c.address == addr]

    def claim_for(self, address: HexOrBytes, index: Optional[int] = None) -> Claim:
        """The claim for ``address`` (and ``index`` when it appears more than once)."""
        matches = self.for_address(address)
        if index is not None:
            matches = [c for c in matches if c.index == index]
        if not matches:
            raise KeyError(f"address not in allowlist: {to_hex(to_address(address))}")
        if len(matches) > 1:
            raise ValueError("address appears more than once; pass an index")
        return matches[0]

    def verify(self, claim: Claim) -> bool:
        """Recompute the leaf for ``claim`` and check its proof against the root."""
        if leaf_for(claim.address, claim.index) != claim.leaf:
            return False
        return verify(claim.leaf, list(claim.proof), self.root)

    def to_dict(self) -> Dict[str, Any]:
        return {"root": to_hex(self.root), "claims": [c.to_dict() for c in self.claims]}

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Allowlist":
        if not isinstance(d, dict) or "root" not in d:
            raise ValueError("distribution must be an object with a 'root'")
        claims = d.get("claims", [])
        if not isinstance(claims, list):
            raise TypeError("'claims' must be a list")
        return cls(
            root=_from_hex(d["root"], length=HASH_LEN, what="root"),
            claims=tuple(Claim.from_dict(c) for c in claims),
        )

    @classmethod
    def from_json(cls, text: str) -> "Allowlist":
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"distribution is not valid JSON: {e}") from e
        return cls.from_dict(obj)


def build_allowlist(addresses: Iterable[HexOrBytes]) -> Allowlist:
    """Assign indices in input order, hash the leaves and build every proof."""
    addrs = [to_address(a) for a in addresses]
    if not addrs:
        raise ValueError("allowlist is empty")
    leaves = [leaf_for(a, i) for i, a in enumerate(addrs)]
    tree = MerkleTree(leaves)
    claims = tuple(
        Claim(address=a, index=i, leaf=leaves[i], proof=tuple(tree.proof_at(i)))
        for i, a in enumerate(addrs)
    )
    return Allowlist(root=tree.root, claims=claims)


__all__ = ["MerkleTree", "Claim", "Allowlist", "build_allowlist"]
