# -*- coding: utf-8 -*-
"""
Merkle airdrop NFT (commit-reveal)
----------------------------------

Allowlisted ``(address, index)`` entries mint one NFT each. Before claiming,
the claimant commits ``keccak256(str(seed))`` and waits ``MIN_DELAY`` blocks;
the claim reveals ``seed`` in the same transaction.

The contract carries both claim ledgers so the two storage layouts can be
compared against the same tree: an index claimed through the mapping path is
tracked separately from the bitmap path.

Claim path (reveal_and_claim_*):
  1. reveal the caller's commitment           "no commitment" / "reveal too early" / "invalid seed"
  2. verify the proof for (caller, index)     "invalid proof"
  3. check + mark the ledger                  "already claimed"
  4. mint the next token id (ids start at 1)  "max supply reached"

Views:
  - owner_of(token_id) / balance_of(owner) / total_supply() / max_supply()
  - token_by_index(i) / token_of_owner_by_index(owner, i)
  - get_approved(token_id) / is_approved_for_all(owner, operator)
  - is_claimed_mapping(index) / is_claimed_bitmap(index)
  - commitment_of(account) -> (hash, height, state)
  - merkle_root()
State-changing:
  - init(root, max_supply)
  - commit(commitment)
  - reveal_and_claim_mapping(proof, index, seed) -> token_id
  - reveal_and_claim_bitmap(proof, index, seed) -> token_id
  - approve(to, token_id) / set_approval_for_all(operator, approved)
  - transfer_from(from, to, token_id)
  - multicall(calls) -> list   (minting entry points are rejected)
"""
from __future__ import annotations

from typing import Any, List, Tuple

from airdrop_vm.stdlib import abi, env, storage

from airdrop_contracts.airdrop import common
from airdrop_contracts.stdlib import dispenser, multicall as batch, reveal
from airdrop_contracts.stdlib.claims import BitmapClaimLedger, ClaimLedger, MappingClaimLedger
from airdrop_contracts.stdlib.math.safe_uint import u256_inc
from airdrop_contracts.stdlib.token import nft

K_MAX_SUPPLY = b"drop:max_supply"
K_NEXT_ID = b"drop:next_id"

FIRST_TOKEN_ID = 1
DEFAULT_MAX_SUPPLY = 100

ERR_MAX_SUPPLY = b"max supply reached"
ERR_BAD_MAX_SUPPLY = b"bad max supply"

MAPPING_LEDGER = MappingClaimLedger(b"drop:claimed:")
BITMAP_LEDGER = BitmapClaimLedger(b"drop:bitmap:")

ABI = {
    "init": ("bytes32", "uint256"),
    "commit": ("bytes32",),
    "reveal_and_claim_mapping": ("bytes32[]", "uint256", "uint256"),
    "reveal_and_claim_bitmap": ("bytes32[]", "uint256", "uint256"),
    "multicall": ("bytes[]",),
    "approve": ("address", "uint256"),
    "set_approval_for_all": ("address", "bool"),
    "transfer_from": ("address", "address", "uint256"),
    "owner_of": ("uint256",),
    "balance_of": ("address",),
    "total_supply": (),
    "max_supply": (),
    "token_by_index": ("uint256",),
    "token_of_owner_by_index": ("address", "uint256"),
    "get_approved": ("uint256",),
    "is_approved_for_all": ("address", "address"),
    "is_claimed_mapping": ("uint256",),
    "is_claimed_bitmap": ("uint256",),
    "commitment_of": ("address",),
    "merkle_root": (),
}


def init(root: bytes, max_supply: int = DEFAULT_MAX_SUPPLY) -> None:
    common.initialize(root)
    abi.require(max_supply > 0, ERR_BAD_MAX_SUPPLY)
    storage.set_u256(K_MAX_SUPPLY, max_supply)
    storage.set_u256(K_NEXT_ID, FIRST_TOKEN_ID)


# ----------------------------
# Commit-reveal claim path
# ----------------------------


def commit(commitment: bytes) -> None:
    reveal.commit(env.sender(), commitment, env.block_height())


def _reveal_and_claim(ledger: ClaimLedger, proof: List[bytes], index: int, seed: int) -> int:
    sender = env.sender()
    reveal.reveal(sender, seed, env.block_height())
    dispenser.check_and_mark(ledger, common.merkle_root(), sender, index, proof)

    if nft.total_supply() >= max_supply():
        abi.revert(ERR_MAX_SUPPLY)
    token_id = storage.get_u256(K_NEXT_ID)
    storage.set_u256(K_NEXT_ID, u256_inc(token_id))
    nft.mint(sender, sender, token_id)
    return token_id


def reveal_and_claim_mapping(proof: List[bytes], index: int, seed: int) -> int:
    return _reveal_and_claim(MAPPING_LEDGER, proof, index, seed)


def reveal_and_claim_bitmap(proof: List[bytes], index: int, seed: int) -> int:
    return _reveal_and_claim(BITMAP_LEDGER, proof, index, seed)


def is_claimed_mapping(index: int) -> bool:
    return MAPPING_LEDGER.is_claimed(index)


def is_claimed_bitmap(index: int) -> bool:
    return BITMAP_LEDGER.is_claimed(index)


def commitment_of(account: bytes) -> Tuple[bytes, int, int]:
    return reveal.commitment_of(account)


def merkle_root() -> bytes:
    return common.merkle_root()


def max_supply() -> int:
    return storage.get_u256(K_MAX_SUPPLY)


# ----------------------------
# Batch dispatch
# ----------------------------


def multicall(calls: List[bytes]) -> List[Any]:
    handlers = {name: globals()[name] for name in ABI if name != "init"}
    return batch.dispatch(calls, exports=ABI, handlers=handlers)


# ----------------------------
# Token surface
# ----------------------------


def approve(to: bytes, token_id: int) -> None:
    nft.approve(env.sender(), to, token_id)


def set_approval_for_all(operator: bytes, approved: bool) -> None:
    nft.set_approval_for_all(env.sender(), operator, approved)


def transfer_from(from_: bytes, to: bytes, token_id: int) -> None:
    nft.transfer_from(env.sender(), from_, to, token_id)


def owner_of(token_id: int) -> bytes:
    return nft.owner_of(token_id)


def balance_of(owner: bytes) -> int:
    return nft.balance_of(owner)


def total_supply() -> int:
    return nft.total_supply()


def token_by_index(index: int) -> int:
    return nft.token_by_index(index)


def token_of_owner_by_index(owner: bytes, index: int) -> int:
    return nft.token_of_owner_by_index(owner, index)


def get_approved(token_id: int) -> bytes:
    return nft.get_approved(token_id)


def is_approved_for_all(owner: bytes, operator: bytes) -> bool:
    return nft.is_approved_for_all(owner, operator)
