"""
Contract claimant used by the reentrancy tests.

It commits and claims on an airdrop through nested calls, so the airdrop
sees this contract as ``sender()`` and runs its receiver hook on mint.

Hook modes:
    MODE_OBSERVE        record ``is_claimed_mapping(index)`` as seen mid-mint, accept
    MODE_REENTER_MAPPING, MODE_REENTER_BITMAP
                        call ``reveal_and_claim_<ledger>`` again from inside the hook
    MODE_REJECT         return False
    MODE_REENTER_CLAIM  call ``claim(proof, index)`` again on the calling drop
"""
from typing import List

from airdrop_vm.stdlib import calls, env, storage

MODE_OBSERVE = 0
MODE_REENTER_MAPPING = 1
MODE_REENTER_BITMAP = 2
MODE_REJECT = 3
MODE_REENTER_CLAIM = 4

K_MODE = b"recv:mode"
K_INDEX = b"recv:index"
K_SEED = b"recv:seed"
K_PROOF = b"recv:proof"
K_SEEN = b"recv:seen"
K_HOOKS = b"recv:hooks"

ABI = {
    "init": ("uint256",),
    "commit": ("address", "bytes32"),
    "claim": ("address", "bytes32[]", "uint256", "uint256"),
    "claim_drop": ("address", "bytes32[]", "uint256"),
    "on_token_received": ("address", "address", "uint256"),
    "seen_claimed": (),
    "hook_calls": (),
}


def init(mode: int) -> None:
    storage.set_u256(K_MODE, mode)


def commit(nft: bytes, commitment: bytes) -> None:
    calls.call(nft, "commit", commitment)


def claim(nft: bytes, proof: List[bytes], index: int, seed: int) -> int:
    storage.set_u256(K_INDEX, index)
    storage.set_u256(K_SEED, seed)
    storage.set(K_PROOF, b"".join(proof))
    return calls.call(nft, "reveal_and_claim_mapping", proof, index, seed)


def claim_drop(drop: bytes, proof: List[bytes], index: int) -> bool:
    storage.set_u256(K_INDEX, index)
    storage.set(K_PROOF, b"".join(proof))
    return calls.call(drop, "claim", proof, index)


def on_token_received(operator: bytes, from_: bytes, token_id: int) -> bool:
    drop = env.sender()
    storage.set_u256(K_HOOKS, storage.get_u256(K_HOOKS) + 1)
    mode = storage.get_u256(K_MODE)
    index = storage.get_u256(K_INDEX)
    if mode == MODE_REJECT:
        return False
    if mode == MODE_OBSERVE:
        seen = calls.call(drop, "is_claimed_mapping", index)
        storage.set(K_SEEN, b"\x01" if seen else b"\x00")
        return True
    raw = storage.get(K_PROOF, b"")
    proof = [raw[i : i + 32] for i in range(0, len(raw), 32)]
    if mode == MODE_REENTER_CLAIM:
        calls.call(drop, "claim", proof, index)
        return True
    fn = "reveal_and_claim_mapping" if mode == MODE_REENTER_MAPPING else "reveal_and_claim_bitmap"
    calls.call(drop, fn, proof, index, storage.get_u256(K_SEED))
    return True


def seen_claimed() -> bool:
    return storage.get(K_SEEN) == b"\x01"


def hook_calls() -> int:
    return storage.get_u256(K_HOOKS)
