"""
airdrop_vm.runtime
==================

Host-side runtime: hashing, gas metering, journaled storage, the event log,
call frames, the contract loader and :class:`~airdrop_vm.runtime.host.LocalChain`.

Submodules are imported explicitly by callers; this package keeps no
import-time side effects so the codec and stdlib can load it early.
"""
