"""
zkUSD: collateralized-debt stablecoin kernel.

- `zkusd.core`: pure kernels (fixed point, vault state machine, oracle aggregation)
- `zkusd.state`: canonical encoding, balances, whitelist, nonces
- `zkusd.integration`: imperative shells, chain substrate, reference collaborators
"""

__version__ = "0.1.0"
