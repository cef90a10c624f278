"""predamm - prediction market trading backend on a share-pool AMM."""

__version__ = "0.1.0"
