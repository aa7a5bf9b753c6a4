"""Fixed-point token amounts, curve pricing, fee collection and staking reward accounting."""

__version__ = "0.1.0"