"""lazymint — authorization-gated lazy minting registry."""

__version__ = "0.1.0"
