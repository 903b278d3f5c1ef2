"""Multi-entity ledger: balance derivation, document posting and numbering."""

__version__ = "1.0.0"
