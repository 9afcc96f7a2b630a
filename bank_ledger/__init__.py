"""
Bank Ledger

Single-institution account ledger with layered account operations, bounded
transaction histories, saving-account interest and bank-wide sweeps. All
monetary values use Decimal precision.
"""

__version__ = "1.0.0"
