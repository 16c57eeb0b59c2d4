"""
Ledger Replay

Replays an ordered stream of client transactions (deposits, withdrawals,
disputes, resolutions and chargebacks) and produces per-client account
summaries. All financial math uses Decimal.
"""

__version__ = "1.0.0"
