"""
Streaming quadratic voting node package initializer

Keep this module lightweight. Do not import web3 or the HTTP app here,
so the ledger can be used without booting the API.
"""

__all__ = []
