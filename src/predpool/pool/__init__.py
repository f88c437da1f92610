"""Liquidity pool routing layer and bet receipts."""
