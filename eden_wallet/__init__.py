"""
Eden Wallet - Storage Core

A local-first expense tracker store for two people sharing a household.
Transactions and workspace settings live in a remote Supabase project when one
is configured, and in a local key-value cache always.

DESIGN PRINCIPLES:
1. The local cache is the source of truth for the session
2. The remote tier is best-effort, never required
3. Public store operations never raise to the UI
4. Every fallback is logged
"""

__version__ = "1.0.0"
__author__ = "Eden Wallet Team"
