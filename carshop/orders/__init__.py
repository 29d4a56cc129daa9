"""
Orders service for CarShop.

This module provides:
- Order placement and lookup
- Shipping and cancellation
- Self-scoped order listing (admins see every order)
"""
