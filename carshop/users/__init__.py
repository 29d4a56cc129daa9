"""
Users service for CarShop.

This module provides:
- Self-registration of user accounts
- The caller's admin status
- Promotion of users to admin by an existing admin
"""
