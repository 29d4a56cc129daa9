"""
Authentication and authorization for CarShop.

This module provides:
- Bearer token verification against Firebase or a local JWT secret
- The access gate in front of protected routes
- Role resolution and role-based access policy
"""
