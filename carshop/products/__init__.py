"""
Products service for CarShop.

Public catalogue reads; creating and deleting products needs a valid identity.
"""
