"""
CarShop API.

A FastAPI backend over four document collections (products, orders, users,
reviews) with bearer-token authentication and role-based access for
privileged routes.
"""
