"""
Document store for CarShop.

This package provides:
- The SQLAlchemy-backed document store and its collections
- FastAPI dependencies resolving the store from application state
"""
