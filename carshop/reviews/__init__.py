"""Reviews service for CarShop."""
