"""Special offer evaluation and storefront/admin offer services."""
