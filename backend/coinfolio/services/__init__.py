"""Business logic and the price oracle client.

- portfolio/: holdings ledger, swap and sell, transaction log, valuation
- repositories/: owner-scoped data access
- shared/: HTTP base client
- coingecko_client: spot prices and market data
- auth_service: passwords and access tokens
"""
