"""eBay Market Pricing Package.

An HTTP service that estimates eBay market pricing for a search term by
combining sold listings scraped from rendered search pages with active
listings sampled from rendered pages or the eBay Browse API.

The application follows a modular architecture with separate concerns for:
- Sampling listings from rendered pages and the Browse API
- Normalizing raw records into listings
- Estimating per-condition statistics from bounded samples
- Assembling sold/active reports and the sell-through rate
"""
