"""Services package.

Credential provider, estimator and report assembly used by the HTTP layer.
"""
