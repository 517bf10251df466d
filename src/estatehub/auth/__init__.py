"""Authentication and authorization.

Three layers, applied in this order on protected routes:
1. Auth gate: bearer JWT → CurrentIdentity (401 when missing, 403 when bad)
2. Role gate: identity role must be in an allow-list (403 otherwise)
3. Ownership policy: the identity must own the resource or be an admin
"""
