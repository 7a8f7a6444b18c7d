"""auth/ -- Credential verification, registration, and token issuance.

Layer rule: auth/ imports only stdlib + third-party libraries. Configuration
(signing key, bcrypt rounds, database URL) is injected through constructors
by api/main.py; auth/ does NOT import core/ or api/.
api/ imports from auth/, not the other way around.
"""
