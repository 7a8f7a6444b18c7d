"""
auth/models.py -- Domain dataclass for the stored credential entity.

Pattern: Data class (pure data container, zero logic). The store maps rows
to CredentialRecord; the credential components and routes do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CredentialRecord:
    """A persisted account entry.

    id is the identity reference. It is None until UserStore.insert() assigns
    it, and it is what access tokens embed.

    email is the lookup key but is NOT unique -- the store does not enforce it
    and the registrar does not pre-check it. With duplicates, lookups return
    the oldest record.

    password_hash is the full bcrypt string ($2b$<cost>$<salt><digest>), never
    the plaintext.
    """

    name: str
    email: str
    password_hash: str
    id: str | None = None
