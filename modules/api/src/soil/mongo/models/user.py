"""
Model for working with 'users' documents in MongoDB.
"""

from typing import ClassVar

from ..client import MongoModel


class UserModel(MongoModel):
    """
    Model for user account documents.

    Emails are stored lower-cased and carry a unique index, so a second
    signup with the same address is rejected by the store as well as by the
    identity service's lookup.
    """

    collection_name: ClassVar[str] = "users"
    indexes: ClassVar[list] = [
        ([("email", 1)], {"unique": True, "name": "email_unique"}),
    ]

    full_name: str
    email: str
    password_hash: str
    role: str = "User"
