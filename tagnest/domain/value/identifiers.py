"""Strongly typed identifiers for tagnest domain entities.

Using NewType for strong typing prevents mixing up tag identifiers with the
string identifiers of arbitrary tagged objects.
"""

from typing import NewType
from uuid import UUID

TagId = NewType("TagId", UUID)

# Identifier of any taggable object, stored as text so that object kinds with
# heterogeneous primary keys (UUID, int, slug) can share the tagged table.
ObjectId = NewType("ObjectId", str)
