"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing DropID where SubmissionID expected).

Uses TypeAlias for complex types that are purely structural.
"""

from typing import NewType, TypeAlias, Union

# ID types using NewType for type safety
UserID = NewType("UserID", str)
ProfileID = NewType("ProfileID", str)
DropID = NewType("DropID", str)
SubmissionID = NewType("SubmissionID", str)

# Template values are scalars, booleans, or ordered lists of records.
# Records address their fields as {{item.<field>}} inside {{#each}} blocks.
TemplateScalar: TypeAlias = Union[str, int, float, bool, None]
TemplateValue: TypeAlias = Union[
    TemplateScalar, list["TemplateRecord"], dict[str, "TemplateValue"]
]
TemplateRecord: TypeAlias = dict[str, TemplateValue]
TemplateContext: TypeAlias = dict[str, TemplateValue]

NotificationChannel: TypeAlias = str  # "immediate" or "digest"
