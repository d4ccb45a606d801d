"""Options controlling a transformation run."""

from pydantic import BaseModel, Field


class LiteralPolicy(BaseModel):
    """Which string literals beyond expressions and module specifiers get replaced.

    All flags default to off: only plain literal expressions and
    import/require module specifiers are replaced.
    """

    property_keys: bool = Field(
        default=False,
        description="Replace quoted object keys, member names and enum member names",
    )
    enum_initializers: bool = Field(
        default=False,
        description="Replace string initializers of enum members",
    )
    type_literals: bool = Field(
        default=False,
        description="Replace string literal types and ambient module names",
    )

    model_config = {"frozen": True}


class TransformOptions(BaseModel):
    """Options for one transformation run."""

    policy: LiteralPolicy = Field(
        default_factory=LiteralPolicy, description="Literal eligibility policy"
    )
    indent: int | None = Field(
        default=2,
        ge=0,
        description="Indentation of the mapping document (None for a single line)",
    )
    ensure_ascii: bool = Field(
        default=False, description="Escape non-ASCII characters in the mapping document"
    )
    verify_output: bool = Field(
        default=True, description="Re-parse the regenerated source before writing it"
    )

    model_config = {"frozen": True}
