"""Configuration models for route table assembly."""

from pydantic import BaseModel, ConfigDict, Field


class RouteTableConfig(BaseModel):
    """Controls how ``build_table`` assembles and checks a route table."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    validate_on_build: bool = Field(
        default=True,
        description="Run the overlap validator and log its diagnostics on build",
    )
    reject_conflicts: bool = Field(
        default=False,
        description="Raise AmbiguousRouteTableError when the validator reports anything",
    )
    max_routes: int = Field(
        default=1000,
        ge=1,
        le=100_000,
        description="Maximum number of table entries, aliases included",
    )
