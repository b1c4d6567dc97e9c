"""Resolution engine configuration models."""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Behaviour of the resolution pipeline and its cache."""

    builtin_prefix: str = Field(
        default="@",
        min_length=1,
        max_length=1,
        description="Key prefix that routes a step to the builtin registry",
    )
    delegate_key: str = Field(
        default="__delegate__",
        description="Resource key naming the delegate for unknown keys",
    )
    this_keyword: str = Field(
        default="this",
        description="Placeholder name that expands to the whole buffer",
    )
    retry_deferred: bool = Field(
        default=True,
        description="Run the deferred steps once more after the delegate phase",
    )
    cache_enabled: bool = Field(
        default=True,
        description="Consult the resolver cache before invoking resolvers",
    )
    cache_directives_enabled: bool = Field(
        default=True,
        description="Populate the cache from directives requested by resolvers",
    )
