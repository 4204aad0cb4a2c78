from pydantic import BaseModel, ConfigDict, Field


class CounterState(BaseModel):
    """Shard counter state as stored under the `urlCount` / `urlPrefix` keys.

    Serialized with the store key names (by_alias=True), so GET /stats
    returns {"urlCount": ..., "urlPrefix": ...}.
    """
    url_count: int = Field(0, ge=0, alias="urlCount", description="Entries written into the current shard")
    url_prefix: int = Field(0, ge=0, alias="urlPrefix", description="Index of the current shard")

    # Pydantic V2 style configuration
    model_config = ConfigDict(populate_by_name=True, frozen=True)
