"""Trip plan returned by a plan generator.

Field names follow the JSON the generator is asked to produce; unknown keys
are ignored so a chatty model does not fail the whole plan.
"""

from pydantic import BaseModel, ConfigDict, Field


class GeneratedActivity(BaseModel):
    """One suggested activity, still unvalidated against the trip."""

    model_config = ConfigDict(extra="ignore")

    type: str
    name: str
    description: str = ""
    location: str = ""
    time: str | None = None


class GeneratedDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: int
    activities: list[GeneratedActivity] = Field(default_factory=list)


class GeneratedBucketItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""


class GeneratedPlan(BaseModel):
    """Full plan: activities per day plus bucket list suggestions."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    itinerary: list[GeneratedDay] = Field(default_factory=list)
    bucket_list: list[GeneratedBucketItem] = Field(default_factory=list, alias="bucketList")
