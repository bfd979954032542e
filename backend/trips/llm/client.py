"""Trip plan generation with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic fallback when no key is present for testing.
"""

import logging
from typing import Protocol

from openai import AsyncOpenAI

from backend.trips.config import Settings
from backend.trips.models.generation import (
    GeneratedActivity,
    GeneratedBucketItem,
    GeneratedDay,
    GeneratedPlan,
)

logger = logging.getLogger(__name__)

ACTIVITY_SLOTS = [("place", "09:00:00"), ("food", "12:30:00"), ("activity", "15:00:00")]


class TripPlanGenerator(Protocol):
    """Protocol for trip plan generator implementations."""

    async def generate_plan(
        self,
        *,
        name: str,
        destination: str,
        num_days: int,
        budget: float | None,
        interests: list[str],
        special_requests: str,
    ) -> GeneratedPlan:
        """Suggest activities per day and bucket list items for a trip.

        Args:
            name: Trip name
            destination: Where the trip goes
            num_days: Number of days in the trip
            budget: Budget in USD, None for unlimited
            interests: Traveller interests to plan around
            special_requests: Free-text extra requests

        Returns:
            GeneratedPlan, not yet validated against the trip
        """
        ...


class DeterministicStubGenerator:
    """Deterministic stub generator for testing (no API key required)."""

    async def generate_plan(
        self,
        *,
        name: str,
        destination: str,
        num_days: int,
        budget: float | None,
        interests: list[str],
        special_requests: str,
    ) -> GeneratedPlan:
        """Generate one activity per slot per day, themed by interest."""
        days = []
        for day in range(1, num_days + 1):
            interest = interests[(day - 1) % len(interests)] if interests else "sightseeing"
            activities = [
                GeneratedActivity(
                    type=activity_type,
                    name=f"{destination} {interest} {activity_type} (day {day})",
                    description=f"Placeholder {interest} {activity_type} for {name}.",
                    location=destination,
                    time=time,
                )
                for activity_type, time in ACTIVITY_SLOTS
            ]
            days.append(GeneratedDay(day=day, activities=activities))

        bucket_list = [
            GeneratedBucketItem(
                name=f"{interest.title()} in {destination}",
                description="Stub suggestion generated without an LLM.",
            )
            for interest in interests[:5]
        ]

        return GeneratedPlan(itinerary=days, bucket_list=bucket_list)


class OpenAITripGenerator:
    """OpenAI-backed trip plan generator."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def generate_plan(
        self,
        *,
        name: str,
        destination: str,
        num_days: int,
        budget: float | None,
        interests: list[str],
        special_requests: str,
    ) -> GeneratedPlan:
        """Generate a plan using the OpenAI API in JSON mode.

        Raises:
            ValueError: If the model returns an empty or malformed plan
            openai.OpenAIError: If the API call fails
        """
        prompt = self._build_prompt(
            name=name,
            destination=destination,
            num_days=num_days,
            budget=budget,
            interests=interests,
            special_requests=special_requests,
        )

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self._build_system_prompt()},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=4000,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        if not content.strip():
            raise ValueError("OpenAI returned an empty plan")

        # pydantic.ValidationError subclasses ValueError
        plan = GeneratedPlan.model_validate_json(content)
        logger.info(
            f"Generated plan for {destination}: {len(plan.itinerary)} days, "
            f"{len(plan.bucket_list)} bucket items"
        )
        return plan

    def _build_system_prompt(self) -> str:
        return """You are a travel expert planning trips day by day.

Respond with ONLY valid JSON of this shape:
{
  "itinerary": [
    {
      "day": 1,
      "activities": [
        {
          "type": "place",
          "name": "Example Waterfall",
          "description": "A stunning cascade...",
          "location": "Ella",
          "time": "09:00:00"
        }
      ]
    }
  ],
  "bucketList": [
    {"name": "Surfing Lesson", "description": "Learn to surf on golden sands..."}
  ]
}

Rules:
- type is one of place, stay, food, activity
- time uses HH:MM:SS
- description is 1-2 sentences"""

    def _build_prompt(
        self,
        *,
        name: str,
        destination: str,
        num_days: int,
        budget: float | None,
        interests: list[str],
        special_requests: str,
    ) -> str:
        """Build the user prompt from the trip request."""
        budget_str = f"{budget:.2f} USD" if budget is not None else "unlimited"

        lines = [
            f'Create a detailed {num_days}-day itinerary for a trip to {destination} named "{name}".',
            f"Budget: {budget_str}.",
            f"Interests: {', '.join(interests)}.",
            f"Special requests: {special_requests or 'None'}.",
            "",
            "For each day, suggest 3-5 activities (mix of place, stay, food, activity types).",
            "Also suggest 5 bucket list items (name, description).",
        ]
        return "\n".join(lines)


def get_trip_generator(settings: Settings) -> TripPlanGenerator:
    """Factory function to get the appropriate generator based on config.

    Returns:
        OpenAITripGenerator if an API key is configured, DeterministicStubGenerator otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI generator for trip plans")
        return OpenAITripGenerator(api_key=api_key.get_secret_value(), model=settings.openai_model)

    logger.warning("No OpenAI API key configured, using deterministic stub generator")
    return DeterministicStubGenerator()
