"""Export JSON schemas for the trip views and request bodies."""

import json
from pathlib import Path

from backend.trips.models import (
    CreateAITripRequest,
    CreateTripRequest,
    GeneratedPlan,
    SharedTripView,
    TripView,
)


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (TripView, SharedTripView, CreateTripRequest, CreateAITripRequest, GeneratedPlan):
        schema = model.model_json_schema()
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
