"""Global pytest configuration."""

import os

# Settings defaults for tests, applied before any imports
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")
