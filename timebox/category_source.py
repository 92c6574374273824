"""
Category source - read a snapshot of category constraints from YAML.

Category CRUD lives elsewhere; a session only needs a one-time snapshot of
{id, priority, weight, min_duration, max_duration} at start.

File format:

    categories:
      - id: deep_work
        priority: 1
        weight: 2
        min_duration: 30
      - id: admin
        priority: 4
        max_duration: 20
"""

import logging
from pathlib import Path

import yaml

from timebox import paths
from timebox.allocation.models import AllocationConstraint
from timebox.contracts import CategoryFile

logger = logging.getLogger(__name__)


def parse_categories(data: dict | list | None) -> list[AllocationConstraint]:
    """
    Validate raw YAML data into constraints.

    Accepts either a mapping with a `categories` list or a bare list.
    Raises pydantic.ValidationError on invalid entries.
    """
    if data is None:
        return []
    if isinstance(data, list):
        data = {"categories": data}

    parsed = CategoryFile.model_validate(data)
    return [
        AllocationConstraint(
            id=c.id,
            priority=c.priority,
            weight=c.weight,
            min_duration=c.min_duration,
            max_duration=c.max_duration,
        )
        for c in parsed.categories
    ]


def load_categories(path: Path | None = None) -> list[AllocationConstraint]:
    """
    Load category constraints from a YAML file.

    A missing file yields an empty list (the allocation engine then reports
    no_contexts). Unreadable YAML is logged and also yields an empty list.
    """
    if path is None:
        path = paths.categories_file()

    if not path.exists():
        logger.warning("Categories file not found: %s", path)
        return []

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as exc:
        logger.error("Failed to read categories file %s: %s", path, exc)
        return []

    constraints = parse_categories(data)
    logger.debug("Loaded %d categories from %s", len(constraints), path)
    return constraints
