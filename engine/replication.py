"""Copy a scenario's resource collection into another scenario."""

import logging
from typing import List

from engine.errors import ReplicationError, ValidationError
from models.resource import Resource

logger = logging.getLogger(__name__)


def detach_copy(resource: Resource) -> Resource:
    """Same field values, no identity, and containers of its own."""
    return resource.with_changes(
        id="",
        overrides=dict(resource.overrides),
        dynamic_holidays=tuple(resource.dynamic_holidays),
    )


async def copy_resources(store, source_scenario_id: str, target_scenario_id: str) -> List[str]:
    """Copy every resource of the source scenario into the target scenario.

    The target receives new records with fresh ids, all in one batch: either
    every copy becomes visible or none does. Returns the new ids.
    """
    if source_scenario_id == target_scenario_id:
        raise ValidationError(["Cannot copy a scenario's resources onto itself."])

    try:
        resources = await store.get_resources_once(source_scenario_id)
        if not resources:
            logger.info("No resources to copy from %s", source_scenario_id)
            return []
        new_ids = await store.add_resources_batch(
            target_scenario_id, [detach_copy(r) for r in resources]
        )
    except ValidationError:
        raise
    except Exception as exc:
        logger.error(
            "Copying resources %s -> %s failed: %s", source_scenario_id, target_scenario_id, exc
        )
        raise ReplicationError(
            f"Could not copy resources from {source_scenario_id} to {target_scenario_id}: {exc}",
            source_scenario_id,
            target_scenario_id,
        ) from exc

    logger.info(
        "Copied %d resources %s -> %s", len(new_ids), source_scenario_id, target_scenario_id
    )
    return new_ids
