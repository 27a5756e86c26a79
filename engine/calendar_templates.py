"""Calendar templates: named presets of leaves and holidays used to seed new resources."""

import logging
from typing import Iterable, List, Optional

from data.validator import validate_template
from engine.calendar_rules import DateLike, to_iso
from engine.errors import ScenarioNotFoundError, ValidationError
from models.resource import CalendarTemplate, Country, Resource

logger = logging.getLogger(__name__)


def seed_resource(resource: Resource, template: CalendarTemplate) -> Resource:
    """Copy a template's overrides and holidays into a resource being created.

    Values already set on the resource win over the template's.
    """
    overrides = dict(template.overrides)
    overrides.update(resource.overrides)
    holidays = tuple(sorted(set(template.dynamic_holidays) | set(resource.dynamic_holidays)))
    return resource.with_changes(overrides=overrides, dynamic_holidays=holidays)


def default_template(templates: Iterable[CalendarTemplate], country) -> Optional[CalendarTemplate]:
    country = Country(country)
    return next((t for t in templates if t.country is country and t.is_default), None)


class CalendarTemplateService:
    """Template CRUD keeping at most one default template per country."""

    def __init__(self, store):
        self.store = store

    async def list_templates(self, country: Optional[Country] = None) -> List[CalendarTemplate]:
        return await self.store.list_templates(country)

    async def default_for(self, country: Country) -> Optional[CalendarTemplate]:
        return default_template(await self.store.list_templates(country), country)

    async def create_template(self, template: CalendarTemplate) -> str:
        result = validate_template(template)
        if not result.is_valid:
            raise ValidationError(result.errors)
        if template.is_default:
            await self._unset_defaults(template.country)
        template_id = await self.store.create_template(template)
        logger.info("Created calendar template %s (%s)", template.name, template.country.value)
        return template_id

    async def update_template(self, template_id: str, **changes) -> None:
        changes.pop("id", None)
        current = await self.store.get_template(template_id)
        if current is None:
            raise ScenarioNotFoundError(f"Calendar template {template_id} not found")
        if "country" in changes and not isinstance(changes["country"], Country):
            changes["country"] = Country(changes["country"])

        updated = current.with_changes(**changes)
        result = validate_template(updated)
        if not result.is_valid:
            raise ValidationError(result.errors)
        if updated.is_default:
            await self._unset_defaults(updated.country, exclude_id=template_id)
        await self.store.update_template(template_id, **changes)

    async def set_override(self, template_id: str, day: DateLike, value: Optional[float]) -> None:
        """Set one day of the template, or drop it again with ``None``."""
        try:
            iso = to_iso(day)
        except (TypeError, ValueError):
            raise ValidationError([f"Template override: '{day}' is not a YYYY-MM-DD date."]) from None
        current = await self.store.get_template(template_id)
        if current is None:
            raise ScenarioNotFoundError(f"Calendar template {template_id} not found")

        overrides = dict(current.overrides)
        if value is None:
            overrides.pop(iso, None)
        else:
            overrides[iso] = value
        await self.update_template(template_id, overrides=overrides)

    async def delete_template(self, template_id: str) -> None:
        await self.store.delete_template(template_id)

    async def _unset_defaults(self, country: Country, exclude_id: Optional[str] = None) -> None:
        for other in await self.store.list_templates(country):
            if other.is_default and other.id != exclude_id:
                await self.store.update_template(other.id, is_default=False)
