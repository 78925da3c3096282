from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from campus_badges.badges.errors import CatalogError, NotFoundError, ValidationError
from campus_badges.badges.schemas import BadgeCreate, BadgeUpdate, validate
from campus_badges.badges.templates import DEFAULT_TEMPLATES, BadgeTemplate
from campus_badges.badges.types import BadgeCategory, RequirementType
from campus_badges.database.db_manager import is_duplicate_key
from campus_badges.models.badge import Badge

logger = logging.getLogger(__name__)


def _enum_value(enum_cls, value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    try:
        return enum_cls(getattr(value, 'value', value)).value
    except ValueError as e:
        raise ValidationError(f'Unknown {field}: {value}', field=field) from e


class BadgeCatalog:
    def seed_defaults(
        self, templates: Iterable[BadgeTemplate] = DEFAULT_TEMPLATES
    ) -> list[dict[str, Any]]:
        '''Create each built-in badge whose name is not stored yet.'''
        created: list[dict[str, Any]] = []
        for template in templates:
            try:
                if Badge.find_by_name(template.name) is not None:
                    continue
            except Exception as e:
                raise CatalogError('Failed to initialize default badges') from e
            try:
                badge = self.create(template.as_payload())
            except ValidationError as e:
                if e.field == 'name':
                    # Seeded concurrently by another process
                    continue
                raise
            created.append(badge)
            logger.info(f'Created default badge: {template.name}')
        return created

    def find_active(
        self,
        category: BadgeCategory | str | None = None,
        requirement_type: RequirementType | str | None = None,
        is_active: bool | None = True,
    ) -> list[dict[str, Any]]:
        return self.find_all(
            {
                'category': _enum_value(BadgeCategory, category, 'category'),
                'requirement_type': _enum_value(
                    RequirementType, requirement_type, 'requirement_type'
                ),
                'is_active': is_active,
            }
        )

    def find_all(self, filters: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        try:
            return Badge.find_all(filters)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        except Exception as e:
            raise CatalogError('Failed to find badges') from e

    def find_by_id(self, badge_id: int) -> dict[str, Any]:
        try:
            badge = Badge.get(badge_id)
        except Exception as e:
            raise CatalogError('Failed to find badge') from e
        if badge is None:
            raise NotFoundError(badge_id=badge_id)
        return badge

    def find_by_name(self, name: str) -> dict[str, Any]:
        try:
            badge = Badge.find_by_name(name)
        except Exception as e:
            raise CatalogError('Failed to find badge') from e
        if badge is None:
            raise NotFoundError(f'No badge named {name!r}', name=name)
        return badge

    def find_by_category(self, category: BadgeCategory | str) -> list[dict[str, Any]]:
        value = _enum_value(BadgeCategory, category, 'category')
        try:
            return Badge.find_by_category(value)
        except Exception as e:
            raise CatalogError('Failed to find badges by category') from e

    def create(self, payload: Any) -> dict[str, Any]:
        data = validate(BadgeCreate, payload)
        try:
            return Badge.create(data.to_row())
        except Exception as e:
            if is_duplicate_key(e):
                raise ValidationError(
                    f'A badge named {data.name!r} already exists', field='name'
                ) from e
            logger.error(f'Error creating badge {data.name}: {e}')
            raise CatalogError('Failed to create badge') from e

    def update(self, badge_id: int, payload: Any) -> dict[str, Any]:
        data = validate(BadgeUpdate, payload)
        try:
            badge = Badge.update(badge_id, data.to_row())
        except Exception as e:
            if is_duplicate_key(e):
                raise ValidationError(
                    f'A badge named {data.name!r} already exists', field='name'
                ) from e
            logger.error(f'Error updating badge {badge_id}: {e}')
            raise CatalogError('Failed to update badge') from e
        if badge is None:
            raise NotFoundError(badge_id=badge_id)
        return badge

    def delete(self, badge_id: int) -> None:
        '''Remove a badge; its awards go with it (ON DELETE CASCADE).'''
        try:
            deleted = Badge.delete(badge_id)
        except Exception as e:
            logger.error(f'Error deleting badge {badge_id}: {e}')
            raise CatalogError('Failed to delete badge') from e
        if not deleted:
            raise NotFoundError(badge_id=badge_id)

    def count_active(self) -> int:
        try:
            return Badge.count_active()
        except Exception as e:
            raise CatalogError('Failed to count badges') from e


catalog = BadgeCatalog()
