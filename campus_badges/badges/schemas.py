'''
Pydantic schemas for badge definitions and admin progress overrides
'''

from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from campus_badges.badges.errors import ValidationError
from campus_badges.badges.types import (
    BadgeCategory,
    BadgeRarity,
    Progress,
    RequirementType,
)

SchemaT = TypeVar('SchemaT', bound=BaseModel)

# Rounding slack for client-computed percentages
PERCENTAGE_TOLERANCE = 0.01


class RequirementSchema(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: RequirementType
    target: int = Field(..., ge=1)
    timeframe: Optional[str] = None
    conditions: Optional[Dict[str, Any]] = None


class BadgeCreate(BaseModel):
    '''Shape shared by built-in templates and admin-created badges'''

    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    icon: str = Field(..., min_length=1)
    category: BadgeCategory
    rarity: BadgeRarity
    requirement: RequirementSchema
    is_active: bool = True

    def to_row(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'category': self.category.value,
            'rarity': self.rarity.value,
            'is_active': self.is_active,
            **requirement_columns(self.requirement),
        }


class BadgeUpdate(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    icon: Optional[str] = Field(None, min_length=1)
    category: Optional[BadgeCategory] = None
    rarity: Optional[BadgeRarity] = None
    requirement: Optional[RequirementSchema] = None
    is_active: Optional[bool] = None

    @field_validator(
        'name',
        'description',
        'icon',
        'category',
        'rarity',
        'requirement',
        'is_active',
    )
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; null would clear a NOT NULL column
        if value is None:
            raise ValueError('may be omitted but not null')
        return value

    def to_row(self) -> dict[str, Any]:
        values = self.model_dump(exclude_unset=True, exclude={'requirement'})
        row = {k: getattr(v, 'value', v) for k, v in values.items()}
        if self.requirement is not None:
            row.update(requirement_columns(self.requirement))
        return row


class ProgressUpdate(BaseModel):
    '''Admin progress snapshot. percentage is derived; if sent it must agree.'''

    model_config = ConfigDict(extra='forbid')

    current: int = Field(..., ge=0)
    target: int = Field(..., ge=1)
    percentage: Optional[float] = Field(None, ge=0, le=100)

    @model_validator(mode='after')
    def _consistent_snapshot(self) -> 'ProgressUpdate':
        if self.current > self.target:
            raise ValueError('current cannot exceed target')
        if self.percentage is not None:
            expected = Progress.compute(self.current, self.target).percentage
            if abs(self.percentage - expected) > PERCENTAGE_TOLERANCE:
                raise ValueError(
                    f'percentage {self.percentage} does not match '
                    f'{self.current}/{self.target}'
                )
        return self

    def to_progress(self) -> Progress:
        return Progress.compute(self.current, self.target)


def requirement_columns(requirement: RequirementSchema) -> dict[str, Any]:
    return {
        'requirement_type': requirement.type.value,
        'requirement_target': requirement.target,
        'requirement_timeframe': requirement.timeframe,
        'requirement_conditions': requirement.conditions,
    }


def validate(schema: Type[SchemaT], payload: Any) -> SchemaT:
    '''Parse a payload, raising the engine's ValidationError on bad shape.'''
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = '.'.join(str(p) for p in first.get('loc', ())) or None
        raise ValidationError(
            f'Invalid {schema.__name__} data', field=field, errors=e.errors()
        ) from e
