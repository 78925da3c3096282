import pytest

from campus_badges.badges.errors import ValidationError
from campus_badges.badges.schemas import (
    BadgeCreate,
    BadgeUpdate,
    ProgressUpdate,
    validate,
)
from campus_badges.badges.templates import DEFAULT_TEMPLATES
from campus_badges.badges.types import BadgeEarningEvent, RequirementType


def test_every_template_is_a_valid_badge():
    for template in DEFAULT_TEMPLATES:
        data = validate(BadgeCreate, template.as_payload())
        row = data.to_row()
        assert row['requirement_target'] >= 1
        assert row['category'] == template.category.value


def test_template_names_are_unique():
    names = [t.name for t in DEFAULT_TEMPLATES]
    assert len(names) == len(set(names)) == 12


def test_update_row_only_has_set_fields():
    data = validate(BadgeUpdate, {'rarity': 'epic'})
    assert data.to_row() == {'rarity': 'epic'}

    data = validate(BadgeUpdate, {'requirement': {'type': 'cafes_visited', 'target': 2}})
    assert data.to_row() == {
        'requirement_type': 'cafes_visited',
        'requirement_target': 2,
        'requirement_timeframe': None,
        'requirement_conditions': None,
    }


def test_requirement_rejects_unknown_keys():
    with pytest.raises(ValidationError) as exc:
        validate(
            BadgeUpdate,
            {'requirement': {'type': 'cafes_visited', 'target': 2, 'bonus': 1}},
        )
    assert exc.value.field == 'requirement.bonus'


def test_progress_update_bounds():
    p = validate(ProgressUpdate, {'current': 2, 'target': 4}).to_progress()
    assert p.percentage == 50

    p = validate(
        ProgressUpdate, {'current': 2, 'target': 3, 'percentage': 66.67}
    ).to_progress()
    assert p.percentage == pytest.approx(200 / 3)

    with pytest.raises(ValidationError):
        validate(ProgressUpdate, {'current': 5, 'target': 4})
    with pytest.raises(ValidationError):
        validate(ProgressUpdate, {'current': 1})


def test_event_type_parsing():
    assert BadgeEarningEvent('u1', 'PINS_CREATED').requirement_type is (
        RequirementType.PINS_CREATED
    )
    assert BadgeEarningEvent('u1', 'juggling').requirement_type is None
    assert BadgeEarningEvent('u1', RequirementType.TIME_SPENT).value == 1


def test_progress_percentage_must_agree_with_counts():
    with pytest.raises(ValidationError):
        validate(ProgressUpdate, {'current': 0, 'target': 5, 'percentage': 100})
    with pytest.raises(ValidationError) as exc:
        validate(ProgressUpdate, {'current': 1, 'target': 5, 'last_seen': 'now'})
    assert exc.value.field == 'last_seen'


def test_update_rejects_explicit_null():
    for field in ('name', 'icon', 'category', 'requirement', 'is_active'):
        with pytest.raises(ValidationError) as exc:
            validate(BadgeUpdate, {field: None})
        assert exc.value.field == field

    assert validate(BadgeUpdate, {}).to_row() == {}
