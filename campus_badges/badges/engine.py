from __future__ import annotations

import logging
from typing import Any

import campus_badges.badges.strategies  # noqa: F401 ensure strategies register
from campus_badges.badges import assignment
from campus_badges.badges.catalog import catalog
from campus_badges.badges.errors import CatalogError, ProcessingError, SignalReadError
from campus_badges.badges.registry import registry
from campus_badges.badges.types import BadgeEarningEvent, Progress
from campus_badges.models.user_badge import UserBadge
from campus_badges.utils.tracing import add_span_metadata, trace_span

logger = logging.getLogger(__name__)


class BadgeEngine:
    def process_event(self, event: BadgeEarningEvent) -> list[dict[str, Any]]:
        '''Award every badge the event's user now qualifies for.

        Returns the newly earned records in evaluation order, each carrying its
        badge row under 'badge'. The event's value is informational; counters
        are re-read from storage.
        '''
        requirement_type = event.requirement_type
        event_type = getattr(event.event_type, 'value', event.event_type)
        span_metadata = {
            **event.metadata,
            'event_type': event_type,
            'user_id': event.user_id,
        }
        with trace_span('badges.process_event', span_metadata):
            strategy = registry.get(requirement_type) if requirement_type else None
            if strategy is None:
                logger.warning(f'Unknown badge requirement type: {event_type}')
                return []

            try:
                candidates = catalog.find_active(requirement_type=requirement_type)
            except CatalogError as e:
                raise ProcessingError() from e

            earned: list[dict[str, Any]] = []
            for badge in candidates:
                with trace_span(
                    'badges.badge_evaluation',
                    {'badge_id': badge['id'], 'badge_name': badge['name']},
                ):
                    try:
                        if UserBadge.held(event.user_id, badge['id']):
                            continue
                    except Exception as e:
                        raise ProcessingError() from e

                    try:
                        target = int(badge['requirement_target'])
                        qualifies = strategy.evaluate(event.user_id, target)
                    except SignalReadError as e:
                        raise ProcessingError() from e
                    except Exception:
                        # One broken definition must not sink the rest
                        logger.error(
                            f'Error checking qualification for badge {badge["name"]}',
                            exc_info=True,
                        )
                        continue
                    if not qualifies:
                        continue

                    record = assignment.award(
                        event.user_id, badge, Progress.complete(target)
                    )
                    if record is None:
                        continue
                    earned.append({**record, 'badge': badge})
                    logger.info(f'User {event.user_id} earned badge: {badge["name"]}')

            add_span_metadata('earned', len(earned))
            return earned


engine = BadgeEngine()
