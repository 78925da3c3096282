from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from campus_badges.badges.types import RequirementType


@runtime_checkable
class QualificationStrategy(Protocol):
    requirement_type: RequirementType

    def resolve(self, user_id: str) -> Optional[int]:
        '''
        Return the authoritative counter for this requirement, or None when the
        requirement has no counter source. Reader failures propagate.
        '''
        pass

    def evaluate(self, user_id: str, target: int) -> bool:
        '''Return True when the user's counter meets or exceeds target.'''
        pass
