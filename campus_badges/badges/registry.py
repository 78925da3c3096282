from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from campus_badges.badges.interface import QualificationStrategy
from campus_badges.badges.types import RequirementType

logger = logging.getLogger(__name__)


class StrategyRegistry:
    def __init__(self) -> None:
        self._strategies: Dict[RequirementType, QualificationStrategy] = {}

    def register(self, strategy: QualificationStrategy) -> None:
        # One strategy per requirement type; first registration wins
        if strategy.requirement_type in self._strategies:
            logger.debug(
                f'Strategy for {strategy.requirement_type.value} already registered'
            )
            return
        self._strategies[strategy.requirement_type] = strategy

    def get(
        self, requirement_type: RequirementType | str
    ) -> Optional[QualificationStrategy]:
        parsed = RequirementType.parse(requirement_type)
        if parsed is None:
            return None
        return self._strategies.get(parsed)

    def all(self) -> Mapping[RequirementType, QualificationStrategy]:
        return MappingProxyType(dict(self._strategies))

    def missing(self) -> list[RequirementType]:
        return [t for t in RequirementType if t not in self._strategies]

    def is_complete(self) -> bool:
        return not self.missing()


registry = StrategyRegistry()
