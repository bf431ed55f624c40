"""Attribute selection and provenance filters for resolved artifacts.

Selection is a plain predicate over an artifact's provenance plus its declared
attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contract.artifacts import (
    CATEGORY_ATTRIBUTE,
    COVERAGE_RESULTS,
    DEFAULT_TEST_SUITE,
    TEST_SUITE_NAME_ATTRIBUTE,
    VERIFICATION,
    VERIFICATION_TYPE_ATTRIBUTE,
)
from graph.models import ProjectComponentId

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from graph.models import ComponentId, ResolvedArtifact


@dataclass(frozen=True)
class ArtifactSelector:
    """Requested attributes of the artifacts to collect."""

    category: str = VERIFICATION
    verification_type: str = COVERAGE_RESULTS
    test_suite_name: str = DEFAULT_TEST_SUITE

    def attributes(self) -> dict[str, str]:
        return {
            CATEGORY_ATTRIBUTE: self.category,
            VERIFICATION_TYPE_ATTRIBUTE: self.verification_type,
            TEST_SUITE_NAME_ATTRIBUTE: self.test_suite_name,
        }

    def matches(self, attributes: Mapping[str, str]) -> bool:
        return all(
            attributes.get(name) == value for name, value in self.attributes().items()
        )


def is_project_component(component: ComponentId) -> bool:
    return isinstance(component, ProjectComponentId)


def member_filter(members: Iterable[str]) -> Callable[[ComponentId], bool]:
    """Accept only project components whose module is one of members."""
    names = frozenset(members)

    def accept(component: ComponentId) -> bool:
        return is_project_component(component) and component.module in names

    return accept


def select(
    artifacts: Iterable[ResolvedArtifact],
    selector: ArtifactSelector,
    component_filter: Callable[[ComponentId], bool] = is_project_component,
) -> Iterator[ResolvedArtifact]:
    """Yield artifacts matching the selector whose producer passes the filter."""
    for artifact in artifacts:
        if selector.matches(artifact.attributes) and component_filter(
            artifact.component
        ):
            yield artifact


__all__ = [
    "ArtifactSelector",
    "is_project_component",
    "member_filter",
    "select",
]
