"""Immutable data contracts for the knowledge graph viewer."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


class NodeKind(str, Enum):
    """Entity categories rendered by the graph view."""

    PAPER = "paper"
    AUTHOR = "author"
    INSTITUTION = "institution"
    CODE = "code"


class RelationKind(str, Enum):
    """Relation categories between graph entities.

    The relation kind is cosmetic: every link exerts the same spring force.
    """

    AUTHORED = "authored"
    CITED = "cited"
    AFFILIATED_WITH = "affiliated"
    IMPLEMENTS = "implemented"


class GraphNodeSpec(_FrozenBaseModel):
    """Graph entity supplied by the graph-generation collaborator."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    kind: NodeKind
    year: Optional[int] = Field(None, ge=1900, le=2100)
    citation_count: Optional[int] = Field(None, ge=0)
    external_url: Optional[str] = Field(None, min_length=1, description="Link opened when the node is clicked.")

    @model_validator(mode="after")
    def _paper_only_metadata(self) -> "GraphNodeSpec":
        """Validate that publication metadata only appears on papers.

        Returns:
            GraphNodeSpec: The validated node.

        Raises:
            ValueError: If ``year`` or ``citation_count`` is set on a non-paper node.
        """
        if self.kind is not NodeKind.PAPER and (self.year is not None or self.citation_count is not None):
            raise ValueError("year and citation_count are only valid for paper nodes")
        return self


class GraphLinkSpec(_FrozenBaseModel):
    """Directed relation referencing two nodes by identifier."""

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    relation_kind: RelationKind


class GraphPayload(_FrozenBaseModel):
    """Node/link set replacing the current graph wholesale."""

    nodes: List[GraphNodeSpec] = Field(default_factory=list)
    links: List[GraphLinkSpec] = Field(default_factory=list)


__all__ = [
    "NodeKind",
    "RelationKind",
    "GraphNodeSpec",
    "GraphLinkSpec",
    "GraphPayload",
]
