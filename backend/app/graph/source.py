"""Mocked graph-generation collaborator and related-node lookup."""
from __future__ import annotations

import logging
from typing import List, Optional

from backend.app.contracts import GraphLinkSpec, GraphNodeSpec, GraphPayload, NodeKind, RelationKind

LOGGER = logging.getLogger(__name__)

DEFAULT_RELATED_LIMIT = 5


def _node(
    node_id: str,
    name: str,
    kind: NodeKind,
    url: str,
    *,
    year: Optional[int] = None,
    citations: Optional[int] = None,
) -> GraphNodeSpec:
    return GraphNodeSpec(
        id=node_id,
        name=name,
        kind=kind,
        year=year,
        citation_count=citations,
        external_url=url,
    )


SAMPLE_GRAPH = GraphPayload(
    nodes=[
        _node("1", "McDonald et al.", NodeKind.AUTHOR, "https://scholar.google.com/citations?user=mcdonald"),
        _node(
            "2",
            "Deep Learning in NLP",
            NodeKind.PAPER,
            "https://arxiv.org/abs/2023.12345",
            year=2023,
            citations=245,
        ),
        _node("3", "Stanford NLP Lab", NodeKind.INSTITUTION, "https://nlp.stanford.edu/"),
        _node(
            "4",
            "Transformer Architecture",
            NodeKind.PAPER,
            "https://arxiv.org/abs/1706.03762",
            year=2022,
            citations=1203,
        ),
        _node("5", "BERT Implementation", NodeKind.CODE, "https://github.com/google-research/bert"),
        _node(
            "6",
            "GPT-3 Analysis",
            NodeKind.PAPER,
            "https://arxiv.org/abs/2005.14165",
            year=2023,
            citations=567,
        ),
        _node("7", "OpenAI Research", NodeKind.INSTITUTION, "https://openai.com/research"),
        _node("8", "Brown et al.", NodeKind.AUTHOR, "https://scholar.google.com/citations?user=brown"),
    ],
    links=[
        GraphLinkSpec(source_id="1", target_id="2", relation_kind=RelationKind.AUTHORED),
        GraphLinkSpec(source_id="1", target_id="3", relation_kind=RelationKind.AFFILIATED_WITH),
        GraphLinkSpec(source_id="2", target_id="4", relation_kind=RelationKind.CITED),
        GraphLinkSpec(source_id="4", target_id="5", relation_kind=RelationKind.IMPLEMENTS),
        GraphLinkSpec(source_id="8", target_id="6", relation_kind=RelationKind.AUTHORED),
        GraphLinkSpec(source_id="8", target_id="7", relation_kind=RelationKind.AFFILIATED_WITH),
        GraphLinkSpec(source_id="6", target_id="4", relation_kind=RelationKind.CITED),
    ],
)


class SampleGraphSource:
    """Return a fixed research graph for any topic query."""

    def __init__(self, payload: GraphPayload = SAMPLE_GRAPH) -> None:
        self._payload = payload

    def generate(self, query: str) -> GraphPayload:
        """Produce the node/link set for ``query``.

        Raises:
            ValueError: If the query is blank.
        """

        topic = query.strip()
        if not topic:
            raise ValueError("Graph query must not be empty")
        LOGGER.info(
            "Generated graph for query %r (nodes=%d, links=%d)",
            topic,
            len(self._payload.nodes),
            len(self._payload.links),
        )
        return self._payload


def find_related_nodes(
    payload: GraphPayload,
    node_id: str,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> List[GraphNodeSpec]:
    """Return nodes directly linked to ``node_id``, in payload order.

    Args:
        payload: Node/link set to search.
        node_id: Identifier of the node being explored.
        limit: Maximum number of related nodes to return.

    Returns:
        List[GraphNodeSpec]: Linked nodes excluding ``node_id`` itself.
    """

    linked: set[str] = set()
    for link in payload.links:
        if link.source_id == node_id:
            linked.add(link.target_id)
        elif link.target_id == node_id:
            linked.add(link.source_id)
    linked.discard(node_id)
    related = [node for node in payload.nodes if node.id in linked]
    return related[: max(limit, 0)]


__all__ = ["DEFAULT_RELATED_LIMIT", "SAMPLE_GRAPH", "SampleGraphSource", "find_related_nodes"]
