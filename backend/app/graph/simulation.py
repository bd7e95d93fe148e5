"""Force-directed layout step for the interactive graph view."""
from __future__ import annotations

import math

from backend.app.config import SimulationConfig
from backend.app.graph.model import GraphSnapshot

MIN_DISTANCE = 1.0


class ForceSimulation:
    """Advance node velocities and positions one discrete tick at a time.

    Every tick applies pairwise repulsion, linear springs along resolved
    links, a centering pull and damped integration. The step never reports
    convergence; callers keep ticking for as long as the view is mounted.
    """

    def __init__(self, settings: SimulationConfig) -> None:
        self._settings = settings

    @property
    def settings(self) -> SimulationConfig:
        return self._settings

    def tick(self, snapshot: GraphSnapshot) -> None:
        """Apply one simulation step to ``snapshot`` in place.

        Args:
            snapshot: Node/link set whose positions and velocities are updated.
        """

        nodes = snapshot.nodes
        if not nodes:
            return
        settings = self._settings

        # O(n^2) pairwise repulsion; node counts stay in the tens.
        count = len(nodes)
        for i in range(count):
            first = nodes[i]
            for j in range(i + 1, count):
                second = nodes[j]
                dx = second.x - first.x
                dy = second.y - first.y
                distance = max(math.hypot(dx, dy), MIN_DISTANCE)
                force = settings.repulsion / (distance * distance)
                fx = dx / distance * force
                fy = dy / distance * force
                first.vx -= fx
                first.vy -= fy
                second.vx += fx
                second.vy += fy

        for _link, source, target in snapshot.resolved_links():
            dx = target.x - source.x
            dy = target.y - source.y
            distance = max(math.hypot(dx, dy), MIN_DISTANCE)
            force = distance * settings.spring_stiffness
            fx = dx / distance * force
            fy = dy / distance * force
            source.vx += fx
            source.vy += fy
            target.vx -= fx
            target.vy -= fy

        centre_x, centre_y = settings.centre
        for node in nodes:
            node.vx += (centre_x - node.x) * settings.centering
            node.vy += (centre_y - node.y) * settings.centering

        for node in nodes:
            node.vx *= settings.damping
            node.vy *= settings.damping
            node.x += node.vx
            node.y += node.vy

    def run(self, snapshot: GraphSnapshot, ticks: int) -> None:
        """Apply ``ticks`` consecutive steps; used for offline rendering."""

        for _ in range(max(ticks, 0)):
            self.tick(snapshot)


__all__ = ["ForceSimulation", "MIN_DISTANCE"]
