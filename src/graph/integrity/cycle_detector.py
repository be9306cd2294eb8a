"""
Cycle Detection.

Two detectors over flat ID-keyed adjacency maps:
- Parent-pointer chains (one outgoing edge per node), memoized across walks
- Dependency graphs (many outgoing edges), three-color DFS

Every node on a cycle is reported at least once. Cycles sharing members
across different roots may be reported more than once.
"""

from collections.abc import Callable, Iterable, Mapping
from enum import IntEnum

import structlog

from src.graph.schema import ActivityEntity, EntityModel

logger = structlog.get_logger(__name__)

ParentResolver = Callable[[str], str]


def detect_cycle(
    start_id: str,
    resolve_parent: ParentResolver,
    global_visited: set[str],
) -> list[str] | None:
    """
    Walk parent pointers from start_id looking for a back-edge.

    Args:
        start_id: Node to start from
        resolve_parent: Returns a node's parent ID, "" when it has none
        global_visited: Nodes already settled by earlier walks; updated in place

    Returns:
        The cycle closed on its first node (e.g. ["a", "b", "a"]), or None
    """
    local_visited: set[str] = set()
    path: list[str] = []
    cycle: list[str] | None = None

    current = start_id
    while current:
        if current in global_visited:
            break

        if current in local_visited:
            cycle_start = path.index(current)
            cycle = path[cycle_start:] + [current]
            break

        local_visited.add(current)
        path.append(current)
        current = resolve_parent(current)

    global_visited.update(local_visited)
    return cycle


class _Color(IntEnum):
    WHITE = 0  # Unvisited
    GRAY = 1   # On the current DFS path
    BLACK = 2  # Finished


class CycleDetector:
    """
    Finds cycles in parent hierarchies and dependency graphs.

    Usage:
        ```python
        detector = CycleDetector()

        parent_map = CycleDetector.build_parent_map(objectives)
        for cycle in detector.find_parent_cycles(parent_map):
            print(cycle)

        graph = CycleDetector.build_dependency_graph(activities, include_parent=True)
        cycles = detector.find_dependency_cycles(graph)
        ```
    """

    @staticmethod
    def build_parent_map(entities: Iterable[EntityModel]) -> dict[str, str]:
        """Map each entity ID to its parent_id ("" for roots)."""
        return {entity.id: getattr(entity, "parent_id", "") or "" for entity in entities}

    @staticmethod
    def build_dependency_graph(
        activities: Iterable[ActivityEntity],
        include_parent: bool = True,
    ) -> dict[str, list[str]]:
        """
        Map each activity ID to its outgoing edges.

        Args:
            activities: Fetched activities
            include_parent: Treat the parent pointer as one more dependency edge

        Returns:
            Adjacency map; edge targets may be IDs absent from the map
        """
        graph: dict[str, list[str]] = {}
        for activity in activities:
            edges = [dep for dep in activity.dependencies if dep]
            if include_parent and activity.parent_id:
                edges.append(activity.parent_id)
            graph[activity.id] = edges
        return graph

    def find_parent_cycles(self, parent_map: Mapping[str, str]) -> list[list[str]]:
        """
        Find cycles in a single-parent hierarchy.

        Roots are walked in ascending ID order; nodes settled by an earlier
        walk are skipped.
        """
        global_visited: set[str] = set()
        cycles: list[list[str]] = []

        def resolve(node_id: str) -> str:
            return parent_map.get(node_id, "")

        for node_id in sorted(parent_map):
            if node_id in global_visited or not parent_map[node_id]:
                continue

            cycle = detect_cycle(node_id, resolve, global_visited)
            if cycle:
                cycles.append(cycle)

        return cycles

    def find_dependency_cycles(self, graph: Mapping[str, list[str]]) -> list[list[str]]:
        """
        Find cycles in a multi-edge dependency graph.

        Every node is used as a DFS root in ascending ID order unless already
        finished. The search continues past each cycle found. Edges to IDs that
        are not keys of the graph are treated as leaves.
        """
        color: dict[str, _Color] = {}
        cycles: list[list[str]] = []

        for root in sorted(graph):
            if color.get(root, _Color.WHITE) != _Color.WHITE:
                continue

            path: list[str] = [root]
            color[root] = _Color.GRAY
            stack: list[tuple[str, Iterable[str]]] = [(root, iter(graph.get(root, ())))]

            while stack:
                node_id, edges = stack[-1]
                next_id = next(edges, None)

                if next_id is None:
                    stack.pop()
                    path.pop()
                    color[node_id] = _Color.BLACK
                    continue

                state = color.get(next_id, _Color.WHITE)
                if state == _Color.BLACK:
                    continue
                if state == _Color.GRAY:
                    cycle_start = path.index(next_id)
                    cycles.append(path[cycle_start:] + [next_id])
                    continue

                color[next_id] = _Color.GRAY
                path.append(next_id)
                stack.append((next_id, iter(graph.get(next_id, ()))))

        if cycles:
            logger.debug("Dependency cycles found", count=len(cycles))

        return cycles
