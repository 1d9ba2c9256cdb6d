"""
Common manifold test between critical points.

Two saddles close to the same ascending/descending manifold are likely to
bound the same quadrangle. Membership is approximated by looking at the
segmentation ids found in a small breadth-first neighborhood around each
critical point.
"""

from collections import deque
from functools import reduce

from surfquad.tracer import get_tracer


# maximum number of triangulation vertices visited around each point
NEIGHBORHOOD_SIZE = 20


def neighborhood_manifolds(start_vertex, segmentation, triangulation, max_visited=NEIGHBORHOOD_SIZE):
    """
    Segmentation ids found around a vertex.

    Breadth-first traversal of the vertex adjacency starting at start_vertex,
    stopped once max_visited distinct vertices have been seen.
    """
    manifolds = set()
    visited = set()
    frontier = deque([start_vertex])

    while frontier and len(visited) < max_visited:
        current = frontier.popleft()
        if current in visited:
            continue
        visited.add(current)
        manifolds.add(segmentation[current])

        for local_index in range(triangulation.get_vertex_neighbor_number(current)):
            neighbor = triangulation.get_vertex_neighbor(current, local_index)
            if neighbor not in visited:
                frontier.append(neighbor)

    return manifolds


def has_common_manifold(point_ids, critical_points, segmentation, triangulation):
    """
    Check whether critical points lie near a shared manifold.

    Args:
        point_ids: critical point identifiers, usually two saddles
        critical_points: critical point table indexed by identifier
        segmentation: manifold id per triangulation vertex
        triangulation: adjacency collaborator

    Returns:
        True if the neighborhoods of all points share a segmentation id
    """
    tracer = get_tracer()

    if not point_ids:
        return False

    vertex_ids = [critical_points[p].vertex_id for p in point_ids]
    per_point = [
        neighborhood_manifolds(v, segmentation, triangulation)
        for v in vertex_ids
    ]
    common = reduce(lambda left, right: left & right, per_point)

    tracer.event(
        f"Common manifolds between vertices {vertex_ids}: {sorted(common)}",
        level="DEBUG",
    )

    return len(common) > 0
