"""
Vertex adjacency of a triangulated surface.

The quadrangulation only needs two queries from the triangulation: how many
neighbors a vertex has and the k-th of them. TriangulationGraph answers both
from a networkx graph built on the triangle edges.
"""

import networkx as nx

from surfquad.tracer import get_tracer, trace


class TriangulationGraph:
    """
    Adjacency queries over a triangulation.

    Neighbors of a vertex are listed in ascending id order so that traversals
    are reproducible from run to run.
    """

    def __init__(self, graph):
        self.graph = graph
        self._neighbors = {}

    @classmethod
    def from_triangles(cls, triangles, vertex_count=None):
        """Build the adjacency graph from (a, b, c) vertex triples."""
        return cls(build_vertex_graph(triangles, vertex_count))

    def _sorted_neighbors(self, vertex):
        neighbors = self._neighbors.get(vertex)
        if neighbors is None:
            if vertex in self.graph:
                neighbors = sorted(self.graph.neighbors(vertex))
            else:
                neighbors = []
            self._neighbors[vertex] = neighbors
        return neighbors

    def get_vertex_neighbor_number(self, vertex):
        return len(self._sorted_neighbors(vertex))

    def get_vertex_neighbor(self, vertex, local_index):
        return self._sorted_neighbors(vertex)[local_index]

    @property
    def vertex_count(self):
        return self.graph.number_of_nodes()


@trace(label="build_vertex_graph")
def build_vertex_graph(triangles, vertex_count=None):
    """
    Build an undirected vertex graph from triangles.

    Isolated vertices up to vertex_count are kept as nodes without edges.
    """
    tracer = get_tracer()

    graph = nx.Graph()
    if vertex_count:
        graph.add_nodes_from(range(vertex_count))

    for a, b, c in triangles:
        graph.add_edge(a, b)
        graph.add_edge(b, c)
        graph.add_edge(c, a)

    tracer.event(f"Triangulation graph: nodes={graph.number_of_nodes()}, edges={graph.number_of_edges()}")

    return graph
