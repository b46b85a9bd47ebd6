"""2D k-d tree for nearest-seed queries."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from pbnart.types import Seed

AXIS_X = 0
AXIS_Y = 1


@dataclass
class KDNode:
    """Tree node holding one seed; children split on ``axis``."""
    seed: Seed
    axis: int
    left: Optional["KDNode"] = None
    right: Optional["KDNode"] = None

    def coordinate(self, axis: int) -> int:
        return self.seed.x if axis == AXIS_X else self.seed.y


def _build(seeds: List[Seed], depth: int) -> Optional[KDNode]:
    if not seeds:
        return None

    axis = depth % 2
    # sorted() is stable, so equal coordinates keep their relative order
    if axis == AXIS_X:
        ordered = sorted(seeds, key=lambda s: s.x)
    else:
        ordered = sorted(seeds, key=lambda s: s.y)

    median = len(ordered) // 2
    return KDNode(
        seed=ordered[median],
        axis=axis,
        left=_build(ordered[:median], depth + 1),
        right=_build(ordered[median + 1:], depth + 1),
    )


class KDTree:
    """
    Static k-d tree over seeds.

    Built once and never mutated, so concurrent readers need no locking.
    Queries return ``Seed.index`` of a nearest seed by squared Euclidean
    distance. Among equally distant seeds the first one visited wins.
    """

    def __init__(self, seeds: Sequence[Seed]):
        self._size = len(seeds)
        self.root = _build(list(seeds), 0)
        self._flatten()

    def __len__(self) -> int:
        return self._size

    def depth(self) -> int:
        """Height of the tree (0 when empty)."""
        def _depth(node: Optional[KDNode]) -> int:
            if node is None:
                return 0
            return 1 + max(_depth(node.left), _depth(node.right))
        return _depth(self.root)

    def nearest(self, x: int, y: int) -> int:
        """Return the index of a seed nearest to (x, y); 0 for an empty tree."""
        if self.root is None:
            return 0

        best = [self.root, _distance_squared(x, y, self.root.seed)]
        self._search(self.root, x, y, best)
        return best[0].seed.index

    def _search(self, node: Optional[KDNode], x: int, y: int, best: list) -> None:
        if node is None:
            return

        dist = _distance_squared(x, y, node.seed)
        if dist < best[1]:
            best[0] = node
            best[1] = dist

        diff = (x if node.axis == AXIS_X else y) - node.coordinate(node.axis)
        if diff < 0:
            near, far = node.left, node.right
        else:
            near, far = node.right, node.left

        self._search(near, x, y, best)

        # The far side can only hold a closer seed if the splitting
        # line is nearer than the current best
        if diff * diff < best[1]:
            self._search(far, x, y, best)

    def nearest_many(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Batch version of :meth:`nearest`.

        Walks the tree once per node for all queries that reach it, in the
        same near-then-far order with the same pruning rule, so each result
        equals what :meth:`nearest` returns for that point.

        Args:
            xs: Query x coordinates (any shape)
            ys: Query y coordinates (same shape as ``xs``)

        Returns:
            int64 array of seed indices with the shape of ``xs``
        """
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        shape = xs.shape
        xs = xs.ravel()
        ys = ys.ravel()

        if self.root is None or xs.size == 0:
            return np.zeros(shape, dtype=np.int64)

        best_node = np.zeros(xs.size, dtype=np.int64)
        best_dist = (xs - self._node_x[0]) ** 2 + (ys - self._node_y[0]) ** 2
        queries = np.arange(xs.size)

        self._search_many(0, queries, xs, ys, best_node, best_dist)
        return self._node_index[best_node].reshape(shape)

    def _search_many(
        self,
        node: int,
        queries: np.ndarray,
        xs: np.ndarray,
        ys: np.ndarray,
        best_node: np.ndarray,
        best_dist: np.ndarray,
    ) -> None:
        if node < 0 or queries.size == 0:
            return

        qx = xs[queries]
        qy = ys[queries]
        node_x = self._node_x[node]
        node_y = self._node_y[node]

        dist = (qx - node_x) ** 2 + (qy - node_y) ** 2
        closer = dist < best_dist[queries]
        improved = queries[closer]
        best_dist[improved] = dist[closer]
        best_node[improved] = node

        if self._node_axis[node] == AXIS_X:
            diff = qx - node_x
        else:
            diff = qy - node_y

        goes_left = diff < 0
        near_left = queries[goes_left]
        near_right = queries[~goes_left]
        left = self._left[node]
        right = self._right[node]

        self._search_many(left, near_left, xs, ys, best_node, best_dist)
        self._search_many(right, near_right, xs, ys, best_node, best_dist)

        # Far sides, checked only after each query's near side is finished
        diff_left = diff[goes_left]
        far_right = near_left[diff_left * diff_left < best_dist[near_left]]
        self._search_many(right, far_right, xs, ys, best_node, best_dist)

        diff_right = diff[~goes_left]
        far_left = near_right[diff_right * diff_right < best_dist[near_right]]
        self._search_many(left, far_left, xs, ys, best_node, best_dist)

    def _flatten(self) -> None:
        """Mirror the node structure into arrays for batch queries."""
        nodes: List[KDNode] = []
        ids = {}

        def _visit(node: Optional[KDNode]) -> None:
            if node is None:
                return
            ids[id(node)] = len(nodes)
            nodes.append(node)
            _visit(node.left)
            _visit(node.right)

        _visit(self.root)

        def _child_id(child: Optional[KDNode]) -> int:
            return -1 if child is None else ids[id(child)]

        self._node_x = np.array([n.seed.x for n in nodes], dtype=np.int64)
        self._node_y = np.array([n.seed.y for n in nodes], dtype=np.int64)
        self._node_index = np.array([n.seed.index for n in nodes], dtype=np.int64)
        self._node_axis = np.array([n.axis for n in nodes], dtype=np.int64)
        self._left = np.array([_child_id(n.left) for n in nodes], dtype=np.int64)
        self._right = np.array([_child_id(n.right) for n in nodes], dtype=np.int64)


def _distance_squared(x: int, y: int, seed: Seed) -> int:
    dx = x - seed.x
    dy = y - seed.y
    return dx * dx + dy * dy
