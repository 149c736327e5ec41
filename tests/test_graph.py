import pytest
import numpy as np
from deepgraph.core import (
    ArityMismatch,
    FromDict,
    FromOp,
    Graph,
    InvalidReference,
    UnknownOpKind,
    as_input,
)
from deepgraph.ops import Add, Identity, Multiply, Split


class TestInputs:
    """Tests for the two input variants"""

    def test_as_input_conversions(self):
        assert as_input("x") == FromDict("x")
        assert as_input(3) == FromOp(3, 0)
        assert as_input((2, 1)) == FromOp(2, 1)
        assert as_input(FromOp(1)) == FromOp(1, 0)

    def test_as_input_rejects_other_values(self):
        with pytest.raises(TypeError):
            as_input(1.5)
        with pytest.raises(TypeError):
            as_input(True)

    def test_numpy_integer_indices(self):
        """Indices coming out of numpy (e.g. np.argmax) are accepted and stored as int"""
        reference = as_input(np.int64(2))
        assert reference == FromOp(2, 0)
        assert type(reference.node) is int
        assert as_input((np.int32(1), np.int64(0))) == FromOp(1, 0)
        assert type(FromOp(np.int64(3), np.int64(1)).output) is int

    def test_negative_reference_rejected(self):
        with pytest.raises(InvalidReference):
            FromOp(-1)

    def test_inputs_are_frozen(self):
        reference = FromOp(0)
        with pytest.raises(Exception):
            reference.node = 3


class TestGraphConstruction:
    """Tests for the append-only builder"""

    def test_add_op_returns_sequential_indices(self):
        graph = Graph()
        x = graph.add_op("identity", ["x"])
        y = graph.add_op(Multiply, [FromOp(x), FromOp(x)])
        z = graph.add_op("add", [y, "b"])

        assert (x, y, z) == (0, 1, 2)
        assert len(graph) == 3
        assert graph[1].kind is Multiply
        assert graph[2].inputs == (FromOp(1, 0), FromDict("b"))
        assert graph[2].dependencies() == (1,)

    def test_forward_reference_rejected(self):
        graph = Graph()
        graph.add_op("identity", ["x"])
        with pytest.raises(InvalidReference) as info:
            graph.add_op("add", [FromOp(0), FromOp(1)])
        assert info.value.node == 1
        assert info.value.graph_size == 1

    def test_self_reference_rejected(self):
        graph = Graph()
        with pytest.raises(InvalidReference):
            graph.add_op("identity", [FromOp(0)])

    def test_rejected_call_leaves_graph_unmodified(self):
        graph = Graph()
        graph.add_op("identity", ["x"])
        before = graph.ops

        with pytest.raises(InvalidReference):
            graph.add_op("add", [FromOp(0), FromOp(5)])

        assert graph.ops == before
        assert len(graph) == 1
        # The next successful op still gets the next index
        assert graph.add_op("identity", [FromOp(0)]) == 1

    def test_missing_output_rejected(self):
        graph = Graph()
        graph.add_op("identity", ["x"])
        with pytest.raises(InvalidReference):
            graph.add_op("identity", [FromOp(0, 1)])

    def test_multi_output_references(self):
        graph = Graph()
        parts = graph.add_op(Split, ["x"], sections=3)
        assert graph[parts].num_outputs == 3
        graph.add_op("add", [FromOp(parts, 0), FromOp(parts, 2)])
        with pytest.raises(InvalidReference):
            graph.add_op("identity", [FromOp(parts, 3)])

    def test_invalid_split_sections(self):
        graph = Graph()
        with pytest.raises(ValueError):
            graph.add_op("split", ["x"], sections=0)
        assert len(graph) == 0

    def test_arity_checked(self):
        graph = Graph()
        with pytest.raises(ArityMismatch):
            graph.add_op("add", ["x"])
        with pytest.raises(TypeError):
            graph.add_op(Identity, ["x", "y"])
        assert len(graph) == 0

    def test_unknown_kind(self):
        graph = Graph()
        with pytest.raises(UnknownOpKind):
            graph.add_op("convolve", ["x"])

    def test_output_helper(self):
        graph = Graph()
        node = graph.add_op("identity", ["x"])
        assert graph.output(node) == FromOp(0, 0)
        with pytest.raises(InvalidReference):
            graph.output(1)

    def test_attrs_are_read_only(self):
        graph = Graph()
        node = graph.add_op("reshape", ["x"], shape=(2, 2))
        assert graph[node].attrs["shape"] == (2, 2)
        with pytest.raises(TypeError):
            graph[node].attrs["shape"] = (4,)

    def test_attrs_detached_from_caller(self):
        """Mutating the list passed as an attribute does not change the stored Op"""
        graph = Graph()
        shape = [2, 2]
        node = graph.add_op("reshape", ["x"], shape=shape)
        shape.append(1)
        assert graph[node].attrs["shape"] == (2, 2)

    def test_ops_are_hashable(self):
        graph = Graph()
        graph.add_op("slice", ["x"], begin=[0], end=[1], step=None)
        rebuilt = Graph(graph.ops)
        assert hash(graph[0]) == hash(rebuilt[0])
        assert len({graph[0], rebuilt[0]}) == 1


class TestGraphMerge:
    """Tests for merging graphs, which shifts node references"""

    def make_graph(self):
        graph = Graph()
        a = graph.add_op("identity", ["a"])
        graph.add_op(Add, [FromOp(a), "b"])
        return graph

    def test_merge_shifts_references(self):
        graph = self.make_graph()
        other = self.make_graph()

        shift = graph.merge(other)

        assert shift == 2
        assert len(graph) == 4
        assert graph[3].index == 3
        assert graph[3].inputs == (FromOp(2, 0), FromDict("b"))
        # The merged graph itself is untouched
        assert other[1].inputs == (FromOp(0, 0), FromDict("b"))

    def test_merge_input(self):
        graph = self.make_graph()
        other = self.make_graph()

        assert graph.merge_input(other, FromOp(1)) == FromOp(3, 0)
        assert graph.merge_input(Graph(), "key") == FromDict("key")

    def test_merge_into_itself(self):
        graph = self.make_graph()
        graph.merge(graph)
        assert len(graph) == 4
        assert graph[3].inputs[0] == FromOp(2, 0)

    def test_copy_is_independent(self):
        graph = self.make_graph()
        copy = graph.copy()
        copy.add_op("identity", [FromOp(1)])
        assert len(graph) == 2
        assert len(copy) == 3

    def test_rebuild_from_ops(self):
        graph = self.make_graph()
        rebuilt = Graph(graph.ops)
        assert rebuilt.ops == graph.ops
