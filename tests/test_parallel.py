import threading
import time

import pytest
import numpy as np
from deepgraph.core import (
    Evaluator,
    EvaluatorConfig,
    FromOp,
    Graph,
    MissingKey,
    OpKind,
    ShapeMismatch,
    TensorDict,
)


class SlowCounter(OpKind):
    """Identity that sleeps briefly and counts invocations per thread-safe counter"""

    name = "slow_counter"
    arity = 1
    calls = 0
    lock = threading.Lock()

    @staticmethod
    def forward(x, **attrs):
        time.sleep(0.01)
        with SlowCounter.lock:
            SlowCounter.calls += 1
        return x


def build_wide_graph(width=8):
    """Independent branches off one shared root, summed pairwise into one output"""
    graph = Graph()
    root = graph.add_op(SlowCounter, ["x"])
    branches = [graph.add_op("multiply", [FromOp(root), f"w{i}"]) for i in range(width)]
    total = branches[0]
    for branch in branches[1:]:
        total = graph.add_op("add", [FromOp(total), FromOp(branch)])
    return graph, total


class TestParallelEvaluation:
    """The thread pool evaluator must agree with the sequential one"""

    def setup_method(self):
        SlowCounter.calls = 0
        self.sequential = Evaluator()
        self.parallel = Evaluator(EvaluatorConfig(parallel=True, max_workers=4))

    def feeds(self, width=8):
        rng = np.random.default_rng(42)
        feeds = TensorDict(x=rng.normal(size=(3, 3)))
        for i in range(width):
            feeds.insert(f"w{i}", rng.normal(size=(3, 3)))
        return feeds

    def test_matches_sequential(self):
        graph, total = build_wide_graph()
        feeds = self.feeds()

        expected = self.sequential.evaluate(graph, feeds, total)
        result = self.parallel.evaluate(graph, feeds, total)

        assert result.identical(expected)

    def test_shared_root_computed_once(self):
        graph, total = build_wide_graph()
        self.parallel.evaluate(graph, self.feeds(), total)
        assert SlowCounter.calls == 1

    @pytest.mark.parametrize("workers", [1, 2, 16])
    def test_any_pool_size_completes(self, workers):
        graph, total = build_wide_graph()
        evaluator = Evaluator(EvaluatorConfig(parallel=True, max_workers=workers))
        result = evaluator.evaluate(graph, self.feeds(), total)
        assert result.shape == (3, 3)

    def test_error_propagates(self):
        graph, total = build_wide_graph()
        feeds = self.feeds()
        feeds.insert("w3", np.zeros((2, 2)))

        with pytest.raises(ShapeMismatch) as info:
            self.parallel.evaluate(graph, feeds, total)
        assert info.value.kind == "multiply"

    def test_missing_key_propagates(self):
        graph, total = build_wide_graph()
        feeds = TensorDict(x=np.ones((3, 3)))
        with pytest.raises(MissingKey):
            self.parallel.evaluate(graph, feeds, total)

    def test_concurrent_runs_share_graph(self):
        """One graph and one evaluator serving several threads at once"""
        graph, total = build_wide_graph(width=4)
        inputs = [self.feeds(width=4) for _ in range(6)]
        for i, feeds in enumerate(inputs):
            feeds.insert("x", np.full((3, 3), float(i)))
        expected = [self.sequential.evaluate(graph, feeds, total) for feeds in inputs]

        results = [None] * len(inputs)

        def run(i):
            results[i] = self.parallel.evaluate(graph, inputs[i], total)

        threads = [threading.Thread(target=run, args=(i,)) for i in range(len(inputs))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for result, reference in zip(results, expected):
            assert result.identical(reference)
