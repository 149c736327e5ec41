import pytest
import numpy as np
from deepgraph.core import MissingKey, Tensor, TensorDict


class TestTensorDict:
    """Tests for the named input store"""

    def test_insert_and_get(self):
        feeds = TensorDict()
        feeds.insert("x", Tensor([1.0, 2.0]))
        feeds.insert("y", [[1, 2], [3, 4]])

        assert feeds.get("x").shape == (2,)
        assert isinstance(feeds.get("y"), Tensor)
        assert feeds.get("y").shape == (2, 2)
        assert len(feeds) == 2
        assert set(feeds) == {"x", "y"}

    def test_constructor_forms(self):
        feeds = TensorDict({"a": [1.0]}, b=np.zeros((2, 2)))
        assert "a" in feeds
        assert feeds["b"].shape == (2, 2)

    def test_missing_key_raises(self):
        feeds = TensorDict(x=[1.0])
        with pytest.raises(MissingKey) as info:
            feeds.get("y")
        assert info.value.key == "y"
        assert "'y'" in str(info.value)

    def test_missing_key_is_a_key_error(self):
        feeds = TensorDict()
        with pytest.raises(KeyError):
            feeds["anything"]

    def test_no_default_is_returned(self):
        """get never falls back to a default or zero tensor"""
        feeds = TensorDict()
        with pytest.raises(MissingKey):
            feeds.get("x")
        assert "x" not in feeds

    def test_insert_replaces(self):
        feeds = TensorDict(x=[1.0])
        feeds.insert("x", [2.0, 3.0])
        assert feeds.get("x").tolist() == [2.0, 3.0]

    def test_non_string_key_rejected(self):
        feeds = TensorDict()
        with pytest.raises(TypeError):
            feeds.insert(1, [1.0])

    def test_snapshot_is_isolated(self):
        feeds = TensorDict(x=[1.0])
        snapshot = feeds.snapshot()
        feeds.insert("y", [2.0])
        feeds.insert("x", [5.0])

        assert "y" not in snapshot
        assert snapshot.get("x").tolist() == [1.0]
