from unittest.mock import patch

import numpy as np
import pytest
from inkflow.field import FieldAllocationError, FieldPair, allocate_field


def test_allocate_field_layout():
    f = allocate_field(8, 5)
    assert f.shape == (5, 8, 4)
    assert f.dtype == np.float32
    assert not f.any()


@pytest.mark.parametrize("size", [(0, 4), (4, 0), (-1, 3)])
def test_allocate_field_rejects_empty(size):
    with pytest.raises(ValueError):
        allocate_field(*size)


def test_allocation_failure_is_fatal():
    with patch("inkflow.field.np.zeros", side_effect=MemoryError):
        with pytest.raises(FieldAllocationError):
            FieldPair(100000, 100000)


def test_field_pair_front_and_back_are_distinct():
    pair = FieldPair(6, 4)
    assert pair.shape == (6, 4)
    assert pair.front is not pair.back
    assert not np.shares_memory(pair.front, pair.back)


def test_swap_hands_written_buffer_to_front():
    pair = FieldPair(3, 3)
    front, back = pair.front, pair.back
    pair.write(np.ones((3, 3, 4)))
    assert not front.any()
    pair.swap()
    assert pair.front is back
    assert pair.back is front
    assert np.all(pair.front == 1.0)
    pair.swap()
    assert pair.front is front


def test_clear_zeroes_both_buffers():
    pair = FieldPair(2, 2)
    pair.front[...] = 3.0
    pair.back[...] = 4.0
    pair.clear()
    assert not pair.front.any()
    assert not pair.back.any()
