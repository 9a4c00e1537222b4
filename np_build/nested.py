from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from .array import ArrayValue
from .errors import ShapeError
from .utils import ArrayShape, is_sequence, shape_size


@dataclass(frozen=True, slots=True)
class Leaf:
  value: Any

@dataclass(frozen=True, slots=True)
class Node:
  children: tuple['Nested', ...]

Nested = Union[Leaf, Node]


def to_nested(obj: Any, /) -> Nested:
  """
  Converts host input into a tree of leaves and nodes.

  Sequences (lists, tuples, ranges, deques), numpy arrays and array values are nodes. Everything else, strings and bytes included, is a leaf.
  """

  if isinstance(obj, ArrayValue):
    obj = obj.to_numpy()

  if isinstance(obj, np.ndarray):
    if obj.ndim == 0:
      return Leaf(obj[()])

    return Node(tuple(to_nested(item) for item in obj))

  if is_sequence(obj):
    return Node(tuple(to_nested(item) for item in obj))

  return Leaf(obj)

def _flatten_nested(nested: Nested, /) -> tuple[ArrayShape, list[Any]]:
  if isinstance(nested, Leaf):
    return (), [nested.value]

  if not nested.children:
    # Dimensions below an empty one cannot be observed
    return (0,), []

  first_shape, flat = _flatten_nested(nested.children[0])

  for index, child in enumerate(nested.children[1:], start=1):
    child_shape, child_flat = _flatten_nested(child)

    if child_shape != first_shape:
      raise ShapeError(f"Irregular nesting: element {index} has shape {child_shape}, expected {first_shape}")

    flat += child_flat

  return (len(nested.children), *first_shape), flat

def flatten(obj: Any, /) -> tuple[ArrayShape, list[Any]]:
  """
  Computes the shape of nested input and its elements in row-major order.

  Parameters
    obj: A scalar, or arbitrarily nested lists, tuples, numpy arrays or array values.

  Returns
    The shape and the flat list of leaf values. A scalar has shape `()` and a single element.

  Raises
    ShapeError: If sibling elements at the same nesting level have different shapes.
  """

  shape, flat = _flatten_nested(to_nested(obj))
  assert shape_size(shape) == len(flat)

  return shape, flat


__all__ = [
  'Leaf',
  'Nested',
  'Node',
  'flatten',
  'to_nested'
]
