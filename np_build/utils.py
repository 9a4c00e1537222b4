import math
import numbers
from collections.abc import Sequence as SequenceABC
from typing import Literal, Sequence

import numpy as np

from .errors import ShapeError


ArrayShape = tuple[int, ...]
ArrayOrder = Literal['C', 'F']
CastingRule = Literal['equiv', 'no', 'safe', 'same_kind', 'unsafe']

CASTING_RULES: tuple[CastingRule, ...] = ('equiv', 'no', 'safe', 'same_kind', 'unsafe')


def is_dimension(value: object, /):
  return isinstance(value, (numbers.Integral, np.integer)) and not isinstance(value, (bool, np.bool_))

def is_sequence(value: object, /):
  return isinstance(value, SequenceABC) and not isinstance(value, (str, bytes, bytearray))

def normalize_shape(shape: int | Sequence[int], /) -> ArrayShape:
  if is_dimension(shape):
    shape = (shape,) # type: ignore

  try:
    dims = tuple(shape) # type: ignore
  except TypeError as exc:
    raise ShapeError(f"Invalid shape {shape!r}") from exc

  for dim in dims:
    if not is_dimension(dim):
      raise ShapeError(f"Invalid dimension {dim!r} in shape {dims!r}")
    if dim < 0:
      raise ShapeError(f"Negative dimension {dim} in shape {dims!r}")

  return tuple(int(dim) for dim in dims)

def shape_size(shape: ArrayShape, /):
  return math.prod(shape)
