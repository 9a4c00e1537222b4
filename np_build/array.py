from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np

from .dtypes import DType, cast_all
from .errors import InvalidValueError
from .utils import ArrayOrder, ArrayShape, CastingRule, is_dimension, shape_size


@dataclass(frozen=True, kw_only=True, eq=False)
class ArrayValue:
  """
  An immutable dense array: a shape, a dtype and a flat buffer in row-major order.

  The buffer is copied on creation, so the value owns it, and is made read-only.
  """

  shape: ArrayShape
  dtype: DType
  data: np.ndarray

  def __post_init__(self):
    if not isinstance(self.dtype, DType):
      raise InvalidValueError(f"Invalid dtype {self.dtype!r}")
    if not isinstance(self.shape, tuple) or not all(is_dimension(dim) and dim >= 0 for dim in self.shape):
      raise InvalidValueError(f"Invalid shape {self.shape!r}")
    if not isinstance(self.data, np.ndarray) or self.data.ndim != 1:
      raise InvalidValueError("Data must be a one-dimensional array")
    if self.data.dtype != self.dtype.numpy:
      raise InvalidValueError(f"Data has dtype {self.data.dtype}, expected {self.dtype.numpy}")
    if shape_size(self.shape) != self.data.size:
      raise InvalidValueError(f"Shape {self.shape} does not match the number of elements: {self.data.size}")

    data = np.array(self.data, copy=True)
    data.flags.writeable = False
    object.__setattr__(self, 'data', data)

  @property
  def ndim(self):
    return len(self.shape)

  @property
  def size(self):
    return self.data.size

  def astype(self, dtype: DType, /, *, casting: CastingRule = 'unsafe'):
    """
    Returns a copy of this array with every element cast to another dtype.
    """

    return ArrayValue(shape=self.shape, dtype=dtype, data=cast_all(self.data, dtype, casting=casting))

  def item(self):
    if self.size != 1:
      raise ValueError("Only arrays of size 1 can be converted to a scalar")

    return self.data[0].item()

  def tolist(self) -> Any:
    return self.data.reshape(self.shape).tolist()

  def to_numpy(self, order: ArrayOrder = 'C') -> np.ndarray:
    """
    Returns a writable copy of this array with its full shape.

    Parameters
      order: The memory order of the returned array, either `C` or `F`.
    """

    return np.array(self.data.reshape(self.shape), order=order)

  def __eq__(self, other: object):
    if not isinstance(other, ArrayValue):
      return NotImplemented

    return (self.shape == other.shape) and (self.dtype is other.dtype) and np.array_equal(self.data, other.data)

  __hash__ = None # type: ignore

  def __iter__(self) -> Iterator['ArrayValue']:
    if not self.shape:
      raise TypeError("Iteration over a 0-d array")

    inner_shape = self.shape[1:]
    stride = shape_size(inner_shape)

    for index in range(self.shape[0]):
      yield ArrayValue(shape=inner_shape, dtype=self.dtype, data=self.data[index * stride:(index + 1) * stride].copy())

  def __len__(self):
    if not self.shape:
      raise TypeError("len() of a 0-d array")

    return self.shape[0]

  def __repr__(self):
    return f"ArrayValue(shape={self.shape!r}, dtype={self.dtype.name}, data={self.data.tolist()!r})"


__all__ = [
  'ArrayValue'
]
