import enum
import math
import numbers
from decimal import Decimal
from typing import Any, Optional, Sequence

import numpy as np

from .errors import CastError, TypeInferenceError
from .utils import CASTING_RULES, CastingRule


class DType(enum.Enum):
  """
  The closed set of element kinds an array can hold.

  Each member is backed by a numpy dtype, which is the canonical representation of its elements.
  """

  bool_ = 'b1'
  int8 = 'i1'
  int16 = 'i2'
  int32 = 'i4'
  int64 = 'i8'
  uint8 = 'u1'
  uint16 = 'u2'
  uint32 = 'u4'
  uint64 = 'u8'
  float16 = 'f2'
  float32 = 'f4'
  float64 = 'f8'

  @property
  def numpy(self) -> np.dtype:
    return np.dtype(self.value)

  @property
  def kind(self) -> str:
    return self.numpy.kind

  @classmethod
  def from_numpy(cls, dtype: np.dtype | str, /) -> 'DType':
    """
    Returns the member backed by the given numpy dtype.

    Raises
      TypeInferenceError: If the dtype is not supported, e.g. complex or object dtypes.
    """

    member = _BY_NUMPY.get(np.dtype(dtype))

    if member is None:
      raise TypeInferenceError(f"Unsupported dtype {np.dtype(dtype)}")

    return member

  @classmethod
  def from_name(cls, name: str, /) -> 'DType':
    """
    Looks up a member by its name (`int32`, `bool`, `bool_`) or by a numpy dtype string (`f4`, `int`).
    """

    if name in cls.__members__:
      return cls[name]

    try:
      return cls.from_numpy(name)
    except (TypeError, TypeInferenceError) as exc:
      raise ValueError(f"Unknown dtype {name!r}") from exc


_BY_NUMPY = { member.numpy: member for member in DType }

DEFAULT_DTYPE = DType.float64


def _as_scalar(value: Any, /):
  if isinstance(value, np.ndarray) and value.ndim == 0:
    return value[()]

  return value

def is_numeric(value: Any, /):
  return isinstance(value, (np.bool_, numbers.Real, Decimal))


def _is_finite(value: Any, /):
  if isinstance(value, (numbers.Rational, np.bool_)):
    return True
  if isinstance(value, Decimal):
    return value.is_finite()

  return math.isfinite(value)


def _cast_bool(value: Any, target: DType):
  try:
    return np.bool_(value != 0)
  except ArithmeticError as exc:
    # Signaling NaN decimals refuse comparisons
    raise CastError(f"Cannot cast {value!r} to {target.name}") from exc

def _cast_integer(value: Any, target: DType):
  if not _is_finite(value):
    raise CastError(f"Cannot cast {value!r} to {target.name}")

  # Truncates toward zero for non-integral values
  number = int(value)
  info = np.iinfo(target.numpy)

  if not info.min <= number <= info.max:
    raise CastError(f"Value {value!r} is out of range for {target.name}")

  return target.numpy.type(number)

def _cast_float(value: Any, target: DType):
  try:
    number = float(value)
  except (OverflowError, ValueError) as exc:
    raise CastError(f"Cannot cast {value!r} to {target.name}") from exc

  with np.errstate(over='ignore'):
    result = target.numpy.type(number)

  if _is_finite(value) and not np.isfinite(result):
    raise CastError(f"Value {value!r} is out of range for {target.name}")

  return result

_CASTERS = {
  'b': _cast_bool,
  'f': _cast_float,
  'i': _cast_integer,
  'u': _cast_integer
}


def cast(value: Any, target: DType, /, *, casting: CastingRule = 'unsafe'):
  """
  Converts a numeric value into the canonical representation of a dtype.

  Parameters
    value: A Python or numpy number, or a 0-d numpy array.
    target: The dtype to convert into.
    casting: A numpy casting rule. Unless `unsafe`, the kind inferred from the value must be castable to the target under this rule.

  Returns
    A numpy scalar of type `target.numpy.type`.

  Raises
    CastError: If the value is not numeric, if the casting rule forbids the conversion, or if the value is not representable in the target (NaN or infinite to an integer, out of range).
  """

  if casting not in CASTING_RULES:
    raise ValueError(f"Invalid casting rule {casting!r}")

  scalar = _as_scalar(value)

  if not is_numeric(scalar):
    raise CastError(f"Cannot cast non-numeric value {value!r} to {target.name}")

  if casting != 'unsafe':
    source = infer_kind(scalar)

    if (source is None) or (not np.can_cast(source.numpy, target.numpy, casting)):
      raise CastError(f"Cannot cast {value!r} to {target.name} with casting rule {casting!r}")

  return _CASTERS[target.kind](scalar, target)

def cast_all(values: Sequence[Any], target: DType, /, *, casting: CastingRule = 'unsafe') -> np.ndarray:
  """
  Casts each value in order into a fresh one-dimensional array, failing on the first value that cannot be cast.
  """

  result = np.empty(len(values), dtype=target.numpy)

  for index, value in enumerate(values):
    try:
      result[index] = cast(value, target, casting=casting)
    except CastError as exc:
      raise CastError(f"Element {index}: {exc}") from exc

  return result

def infer_kind(sample: Any, /) -> Optional[DType]:
  """
  Returns the dtype matching the runtime numeric category of a sample, or None if the category is not supported.

  Python integers infer `int64` and Python floats, fractions and decimals infer `float64`. Numpy scalars keep their own width.
  """

  sample = _as_scalar(sample)

  if isinstance(sample, (bool, np.bool_)):
    return DType.bool_
  if isinstance(sample, (np.integer, np.floating)):
    return _BY_NUMPY.get(sample.dtype)
  if isinstance(sample, numbers.Integral):
    return DType.int64
  if isinstance(sample, (numbers.Real, Decimal)):
    return DType.float64

  return None


__all__ = [
  'DEFAULT_DTYPE',
  'DType',
  'cast',
  'cast_all',
  'infer_kind',
  'is_numeric'
]
