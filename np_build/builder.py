import contextlib
import logging
from typing import Any, Optional, Sequence

import numpy as np

from .array import ArrayValue
from .config import DEFAULT_CONFIG, BuildConfig
from .dtypes import DType, cast, cast_all, infer_kind
from .errors import ConstructionError, EmptyInputError, InvalidValueError, ShapeError, TypeInferenceError
from .nested import flatten
from .utils import is_dimension, is_sequence, normalize_shape


logger = logging.getLogger(__name__)


@contextlib.contextmanager
def log_failures(operation: str, /):
  try:
    yield
  except ConstructionError as exc:
    logger.debug(f"{operation} failed: {exc}")
    raise

def repeat_array(unit: ArrayValue, count: int, /):
  return ArrayValue(
    shape=(count, *unit.shape),
    dtype=unit.dtype,
    data=np.tile(unit.data, count)
  )


def build_filled(
  shape: int | Sequence[int],
  fill_value: Any,
  *,
  dtype: Optional[DType] = None,
  config: Optional[BuildConfig] = None
):
  """
  Creates an array of the given shape with every element set to the same value.

  Parameters
    shape: The shape of the array, or its length for a one-dimensional array. An empty shape creates a single-element scalar array.
    fill_value: The value of every element. It is cast to `dtype`.
    dtype: The data type. Defaults to the `default_dtype` of the config, `float64` unless configured otherwise.
    config: The build settings. Defaults to `DEFAULT_CONFIG`.

  Raises
    ShapeError: If a dimension is negative or not an integer.
    CastError: If the fill value cannot be cast to the dtype.
  """

  config = config or DEFAULT_CONFIG
  dtype = dtype if dtype is not None else config.default_dtype

  with log_failures("build_filled"):
    dims = normalize_shape(shape)
    value = cast(fill_value, dtype, casting=config.casting)

    # Wraps the current block into `dim` copies, from the innermost dimension outwards
    array = ArrayValue(shape=(), dtype=dtype, data=np.array([value], dtype=dtype.numpy))

    for dim in reversed(dims):
      array = repeat_array(array, dim)

  logger.debug(f"Built filled array with shape {array.shape} and dtype {dtype.name}")
  return array

def build_from_nested(
  obj: Any,
  /,
  *,
  dtype: Optional[DType] = None,
  config: Optional[BuildConfig] = None
):
  """
  Creates an array from nested sequences, inferring its shape and, if missing, its dtype.

  The dtype is inferred from the first element only. Elements which do not fit that dtype are reported when they are cast.

  Parameters
    obj: A scalar, or arbitrarily nested sequences, numpy arrays or array values.
    dtype: The data type. Will be inferred from the first element if missing. Required for empty input.
    config: The build settings. Defaults to `DEFAULT_CONFIG`.

  Raises
    ShapeError: If the input is jagged.
    EmptyInputError: If the input has no element and no dtype is provided.
    TypeInferenceError: If the dtype of the first element cannot be inferred.
    CastError: If an element cannot be cast to the dtype.
  """

  config = config or DEFAULT_CONFIG

  with log_failures("build_from_nested"):
    shape, flat = flatten(obj)

    if dtype is None:
      if not flat:
        raise EmptyInputError("Cannot determine dtype of an empty array")

      dtype = infer_kind(flat[0])

      if dtype is None:
        raise TypeInferenceError(f"Cannot determine dtype from element {flat[0]!r}")

    array = ArrayValue(
      shape=shape,
      dtype=dtype,
      data=cast_all(flat, dtype, casting=config.casting)
    )

  logger.debug(f"Built array with shape {array.shape} and dtype {dtype.name} from nested input")
  return array

def build_repeated(
  unit: Any,
  count: int,
  *,
  dtype: Optional[DType] = None,
  config: Optional[BuildConfig] = None
):
  """
  Creates an array by repeating a scalar or an array along a new leading dimension.

  Parameters
    unit: A scalar, an array value, or nested sequences which are first built with build_from_nested().
    count: The number of repetitions, which becomes the first dimension of the result.
    dtype: The data type. Will be inferred from the unit if missing. If the unit is an array with another dtype, its elements are cast.
    config: The build settings. Defaults to `DEFAULT_CONFIG`.

  Raises
    ShapeError: If the count is negative or not an integer.
    EmptyInputError: If the unit is None.
    InvalidValueError: If no dtype is provided and none can be inferred from a scalar unit.
    CastError: If the unit cannot be cast to the dtype.
  """

  config = config or DEFAULT_CONFIG

  with log_failures("build_repeated"):
    if not is_dimension(count) or count < 0:
      raise ShapeError(f"Invalid repetition count {count!r}")
    if unit is None:
      raise EmptyInputError("Missing repetition unit")

    count = int(count)

    if is_sequence(unit) or isinstance(unit, np.ndarray):
      unit = build_from_nested(unit, dtype=dtype, config=config)

    if isinstance(unit, ArrayValue):
      if (dtype is not None) and (dtype is not unit.dtype):
        unit = unit.astype(dtype, casting=config.casting)

      array = repeat_array(unit, count)
    else:
      dtype = dtype if dtype is not None else infer_kind(unit)

      if dtype is None:
        raise InvalidValueError(f"Cannot determine dtype of repeated value {unit!r}")

      value = cast(unit, dtype, casting=config.casting)
      array = ArrayValue(shape=(count,), dtype=dtype, data=np.full(count, value, dtype=dtype.numpy))

  logger.debug(f"Built repeated array with shape {array.shape} and dtype {array.dtype.name}")
  return array


__all__ = [
  'build_filled',
  'build_from_nested',
  'build_repeated'
]
