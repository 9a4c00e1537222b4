from .array import ArrayValue
from .builder import build_filled, build_from_nested, build_repeated
from .config import DEFAULT_CONFIG, BuildConfig, load_config
from .dtypes import DEFAULT_DTYPE, DType, cast, infer_kind
from .errors import CastError, ConstructionError, EmptyInputError, InvalidValueError, ShapeError, TypeInferenceError
from .nested import flatten


__all__ = [
  'ArrayValue',
  'BuildConfig',
  'CastError',
  'ConstructionError',
  'DEFAULT_CONFIG',
  'DEFAULT_DTYPE',
  'DType',
  'EmptyInputError',
  'InvalidValueError',
  'ShapeError',
  'TypeInferenceError',
  'build_filled',
  'build_from_nested',
  'build_repeated',
  'cast',
  'flatten',
  'infer_kind',
  'load_config'
]
