class ConstructionError(Exception):
  """
  Base class of every error raised while building an array.
  """


class ShapeError(ConstructionError, ValueError):
  """
  A dimension is negative or not an integer, or nested input is jagged.
  """


class CastError(ConstructionError, TypeError):
  """
  A value cannot be converted to the requested dtype.
  """


class EmptyInputError(ConstructionError, ValueError):
  """
  The input holds no element from which a dtype could be inferred.
  """


class TypeInferenceError(ConstructionError, TypeError):
  """
  A sample value does not belong to any supported dtype.
  """


class InvalidValueError(ConstructionError, ValueError):
  """
  The shape, dtype and data of an array do not agree.
  """


__all__ = [
  'CastError',
  'ConstructionError',
  'EmptyInputError',
  'InvalidValueError',
  'ShapeError',
  'TypeInferenceError'
]
