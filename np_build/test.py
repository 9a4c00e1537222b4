from collections import deque
from decimal import Decimal
from fractions import Fraction
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase
import math
import numpy as np
import unittest

from . import (
  ArrayValue,
  BuildConfig,
  CastError,
  ConstructionError,
  DType,
  EmptyInputError,
  InvalidValueError,
  ShapeError,
  TypeInferenceError,
  build_filled,
  build_from_nested,
  build_repeated,
  cast,
  flatten,
  infer_kind,
  load_config
)
from .nested import Leaf, Node, to_nested


class CastTest(TestCase):
  def test_integer(self):
    value = cast(5, DType.int32)

    self.assertIsInstance(value, np.int32)
    self.assertEqual(value, 5)

  def test_truncate(self):
    self.assertEqual(cast(2.9, DType.int64), 2)
    self.assertEqual(cast(-2.9, DType.int64), -2)
    self.assertEqual(cast(Fraction(7, 2), DType.int16), 3)
    self.assertEqual(cast(Decimal("-1.5"), DType.int8), -1)

  def test_non_numeric(self):
    for value in ["not-a-number", "5", None, b"1", [1], 1 + 2j]:
      with self.assertRaises(CastError):
        cast(value, DType.int64)

  def test_non_finite_to_integer(self):
    for value in [math.nan, math.inf, -math.inf]:
      with self.assertRaises(CastError):
        cast(value, DType.int32)

  def test_out_of_range(self):
    with self.assertRaises(CastError):
      cast(128, DType.int8)

    with self.assertRaises(CastError):
      cast(-1, DType.uint8)

    with self.assertRaises(CastError):
      cast(1e6, DType.float16)

    with self.assertRaises(CastError):
      cast(10 ** 400, DType.float64)

    self.assertEqual(cast(2 ** 64 - 1, DType.uint64), 2 ** 64 - 1)

  def test_float(self):
    value = cast(3, DType.float32)

    self.assertIsInstance(value, np.float32)
    self.assertEqual(value, 3.0)
    self.assertTrue(np.isnan(cast(math.nan, DType.float16)))
    self.assertEqual(cast(-math.inf, DType.float64), -math.inf)

  def test_bool(self):
    self.assertIs(bool(cast(3, DType.bool_)), True)
    self.assertIs(bool(cast(0.0, DType.bool_)), False)
    self.assertEqual(cast(True, DType.int64), 1)

  def test_numpy_scalars(self):
    self.assertEqual(cast(np.float32(1.5), DType.float64), 1.5)
    self.assertEqual(cast(np.array(7), DType.int8), 7)

    with self.assertRaises(CastError):
      cast(np.array([7]), DType.int8)

  def test_casting_rule(self):
    self.assertEqual(cast(1, DType.float64, casting='same_kind'), 1.0)
    self.assertEqual(cast(np.int8(3), DType.int64, casting='safe'), 3)

    with self.assertRaises(CastError):
      cast(1.5, DType.int64, casting='same_kind')

    with self.assertRaises(CastError):
      cast(1, DType.int8, casting='safe')

    with self.assertRaises(ValueError):
      cast(1, DType.int8, casting='lenient') # type: ignore

  def test_decimal_overflow(self):
    with self.assertRaises(CastError):
      cast(Decimal("1e400"), DType.float64)

    with self.assertRaises(CastError):
      cast(Decimal("1e10"), DType.float16)

    self.assertEqual(cast(Decimal("-Infinity"), DType.float64), -math.inf)

  def test_signaling_nan(self):
    for dtype in [DType.int64, DType.float64]:
      with self.assertRaises(CastError):
        cast(Decimal("sNaN"), dtype)

    with self.assertRaises(CastError):
      build_filled([1], Decimal("sNaN"), dtype=DType.float64)

  def test_error_categories(self):
    with self.assertRaises(TypeError):
      cast("x", DType.float64)


class InferKindTest(TestCase):
  def test_python_values(self):
    self.assertIs(infer_kind(True), DType.bool_)
    self.assertIs(infer_kind(1), DType.int64)
    self.assertIs(infer_kind(1.0), DType.float64)
    self.assertIs(infer_kind(Fraction(1, 3)), DType.float64)
    self.assertIs(infer_kind(Decimal("1.5")), DType.float64)

  def test_numpy_values(self):
    self.assertIs(infer_kind(np.float32(1)), DType.float32)
    self.assertIs(infer_kind(np.uint16(1)), DType.uint16)
    self.assertIs(infer_kind(np.bool_(False)), DType.bool_)
    self.assertIs(infer_kind(np.array(2, dtype='i2')), DType.int16)

  def test_unsupported(self):
    for value in ["1", None, 1j, np.complex128(1), [1], object()]:
      self.assertIsNone(infer_kind(value))

  def test_from_name(self):
    self.assertIs(DType.from_name('int32'), DType.int32)
    self.assertIs(DType.from_name('f4'), DType.float32)
    self.assertIs(DType.from_name('bool'), DType.bool_)

    with self.assertRaises(ValueError):
      DType.from_name('complex128')

    with self.assertRaises(ValueError):
      DType.from_name('quaternion')

  def test_from_numpy(self):
    self.assertIs(DType.from_numpy(np.dtype('u8')), DType.uint64)

    with self.assertRaises(TypeInferenceError):
      DType.from_numpy(np.dtype('O'))


class FlattenTest(TestCase):
  def test_scalar(self):
    self.assertEqual(flatten(4), ((), [4]))

  def test_nested(self):
    shape, flat = flatten([[1, 2, 3], [4, 5, 6]])

    self.assertEqual(shape, (2, 3))
    self.assertEqual(flat, [1, 2, 3, 4, 5, 6])

  def test_row_major(self):
    arr = np.arange(24).reshape(2, 3, 4)
    shape, flat = flatten(arr.tolist())

    self.assertEqual(shape, arr.shape)
    self.assertEqual(flat, arr.ravel(order='C').tolist())

  def test_tuples_and_arrays(self):
    shape, flat = flatten(((1, 2), np.array([3, 4])))

    self.assertEqual(shape, (2, 2))
    self.assertEqual(flat, [1, 2, 3, 4])

  def test_jagged(self):
    for obj in [[[1, 2], [3]], [1, [2]], [[[1], [2]], [[3], [4, 5]]], [[1, 2], []]]:
      with self.assertRaises(ShapeError):
        flatten(obj)

  def test_empty(self):
    self.assertEqual(flatten([]), ((0,), []))
    self.assertEqual(flatten([[], []]), ((2, 0), []))

  def test_strings_are_leaves(self):
    self.assertEqual(flatten(["ab", "cd"]), ((2,), ["ab", "cd"]))

  def test_other_sequences(self):
    self.assertEqual(flatten(range(3)), ((3,), [0, 1, 2]))
    self.assertEqual(flatten([range(2), range(2)]), ((2, 2), [0, 1, 0, 1]))
    self.assertEqual(flatten(deque([1, 2])), ((2,), [1, 2]))
    self.assertEqual(flatten([b"ab", bytearray(b"cd")]), ((2,), [b"ab", bytearray(b"cd")]))

  def test_to_nested(self):
    self.assertEqual(to_nested([1, [2]]), Node((Leaf(1), Node((Leaf(2),)))))
    self.assertEqual(to_nested(np.array(3.0)), Leaf(3.0))


class BuildFilledTest(TestCase):
  def test_default(self):
    arr = build_filled((2, 3), 5, dtype=DType.int64)

    self.assertEqual(arr.shape, (2, 3))
    self.assertIs(arr.dtype, DType.int64)
    self.assertEqual(arr.data.tolist(), [5] * 6)

  def test_default_dtype(self):
    arr = build_filled([4], 1)

    self.assertIs(arr.dtype, DType.float64)
    self.assertEqual(arr.tolist(), [1.0, 1.0, 1.0, 1.0])

  def test_int_shape(self):
    self.assertEqual(build_filled(3, 0).shape, (3,))

  def test_scalar(self):
    arr = build_filled((), 7, dtype=DType.uint8)

    self.assertEqual(arr.shape, ())
    self.assertEqual(arr.size, 1)
    self.assertEqual(arr.item(), 7)

  def test_empty_axis(self):
    for shape in [(0,), (3, 0), (0, 4), (2, 0, 5)]:
      arr = build_filled(shape, 1, dtype=DType.int32)

      self.assertEqual(arr.shape, shape)
      self.assertEqual(arr.size, 0)

  def test_nested_layout(self):
    arr = build_filled((2, 3, 4), 1.5, dtype=DType.float32)

    self.assertTrue(np.array_equal(arr.to_numpy(), np.full((2, 3, 4), 1.5, dtype='f4')))

  def test_negative_shape(self):
    with self.assertRaises(ShapeError):
      build_filled([2, -1, 3], 0, dtype=DType.int64)

  def test_invalid_shape(self):
    for shape in [(2.0, 3), (True,), "ab", None]:
      with self.assertRaises(ShapeError):
        build_filled(shape, 0) # type: ignore

  def test_cast_failure(self):
    with self.assertRaises(CastError):
      build_filled([1], "not-a-number", dtype=DType.int64)

  def test_truncate(self):
    self.assertEqual(build_filled([2], 2.7, dtype=DType.int16).tolist(), [2, 2])


class BuildFromNestedTest(TestCase):
  def test_default(self):
    arr = build_from_nested([[1, 2, 3], [4, 5, 6]])

    self.assertEqual(arr.shape, (2, 3))
    self.assertIs(arr.dtype, DType.int64)
    self.assertEqual(arr.data.tolist(), [1, 2, 3, 4, 5, 6])

  def test_float(self):
    arr = build_from_nested([0.5, 1.5])

    self.assertIs(arr.dtype, DType.float64)

  def test_round_trip(self):
    for obj in [[[1, 2], [3, 4], [5, 6]], [[[1.0], [2.0]], [[3.0], [4.0]]], [True, False], [[[[7]]]]]:
      self.assertEqual(build_from_nested(obj).tolist(), obj)

  def test_scalar(self):
    arr = build_from_nested(3.5)

    self.assertEqual(arr.shape, ())
    self.assertEqual(arr.tolist(), 3.5)

  def test_empty(self):
    for obj in [[], [[], []]]:
      with self.assertRaises(EmptyInputError):
        build_from_nested(obj)

  def test_empty_with_dtype(self):
    arr = build_from_nested([], dtype=DType.float32)

    self.assertEqual(arr.shape, (0,))
    self.assertIs(arr.dtype, DType.float32)

  def test_jagged(self):
    with self.assertRaises(ShapeError):
      build_from_nested([[1, 2], [3]])

  def test_unknown_kind(self):
    for obj in [["a", "b"], [None], [1j]]:
      with self.assertRaises(TypeInferenceError):
        build_from_nested(obj)

  def test_first_element_decides(self):
    arr = build_from_nested([1, 2.5])

    self.assertIs(arr.dtype, DType.int64)
    self.assertEqual(arr.tolist(), [1, 2])

    with self.assertRaises(CastError):
      build_from_nested([1, "2"])

  def test_numpy_input(self):
    arr = build_from_nested(np.arange(6, dtype='i2').reshape(3, 2))

    self.assertEqual(arr.shape, (3, 2))
    self.assertIs(arr.dtype, DType.int16)

  def test_array_value_input(self):
    inner = build_from_nested([1.0, 2.0])
    arr = build_from_nested([inner, inner])

    self.assertEqual(arr.shape, (2, 2))
    self.assertEqual(arr.tolist(), [[1.0, 2.0], [1.0, 2.0]])

  def test_config_casting(self):
    config = BuildConfig(casting='same_kind')

    with self.assertRaises(CastError):
      build_from_nested([1.5], dtype=DType.int64, config=config)


class BuildRepeatedTest(TestCase):
  def test_array(self):
    arr = build_repeated(build_from_nested([1, 2]), 3)

    self.assertEqual(arr.shape, (3, 2))
    self.assertIs(arr.dtype, DType.int64)
    self.assertEqual(arr.data.tolist(), [1, 2, 1, 2, 1, 2])

  def test_scalar(self):
    arr = build_repeated(2.5, 4)

    self.assertEqual(arr.shape, (4,))
    self.assertIs(arr.dtype, DType.float64)
    self.assertEqual(arr.tolist(), [2.5] * 4)

  def test_scalar_dtype(self):
    arr = build_repeated(2.5, 2, dtype=DType.int8)

    self.assertIs(arr.dtype, DType.int8)
    self.assertEqual(arr.tolist(), [2, 2])

  def test_cast_array(self):
    arr = build_repeated(build_from_nested([1, 2]), 2, dtype=DType.float32)

    self.assertIs(arr.dtype, DType.float32)
    self.assertEqual(arr.tolist(), [[1.0, 2.0], [1.0, 2.0]])

  def test_range_unit(self):
    arr = build_repeated(range(3), 2)

    self.assertEqual(arr.shape, (2, 3))
    self.assertEqual(arr.tolist(), [[0, 1, 2], [0, 1, 2]])
    self.assertEqual(build_repeated(deque([1.5]), 2).shape, (2, 1))

  def test_nested_unit(self):
    arr = build_repeated([[1], [2]], 2)

    self.assertEqual(arr.shape, (2, 2, 1))

  def test_zero_count(self):
    arr = build_repeated(build_from_nested([[1, 2, 3]]), 0)

    self.assertEqual(arr.shape, (0, 1, 3))
    self.assertEqual(arr.size, 0)

  def test_invalid_count(self):
    for count in [-1, 1.0, True]:
      with self.assertRaises(ShapeError):
        build_repeated(1, count) # type: ignore

  def test_missing_unit(self):
    with self.assertRaises(EmptyInputError):
      build_repeated(None, 2)

  def test_unknown_dtype(self):
    with self.assertRaises(InvalidValueError):
      build_repeated("x", 2)

  def test_no_aliasing(self):
    unit = build_from_nested([1, 2])
    arr = build_repeated(unit, 2)

    self.assertFalse(np.shares_memory(unit.data, arr.data))


class ArrayValueTest(TestCase):
  def test_shape_mismatch(self):
    with self.assertRaises(InvalidValueError):
      ArrayValue(shape=(2, 2), dtype=DType.int64, data=np.zeros(3, dtype='i8'))

  def test_dtype_mismatch(self):
    with self.assertRaises(InvalidValueError):
      ArrayValue(shape=(3,), dtype=DType.int64, data=np.zeros(3, dtype='f8'))

  def test_invalid_data(self):
    with self.assertRaises(InvalidValueError):
      ArrayValue(shape=(1, 3), dtype=DType.float64, data=np.zeros((1, 3)))

    with self.assertRaises(InvalidValueError):
      ArrayValue(shape=(-1,), dtype=DType.float64, data=np.zeros(0))

  def test_owns_buffer(self):
    data = np.arange(4, dtype='i8')
    arr = ArrayValue(shape=(2, 2), dtype=DType.int64, data=data)

    self.assertTrue(data.flags.writeable)
    self.assertFalse(np.shares_memory(data, arr.data))

    data[0] = 9
    self.assertEqual(arr.tolist(), [[0, 1], [2, 3]])

  def test_immutable(self):
    arr = build_filled((2, 2), 0, dtype=DType.int64)

    with self.assertRaises(ValueError):
      arr.data[0] = 1

    with self.assertRaises(AttributeError):
      arr.shape = (4,) # type: ignore

  def test_to_numpy(self):
    arr = build_from_nested([[1, 2, 3], [4, 5, 6]])
    loaded = arr.to_numpy(order='F')

    self.assertTrue(np.array_equal(loaded, np.array([[1, 2, 3], [4, 5, 6]])))
    self.assertTrue(loaded.flags.f_contiguous)
    self.assertTrue(loaded.flags.writeable)

  def test_iter(self):
    arr = build_from_nested([[1, 2], [3, 4], [5, 6]])

    self.assertEqual(len(arr), 3)
    self.assertEqual([row.tolist() for row in arr], [[1, 2], [3, 4], [5, 6]])

    with self.assertRaises(TypeError):
      len(build_from_nested(1))

  def test_equality(self):
    self.assertEqual(build_from_nested([1, 2]), build_from_nested((1, 2)))
    self.assertNotEqual(build_from_nested([1, 2]), build_from_nested([1.0, 2.0]))
    self.assertNotEqual(build_from_nested([1, 2]), build_from_nested([[1, 2]]))

  def test_shape_agreement(self):
    arrays = [
      build_filled((3, 0, 2), 1),
      build_filled((), 1),
      build_from_nested([[[1, 2]], [[3, 4]]]),
      build_repeated(build_filled((2, 2), 1), 3)
    ]

    for arr in arrays:
      self.assertEqual(math.prod(arr.shape), arr.data.size)

  def test_errors_share_base(self):
    for error in [CastError, EmptyInputError, InvalidValueError, ShapeError, TypeInferenceError]:
      self.assertTrue(issubclass(error, ConstructionError))


class ConfigTest(TestCase):
  def test_toml(self):
    with TemporaryDirectory() as dir_path:
      path = Path(dir_path) / "config.toml"
      path.write_text("[np_build]\ncasting = \"same_kind\"\ndefault_dtype = \"float32\"\n")

      config = load_config(path)

      self.assertEqual(config.casting, 'same_kind')
      self.assertIs(config.default_dtype, DType.float32)
      self.assertIs(build_filled((2,), 1, config=config).dtype, DType.float32)

  def test_json(self):
    with TemporaryDirectory() as dir_path:
      path = Path(dir_path) / "config.json"
      path.write_text("{\"default_dtype\": \"i4\"}")

      self.assertIs(load_config(path).default_dtype, DType.int32)

  def test_invalid(self):
    with TemporaryDirectory() as dir_path:
      path = Path(dir_path) / "config.json"

      with self.assertRaises(FileNotFoundError):
        load_config(path)

      path.write_text("{\"order\": \"F\"}")

      with self.assertRaises(ValueError):
        load_config(path)

      path.write_text("{\"casting\": \"lenient\"}")

      with self.assertRaises(ValueError):
        load_config(path)

      yaml_path = Path(dir_path) / "config.yaml"
      yaml_path.write_text("casting: safe\n")

      with self.assertRaises(ValueError):
        load_config(yaml_path)


if __name__ == '__main__':
  unittest.main()
