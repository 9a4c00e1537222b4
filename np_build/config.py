"""
Build settings and their loading from TOML or JSON files.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping
import tomllib

from .dtypes import DEFAULT_DTYPE, DType
from .utils import CASTING_RULES, CastingRule


logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class BuildConfig:
  """
  Settings shared by the construction functions.

  Parameters
    casting: The numpy casting rule applied to every element cast. Defaults to `unsafe`, which truncates floats cast to integers.
    default_dtype: The dtype of filled arrays when none is given.
  """

  casting: CastingRule = 'unsafe'
  default_dtype: DType = DEFAULT_DTYPE

  def __post_init__(self):
    if self.casting not in CASTING_RULES:
      raise ValueError(f"Invalid casting rule {self.casting!r}")
    if not isinstance(self.default_dtype, DType):
      raise ValueError(f"Invalid default dtype {self.default_dtype!r}")

  @classmethod
  def from_mapping(cls, options: Mapping[str, Any], /):
    """
    Creates a config from a dictionary, e.g. one read from a file. Dtypes may be given by name.
    """

    options = dict(options)
    unknown_keys = options.keys() - { field.name for field in fields(cls) }

    if unknown_keys:
      raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown_keys))}")

    if isinstance(options.get('default_dtype'), str):
      options['default_dtype'] = DType.from_name(options['default_dtype'])

    return cls(**options)


DEFAULT_CONFIG = BuildConfig()


def load_config(path: Path | str, /):
  """
  Loads a config file.

  The format is chosen from the file suffix, either `.toml` or `.json`. Settings are read from the `np_build` table if present, otherwise from the top level.

  Raises
    FileNotFoundError: If the file does not exist.
    ValueError: If the format is not supported or the settings are invalid.
  """

  path = Path(path)

  if not path.exists():
    raise FileNotFoundError(f"Config file not found: {path}")

  logger.debug(f"Loading config from {path}")

  if path.suffix == ".toml":
    with path.open("rb") as file:
      contents = tomllib.load(file)
  elif path.suffix == ".json":
    with path.open("r", encoding="utf-8") as file:
      contents = json.load(file)
  else:
    raise ValueError(f"Unsupported config format: {path.suffix}")

  if not isinstance(contents, dict):
    raise ValueError(f"Invalid config in {path}")

  return BuildConfig.from_mapping(contents.get('np_build', contents))


__all__ = [
  'BuildConfig',
  'DEFAULT_CONFIG',
  'load_config'
]
