"""
helperkit: dot-path access to nested data, plus the small conveniences web
apps reach for (env, config, cache, encryption, logging, request helpers).

The path accessor is importable from the package root:

    from helperkit import data_get, data_set, pluck
"""
from importlib.metadata import version, PackageNotFoundError

from helperkit.utils.arrays import array_except, array_only, array_pluck, except_, only, pluck
from helperkit.utils.dict_path import (
    PathError, data_forget, data_get, data_has, data_set, split_path, value,
)

try:
    __version__ = version("helperkit")
except PackageNotFoundError:
    __version__ = "unknown"
__app_name__ = "helperkit"

__all__ = [
    "PathError",
    "array_except",
    "array_only",
    "array_pluck",
    "data_forget",
    "data_get",
    "data_has",
    "data_set",
    "except_",
    "only",
    "pluck",
    "split_path",
    "value",
]
