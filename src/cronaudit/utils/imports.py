"""按导入路径加载可调用对象"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Callable


def resolve_callable(path: str) -> Callable[..., Any]:
    """解析 "package.module:attr" 格式的导入路径

    也接受 "package.module.attr" 形式（最后一段视为属性名）。

    Raises:
        ValueError: 路径格式无效
        ImportError: 模块无法导入
        AttributeError: 模块中不存在该属性
        TypeError: 目标不可调用
    """
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"Invalid import path: {path!r}")

    target: Any = import_module(module_name)
    for attr in attr_path.split("."):
        target = getattr(target, attr)

    if not callable(target):
        raise TypeError(f"Import path {path!r} does not point to a callable")
    return target
