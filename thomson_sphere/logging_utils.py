from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6
_repr.maxother = 120


def _summarize(value: Any, *, max_length: int = 200) -> str:
    if isinstance(value, np.ndarray):
        parts = [f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"]
        if value.size and np.issubdtype(value.dtype, np.number):
            parts.append(f"min={float(value.min()):.6g}")
            parts.append(f"max={float(value.max()):.6g}")
        return ", ".join(parts)
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], np.ndarray):
        return f"{type(value).__name__}[{len(value)} x {_summarize(value[0])}]"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _describe_call(args: Iterable[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_summarize(arg) for arg in args]
    parts.extend(f"{key}={_summarize(value)}" for key, value in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that logs entry, exit and failures at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        qualname = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            enabled = logger.isEnabledFor(logging.DEBUG)
            if enabled:
                logger.debug("Entering %s (%s)", qualname, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                if enabled:
                    logger.exception("Exception in %s", qualname)
                raise
            if enabled:
                if log_result:
                    logger.debug("Exiting %s -> %s", qualname, _summarize(result))
                else:
                    logger.debug("Exiting %s", qualname)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def _wrap_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr_name, attr_value in list(cls.__dict__.items()):
        if attr_name.startswith("_"):
            continue
        qualified = f"{cls.__name__}.{attr_name}"
        if attr_name in skip or qualified in skip:
            continue
        if isinstance(attr_value, staticmethod):
            wrapped = debug_log_call(logger, name=qualified)(attr_value.__func__)
            setattr(cls, attr_name, staticmethod(wrapped))
        elif isinstance(attr_value, classmethod):
            wrapped = debug_log_call(logger, name=qualified)(attr_value.__func__)
            setattr(cls, attr_name, classmethod(wrapped))
        elif inspect.isfunction(attr_value) and attr_value.__module__ == cls.__module__:
            setattr(cls, attr_name, debug_log_call(logger, name=qualified)(attr_value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = True,
) -> None:
    """Wrap the public functions (and class methods) defined in ``namespace``."""

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set: Set[str] = set(skip or [])

    for name, value in list(namespace.items()):
        if name.startswith("_") or name in skip_set:
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)
        elif wrap_methods and inspect.isclass(value) and value.__module__ == module_name:
            _wrap_class(value, logger, skip_set)


__all__ = ["apply_debug_logging", "debug_log_call"]
