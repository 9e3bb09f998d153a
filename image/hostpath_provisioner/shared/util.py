# ---------------------------------------------------------------------------- #

from __future__ import annotations

import sys
from asyncio import CancelledError
from collections.abc import Callable, Coroutine
from datetime import datetime
from functools import wraps
from traceback import print_exc
from typing import Any, TypeVar

from hostpath_provisioner.shared.kubernetes import IgnoredError

# ---------------------------------------------------------------------------- #


def log(obj: object) -> None:
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")
    print(f"\033[36m[{now}]\033[0m {obj}", file=sys.stderr, flush=True)


# ---------------------------------------------------------------------------- #

_Self = TypeVar("_Self")
_Arg = TypeVar("_Arg")
_Result = TypeVar("_Result")

_Method = Callable[[_Self, _Arg], Coroutine[Any, Any, _Result]]

_call_seqnum = 0


def log_call(
    method: _Method[_Self, _Arg, _Result]
) -> _Method[_Self, _Arg, _Result]:
    """Log entry to and exit from a provisioner operation."""

    @wraps(method)
    async def wrapped(self: _Self, arg: _Arg) -> _Result:

        global _call_seqnum
        seqnum = _call_seqnum
        _call_seqnum += 1

        header = f"{seqnum}: {type(self).__name__}.{method.__name__}()"

        log(f"entering {header} <-- {describe(arg)}")

        try:
            result = await method(self, arg)
        except IgnoredError as e:
            log(f"\033[33mexited   {header} --> ignored: {e.reason}\033[0m")
            raise
        except CancelledError:
            log(f"\033[31mexited   {header} --> canceled\033[0m")
            raise
        except Exception:
            log(f"\033[31mexited   {header} --> unhandled exception:")
            print_exc()
            print("\033[0m", end="", file=sys.stderr, flush=True)
            raise
        else:
            log(f"\033[32mexited   {header} --> {describe(result)}\033[0m")
            return result

    return wrapped


def describe(obj: object) -> str:
    """Short description of an argument or result of a provisioner operation,
    avoiding dumps of whole Kubernetes objects."""

    if obj is None:
        return "None"

    if isinstance(obj, tuple):
        return f"({', '.join(map(describe, obj))})"

    pv_name = getattr(obj, "pv_name", None)
    if pv_name is not None:
        return f"{type(obj).__name__} {{ pv_name: {pv_name} }}"

    metadata = getattr(obj, "metadata", None)
    if metadata is not None:
        return f"{type(obj).__name__} {{ name: {metadata.name} }}"

    return str(obj)


# ---------------------------------------------------------------------------- #
