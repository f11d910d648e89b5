"""
Call-chain inspection.

The logger passes its own frame as ``origin``. That frame is depth 0 and is
never reported; its caller is depth 1, the caller's caller depth 2, and so on
out to the entry point.
"""

import inspect
import linecache
import reprlib
from types import FrameType

from .records import FrameDescriptor

NO_FILE = "<No file>"

_repr = reprlib.Repr()
_repr.maxstring = 80
_repr.maxother = 80


def _script_path(filename: str) -> str | None:
    # <stdin>, <string>, <frozen ...> have no file behind them
    if not filename or (filename.startswith("<") and filename.endswith(">")):
        return None
    return filename


def render_arguments(frame: FrameType) -> str:
    """Render the frame's parameters as ``{a=1, b='x'}``; ``{}`` if none."""
    arginfo = inspect.getargvalues(frame)
    names = list(arginfo.args)
    if arginfo.varargs:
        names.append(arginfo.varargs)
    if arginfo.keywords:
        names.append(arginfo.keywords)

    pairs = []
    for name in names:
        if name not in arginfo.locals:
            continue
        try:
            value = _repr.repr(arginfo.locals[name])
        except Exception:
            value = "<unrepresentable>"
        pairs.append(f"{name}={value}")
    return "{" + ", ".join(pairs) + "}"


def describe_frame(frame: FrameType, depth: int) -> FrameDescriptor:
    lineno = frame.f_lineno or 0
    script_path = _script_path(frame.f_code.co_filename)
    if script_path is None:
        location = NO_FILE
        command = ""
    else:
        location = f"{script_path}: line {lineno}"
        command = linecache.getline(script_path, lineno, frame.f_globals).strip()
    return FrameDescriptor(
        depth=depth,
        source_line=lineno,
        function_name=frame.f_code.co_name,
        script_path=script_path,
        location=location,
        command=command,
        arguments=render_arguments(frame),
    )


def capture_call_chain(origin: FrameType) -> list[FrameDescriptor]:
    """
    Describe every frame outside the logger, innermost first.

    Args:
        origin: The logger's own frame (excluded)

    Returns:
        FrameDescriptors with depth 1..N
    """
    frames = []
    frame = origin.f_back
    depth = 1
    while frame is not None:
        frames.append(describe_frame(frame, depth))
        frame = frame.f_back
        depth += 1
    return frames


def calling_function(origin: FrameType) -> str:
    """Name of the depth-1 frame, '' when the logger has no caller."""
    caller = origin.f_back
    if caller is None:
        return ""
    return caller.f_code.co_name
