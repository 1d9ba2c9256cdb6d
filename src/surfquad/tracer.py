"""
Hierarchical runtime tracing for surfquad.

Nested spans with timing plus one-off events, so a quadrangulation run can
be followed stage by stage without a debugger.
"""

import functools
import json
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime


LEVEL_RANKS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


@dataclass
class TracerConfig:
    """Settings of the global tracer."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


class Tracer:
    """
    Hierarchical tracer for structured run logging.

    Every line names the innermost open span as module:name, indented by the
    number of open spans. Output goes to stderr, mirrored to file_path when
    set, each text line optionally followed by the same record as JSON.
    """

    def __init__(self):
        self.config = TracerConfig()
        self._sink = None
        self._open_spans = []

    @property
    def depth(self):
        return len(self._open_spans)

    def configure(self, **settings):
        """Replace the settings, reopening the mirror file if any."""
        self.close()
        self.config = TracerConfig(**settings)
        self.config.level = self.config.level.upper()
        if self.config.enabled and self.config.file_path:
            self._sink = open(self.config.file_path, "w", encoding="utf-8")

    def close(self):
        if self._sink is not None:
            self._sink.close()
            self._sink = None

    def enabled_for(self, level):
        if not self.config.enabled:
            return False
        return LEVEL_RANKS.get(level, 2) <= LEVEL_RANKS.get(self.config.level, 2)

    def _emit(self, level, where, message, meta=None):
        if not self.enabled_for(level):
            return

        now = datetime.now()
        stamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        meta = {key: summarize(value) for key, value in (meta or {}).items()}

        text = f"{stamp} {level:<5} {'  ' * self.depth}{where}  {message}"
        if meta:
            text += " " + " ".join(f"{key}={value}" for key, value in meta.items())
        lines = [text]
        if self.config.json_output:
            lines.append(json.dumps({
                "timestamp": stamp,
                "level": level,
                "depth": self.depth,
                "where": where,
                "message": message,
                "meta": meta,
            }))

        for line in lines:
            print(line, file=sys.stderr)
            if self._sink is not None:
                self._sink.write(line + "\n")
                self._sink.flush()

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Context manager for a traced span.

        Exceptions are logged at ERROR level with the elapsed time and
        re-raised.
        """
        if not self.config.enabled:
            yield
            return

        where = f"{module}:{name}" if module else name
        self._emit("INFO", where, "start", meta)
        self._open_spans.append(where)
        started = time.perf_counter()

        try:
            yield
        except Exception as e:
            self._open_spans.pop()
            elapsed = (time.perf_counter() - started) * 1000
            self._emit("ERROR", where, f"failed dt={elapsed:.0f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise

        self._open_spans.pop()
        elapsed = (time.perf_counter() - started) * 1000
        self._emit("INFO", where, f"end ok dt={elapsed:.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event within the current span."""
        where = self._open_spans[-1] if self._open_spans else ""
        self._emit(level, where, message, meta)


def summarize(obj, max_len=200):
    """
    Summarize an object for logging.

    Returns a compact string that never exceeds max_len chars.
    """
    try:
        text = _describe(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text


def _describe(obj):
    import networkx as nx
    import numpy as np
    from pydantic import BaseModel

    type_name = type(obj).__name__

    if obj is None:
        return "None"
    if isinstance(obj, np.ndarray):
        return f"ndarray({obj.dtype},{'x'.join(str(s) for s in obj.shape)})"
    if isinstance(obj, nx.Graph):
        return f"{type_name}(nodes={obj.number_of_nodes()},edges={obj.number_of_edges()})"
    if isinstance(obj, BaseModel):
        return f"{type_name}({len(type(obj).model_fields)} fields)"
    if isinstance(obj, (bool, int, float, np.number)):
        return str(obj)

    if isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj) if isinstance(obj, (set, frozenset)) else list(obj)
        if not items:
            return f"{type_name}(len=0)"
        # point ids and quad corners are short enough to print in full
        if len(items) <= 8 and all(isinstance(x, (int, float)) for x in items):
            return f"{type_name}({','.join(str(x) for x in items)})"
        return f"{type_name}(len={len(items)},first={type(items[0]).__name__})"

    return f"<{type_name}>"


def trace(label=None):
    """
    Decorator to trace function execution.

    Wraps a function in a span named after label, or the function name,
    within its module.
    """
    def decorator(func):
        module = func.__module__.rsplit(".", 1)[-1] if func.__module__ else ""

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)
            with _tracer.span(label or func.__name__, module=module):
                return func(*args, **kwargs)

        return wrapper
    return decorator


# Global tracer instance
_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
