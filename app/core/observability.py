
import uuid
import contextvars
import json
import time
from functools import wraps
from typing import Optional, Dict, Any

# One trace per automation request; spans nest inside it (apply_plan, immediate_run)
_trace_id_ctx = contextvars.ContextVar("trace_id", default=None)
_span_id_ctx = contextvars.ContextVar("span_id", default=None)

class TraceManager:
    """
    Trace events for automation requests: classification, plan application and
    immediate runs. Each event is a single JSON line on stdout carrying the
    request's trace id (the X-Trace-Id header when the caller sent one).
    """

    @staticmethod
    def get_trace_id() -> str:
        tid = _trace_id_ctx.get()
        if not tid:
            tid = str(uuid.uuid4())
            _trace_id_ctx.set(tid)
        return tid

    @staticmethod
    def set_trace_id(trace_id: str):
        _trace_id_ctx.set(trace_id)

    @staticmethod
    def log(level: str, message: str, extra: Optional[Dict[str, Any]] = None):
        event = {
            "timestamp": time.time(),
            "level": level.upper(),
            "message": message,
            "trace_id": TraceManager.get_trace_id(),
            "span_id": _span_id_ctx.get(),
            **(extra or {})
        }
        print(json.dumps(event, default=str))

    @staticmethod
    def info(message: str, **fields):
        TraceManager.log("INFO", message, fields)

    @staticmethod
    def warning(message: str, **fields):
        TraceManager.log("WARNING", message, fields)

    @staticmethod
    def error(message: str, exc: Optional[Exception] = None, **fields):
        if exc:
            fields["error"] = str(exc)
            fields["error_type"] = type(exc).__name__
        TraceManager.log("ERROR", message, fields)

    @staticmethod
    def span(name: str):
        """
        Wraps a coroutine (usually a remote stage such as applying a plan) in
        start/end events with its duration. Exceptions are recorded and re-raised.
        """
        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                parent_span = _span_id_ctx.get()
                token = _span_id_ctx.set(str(uuid.uuid4()))
                started = time.monotonic()
                TraceManager.info(f"{name} started", span_name=name, parent_span=parent_span)

                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    TraceManager.error(f"{name} failed", exc=e, span_name=name, duration_ms=(time.monotonic() - started) * 1000)
                    raise
                else:
                    TraceManager.info(f"{name} finished", span_name=name, duration_ms=(time.monotonic() - started) * 1000)
                    return result
                finally:
                    _span_id_ctx.reset(token)
            return wrapper
        return decorator
