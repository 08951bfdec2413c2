# util/timing.py
import time
from contextlib import contextmanager
from typing import Iterator, Any
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "pipeline.embed", chunk="chunk-0"):
          ...
    Emits one INFO on exit: "<name>.done ms=<int> ok=<bool> key=val ..."
    A failing block is logged with ok=False and the exception is re-raised.
    """
    t0 = time.perf_counter()
    ok = True
    try:
        yield
    except BaseException:
        ok = False
        raise
    finally:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        logger.info("%s.done ms=%d ok=%s%s", name, dt_ms, ok, suffix)
