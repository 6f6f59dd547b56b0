import os
import threading
import multiprocessing
import config

# scope -> config flag that silences it when False
_SCOPE_FLAGS = {
    "ZONES": "LOG_ZONES",
    "ZONE_MAP": "LOG_ZONES",
    "LAYER_CACHE": "LOG_LAYER_CACHE",
}


def enabled(scope, level="INFO"):
    if level in ("WARN", "ERROR"):
        return True
    flag = _SCOPE_FLAGS.get(scope)
    if flag is None:
        return True
    return bool(getattr(config, flag, True))


def log(scope, msg, level="INFO"):
    if not enabled(scope, level):
        return
    pid = os.getpid()
    proc = multiprocessing.current_process().name
    thread = threading.current_thread().name
    text = f"[{level} pid{pid} proc{proc} thr{thread} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color:
        if level == "ERROR":
            text = f"\x1b[31m{text}\x1b[0m"
        elif proc == "MainProcess" and thread != "MainThread":
            # Generation worker thread.
            text = f"\x1b[32m{text}\x1b[0m"
        elif proc != "MainProcess":
            text = f"\x1b[33m{text}\x1b[0m"
    print(text)
