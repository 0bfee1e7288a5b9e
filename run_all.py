from __future__ import annotations

import signal
import subprocess
import sys
import time

PROCESSES = {
    "api": "run_local.py",
    "worker": "run_worker.py",
}


def _terminate(procs: dict[str, subprocess.Popen]) -> None:
    for proc in procs.values():
        if proc.poll() is None:
            proc.terminate()
    for proc in procs.values():
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()


def main() -> int:
    procs = {name: subprocess.Popen([sys.executable, script]) for name, script in PROCESSES.items()}
    try:
        while True:
            for name, proc in procs.items():
                code = proc.poll()
                if code is not None:
                    print(f"{name} exited with {code}, stopping the rest", file=sys.stderr)
                    _terminate(procs)
                    return code
            time.sleep(0.5)
    except KeyboardInterrupt:
        _terminate(procs)
        return 0


if __name__ == "__main__":
    signal.signal(signal.SIGINT, signal.default_int_handler)
    raise SystemExit(main())
