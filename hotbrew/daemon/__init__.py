"""Background sync daemon."""
from hotbrew.daemon.daemon import is_running, read_pid, run_cycle, start, status, stop
from hotbrew.daemon.shutdown import GracefulShutdown

__all__ = ["GracefulShutdown", "is_running", "read_pid", "run_cycle", "start", "status", "stop"]
