import logging
import socket
import threading
from typing import Dict, List, Optional, Set

from ..core.config import settings
from ..core.errors import NoPortAvailableError, PortNotAllocatedError
from ..models.project import RunningServer

logger = logging.getLogger(__name__)


class PortManager:
    """
    Tracks dev server ports claimed by this process.

    Owns two collections guarded by one lock:
    - allocated_ports: ports handed out by allocate_port()
    - running servers: port -> (project name, pid) for servers that reached
      the started state. Every registered port is also allocated.
    """

    def __init__(self, port_range_start: int = 8080, port_range_size: int = 100):
        self.port_range_start = port_range_start
        self.port_range_end = port_range_start + port_range_size
        self._allocated_ports: Set[int] = set()
        self._running_servers: Dict[int, RunningServer] = {}
        self._lock = threading.Lock()

    def is_port_available(self, port: int) -> bool:
        """Check if a port is available"""
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(('', port))
                s.listen(1)
                return True
        except OSError:
            return False

    def allocate_port(self) -> int:
        """Allocate the first free port in range"""
        with self._lock:
            for port in range(self.port_range_start, self.port_range_end):
                if port in self._allocated_ports:
                    continue
                if self.is_port_available(port):
                    self._allocated_ports.add(port)
                    logger.info(f"Allocated port {port}")
                    return port

        raise NoPortAvailableError(self.port_range_start, self.port_range_end)

    def release_port(self, port: int):
        """Release a port"""
        with self._lock:
            self._allocated_ports.discard(port)
            self._running_servers.pop(port, None)
        logger.info(f"Released port {port}")

    def is_allocated(self, port: int) -> bool:
        with self._lock:
            return port in self._allocated_ports

    @property
    def allocated_ports(self) -> List[int]:
        with self._lock:
            return sorted(self._allocated_ports)

    def register_running_server(self, port: int, project_name: str, process_id: Optional[int] = None):
        """Record a started server; the port must already be allocated"""
        with self._lock:
            if port not in self._allocated_ports:
                raise PortNotAllocatedError(port)
            self._running_servers[port] = RunningServer(
                port=port,
                project_name=project_name,
                process_id=process_id
            )
        logger.info(f"Registered server '{project_name}' on port {port} (pid {process_id})")

    def unregister_server(self, port: int):
        with self._lock:
            self._running_servers.pop(port, None)

    def get_running_servers(self) -> List[RunningServer]:
        """Snapshot of running servers in registration order"""
        with self._lock:
            return list(self._running_servers.values())

    def cleanup(self):
        """Forget every allocated port and running server"""
        with self._lock:
            ports = len(self._allocated_ports)
            self._allocated_ports.clear()
            self._running_servers.clear()
        logger.warning(f"Port bookkeeping cleared ({ports} ports released)")


# Global instance
port_manager = PortManager(
    port_range_start=settings.PORT_RANGE_START,
    port_range_size=settings.PORT_RANGE_SIZE
)
