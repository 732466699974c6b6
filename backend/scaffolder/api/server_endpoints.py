from fastapi import APIRouter, Depends

from ..models.project import ServerList
from ..services.port_manager import PortManager
from .dependencies import get_port_manager

router = APIRouter(prefix="/servers", tags=["servers"])


@router.get("", response_model=ServerList)
async def get_running_servers(ports: PortManager = Depends(get_port_manager)):
    """List dev servers that reached the started state"""
    return ServerList(
        servers=ports.get_running_servers(),
        allocated_ports=ports.allocated_ports
    )


@router.post("/cleanup")
async def cleanup_servers(ports: PortManager = Depends(get_port_manager)):
    """Forget all allocated ports and running servers (does not stop processes)"""
    released = len(ports.allocated_ports)
    ports.cleanup()
    return {"message": "Port bookkeeping cleared", "released_ports": released}
