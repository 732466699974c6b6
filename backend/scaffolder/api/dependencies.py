from ..services.port_manager import PortManager, port_manager
from ..services.project_manager import ProjectManager, project_manager


def get_project_manager() -> ProjectManager:
    return project_manager


def get_port_manager() -> PortManager:
    return port_manager
