import logging
from pathlib import Path

from ..core.config import settings
from ..core.errors import (
    CommandFailedError,
    PortNotAllocatedError,
    ProjectExistsError,
    ServerStartError,
)
from ..models.project import FrontendResult, OutputDirs, ProjectResult, PromptResponse
from .command_runner import run_command
from .port_manager import PortManager, port_manager
from .project_generator import ProjectGenerator, project_generator
from .server_supervisor import DevServerSupervisor, dev_server_supervisor

logger = logging.getLogger(__name__)


class ProjectManager:
    """Scaffolds projects into the output directory"""

    def __init__(
        self,
        output_dir: Path,
        port_manager: PortManager,
        supervisor: DevServerSupervisor,
        generator: ProjectGenerator,
        install_nest_cli: bool = True
    ):
        self.output_dir = Path(output_dir)
        self.port_manager = port_manager
        self.supervisor = supervisor
        self.generator = generator
        self.install_nest_cli = install_nest_cli

    def _relative(self, project_path: Path) -> str:
        return f"{self.output_dir.name}/{project_path.name}"

    def _new_project_path(self, name: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        project_path = self.output_dir / name
        if project_path.exists():
            raise ProjectExistsError(project_path)
        return project_path

    async def setup_vanilla_project(self, name: str) -> FrontendResult:
        """
        Generate a vanilla frontend, install its dependencies and start its dev server.

        The files are kept when install or server start fails; the result then
        reports server_started=False with the reason.
        """
        logger.info(f"--- Starting Vanilla Frontend Project Setup: {name} ---")
        project_path = self._new_project_path(name)

        port = self.port_manager.allocate_port()
        try:
            project_path.mkdir(parents=True)
            self.generator.generate_vanilla_files(project_path, name, port)
        except OSError:
            self.port_manager.release_port(port)
            raise

        result = FrontendResult(
            name=name,
            path=self._relative(project_path),
            message=f"Vanilla frontend project '{name}' created",
            port=port
        )

        try:
            await run_command("npm", ["install"], cwd=project_path, capture=True)
        except CommandFailedError as e:
            self.port_manager.release_port(port)
            logger.warning(f"Dependency installation failed for '{name}': {e}")
            result.server_error = str(e)
            return result

        try:
            server = await self.supervisor.start_server(project_path, port, name)
        except (ServerStartError, PortNotAllocatedError) as e:
            logger.warning(f"Project '{name}' created but its server did not start: {e}")
            result.server_error = str(e)
            return result

        result.server_started = True
        result.url = server.url
        result.message = f"Vanilla frontend project '{name}' created and server started on {server.url}"
        return result

    async def setup_react_project(self, name: str) -> ProjectResult:
        """Create a React TypeScript project with create-react-app"""
        logger.info(f"--- Starting React Project Setup: {name} ---")
        project_path = self._new_project_path(name)

        await run_command(
            "npx",
            ["create-react-app", name, "--template", "typescript"],
            cwd=self.output_dir
        )

        return ProjectResult(
            name=name,
            path=self._relative(project_path),
            message=f"React project '{name}' created successfully"
        )

    async def setup_nestjs_project(self, name: str) -> ProjectResult:
        """Create a NestJS project with the Nest CLI"""
        logger.info(f"--- Starting NestJS Project Setup: {name} ---")
        project_path = self._new_project_path(name)

        if self.install_nest_cli:
            await run_command("npm", ["install", "-g", "@nestjs/cli"])

        await run_command(
            "nest",
            ["new", name, "--package-manager", "npm"],
            cwd=self.output_dir
        )

        return ProjectResult(
            name=name,
            path=self._relative(project_path),
            message="NestJS backend project created successfully"
        )

    async def create_from_prompt(self, content: str) -> PromptResponse:
        """Create <content>_backend and <content>_frontend"""
        backend_name = f"{content}_backend"
        frontend_name = f"{content}_frontend"
        logger.info(f"Starting project creation for: {content}")

        backend = await self.setup_nestjs_project(backend_name)
        frontend = await self.setup_vanilla_project(frontend_name)

        if frontend.server_started:
            frontend_info = f"Vanilla frontend project created and server started on {frontend.url}"
        else:
            frontend_info = f"Vanilla frontend project created; server not started: {frontend.server_error}"

        return PromptResponse(
            message="Success",
            output_dir=OutputDirs(backend=backend.path, frontend=frontend.path),
            info=OutputDirs(backend=backend.message, frontend=frontend_info)
        )


# Global instance
project_manager = ProjectManager(
    output_dir=settings.OUTPUT_DIR,
    port_manager=port_manager,
    supervisor=dev_server_supervisor,
    generator=project_generator,
    install_nest_cli=settings.INSTALL_NEST_CLI
)
