"""Service topology declaration, validation and rendering."""

from .builder import COMPOSE_FILE_NAME, PROXY_ROUTES_FILE_NAME, RenderedTopology, TopologyBuilder
from .scaffold import DOCKERFILE_NAME, ENTRYPOINT_NAME, ScaffoldResult, scaffold_write_build_files
from .services import (
	APPLICATION_CONTAINER_PORT,
	APPLICATION_SERVICE_NAME,
	DATA_SUBDIRECTORIES,
	topology_default_services,
)

__all__ = [
	"APPLICATION_CONTAINER_PORT",
	"APPLICATION_SERVICE_NAME",
	"COMPOSE_FILE_NAME",
	"DATA_SUBDIRECTORIES",
	"DOCKERFILE_NAME",
	"ENTRYPOINT_NAME",
	"PROXY_ROUTES_FILE_NAME",
	"RenderedTopology",
	"ScaffoldResult",
	"TopologyBuilder",
	"scaffold_write_build_files",
	"topology_default_services",
]
