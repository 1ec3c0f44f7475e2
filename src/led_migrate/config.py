"""Fixed settings shared by the migration commands."""

# Compose project name of the deployment. Compose names its volumes
# "<project>_<volume>", so this prefix must match exactly.
PROJECT_NAME = "lemmy-easy-deploy"
VOLUME_PREFIX = f"{PROJECT_NAME}_"

# Label recording how an imported volume was populated
IMPORT_TYPE_LABEL = f"{PROJECT_NAME}.import.type"

HELPER_IMAGE = "alpine:latest"
SMOKE_TEST_IMAGE = "hello-world"

# Engines in priority order
ENGINE_CANDIDATES = ("podman", "docker")
PODMAN_COMPOSE_COMMAND = "podman-compose"
DOCKER_COMPOSE_COMMANDS = ("docker compose", "docker-compose")

PODMAN_SOCKETS = (
    "{runtime_dir}/podman/podman.sock",
    "/run/podman/podman.sock",
)

MIN_SUPPORTED_ENGINE_MAJOR = 20

DOCKER_INSTALL_URL = "https://docs.docker.com/engine/install/"
DOCKER_SERVER_INSTALL_URL = "https://docs.docker.com/engine/install/#server"
DOCKER_EOL_URL = "https://endoflife.date/docker-engine"

EXAMPLE_VOLUMES = (
    "caddy_data",
    "caddy_config",
    "pictrs_data",
    "postgres_data",
    "postfix_data",
    "postfix_mail",
    "postfix_spool",
    "postfix_keys",
)
