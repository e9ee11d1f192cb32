"""Services for hostprobe MCP."""

from hostprobe_mcp.dependencies import Dependencies
from hostprobe_mcp.services.connection import (
    ConnectionError,
    get_connection_with_retry,
)
from hostprobe_mcp.services.connectors import LocalConnector, SSHConnector
from hostprobe_mcp.services.executors import (
    check,
    exists,
    is_dir,
    look_path,
    mkdirp,
    read_file,
    run,
    run_in_background,
    run_retry,
    run_with_options,
    write_file,
)
from hostprobe_mcp.services.facts import FactsError, gather_facts
from hostprobe_mcp.services.filesystem import (
    ensure_mount,
    is_mounted,
    is_not_mounted_error,
    unmount,
)
from hostprobe_mcp.services.packages import (
    clean_package_cache,
    install_packages,
    is_package_installed,
    remove_packages,
    update_package_cache,
)
from hostprobe_mcp.services.pool import ConnectionPool
from hostprobe_mcp.services.service_manager import (
    daemon_reload,
    disable_service,
    enable_service,
    is_service_active,
    is_service_enabled,
    restart_service,
    start_service,
    stop_service,
)
from hostprobe_mcp.services.state import (
    get_config,
    get_pool,
    reset_state,
    set_config,
    set_pool,
)
from hostprobe_mcp.services.strategy import (
    StrategyError,
    detect_init_system,
    detect_package_manager,
)
from hostprobe_mcp.services.targets import get_connector, get_facts

__all__ = [
    "check",
    "clean_package_cache",
    "ConnectionError",
    "ConnectionPool",
    "daemon_reload",
    "Dependencies",
    "detect_init_system",
    "detect_package_manager",
    "disable_service",
    "enable_service",
    "ensure_mount",
    "exists",
    "FactsError",
    "gather_facts",
    "get_config",
    "get_connection_with_retry",
    "get_connector",
    "get_facts",
    "get_pool",
    "install_packages",
    "is_dir",
    "is_mounted",
    "is_not_mounted_error",
    "is_package_installed",
    "is_service_active",
    "is_service_enabled",
    "LocalConnector",
    "look_path",
    "mkdirp",
    "read_file",
    "remove_packages",
    "reset_state",
    "restart_service",
    "run",
    "run_in_background",
    "run_retry",
    "run_with_options",
    "set_config",
    "set_pool",
    "SSHConnector",
    "start_service",
    "stop_service",
    "StrategyError",
    "unmount",
    "update_package_cache",
    "write_file",
]
