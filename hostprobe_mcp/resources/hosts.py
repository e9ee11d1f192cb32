"""Hosts resource listing probe targets."""

from hostprobe_mcp.services import get_config
from hostprobe_mcp.services.state import get_cached_facts
from hostprobe_mcp.utils.ping import check_hosts_online


async def list_hosts_resource() -> str:
    """List configured hosts with reachability and any gathered facts.

    Returns:
        Formatted host list
    """
    hosts = get_config().get_hosts()
    if not hosts:
        return "No SSH hosts configured. Use 'localhost' to probe this machine."

    online_status = await check_hosts_online(hosts, timeout=2.0)

    lines = ["Available Hosts", "=" * 40, ""]
    for name, host in sorted(hosts.items()):
        online = online_status.get(name, False)
        lines.append(f"[{'✓' if online else '✗'}] {name} ({'online' if online else 'offline'})")
        lines.append(f"    SSH:    {host.address}")

        facts = get_cached_facts(name)
        if facts is not None:
            pm = facts.package_manager.kind.value if facts.package_manager else "-"
            init = facts.init_system.kind.value if facts.init_system else "-"
            lines.append(
                f"    Facts:  {facts.os.id} {facts.os.version_id} {facts.os.arch}, "
                f"{facts.total_cpu} cpu, {facts.total_memory} MiB, pm={pm}, init={init}"
            )
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
