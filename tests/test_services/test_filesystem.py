"""Tests for mount primitives."""

import pytest

from hostprobe_mcp.models import CommandError
from hostprobe_mcp.services.filesystem import (
    ensure_mount,
    is_mounted,
    is_not_mounted_error,
    unmount,
)
from hostprobe_mcp.utils.validation import PolicyError

from fakes import FakeConnector, MountHost


@pytest.mark.asyncio
async def test_is_mounted_uses_mountpoint() -> None:
    host = MountHost()
    host.mounts["/data"] = "/dev/sdb1"

    assert await is_mounted(host, "/data") is True
    assert await is_mounted(host, "/other") is False
    assert host.calls("mountpoint -q") == ["mountpoint -q /data", "mountpoint -q /other"]


@pytest.mark.asyncio
async def test_is_mounted_falls_back_to_mount_table() -> None:
    conn = FakeConnector(
        files={
            "/proc/mounts": (
                b"/dev/sda1 / ext4 rw 0 0\n"
                b"/dev/sdb1 /data ext4 rw 0 0\n"
                b"tmpfs /data/cache tmpfs rw 0 0\n"
            )
        }
    )

    assert await is_mounted(conn, "/data") is True
    assert await is_mounted(conn, "/dat") is False
    assert await is_mounted(conn, "/data/cache") is True
    assert conn.commands == []


@pytest.mark.asyncio
async def test_is_mounted_propagates_transport_errors() -> None:
    conn = FakeConnector(executables={"mountpoint"}).on("mountpoint", OSError("broken pipe"))

    with pytest.raises(OSError):
        await is_mounted(conn, "/data")


@pytest.mark.asyncio
async def test_unmount_not_mounted_is_noop() -> None:
    """An unmounted target issues no umount command."""
    host = MountHost()

    await unmount(host, "/data")

    assert host.calls("umount") == []


@pytest.mark.asyncio
async def test_unmount_mounted_target() -> None:
    host = MountHost()
    host.mounts["/data"] = "/dev/sdb1"

    await unmount(host, "/data", force=True)

    assert host.calls("umount") == ["umount -f /data"]
    assert host.options[-1].sudo is True
    assert "/data" not in host.mounts


@pytest.mark.asyncio
async def test_unmount_race_with_not_mounted_message_is_success() -> None:
    conn = FakeConnector(executables={"mountpoint"})
    conn.fail("umount", exit_code=32, stderr="umount: /data: not mounted.")

    await unmount(conn, "/data")

    assert conn.calls("umount") == ["umount /data"]


@pytest.mark.asyncio
async def test_unmount_other_failures_propagate() -> None:
    conn = FakeConnector(executables={"mountpoint"})
    conn.fail("umount", exit_code=32, stderr="umount: /data: target is busy.")

    with pytest.raises(CommandError, match="target is busy"):
        await unmount(conn, "/data")


def test_is_not_mounted_error_matches_tool_phrasing() -> None:
    assert is_not_mounted_error(CommandError("umount /x", 32, stderr="umount: /x: not mounted"))
    assert is_not_mounted_error(
        CommandError("umount /x", 1, stderr="umount: /x: not currently mounted")
    )
    assert not is_not_mounted_error(CommandError("umount /x", 32, stderr="target is busy"))


@pytest.mark.asyncio
async def test_ensure_mount_twice_is_idempotent() -> None:
    """The second call observes the mount and fstab entry and changes nothing."""
    host = MountHost()

    await ensure_mount(host, "/dev/sdb1", "/data", "ext4", "noatime", persistent=True)

    assert host.mounts == {"/data": "/dev/sdb1"}
    assert host.fstab == ["/dev/sdb1 /data ext4 noatime 0 0"]
    first_mounts = host.calls("mount -o")
    first_appends = host.calls(">> /etc/fstab")
    assert len(first_mounts) == 1
    assert len(first_appends) == 1

    await ensure_mount(host, "/dev/sdb1", "/data", "ext4", "noatime", persistent=True)

    assert host.calls("mount -o") == first_mounts
    assert host.calls(">> /etc/fstab") == first_appends
    assert host.fstab == ["/dev/sdb1 /data ext4 noatime 0 0"]


@pytest.mark.asyncio
async def test_ensure_mount_creates_mount_point_first() -> None:
    host = MountHost()

    await ensure_mount(host, "server:/export", "/mnt/nfs", "nfs")

    assert host.commands[-2:] == [
        "mkdir -p /mnt/nfs",
        "mount -t nfs server:/export /mnt/nfs",
    ]
    assert host.fstab == []


@pytest.mark.asyncio
async def test_ensure_mount_adds_missing_fstab_entry_when_already_mounted() -> None:
    host = MountHost(use_mountpoint=False)
    host.mounts["/data"] = "/dev/sdb1"
    host._sync_proc_mounts()

    await ensure_mount(host, "/dev/sdb1", "/data", "ext4", persistent=True)

    assert host.calls("mount ") == []
    assert host.fstab == ["/dev/sdb1 /data ext4 defaults 0 0"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "device, mount_point, fs_type",
    [
        ("", "/data", "ext4"),
        ("/dev/sdb1", "", "ext4"),
        ("/dev/sdb1", "/data", ""),
        ("/dev/sdb1", "/data/../etc", "ext4"),
    ],
)
async def test_ensure_mount_validates_before_remote_calls(
    device: str, mount_point: str, fs_type: str
) -> None:
    host = MountHost()

    with pytest.raises(PolicyError):
        await ensure_mount(host, device, mount_point, fs_type)

    assert host.commands == []


@pytest.mark.asyncio
async def test_ensure_mount_sees_escaped_target_in_mount_table() -> None:
    host = MountHost(use_mountpoint=False)
    host.mounts["/mnt/my disk"] = "/dev/sdc1"
    host._sync_proc_mounts()

    assert b"/mnt/my\\040disk" in host.files["/proc/mounts"]
    assert await is_mounted(host, "/mnt/my disk") is True

    await ensure_mount(host, "/dev/sdc1", "/mnt/my disk", "ext4")

    assert host.calls("mount ") == []
