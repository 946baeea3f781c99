import pytest

from multisource.core.exceptions import (
    CapabilityDisabledError,
    CommandExecutionError,
    UnsafeCommandError,
)
from multisource.mcp.tools.bash import BashCommandTool, is_dangerous_command


@pytest.fixture
def no_subprocess(monkeypatch):
    async def fail_if_called(*args, **kwargs):
        raise AssertionError("command must not be executed")

    monkeypatch.setattr(
        "multisource.mcp.tools.bash.asyncio.create_subprocess_shell", fail_if_called
    )


@pytest.mark.asyncio
async def test_disabled_tool_explains_how_to_enable(no_subprocess):
    tool = BashCommandTool(enabled=False)

    with pytest.raises(CapabilityDisabledError, match="ENABLE_BASH_COMMANDS=true"):
        await tool.invoke({"command": "date"})


@pytest.mark.asyncio
@pytest.mark.parametrize("command", ["rm -rf /tmp", "echo hi > out.txt", "SUDO ls"])
async def test_unsafe_commands_are_never_run(no_subprocess, command):
    tool = BashCommandTool(enabled=True)

    with pytest.raises(UnsafeCommandError):
        await tool.invoke({"command": command})


@pytest.mark.parametrize(
    "command",
    [
        "cat /etc/passwd",
        "chmod 777 file",
        "dd if=/dev/zero of=/dev/sda",
        "mkfs.ext4 /dev/sdb1",
        "fdisk -l",
        "kill -9 1",
        "killall python",
        "shutdown now",
        "reboot",
        "halt",
        "test 2 > 1",
    ],
)
def test_deny_list_patterns(command):
    assert is_dangerous_command(command)


@pytest.mark.parametrize("command", ["date", "ls -la", "echo hello", "curl -s https://example.com"])
def test_benign_commands_pass_filter(command):
    assert not is_dangerous_command(command)


@pytest.mark.asyncio
async def test_enabled_tool_runs_safe_command():
    tool = BashCommandTool(enabled=True)

    result = await tool.invoke({"command": "date", "description": "current date"})

    assert result["command"] == "date"
    assert result["description"] == "current date"
    assert result["success"] is True
    assert result["stdout"].strip()
    assert result["timestamp"]


@pytest.mark.asyncio
async def test_non_zero_exit_is_an_execution_error():
    tool = BashCommandTool(enabled=True)

    with pytest.raises(CommandExecutionError, match="exit code 3"):
        await tool.invoke({"command": "exit 3"})


@pytest.mark.asyncio
async def test_timeout_aborts_command():
    tool = BashCommandTool(enabled=True, timeout=0.2)

    with pytest.raises(CommandExecutionError, match="timed out"):
        await tool.invoke({"command": "sleep 5"})
