"""Tests for shell quoting helpers."""

import pytest

from hostprobe_mcp.utils.shell import quote_arg, quote_path, render_template, sh_c
from hostprobe_mcp.utils.validation import PolicyError


def test_quote_path_and_arg():
    assert quote_path("/etc/hosts") == "/etc/hosts"
    assert quote_path("/tmp/my file") == "'/tmp/my file'"
    assert quote_arg("a'b") == "'a'\"'\"'b'"


def test_render_template_quotes_each_argument():
    assert render_template("apt-get install -y %s", "curl", "jq") == "apt-get install -y curl jq"
    assert render_template("systemctl start %s", "my unit") == "systemctl start 'my unit'"


def test_render_template_keeps_literal_percent():
    assert render_template("printf '100%%' %s", "x") == "printf '100%' x"


@pytest.mark.parametrize("template", ["", "systemctl daemon-reload", "cp %s %s"])
def test_render_template_rejects_invalid_templates(template: str):
    with pytest.raises(PolicyError, match="invalid command template"):
        render_template(template, "x")


def test_sh_c_wraps_command_line():
    assert sh_c("echo hi > /tmp/out") == "sh -c 'echo hi > /tmp/out'"
