"""
Tests for Proxmox token auth hooks
"""
import logging

import httpx

from fetch_failover_dsn.auth import _mask_value, create_pbs_auth_hook, create_pve_auth_hook


def _request() -> httpx.Request:
    return httpx.Request("GET", "https://10.0.0.1:8006/api2/json/version")


class TestPveAuthHook:
    """Tests for create_pve_auth_hook"""

    def test_sets_authorization(self):
        request = _request()
        create_pve_auth_hook("root@pam!monitor", "secret-uuid")(request)
        assert request.headers["Authorization"] == "PVEAPIToken=root@pam!monitor=secret-uuid"

    def test_missing_credentials_leave_request_unchanged(self, caplog):
        request = _request()
        with caplog.at_level(logging.ERROR, logger="fetch_failover_dsn.auth"):
            create_pve_auth_hook("root@pam!monitor", None, endpoint_name="pve1")(request)

        assert "authorization" not in request.headers
        assert "pve1" in caplog.text
        assert "root@pam!monitor" not in caplog.text


class TestPbsAuthHook:
    """Tests for create_pbs_auth_hook"""

    def test_sets_authorization(self):
        request = _request()
        create_pbs_auth_hook("backup@pbs!monitor", "secret-uuid")(request)
        assert request.headers["Authorization"] == "PBSAPIToken=backup@pbs!monitor:secret-uuid"


class TestMaskValue:
    """Tests for _mask_value"""

    def test_empty(self):
        assert _mask_value(None) == "<empty>"
        assert _mask_value("") == "<empty>"

    def test_short_value_fully_masked(self):
        assert _mask_value("abc") == "***"

    def test_long_value_keeps_prefix(self):
        assert _mask_value("root@pam!monitor") == "root@pam!m******"
