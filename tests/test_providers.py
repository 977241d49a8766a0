import subprocess

import pytest

from wifispeed.errors import ToolExecutionFailed, ToolUnavailable
from wifispeed.parser import HIDDEN_LABEL
from wifispeed.providers import (
    DEFAULT_PROVIDERS,
    NmcliProvider,
    PyWiFiProvider,
    build_providers,
)

NMCLI_OUTPUT = """IN-USE  BSSID              SSID              MODE   CHAN  RATE        SIGNAL  BARS  SECURITY
*       AA:BB:CC:DD:EE:01  HomeNet           Infra  6     130 Mbit/s  82      ▂▄▆█  WPA2
        AA:BB:CC:DD:EE:02  Coffee Shop WiFi  Infra  11    54 Mbit/s   45      ▂▄__  --
        AA:BB:CC:DD:EE:03  --                Infra  36    270 Mbit/s  30      ▂___  WPA1 WPA2
this line is not a network
"""


class FakeCompletedProcess:
    def __init__(self, stdout, returncode=0):
        self.stdout = stdout
        self.returncode = returncode


def fake_nmcli(monkeypatch, stdout="", returncode=0, calls=None):
    monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/bin/{cmd}")

    def fake_run(cmd, *args, **kwargs):
        if calls is not None:
            calls.append(cmd)
        return FakeCompletedProcess(stdout, returncode)

    monkeypatch.setattr("subprocess.run", fake_run)


def test_nmcli_scan(monkeypatch):
    calls = []
    fake_nmcli(monkeypatch, NMCLI_OUTPUT, calls=calls)
    entries = NmcliProvider().scan()

    assert calls[0][:3] == ["/usr/bin/nmcli", "-c", "no"]
    assert "--rescan" in calls[0]
    assert [e.identifier for e in entries] == ["HomeNet", "Coffee Shop WiFi", HIDDEN_LABEL]
    assert entries[0].in_use is True
    assert entries[1].security == "--"
    assert entries[2].is_hidden is True
    assert entries[2].hardware_address == "AA:BB:CC:DD:EE:03"


def test_nmcli_terse_scan(monkeypatch):
    calls = []
    fake_nmcli(monkeypatch, "MyNet:80:▂▄▆█\n:70:▂▄▆_\n", calls=calls)
    entries = NmcliProvider(terse=True).scan()

    assert "-t" in calls[0]
    # terse output has no header row
    assert [e.identifier for e in entries] == ["MyNet", HIDDEN_LABEL]
    assert entries[1].signal_percent == 70


def test_nmcli_missing(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda cmd: None)
    with pytest.raises(ToolUnavailable) as excinfo:
        NmcliProvider().scan()
    assert excinfo.value.provider == "nmcli"
    assert "not found" in str(excinfo.value)


def test_nmcli_nonzero_exit(monkeypatch):
    fake_nmcli(monkeypatch, "Error: NetworkManager is not running.", returncode=8)
    with pytest.raises(ToolExecutionFailed) as excinfo:
        NmcliProvider().scan()
    assert "exit status 8" in str(excinfo.value)
    assert "not running" in excinfo.value.output


def test_nmcli_timeout(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda cmd: "/usr/bin/nmcli")

    def hang(cmd, *args, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr("subprocess.run", hang)
    with pytest.raises(ToolExecutionFailed, match="timed out"):
        NmcliProvider(timeout=1).scan()


@pytest.mark.parametrize(
    "stdout",
    [
        "",
        "IN-USE  BSSID  SSID  MODE  CHAN  RATE  SIGNAL  BARS  SECURITY\n",
        "IN-USE  BSSID  SSID  MODE  CHAN  RATE  SIGNAL  BARS  SECURITY\nnonsense\nmore nonsense\n",
    ],
)
def test_nmcli_unusable_output(monkeypatch, stdout):
    fake_nmcli(monkeypatch, stdout)
    with pytest.raises(ToolExecutionFailed):
        NmcliProvider().scan()


class FakeProfile:
    def __init__(self, ssid, signal):
        self.ssid = ssid
        self.signal = signal


class FakeInterface:
    def __init__(self, results):
        self.results = results
        self.scanned = False

    def name(self):
        return "wlan0"

    def scan(self):
        self.scanned = True

    def scan_results(self):
        return self.results


def fake_pywifi(monkeypatch, interfaces):
    class FakePyWiFi:
        def interfaces(self):
            return interfaces

    monkeypatch.setattr("wifispeed.providers.pywifi.PyWiFi", FakePyWiFi)


def test_pywifi_scan(monkeypatch):
    iface = FakeInterface(
        [
            FakeProfile("HomeNet", -45),
            FakeProfile("aa:bb:cc:dd:ee:ff", -70),
            FakeProfile("HomeNet", -80),
            FakeProfile("0123456789ab", -90),
            FakeProfile("", -60),
        ]
    )
    fake_pywifi(monkeypatch, [iface])
    entries = PyWiFiProvider(scan_wait=0).scan()

    assert iface.scanned
    assert [e.identifier for e in entries] == [
        "HomeNet",
        "aa:bb:cc:dd:ee:ff",
        "0123456789ab",
        HIDDEN_LABEL,
    ]
    home = entries[0]
    assert home.signal_dbm == -45
    assert home.signal_percent == 79
    assert home.is_hidden is False
    assert home.hardware_address is None
    assert all(e.is_hidden for e in entries[1:])


def test_pywifi_empty_scan_is_success(monkeypatch):
    fake_pywifi(monkeypatch, [FakeInterface([])])
    assert PyWiFiProvider(scan_wait=0).scan() == []


def test_pywifi_no_interface(monkeypatch):
    fake_pywifi(monkeypatch, [])
    with pytest.raises(ToolUnavailable):
        PyWiFiProvider(scan_wait=0).scan()


def test_pywifi_library_error(monkeypatch):
    class BrokenPyWiFi:
        def __init__(self):
            raise FileNotFoundError("/var/run/wpa_supplicant")

    monkeypatch.setattr("wifispeed.providers.pywifi.PyWiFi", BrokenPyWiFi)
    with pytest.raises(ToolExecutionFailed, match="wpa_supplicant"):
        PyWiFiProvider(scan_wait=0).scan()


def test_build_providers_order():
    providers = build_providers(["pywifi", "nmcli"], timeout=5, terse=True)
    assert [p.name for p in providers] == ["pywifi", "nmcli"]
    assert providers[1].terse is True
    assert all(p.timeout == 5 for p in providers)
    assert [p.name for p in build_providers()] == list(DEFAULT_PROVIDERS)


def test_build_providers_unknown():
    with pytest.raises(ValueError):
        build_providers(["airport"])


def test_pywifi_hang_times_out_without_blocking_exit(monkeypatch):
    import threading

    release = threading.Event()

    class HangingInterface(FakeInterface):
        def scan(self):
            release.wait(5)

    fake_pywifi(monkeypatch, [HangingInterface([])])
    try:
        with pytest.raises(ToolExecutionFailed, match="timed out"):
            PyWiFiProvider(timeout=0.1, scan_wait=0).scan()
        workers = [t for t in threading.enumerate() if t.name == "pywifi-scan"]
        assert workers
        assert all(t.daemon for t in workers)
    finally:
        release.set()
