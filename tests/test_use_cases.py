"""
Tests for use cases — running an intent end to end, listing managers.
"""

import sys
import threading

import pytest

from upm.backends.prober import ActiveBackendSet, AvailabilityProber
from upm.backends.registry import BackendRegistry
from upm.core.engine.dispatcher import Dispatcher
from upm.core.models import BackendDescriptor, CommandTemplate, Intent, ResultStatus
from upm.core.use_cases.managers import list_managers, query_version
from upm.core.use_cases.run_intent import run_intent


class _RefusingDispatcher(Dispatcher):
    def execute(self, commands, cancel_event=None):
        raise AssertionError("nothing should be dispatched")


@pytest.fixture
def py_backend(make_backend):
    """Backend that runs this interpreter; exit code comes from the code."""

    def make(name: str, code: str = "pass", **kwargs) -> BackendDescriptor:
        return make_backend(
            name,
            executable=sys.executable,
            install=CommandTemplate(args=["-c", code, "{packages}"]),
            **kwargs,
        )

    return make


class TestRunIntent:
    def test_results_in_active_order_with_markers(self, py_backend):
        active = ActiveBackendSet.of(
            py_backend("first", "import time; time.sleep(0.3)"),
            BackendDescriptor(name="lister", actions={"list": CommandTemplate(args=["-Q"], arity="none")}),
            py_backend("second", "import sys; sys.exit(2)"),
        )
        result = run_intent(Intent(action="install", packages=["pkg"]), active=active, dispatcher=Dispatcher())

        rs = result.result_set
        assert [r.backend for r in rs.results] == ["first", "lister", "second"]
        assert [r.status for r in rs.results] == [
            ResultStatus.OK,
            ResultStatus.NOT_APPLICABLE,
            ResultStatus.FAILED,
        ]
        assert rs.status == "partial"
        assert result.exit_code == 1
        assert result.active == ["first", "lister", "second"]
        assert len(result.commands) == 2

    def test_all_ok(self, py_backend):
        active = ActiveBackendSet.of(py_backend("a"), py_backend("b"))
        result = run_intent(Intent(action="install", packages=["x"]), active=active, dispatcher=Dispatcher())
        assert result.result_set.status == "ok"
        assert result.exit_code == 0

    def test_per_package_results_grouped_by_backend(self, py_backend):
        active = ActiveBackendSet.of(
            py_backend("a"),
            BackendDescriptor(
                name="b",
                executable=sys.executable,
                actions={"install": CommandTemplate(args=["-c", "pass", "{packages}"], arity="one")},
            ),
        )
        intent = Intent(action="install", packages=["x", "y"])
        result = run_intent(intent, active=active, dispatcher=Dispatcher())
        assert [r.backend for r in result.result_set.results] == ["a", "b", "b"]
        assert [r.argv[-1] for r in result.result_set.for_backend("b")] == ["x", "y"]

    def test_nul_in_package_name_reported_per_backend(self, py_backend):
        active = ActiveBackendSet.of(
            py_backend("a"),
            BackendDescriptor(
                name="b",
                executable=sys.executable,
                actions={"install": CommandTemplate(args=["-c", "pass", "{packages}"], arity="one")},
            ),
        )
        intent = Intent(action="install", packages=["good", "bad\x00name"])
        result = run_intent(intent, active=active, dispatcher=Dispatcher())

        statuses = [(r.backend, r.status) for r in result.result_set.results]
        assert statuses == [
            ("a", ResultStatus.LAUNCH_FAILED),
            ("b", ResultStatus.OK),
            ("b", ResultStatus.LAUNCH_FAILED),
        ]
        assert result.exit_code == 1

    def test_no_capable_backend(self):
        active = ActiveBackendSet.of(BackendDescriptor(name="bare"))
        result = run_intent(Intent(action="search", packages=["x"]), active=active, dispatcher=_RefusingDispatcher())
        assert result.commands == []
        assert result.result_set.status == "unsupported"
        assert result.result_set.results[0].status == ResultStatus.NOT_APPLICABLE
        assert result.exit_code == 1

    def test_no_active_backends(self):
        result = run_intent(Intent(action="list"), active=ActiveBackendSet(), dispatcher=_RefusingDispatcher())
        assert result.active == []
        assert result.result_set.results == ()
        assert result.exit_code == 1

    def test_dry_run(self, py_backend):
        active = ActiveBackendSet.of(py_backend("a"))
        result = run_intent(
            Intent(action="install", packages=["x"]),
            active=active,
            dispatcher=_RefusingDispatcher(),
            dry_run=True,
        )
        assert result.dry_run
        assert len(result.commands) == 1
        assert result.exit_code == 0
        data = result.to_dict()
        assert data["result"] is None
        assert data["commands"][0]["argv"][-1] == "x"
        assert data["intent"] == {"action": "install", "packages": ["x"]}

    def test_cancelled(self, py_backend):
        cancel = threading.Event()
        cancel.set()
        active = ActiveBackendSet.of(py_backend("a"))
        result = run_intent(
            Intent(action="install", packages=["x"]),
            active=active,
            dispatcher=Dispatcher(),
            cancel_event=cancel,
        )
        assert result.cancelled
        assert result.result_set.results == ()
        assert result.exit_code == 130


class TestManagers:
    def _registry(self) -> BackendRegistry:
        return BackendRegistry([
            BackendDescriptor(name="fakepm", description="A fake one"),
            BackendDescriptor(name="ghost"),
        ])

    def test_active_only(self, fake_bin):
        bin_dir, make = fake_bin
        make("fakepm")
        registry = self._registry()
        active = AvailabilityProber(search_path=str(bin_dir)).probe(registry)

        result = list_managers(registry, active, include_inactive=False)
        assert [m.name for m in result.managers] == ["fakepm"]
        assert result.managers[0].location == str(bin_dir / "fakepm")
        assert result.managers[0].version is None

    def test_include_inactive(self, fake_bin):
        bin_dir, make = fake_bin
        make("fakepm")
        registry = self._registry()
        active = AvailabilityProber(search_path=str(bin_dir)).probe(registry)

        result = list_managers(registry, active)
        assert [(m.name, m.active) for m in result.managers] == [("fakepm", True), ("ghost", False)]
        assert result.active_count == 1
        data = result.to_dict()
        assert data["total"] == 2
        assert data["managers"][1]["location"] is None

    def test_versions(self, fake_bin):
        bin_dir, make = fake_bin
        make("fakepm", 'echo "fakepm version 4.2.1"')
        registry = self._registry()
        active = AvailabilityProber(search_path=str(bin_dir)).probe(registry)

        result = list_managers(registry, active, versions=True)
        assert str(result.managers[0].version) == "4.2.1"
        assert result.to_dict()["managers"][0]["version"] == "4.2.1"

    def test_query_version_failure_is_unknown(self, fake_bin, tmp_path):
        _, make = fake_bin
        failing = make("broken", "exit 1")
        assert query_version(str(failing), ("--version",)) is None
        assert query_version(str(tmp_path / "missing"), ("--version",)) is None
