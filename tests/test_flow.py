import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from steamsearch.command import CommandFormatter
from steamsearch.errors import AuthError, NetworkError, ProductLookupError, SideEffectError, ValidationError
from steamsearch.flow import FlowState, InteractionFlow
from steamsearch.types import Application, Depot, ProductInfo

STARDEW = Application(413150, "Stardew Valley", "app", 14.99, 0, "")

STARDEW_PRODUCT = ProductInfo(
    413150,
    {
        "common": {"name": "Stardew Valley"},
        "depots": {
            "413151": {"name": "Stardew Valley Windows", "config": {"oslist": "windows"}},
            "413153": {"name": "Stardew Valley Linux", "config": {"oslist": "linux"}},
            "branches": {
                "public": {
                    "buildid": "14593863",
                    "timeupdated": "1715000000",
                    "depots": {"413153": {"manifest": "8881193748180768755"}},
                }
            },
        },
    },
)


class FailingClipboard:
    def copy(self, text: str) -> None:
        raise SideEffectError("Could not copy command to clipboard")


class FakeCatalog:
    def __init__(self, product: ProductInfo | None = None, login_error: Exception | None = None):
        self.product = product
        self.login_error = login_error
        self.events: list[str] = []

    def login(self):
        self.events.append("login")
        if self.login_error is not None:
            raise self.login_error

    def logout(self):
        self.events.append("logout")

    def fetch_product(self, app_id: int) -> ProductInfo:
        self.events.append(f"fetch {app_id}")
        if self.product is None:
            raise ProductLookupError(f"No product information found for app {app_id}")
        return self.product


class FakeSearch:
    def __init__(self, *results):
        self.results = list(results)
        self.terms: list[str] = []

    def search(self, term: str):
        self.terms.append(term)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakePrompts:
    """Picks the entry with the wanted id, or the first one"""

    def __init__(self, terms=("Stardew Valley",), depot_id: str | None = None, interrupt: bool = False):
        self.terms = list(terms)
        self.depot_id = depot_id
        self.interrupt = interrupt
        self.shown: dict[str, list] = {}

    def ask_search_term(self) -> str:
        if self.interrupt:
            raise KeyboardInterrupt
        return self.terms.pop(0)

    def select_application(self, apps):
        self.shown["apps"] = list(apps)
        return apps[0]

    def select_depot(self, depots):
        self.shown["depots"] = list(depots)
        if not depots:
            return None
        return next((depot for depot in depots if depot.id == self.depot_id), depots[0])

    def select_manifest(self, manifests):
        self.shown["manifests"] = list(manifests)
        return manifests[0] if manifests else None


class InteractionFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clipboard = mock.Mock()
        self.console = mock.Mock()
        self.formatter = CommandFormatter(self.clipboard, self.console)

    def run_flow(self, flow: InteractionFlow) -> int:
        with redirect_stdout(io.StringIO()):
            return flow.run()

    def run_flow_output(self, flow: InteractionFlow) -> tuple[int, str]:
        with redirect_stdout(io.StringIO()) as out:
            code = flow.run()
        return code, out.getvalue()

    def test_full_run(self) -> None:
        catalog = FakeCatalog(STARDEW_PRODUCT)
        prompts = FakePrompts(depot_id="413153")
        flow = InteractionFlow(catalog, FakeSearch([STARDEW]), prompts, self.formatter, steam_running=lambda: True)

        self.assertEqual(self.run_flow(flow), 0)
        self.assertEqual(flow.state, FlowState.DONE)
        self.assertEqual(catalog.events, ["login", "fetch 413150", "logout"])
        self.assertEqual([depot.id for depot in prompts.shown["depots"]], ["413151", "413153"])
        assert flow.rendered is not None
        self.assertEqual(flow.rendered.command, "download_depot 413150 413153 8881193748180768755")
        self.clipboard.copy.assert_called_once_with(flow.rendered.annotated_command)
        self.console.open.assert_called_once_with()

    def test_app_without_depots_or_manifests(self) -> None:
        catalog = FakeCatalog(ProductInfo(413150, {"common": {"name": "Stardew Valley"}}))
        prompts = FakePrompts()
        search = FakeSearch([STARDEW])
        flow = InteractionFlow(catalog, search, prompts, self.formatter)

        code, output = self.run_flow_output(flow)
        self.assertEqual(code, 0)
        self.assertIn("No depots found", output)
        self.assertEqual(search.terms, ["Stardew Valley"])
        self.assertEqual(prompts.shown["depots"], [Depot("413150", "Stardew Valley")])
        self.assertEqual(prompts.shown["manifests"], [])
        self.assertEqual(flow.state, FlowState.DONE)
        self.assertIsNone(flow.rendered)
        self.clipboard.copy.assert_not_called()
        self.console.open.assert_not_called()
        self.assertEqual(catalog.events[-1], "logout")

    def test_single_depot_sharing_the_app_id(self) -> None:
        product = ProductInfo(413150, {"common": {"name": "Stardew Valley"}, "depots": {"413150": {"name": "Content"}}})
        prompts = FakePrompts()
        flow = InteractionFlow(FakeCatalog(product), FakeSearch([STARDEW]), prompts, self.formatter)
        code, output = self.run_flow_output(flow)
        self.assertEqual(code, 0)
        self.assertEqual(prompts.shown["depots"], [Depot("413150", "Content")])
        self.assertNotIn("No depots found", output)

    def test_no_results(self) -> None:
        catalog = FakeCatalog(STARDEW_PRODUCT)
        prompts = FakePrompts()
        flow = InteractionFlow(catalog, FakeSearch([]), prompts, self.formatter)
        self.assertEqual(self.run_flow(flow), 0)
        self.assertEqual(catalog.events, ["login", "logout"])
        self.assertNotIn("apps", prompts.shown)

    def test_validation_error_reprompts(self) -> None:
        search = FakeSearch(ValidationError("Please enter a game name to search"), [STARDEW])
        prompts = FakePrompts(terms=["  ", "Stardew Valley"])
        flow = InteractionFlow(FakeCatalog(STARDEW_PRODUCT), search, prompts, self.formatter)
        self.assertEqual(self.run_flow(flow), 0)
        self.assertEqual(search.terms, ["  ", "Stardew Valley"])

    def test_steam_not_running(self) -> None:
        catalog = FakeCatalog(STARDEW_PRODUCT)
        flow = InteractionFlow(catalog, FakeSearch(), FakePrompts(), self.formatter, steam_running=lambda: False)
        self.assertEqual(self.run_flow(flow), 1)
        self.assertEqual(catalog.events, ["logout"])
        self.assertEqual(flow.state, FlowState.DONE)

    def test_fatal_errors_log_out(self) -> None:
        cases = [
            (FakeCatalog(login_error=AuthError("Error logging in: Fail")), FakeSearch([STARDEW])),
            (FakeCatalog(STARDEW_PRODUCT), FakeSearch(NetworkError("Error searching Steam: timeout"))),
            (FakeCatalog(None), FakeSearch([STARDEW])),
        ]
        for catalog, search in cases:
            flow = InteractionFlow(catalog, search, FakePrompts(), self.formatter)
            self.assertEqual(self.run_flow(flow), 1)
            self.assertEqual(catalog.events[-1], "logout")
            self.assertEqual(flow.state, FlowState.DONE)
            self.assertIsNone(flow.rendered)

    def test_user_abort(self) -> None:
        catalog = FakeCatalog(STARDEW_PRODUCT)
        flow = InteractionFlow(catalog, FakeSearch(), FakePrompts(interrupt=True), self.formatter)
        self.assertEqual(self.run_flow(flow), 1)
        self.assertEqual(catalog.events, ["login", "logout"])

    def test_side_effect_failures_are_not_fatal(self) -> None:
        formatter = CommandFormatter(FailingClipboard(), None)
        flow = InteractionFlow(FakeCatalog(STARDEW_PRODUCT), FakeSearch([STARDEW]), FakePrompts(), formatter)
        self.assertEqual(self.run_flow(flow), 0)
        self.assertIsNotNone(flow.rendered)

    def test_save_info(self) -> None:
        tmp_dir = Path(tempfile.mkdtemp(prefix="steamsearch-test-"))
        self.addCleanup(shutil.rmtree, tmp_dir, True)
        flow = InteractionFlow(
            FakeCatalog(STARDEW_PRODUCT),
            FakeSearch([STARDEW]),
            FakePrompts(depot_id="413153"),
            self.formatter,
            info_dir=tmp_dir,
        )
        self.assertEqual(self.run_flow(flow), 0)
        self.assertTrue((tmp_dir / "413150" / "413153" / "manifest_info.json").is_file())
        self.assertTrue((tmp_dir / "413150" / "413153" / "README.txt").is_file())

    def test_save_info_failure_is_not_fatal(self) -> None:
        tmp_dir = Path(tempfile.mkdtemp(prefix="steamsearch-test-"))
        self.addCleanup(shutil.rmtree, tmp_dir, True)
        blocker = tmp_dir / "not-a-directory"
        blocker.write_text("")
        flow = InteractionFlow(
            FakeCatalog(STARDEW_PRODUCT), FakeSearch([STARDEW]), FakePrompts(), self.formatter, info_dir=blocker
        )
        code, output = self.run_flow_output(flow)
        self.assertEqual(code, 0)
        self.assertIn(f"Failed to save manifest information to {blocker}", output)
        self.assertIsNotNone(flow.rendered)


if __name__ == "__main__":
    unittest.main()
