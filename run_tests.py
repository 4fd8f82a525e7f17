#!/usr/bin/env python3
# ================================================================================
# LiveShareNow Test Runner
# ================================================================================
#
# Wraps pytest for the two suites in this repository:
#   ui    live Playwright scenarios against the hosted app (opt-in, --run-e2e)
#   unit  offline framework tests with fake pages, no browser needed
#
# The environment (dev / staging / production) and browser settings reach the
# pytest process as configuration overrides (MODE, BROWSER_TYPE,
# BROWSER_HEADLESS). Scenarios share the app's persisted state, so everything
# runs in one process, in order.
#
# Usage:
#   python run_tests.py --suite unit --no-allure
#   python run_tests.py --suite ui --run-e2e --env staging
#   python run_tests.py --suite all --tags P0 smoke
#   python run_tests.py --auth-status
#
# ================================================================================

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from liveshare_autotest.ui_testing.framework.auth_state import AuthStateStore


SUITE_PATHS = {
    "ui": "liveshare_autotest/ui_testing/tests",
    "unit": "liveshare_autotest/unit",
    "all": "liveshare_autotest",
}
ENVIRONMENTS = ["dev", "staging", "production"]
BROWSERS = ["chromium", "firefox", "webkit"]


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        level="DEBUG" if verbose else "INFO",
    )


class TestRunner:
    """
    Builds and runs one pytest invocation, then publishes the Allure report.

    The command and environment are exposed separately
    (`build_pytest_command()`, `build_env()`) so CI jobs can reuse them.
    """

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        suite: str = "all",
        env: Optional[str] = None,
        tags: Optional[List[str]] = None,
        browser: str = "chromium",
        headless: bool = True,
        run_e2e: bool = False,
        allure_report: bool = True,
        verbose: bool = False,
    ):
        """
        Args:
            suite: "ui", "unit" or "all"
            env: Configuration environment. None keeps MODE (or dev).
            tags: Markers joined with "or" into a -m expression
            browser: Browser for the live scenarios
            headless: Run the browser without a window
            run_e2e: Run the live scenarios instead of skipping them
            allure_report: Collect Allure results and build the HTML report
            verbose: pytest -v and DEBUG runner logs
        """
        if suite not in SUITE_PATHS:
            raise ValueError(f"Unknown suite: {suite}")
        self.suite = suite
        self.env = env
        self.tags = tags or []
        self.browser = browser
        self.headless = headless
        self.run_e2e = run_e2e
        self.allure_report = allure_report
        self.verbose = verbose

        self.root_dir = Path(__file__).parent
        self.reports_dir = self.root_dir / "reports"
        self.allure_results = self.reports_dir / "allure-results"
        self.allure_report_dir = self.reports_dir / "allure-report"

    @property
    def environment(self) -> str:
        return self.env or os.getenv("MODE") or "dev"

    def run(self) -> int:
        """Run pytest and return its exit code."""
        self._log_plan()

        if self.allure_report:
            self.allure_results.mkdir(parents=True, exist_ok=True)

        cmd = self.build_pytest_command()
        logger.debug(f"Command: {' '.join(cmd)}")
        try:
            exit_code = subprocess.run(cmd, cwd=str(self.root_dir), env=self.build_env()).returncode
        except OSError as e:
            logger.error(f"Could not start pytest: {e}")
            exit_code = 1

        if self.allure_report:
            self.publish_allure_report()

        self._log_result(exit_code)
        return exit_code

    def build_env(self) -> Dict[str, str]:
        """Environment for the pytest process; browser settings go through config overrides."""
        env = dict(os.environ)
        if self.env:
            env["MODE"] = self.env
        env["BROWSER_TYPE"] = self.browser
        env["BROWSER_HEADLESS"] = "true" if self.headless else "false"
        return env

    def build_pytest_command(self) -> List[str]:
        cmd = [sys.executable, "-m", "pytest", SUITE_PATHS[self.suite]]
        if self.tags:
            cmd += ["-m", " or ".join(self.tags)]
        if self.env:
            cmd.append(f"--app-env={self.env}")
        if self.run_e2e:
            cmd.append("--run-e2e")
        if self.allure_report:
            cmd += ["--alluredir", str(self.allure_results)]
        cmd.append("-v" if self.verbose else "-q")
        return cmd

    def publish_allure_report(self) -> bool:
        """Render the collected results into reports/allure-report with the allure CLI."""
        try:
            subprocess.run(
                [
                    "allure", "generate", str(self.allure_results),
                    "-o", str(self.allure_report_dir), "--clean",
                ],
                check=True,
            )
        except FileNotFoundError:
            logger.warning(f"allure CLI not installed, raw results kept in {self.allure_results}")
            return False
        except subprocess.CalledProcessError as e:
            logger.error(f"allure generate failed: {e}")
            return False
        logger.info(f"Allure report: {self.allure_report_dir}")
        return True

    def _log_plan(self) -> None:
        logger.info("-" * 60)
        logger.info(f"LiveShareNow {self.suite} suite on '{self.environment}'")
        logger.info(f"Markers: {' or '.join(self.tags) if self.tags else 'any'}")
        if self.suite != "unit":
            mode = "headless" if self.headless else "headed"
            live = "enabled" if self.run_e2e else "skipped (pass --run-e2e)"
            logger.info(f"Browser: {self.browser} ({mode}), live scenarios {live}")
        logger.info("-" * 60)

    def _log_result(self, exit_code: int) -> None:
        if exit_code == 0:
            logger.info("✅ All selected tests passed")
        else:
            logger.error(f"❌ pytest exited with code {exit_code}")


def show_auth_states(store: AuthStateStore) -> int:
    """Log every saved login with its age. Returns the number found."""
    names = store.list_names()
    if not names:
        logger.info(f"No saved logins in {store.state_dir}")
    for name in names:
        info = store.info(name)
        state = "expired" if info.expired else "valid"
        logger.info(f"{name}: {state}, {info.age_hours}h old, {info.size_bytes} bytes ({info.path})")
    return len(names)


def clear_auth_states(store: AuthStateStore, names: List[str]) -> int:
    """Delete the named saved logins, or all of them when no name is given."""
    removed = sum(1 for name in names if store.delete(name)) if names else store.clear()
    logger.info(f"Removed {removed} saved login(s) from {store.state_dir}")
    return removed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the LiveShareNow UI automation suites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Offline unit tests
  python run_tests.py --suite unit --no-allure

  # Live scenarios against staging with a visible browser
  python run_tests.py --suite ui --run-e2e --env staging --no-headless

  # Only P0 scenarios, verbose
  python run_tests.py --suite ui --run-e2e --tags P0 --verbose

  # Forget the saved login and sign in again
  python run_tests.py --suite ui --run-e2e --clear-auth
        """,
    )
    parser.add_argument("--suite", choices=sorted(SUITE_PATHS), default="all",
                        help="Which tests to run (default: all)")
    parser.add_argument("--env", choices=ENVIRONMENTS, default=None,
                        help="Configuration environment (default: MODE env var, then dev)")
    parser.add_argument("--tags", nargs="+", default=[],
                        help="Markers to select, e.g. P0 smoke settings")
    parser.add_argument("--browser", choices=BROWSERS, default="chromium",
                        help="Browser for live scenarios (default: chromium)")
    parser.add_argument("--no-headless", action="store_true",
                        help="Show the browser window")
    parser.add_argument("--run-e2e", action="store_true",
                        help="Run live scenarios against the configured app")
    parser.add_argument("--no-allure", action="store_true",
                        help="Skip Allure result collection and report generation")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Verbose pytest output and debug logs")
    parser.add_argument("--auth-status", action="store_true",
                        help="List saved logins and exit")
    parser.add_argument("--clear-auth", nargs="*", metavar="NAME", default=None,
                        help="Delete saved logins (all when no NAME) before running, forcing a fresh sign-in")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.env:
        # The saved-login directory comes from the selected environment's config
        os.environ["MODE"] = args.env
    if args.auth_status:
        show_auth_states(AuthStateStore())
        sys.exit(0)
    if args.clear_auth is not None:
        clear_auth_states(AuthStateStore(), args.clear_auth)

    runner = TestRunner(
        suite=args.suite,
        env=args.env,
        tags=args.tags,
        browser=args.browser,
        headless=not args.no_headless,
        run_e2e=args.run_e2e,
        allure_report=not args.no_allure,
        verbose=args.verbose,
    )
    sys.exit(runner.run())


if __name__ == "__main__":
    main()
