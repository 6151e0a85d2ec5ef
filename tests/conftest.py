"""Shared test fixtures for the Testomat.io reporter."""

from pathlib import Path

import pytest

PYTHON_TEST_SOURCE = """\
import pytest


def test_login(page):
    user = create_user()
    page.open("/login")
    page.login(user)
    assert page.title == "Dashboard"
    assert page.user == user.name


def test_logout(page):
    page.logout()
    assert page.title == "Login"
"""

JS_TEST_SOURCE = """\
describe('checkout', () => {
  it('adds item to cart', async () => {
    await cart.add('book');
    expect(cart.size).toBe(1);
    expect(cart.total).toBe(10);
  });
  it('removes item from cart', async () => {
    await cart.remove('book');
  });
});
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a small project with test files and a vendor directory."""
    tests_dir = tmp_path / "tests"
    tests_dir.mkdir()
    (tests_dir / "test_login.py").write_text(PYTHON_TEST_SOURCE)
    (tests_dir / "checkout.test.js").write_text(JS_TEST_SOURCE)

    vendor = tmp_path / "node_modules" / "expect" / "build"
    vendor.mkdir(parents=True)
    (vendor / "index.js").write_text("module.exports = {};\n" * 40)

    return tmp_path


@pytest.fixture
def python_test_file(project_dir: Path) -> Path:
    """Return the path of the Python test file."""
    return project_dir / "tests" / "test_login.py"


@pytest.fixture
def js_test_file(project_dir: Path) -> Path:
    """Return the path of the JavaScript test file."""
    return project_dir / "tests" / "checkout.test.js"


@pytest.fixture
def vendor_file(project_dir: Path) -> Path:
    """Return the path of a third-party file."""
    return project_dir / "node_modules" / "expect" / "build" / "index.js"


@pytest.fixture
def python_failure_stack(python_test_file: Path) -> str:
    """Return a pytest-style failure pointing at line 8 of the test file."""
    return f"""\
page = <Page url=/dashboard>

    def test_login(page):
>       assert page.title == "Dashboard"
E       AssertionError: assert 'Home' == 'Dashboard'

{python_test_file}:8: AssertionError
"""


REPORTER_ENV_VARS = [
    "TESTOMATIO",
    "TESTOMATIO_URL",
    "TESTOMATIO_TITLE",
    "TESTOMATIO_RUN",
    "runId",
    "TESTOMATIO_RUNGROUP_TITLE",
    "TESTOMATIO_ENV",
    "TESTOMATIO_SHARED_RUN",
    "TESTOMATIO_PROCEED",
    "TESTOMATIO_CREATE",
    "TESTOMATIO_PUBLISH",
    "TESTOMATIO_PARALLEL",
    "TESTOMATIO_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove reporter variables and run from a directory without a .env file."""
    for name in REPORTER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
