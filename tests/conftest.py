"""Shared pytest fixtures for the Module Maker test suite.

Provides reusable fixtures for:
- A minimal Laravel host project in a temporary directory
- A Config pointing at that host with post hooks disabled
- A recording Rich console capturing everything the CLI prints
- Snapshots of the host registry files
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from rich.console import Console

from module_maker import utils
from module_maker.config import CONFIG_FILENAME, Config
from module_maker.registrations import NAVIGATION_SENTINEL


# ---------------------------------------------------------------------------
# Host project
# ---------------------------------------------------------------------------

COMPOSER_JSON = """{
    "name": "laravel/laravel",
    "type": "project",
    "keywords": ["laravel", "framework"],
    "license": "MIT",
    "require": {
        "php": "^8.2",
        "laravel/framework": "^11.0"
    },
    "autoload": {
        "psr-4": {
            "App\\\\": "app/",
            "Database\\\\Factories\\\\": "database/factories/"
        }
    },
    "autoload-dev": {
        "psr-4": {
            "Tests\\\\": "tests/"
        }
    },
    "minimum-stability": "stable"
}
"""

PROVIDERS_PHP = """<?php

return [
    App\\Providers\\AppServiceProvider::class,
];
"""

WEB_ROUTES_PHP = """<?php

use Illuminate\\Support\\Facades\\Route;

Route::get('/', function () {
    return view('welcome');
});
"""

API_ROUTES_PHP = """<?php

use Illuminate\\Http\\Request;
use Illuminate\\Support\\Facades\\Route;

Route::get('/user', function (Request $request) {
    return $request->user();
})->middleware('auth:sanctum');
"""

LAYOUT_BLADE = f"""<!DOCTYPE html>
<html>
<body>
    <nav>
        <div class="nav-links">
            <a href="/dashboard">Dashboard</a>
            {NAVIGATION_SENTINEL}
        </div>
    </nav>
    {{{{ $slot }}}}
</body>
</html>
"""

HOST_FILES = (
    "composer.json",
    "bootstrap/providers.php",
    "routes/web.php",
    "routes/api.php",
    "resources/views/components/layouts/app.blade.php",
)


@pytest.fixture
def host_project(tmp_path: Path) -> Path:
    """Temporary Laravel host project with every registry file present."""
    root = tmp_path / "laravel-app"
    files = {
        "composer.json": COMPOSER_JSON,
        "bootstrap/providers.php": PROVIDERS_PHP,
        "routes/web.php": WEB_ROUTES_PHP,
        "routes/api.php": API_ROUTES_PHP,
        "resources/views/components/layouts/app.blade.php": LAYOUT_BLADE,
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    # The CLI discovers this file; keep tests away from composer and artisan.
    (root / CONFIG_FILENAME).write_text('{"run_post_hooks": false}\n', encoding="utf-8")
    yield root


@pytest.fixture
def config(host_project: Path) -> Config:
    """Config for the temporary host project, post hooks disabled."""
    return Config(root_path=host_project, run_post_hooks=False)


@pytest.fixture
def host_snapshot():
    """Return a callable capturing the bytes of every host registry file."""

    def _snapshot(root: Path) -> dict[str, bytes | None]:
        result: dict[str, bytes | None] = {}
        for relative in HOST_FILES:
            path = root / relative
            result[relative] = path.read_bytes() if path.exists() else None
        return result

    return _snapshot


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def recording_console(monkeypatch: pytest.MonkeyPatch) -> Console:
    """Replace the shared Rich console with a wide, recording one."""
    console = Console(record=True, width=200, force_terminal=False, color_system=None)
    monkeypatch.setattr(utils, "console", console)
    return console


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any MODULE_MAKER_* variables inherited from the caller's shell."""
    for key in list(os.environ):
        if key.startswith("MODULE_MAKER_"):
            monkeypatch.delenv(key, raising=False)
