"""Read-only inventory of generated modules.

Enumerates the module root, classifies each module's kind, counts routes,
files and bytes, and scores module health.  Nothing in this module writes to
disk.
"""

from __future__ import annotations

import math
from pathlib import Path

from pydantic import BaseModel, Field

from module_maker.config import Config, ModuleKind
from module_maker.registrations import HostRegistrar
from module_maker.scaffolder.generator import read_manifest

ROUTE_MARKER = "Route::"

UNKNOWN_KIND = "Unknown"

HEALTHY_THRESHOLD = 90
ATTENTION_THRESHOLD = 70


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ModuleInfo(BaseModel):
    """One row of the module listing."""

    name: str
    kind: ModuleKind | None = Field(default=None, description="None when undetectable")
    web_routes: int = 0
    api_routes: int = 0
    size_bytes: int = 0
    file_count: int = 0

    @property
    def kind_label(self) -> str:
        return self.kind.label if self.kind else UNKNOWN_KIND

    @property
    def total_routes(self) -> int:
        return self.web_routes + self.api_routes

    @property
    def routes_label(self) -> str:
        """``"3 (1W/2A)"`` or ``"0"``."""
        if self.total_routes == 0:
            return "0"
        return f"{self.total_routes} ({self.web_routes}W/{self.api_routes}A)"


class HealthReport(BaseModel):
    """Outcome of the health checks for one module."""

    module: str
    kind: ModuleKind | None = None
    checks: dict[str, bool] = Field(default_factory=dict)

    @property
    def passed(self) -> int:
        return sum(1 for ok in self.checks.values() if ok)

    @property
    def total(self) -> int:
        return len(self.checks)

    @property
    def score(self) -> int:
        """Percentage of passing checks, rounded half up."""
        if not self.checks:
            return 0
        return round_half_up(self.passed / self.total * 100)

    @property
    def issues(self) -> list[str]:
        return [humanize_check(name) for name, ok in self.checks.items() if not ok]

    @property
    def status(self) -> str:
        return health_status(self.score)


class InventorySummary(BaseModel):
    """Aggregate statistics over every module."""

    total: int = 0
    by_kind: dict[str, int] = Field(default_factory=dict)
    routes: int = 0
    files: int = 0
    size_bytes: int = 0
    average_health: int = 0


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def humanize_check(name: str) -> str:
    """``"has_service_provider"`` -> ``"Has service provider"``."""
    text = name.replace("_", " ")
    return text[:1].upper() + text[1:]


def health_status(score: int) -> str:
    """Status icon for a health score."""
    if score >= HEALTHY_THRESHOLD:
        return "✅"
    if score >= ATTENTION_THRESHOLD:
        return "⚠️"
    return "❌"


def classify(has_livewire: bool, has_controllers: bool, has_models: bool) -> ModuleKind | None:
    """Infer a module kind from which directories exist.

    Combined signals win over single-kind ones: Livewire + Controllers +
    Models is ``combined`` even though it also matches ``basic``.
    """
    if has_livewire and has_controllers and has_models:
        return ModuleKind.COMBINED
    if has_livewire and not has_controllers:
        return ModuleKind.UI
    if has_controllers and has_models:
        return ModuleKind.BASIC
    return None


def has_files(directory: Path) -> bool:
    """``True`` if *directory* exists and contains at least one file, at any depth."""
    if not directory.is_dir():
        return False
    return any(path.is_file() for path in directory.rglob("*"))


def count_occurrences(path: Path, marker: str = ROUTE_MARKER) -> int:
    if not path.is_file():
        return 0
    return path.read_text(encoding="utf-8", errors="replace").count(marker)


def directory_size(path: Path) -> int:
    return sum(p.stat().st_size for p in path.rglob("*") if p.is_file())


def count_files(path: Path) -> int:
    return sum(1 for p in path.rglob("*") if p.is_file())


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class Inventory:
    """Reports on every module under ``config.modules_path``."""

    def __init__(self, config: Config, registrar: HostRegistrar | None = None) -> None:
        self.config = config
        self.registrar = registrar or HostRegistrar(config)

    def module_names(self) -> list[str]:
        root = self.config.modules_path
        if not root.is_dir():
            return []
        return sorted(p.name for p in root.iterdir() if p.is_dir())

    def detect_kind(self, path: Path) -> ModuleKind | None:
        """Kind from the module manifest, else from its directory layout."""
        manifest = read_manifest(path)
        if manifest is not None:
            try:
                return ModuleKind.parse(str(manifest.get("kind", "")))
            except ValueError:
                pass
        return classify(
            (path / "Livewire").exists(),
            (path / "Controllers").exists(),
            (path / "Models").exists(),
        )

    def count_routes(self, path: Path) -> tuple[int, int]:
        """``(web, api)`` route definition counts of the module at *path*."""
        routes = path / "Routes"
        return count_occurrences(routes / "web.php"), count_occurrences(routes / "api.php")

    def module_info(self, name: str) -> ModuleInfo:
        path = self.config.module_path(name)
        web_routes, api_routes = self.count_routes(path)
        return ModuleInfo(
            name=name,
            kind=self.detect_kind(path),
            web_routes=web_routes,
            api_routes=api_routes,
            size_bytes=directory_size(path),
            file_count=count_files(path),
        )

    def list_modules(self) -> list[ModuleInfo]:
        return [self.module_info(name) for name in self.module_names()]

    def health(self, name: str) -> HealthReport:
        """Run every health check for module *name*."""
        path = self.config.module_path(name)
        kind = self.detect_kind(path)
        manifest = read_manifest(path) or {}
        options = manifest.get("options", {}) if isinstance(manifest.get("options"), dict) else {}

        checks: dict[str, bool] = {}
        if kind in (None, ModuleKind.BASIC, ModuleKind.COMBINED):
            checks["has_controllers"] = has_files(path / "Controllers")
        if kind in (ModuleKind.UI, ModuleKind.COMBINED):
            checks["has_livewire"] = has_files(path / "Livewire")
        checks["has_models"] = has_files(path / "Models")
        checks["has_routes"] = has_files(path / "Routes")
        checks["has_views"] = has_files(path / "Views")
        checks["has_migrations"] = has_files(path / "Database" / "Migrations")
        if options.get("tests", True):
            checks["has_tests"] = has_files(path / "Tests")
        checks["has_service_provider"] = (
            path / "Providers" / f"{name}ServiceProvider.php"
        ).is_file()

        registration_kind = kind or ModuleKind.BASIC
        for registration, applied in self.registrar.status(name, registration_kind).items():
            checks[f"{registration}_registered"] = applied

        return HealthReport(module=name, kind=kind, checks=checks)

    def summary(self, modules: list[ModuleInfo] | None = None) -> InventorySummary:
        modules = self.list_modules() if modules is None else modules
        by_kind = {kind.label: 0 for kind in ModuleKind}
        for info in modules:
            if info.kind is not None:
                by_kind[info.kind.label] += 1
        scores = [self.health(info.name).score for info in modules]
        return InventorySummary(
            total=len(modules),
            by_kind=by_kind,
            routes=sum(info.total_routes for info in modules),
            files=sum(info.file_count for info in modules),
            size_bytes=sum(info.size_bytes for info in modules),
            average_health=round_half_up(sum(scores) / len(scores)) if scores else 0,
        )
