"""Module scaffolding orchestrator.

Takes a validated ``ModuleSpec`` and generates the module's directory tree
under the configured modules root: controllers, models, routes, Blade views,
Livewire components, migrations, service provider, tests, seeders and
factories, depending on the module kind and options.

Existing files are never clobbered unless ``ModuleSpec.overwrite`` is set.
Generation is not transactional: an I/O failure aborts with
``GenerationError`` and leaves whatever was already written in place.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from module_maker.config import Config, ModuleKind
from module_maker.errors import StubMissingError
from module_maker.naming import ModuleNames, validate_name
from module_maker.scaffolder.templates import TemplateRenderer, render_text
from module_maker.utils import ensure_dir, write_text

MANIFEST_FILENAME = "module.json"

# ---------------------------------------------------------------------------
# Directory layout per kind
# ---------------------------------------------------------------------------

COMMON_DIRECTORIES: tuple[str, ...] = (
    "Models",
    "Routes",
    "Views",
    "Providers",
    "Config",
    "Database/Migrations",
    "Http/Requests",
)

CONTROLLER_DIRECTORIES: tuple[str, ...] = ("Controllers", "Http/Middleware")

LIVEWIRE_DIRECTORIES: tuple[str, ...] = ("Livewire", "Views/livewire")

TEST_DIRECTORIES: tuple[str, ...] = ("Tests/Feature", "Tests/Unit")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ModuleSpec(BaseModel):
    """What to generate. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    kind: ModuleKind = Field(default=ModuleKind.BASIC)
    generate_tests: bool = Field(default=True)
    generate_seeders: bool = Field(default=True)
    generate_factories: bool = Field(default=True)
    overwrite: bool = Field(default=False)

    @classmethod
    def create(
        cls,
        name: str,
        config: Config,
        *,
        kind: ModuleKind | None = None,
        overwrite: bool = False,
        no_tests: bool = False,
        no_seeders: bool = False,
        no_factories: bool = False,
    ) -> "ModuleSpec":
        """Build a spec from command-line input, filling gaps from *config*.

        Raises:
            InvalidNameError: If *name* is not a valid module name.
        """
        validate_name(name)
        return cls(
            name=name,
            kind=kind or config.default_kind,
            generate_tests=config.generate_tests and not no_tests,
            generate_seeders=config.generate_seeders and not no_seeders,
            generate_factories=config.generate_factories and not no_factories,
            overwrite=overwrite,
        )

    @property
    def has_controllers(self) -> bool:
        return self.kind in (ModuleKind.BASIC, ModuleKind.COMBINED)

    @property
    def has_livewire(self) -> bool:
        return self.kind in (ModuleKind.UI, ModuleKind.COMBINED)


class GenerationResult(BaseModel):
    """What a generation run actually did."""

    module: str
    kind: ModuleKind
    path: Path
    directories: list[Path] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list, description="Files written")
    skipped: list[Path] = Field(
        default_factory=list, description="Existing files left untouched"
    )
    warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ModuleGenerator:
    """Creates a module's directory tree and renders its stubs.

    Stubs are resolved from, in order: ``config.stubs_path``, the host's
    published stub directory, and the bundled stubs.
    """

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer(self.stub_dirs(config))
        self.clock = clock or datetime.now

    @staticmethod
    def stub_dirs(config: Config) -> list[Path]:
        dirs: list[Path] = []
        if config.stubs_path is not None:
            dirs.append(config.stubs_path)
        dirs.append(config.published_stubs_path)
        return dirs

    # -- Queries -----------------------------------------------------------

    def module_path(self, name: str) -> Path:
        return self.config.module_path(name)

    def module_exists(self, name: str) -> bool:
        return self.module_path(name).exists()

    def directories(self, spec: ModuleSpec) -> list[str]:
        """Relative subdirectories created for *spec*."""
        dirs = list(COMMON_DIRECTORIES)
        if spec.has_controllers:
            dirs.extend(CONTROLLER_DIRECTORIES)
        if spec.has_livewire:
            dirs.extend(LIVEWIRE_DIRECTORIES)
        if spec.generate_tests:
            dirs.extend(TEST_DIRECTORIES)
        if spec.generate_seeders:
            dirs.append("Database/Seeders")
        if spec.generate_factories:
            dirs.append("Database/Factories")
        return dirs

    def template_set(self, spec: ModuleSpec) -> list[tuple[str, str]]:
        """Ordered ``(stub, output_pattern)`` pairs for *spec*.

        Output patterns are relative to the module root and may contain the
        same tokens as the stubs.  The migration is handled separately.
        """
        if spec.kind is ModuleKind.UI:
            web_routes = "routes-web-livewire"
        elif spec.kind is ModuleKind.COMBINED:
            web_routes = "routes-web-full"
        else:
            web_routes = "routes-web"

        api_routes = "routes-api" if spec.has_controllers else "routes-api-livewire"

        entries: list[tuple[str, str]] = [
            ("model", "Models/{{module}}.php"),
            (web_routes, "Routes/web.php"),
            (api_routes, "Routes/api.php"),
            ("service-provider", "Providers/{{module}}ServiceProvider.php"),
            ("config", "Config/config.php"),
        ]
        if spec.has_controllers:
            entries.extend([
                ("controller", "Controllers/{{module}}Controller.php"),
                ("request", "Http/Requests/{{module}}Request.php"),
                ("view-index", "Views/index.blade.php"),
                ("view-create", "Views/create.blade.php"),
                ("view-edit", "Views/edit.blade.php"),
            ])
        if spec.has_livewire:
            entries.extend([
                ("livewire-component", "Livewire/{{module}}Manager.php"),
                ("livewire-view", "Views/livewire/manager.blade.php"),
            ])
        # Without a factory, the seeder and feature test create records directly.
        plain = "" if spec.generate_factories else "-plain"
        if spec.generate_tests:
            entries.extend([
                (f"test-feature{plain}", "Tests/Feature/{{module}}Test.php"),
                ("test-unit", "Tests/Unit/{{module}}Test.php"),
            ])
        if spec.generate_seeders:
            entries.append((f"seeder{plain}", "Database/Seeders/{{module}}Seeder.php"))
        if spec.generate_factories:
            entries.append(("factory", "Database/Factories/{{module}}Factory.php"))
        return entries

    # -- Public API --------------------------------------------------------

    def generate(self, spec: ModuleSpec) -> GenerationResult:
        """Generate the module described by *spec*.

        Returns:
            A ``GenerationResult`` listing created directories, written
            files, skipped existing files and non-fatal warnings.

        Raises:
            GenerationError: On the first I/O failure.  Files written before
                the failure are left in place.
        """
        names = ModuleNames(spec.name, self.config.namespace)
        replacements = names.replacements()
        root = self.module_path(spec.name)
        result = GenerationResult(module=spec.name, kind=spec.kind, path=root)

        # 1. Directory skeleton
        for directory in [root, *(root / d for d in self.directories(spec))]:
            if not directory.is_dir():
                ensure_dir(directory)
                result.directories.append(directory)

        # 2. Stub-based files
        for stub, pattern in self.template_set(spec):
            target = root / render_text(pattern, replacements)
            self._emit(stub, target, replacements, spec, result)

        # 3. Migration (timestamped name, reused on regeneration)
        self._emit("migration", self.migration_path(spec, names), replacements, spec, result)

        # 4. Manifest
        manifest = root / MANIFEST_FILENAME
        if spec.overwrite or not manifest.exists():
            write_text(manifest, self._manifest(spec))
            result.files.append(manifest)
        else:
            result.skipped.append(manifest)

        return result

    def migration_path(self, spec: ModuleSpec, names: ModuleNames) -> Path:
        """Path of the module's create-table migration.

        An existing ``*_create_<table>_table.php`` is reused so regenerating a
        module never adds a second migration for the same table.
        """
        directory = self.module_path(spec.name) / "Database" / "Migrations"
        suffix = f"_create_{names.plural_snake}_table.php"
        if directory.is_dir():
            existing = sorted(directory.glob(f"*{suffix}"))
            if existing:
                return existing[0]
        timestamp = self.clock().strftime("%Y_%m_%d_%H%M%S")
        return directory / f"{timestamp}{suffix}"

    # -- Internal helpers --------------------------------------------------

    def _emit(
        self,
        stub: str,
        target: Path,
        replacements: dict[str, str],
        spec: ModuleSpec,
        result: GenerationResult,
    ) -> None:
        if target.exists() and not spec.overwrite:
            result.skipped.append(target)
            return
        try:
            self.renderer.render_to_file(stub, target, replacements)
        except StubMissingError as exc:
            result.warnings.append(str(exc))
            return
        result.files.append(target)

    def _manifest(self, spec: ModuleSpec) -> str:
        data = {
            "name": spec.name,
            "kind": spec.kind.value,
            "namespace": self.config.namespace,
            "created_at": self.clock().isoformat(timespec="seconds"),
            "options": {
                "tests": spec.generate_tests,
                "seeders": spec.generate_seeders,
                "factories": spec.generate_factories,
            },
        }
        return json.dumps(data, indent=2) + "\n"


def read_manifest(module_path: Path) -> dict | None:
    """Return the parsed manifest of a module, or ``None`` if absent/unreadable."""
    path = module_path / MANIFEST_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None
