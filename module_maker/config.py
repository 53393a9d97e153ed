"""Module Maker configuration.

Centralised, typed configuration for every command. All settings use
Pydantic v2 models so they are validated at construction time and can be
serialised to/from JSON or environment variables without boiler-plate.

A single ``Config`` instance is built by the CLI entry point and passed
explicitly into every component; nothing reads settings from global state.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "module-maker.json"
ENV_PREFIX = "MODULE_MAKER_"


class ModuleKind(str, Enum):
    """Structural variant of a generated module."""

    BASIC = "basic"
    UI = "ui"
    COMBINED = "combined"

    @classmethod
    def parse(cls, value: str) -> "ModuleKind":
        """Accept canonical values and the ``api``/``livewire``/``full`` aliases."""
        key = value.strip().lower()
        alias = _KIND_ALIASES.get(key, key)
        return cls(alias)

    @property
    def label(self) -> str:
        """Display name used in tables."""
        return _KIND_LABELS[self]


_KIND_ALIASES: dict[str, str] = {
    "api": "basic",
    "livewire": "ui",
    "full": "combined",
    "full-stack": "combined",
}

_KIND_LABELS: dict[ModuleKind, str] = {
    ModuleKind.BASIC: "API",
    ModuleKind.UI: "Livewire",
    ModuleKind.COMBINED: "Full-Stack",
}


class RouteRegistration(str, Enum):
    """Which host route files receive a module's route include."""

    WEB = "web"
    API = "api"
    BOTH = "both"

    @property
    def route_types(self) -> tuple[str, ...]:
        if self is RouteRegistration.BOTH:
            return ("web", "api")
        return (self.value,)


class Config(BaseModel):
    """Global Module Maker configuration.

    Holds every tuneable parameter and the derived paths of the host project
    files the tool reads and edits.
    """

    root_path: Path = Field(default=Path("."), description="Root of the host project")
    modules_dir: str = Field(default="modules", min_length=1)
    namespace: str = Field(default="Modules", pattern=r"^[A-Za-z][A-Za-z0-9_\\]*$")
    default_kind: ModuleKind = Field(default=ModuleKind.BASIC)

    auto_register_routes: bool = Field(default=True)
    route_registration: RouteRegistration = Field(default=RouteRegistration.BOTH)
    register_navigation: bool = Field(
        default=True, description="Add a layout link for modules with UI pages"
    )

    generate_tests: bool = Field(default=True)
    generate_seeders: bool = Field(default=True)
    generate_factories: bool = Field(default=True)

    stubs_path: Path | None = Field(
        default=None, description="Override directory searched before published stubs"
    )

    run_post_hooks: bool = Field(
        default=True, description="Run composer/artisan after create and delete"
    )
    composer_binary: str = Field(default="composer")
    php_binary: str = Field(default="php")
    tool_timeout: int = Field(default=120, ge=1, description="External tool timeout in seconds")

    @field_validator("default_kind", mode="before")
    @classmethod
    def _parse_kind_alias(cls, value: Any) -> Any:
        """Accept the ``api``/``livewire``/``full`` aliases from any source."""
        if isinstance(value, str) and not isinstance(value, ModuleKind):
            return ModuleKind.parse(value)
        return value

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def modules_path(self) -> Path:
        """Directory holding one subdirectory per generated module."""
        return self.root_path / self.modules_dir

    @property
    def providers_file(self) -> Path:
        return self.root_path / "bootstrap" / "providers.php"

    @property
    def composer_file(self) -> Path:
        return self.root_path / "composer.json"

    @property
    def web_routes_file(self) -> Path:
        return self.root_path / "routes" / "web.php"

    @property
    def api_routes_file(self) -> Path:
        return self.root_path / "routes" / "api.php"

    @property
    def layout_file(self) -> Path:
        """Blade layout that carries the navigation links."""
        return self.root_path / "resources" / "views" / "components" / "layouts" / "app.blade.php"

    @property
    def published_stubs_path(self) -> Path:
        """Where ``publish-stubs`` copies the bundled templates."""
        return self.root_path / "resources" / "stubs" / "module-maker"

    def module_path(self, name: str) -> Path:
        return self.modules_path / name

    def routes_file(self, route_type: str) -> Path:
        """Host route file for ``web`` or ``api``."""
        if route_type == "api":
            return self.api_routes_file
        return self.web_routes_file

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<root_path>/module-maker.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.root_path / CONFIG_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, base: "Config | None" = None) -> "Config":
        """Build a ``Config`` from ``MODULE_MAKER_*`` environment variables.

        Recognised variables (all optional):
            MODULE_MAKER_ROOT, MODULE_MAKER_PATH, MODULE_MAKER_NAMESPACE,
            MODULE_MAKER_DEFAULT_KIND, MODULE_MAKER_ROUTE_REGISTRATION,
            MODULE_MAKER_AUTO_REGISTER_ROUTES, MODULE_MAKER_GENERATE_TESTS,
            MODULE_MAKER_GENERATE_SEEDERS, MODULE_MAKER_GENERATE_FACTORIES,
            MODULE_MAKER_STUBS_PATH, MODULE_MAKER_RUN_POST_HOOKS.

        Values found in the environment override those of *base*.
        """
        data: dict[str, Any] = base.model_dump() if base is not None else {}

        mapping = {
            "ROOT": "root_path",
            "PATH": "modules_dir",
            "NAMESPACE": "namespace",
            "DEFAULT_KIND": "default_kind",
            "ROUTE_REGISTRATION": "route_registration",
            "STUBS_PATH": "stubs_path",
        }
        for suffix, field in mapping.items():
            value = os.environ.get(ENV_PREFIX + suffix)
            if value:
                data[field] = value

        for suffix, field in (
            ("AUTO_REGISTER_ROUTES", "auto_register_routes"),
            ("GENERATE_TESTS", "generate_tests"),
            ("GENERATE_SEEDERS", "generate_seeders"),
            ("GENERATE_FACTORIES", "generate_factories"),
            ("RUN_POST_HOOKS", "run_post_hooks"),
        ):
            value = os.environ.get(ENV_PREFIX + suffix)
            if value:
                data[field] = _parse_bool(value)

        return cls.model_validate(data)

    @classmethod
    def discover(cls, root: Path | None = None, config_file: Path | None = None) -> "Config":
        """Resolve the effective configuration for a host project.

        Order: defaults, then *config_file* (or ``module-maker.json`` in the
        project root when present), then environment variables, then an
        explicit *root*, which always wins.
        """
        project_root = root or Path(os.environ.get(ENV_PREFIX + "ROOT") or ".")
        candidate = config_file or (project_root / CONFIG_FILENAME)
        if candidate.is_file():
            base = cls.load(candidate)
        else:
            base = cls()
        base = base.model_copy(update={"root_path": project_root})
        config = cls.from_env(base)
        if root is not None:
            config = config.model_copy(update={"root_path": root})
        return config


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
