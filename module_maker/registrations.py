"""Wiring generated modules into the host project.

Each registration is one idempotent edit from :mod:`module_maker.registry`:

* ``autoload``     -- PSR-4 entry in ``composer.json``
* ``provider``     -- service provider in ``bootstrap/providers.php``
* ``web_routes``   -- ``require_once`` of the module's web routes in ``routes/web.php``
* ``api_routes``   -- ``require_once`` of the module's API routes in ``routes/api.php``
* ``navigation``   -- link in the application layout (UI modules only)

Missing host files are created from minimal skeletons on registration, and
ignored on removal.
"""

from __future__ import annotations

from collections.abc import Callable

from module_maker.config import Config, ModuleKind
from module_maker.errors import GenerationError, RegistryFormatError, SentinelMissingError
from module_maker.naming import ModuleNames
from module_maker.registry import BLADE_COMMENT, JsonMapEdit, MarkerBlockEdit

PROVIDERS_SKELETON = "<?php\n\nreturn [\n];\n"

ROUTES_SKELETON = "<?php\n\nuse Illuminate\\Support\\Facades\\Route;\n"

NAVIGATION_SENTINEL = "{{-- module-maker:navigation --}}"

LAYOUT_SKELETON = f"""<!DOCTYPE html>
<html lang="{{{{ str_replace('_', '-', app()->getLocale()) }}}}">
<head>
    <meta charset="utf-8">
    <title>{{{{ $title ?? config('app.name') }}}}</title>
</head>
<body>
    <nav>
        <div class="hidden space-x-8 sm:-my-px sm:ms-10 sm:flex">
            {NAVIGATION_SENTINEL}
        </div>
    </nav>
    <main>
        {{{{ $slot }}}}
    </main>
</body>
</html>
"""

COMPOSER_SKELETON = {"autoload": {"psr-4": {}}}

NAV_LINK_CLASS = (
    "inline-flex items-center px-1 pt-1 border-b-2 border-transparent text-sm "
    "font-medium text-gray-500 hover:text-gray-700 hover:border-gray-300"
)

ROUTE_TYPES = ("web", "api")

Edit = MarkerBlockEdit | JsonMapEdit


class HostRegistrar:
    """Applies and removes a module's registrations in the host project."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def names(self, module: str) -> ModuleNames:
        return ModuleNames(module, self.config.namespace)

    # -- Edit construction -------------------------------------------------

    def edits(self, module: str) -> dict[str, Edit]:
        """Every registration a module can have, keyed by registration name."""
        names = self.names(module)
        modules_dir = self.config.modules_dir.strip("/")

        result: dict[str, Edit] = {
            "autoload": JsonMapEdit(
                path=self.config.composer_file,
                keys=("autoload", "psr-4"),
                key=f"{names.module_namespace}\\",
                value=f"{modules_dir}/{module}/",
                skeleton=COMPOSER_SKELETON,
            ),
            "provider": MarkerBlockEdit(
                path=self.config.providers_file,
                marker=module,
                body=(f"{names.provider_class}::class,",),
                sentinel="];",
                indent="    ",
                skeleton=PROVIDERS_SKELETON,
                require_sentinel=True,
            ),
        }

        for route_type in ROUTE_TYPES:
            result[f"{route_type}_routes"] = MarkerBlockEdit(
                path=self.config.routes_file(route_type),
                marker=module,
                body=(
                    f"require_once __DIR__ . '/../{modules_dir}/{module}/Routes/{route_type}.php';",
                ),
                skeleton=ROUTES_SKELETON,
            )

        result["navigation"] = MarkerBlockEdit(
            path=self.config.layout_file,
            marker=module,
            body=(
                f'<a href="/{names.plural_lower}" class="{NAV_LINK_CLASS}">',
                f"    {names.plural}",
                "</a>",
            ),
            style=BLADE_COMMENT,
            sentinel=NAVIGATION_SENTINEL,
            skeleton=LAYOUT_SKELETON,
            require_sentinel=True,
        )
        return result

    def planned(self, kind: ModuleKind) -> list[str]:
        """Registration names the current configuration applies to a *kind*."""
        planned = ["autoload", "provider"]
        if self.config.auto_register_routes:
            planned.extend(
                f"{route_type}_routes" for route_type in self.config.route_registration.route_types
            )
        if self.config.register_navigation and kind in (ModuleKind.UI, ModuleKind.COMBINED):
            planned.append("navigation")
        return planned

    # -- Operations --------------------------------------------------------

    def register(
        self,
        module: str,
        kind: ModuleKind,
        on_warning: Callable[[str], None] | None = None,
    ) -> list[str]:
        """Apply every planned registration; returns the ones that changed a file.

        Route includes are only added for route files the module actually has.
        A provider registry or layout without its sentinel line is left alone
        and reported through *on_warning*.
        """
        module_path = self.config.module_path(module)
        edits = self.edits(module)
        applied: list[str] = []
        for registration in self.planned(kind):
            if registration.endswith("_routes"):
                route_type = registration.split("_", 1)[0]
                if not (module_path / "Routes" / f"{route_type}.php").is_file():
                    continue
            try:
                changed = edits[registration].apply()
            except SentinelMissingError as exc:
                if on_warning is not None:
                    on_warning(
                        f"Skipped {registration} registration: {exc}. "
                        f"Put '{exc.sentinel}' on a line of its own where the entry belongs."
                    )
                continue
            if changed:
                applied.append(registration)
        return applied

    def unregister(self, module: str) -> list[str]:
        """Remove every registration of *module*, whatever the configuration.

        Returns the registrations that were present and removed.
        """
        return [name for name, edit in self.edits(module).items() if edit.revert()]

    def status(self, module: str, kind: ModuleKind) -> dict[str, bool]:
        """``{registration: applied}`` for every planned registration.

        A registry file that cannot be read or parsed counts as not applied.
        """
        edits = self.edits(module)
        status: dict[str, bool] = {}
        for registration in self.planned(kind):
            try:
                status[registration] = edits[registration].is_applied()
            except (GenerationError, RegistryFormatError):
                status[registration] = False
        return status
