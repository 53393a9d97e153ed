"""Module Maker command-line interface.

Commands::

    module-maker create Blog --kind combined --belongs-to User
    module-maker delete Blog --force
    module-maker list
    module-maker health [Blog]
    module-maker dashboard
    module-maker stubs
    module-maker publish-stubs [--force]

Every command returns a process exit code; errors derived from
``ModuleMakerError`` are reported in red and mapped to their own exit codes.
"""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.prompt import Confirm

from module_maker import __version__, utils
from module_maker.config import Config, ModuleKind
from module_maker.errors import (
    ExternalToolError,
    GenerationError,
    ModuleExistsError,
    ModuleMakerError,
    UnknownModuleError,
)
from module_maker.inventory import UNKNOWN_KIND, Inventory, health_status
from module_maker.naming import validate_name
from module_maker.registrations import HostRegistrar
from module_maker.scaffolder.generator import ModuleGenerator, ModuleSpec
from module_maker.scaffolder.relations import RelationAugmenter
from module_maker.scaffolder.templates import BUNDLED_STUBS_DIR, STUB_SUFFIX, TemplateRenderer
from module_maker.utils import (
    format_bytes,
    print_banner,
    print_error,
    print_hint,
    print_info,
    print_line,
    print_success,
    print_table,
    print_warning,
    relative_to_root,
    run_tool,
)

KIND_CHOICES = ["basic", "ui", "combined", "api", "livewire", "full"]


# ---------------------------------------------------------------------------
# Post hooks
# ---------------------------------------------------------------------------


def _run_hook(config: Config, cmd: list[str], success: str, failure: str) -> None:
    """Run an external helper; failures only produce a warning."""
    try:
        run_tool(cmd, cwd=config.root_path, timeout=config.tool_timeout)
    except ExternalToolError as exc:
        print_warning(f"  ⚠ {failure} ({exc.reason})")
        return
    print_line(f"  ✓ {success}")


def dump_autoload(config: Config) -> None:
    if not config.run_post_hooks:
        return
    _run_hook(
        config,
        [config.composer_binary, "dump-autoload", "-q"],
        "Composer autoload regenerated",
        "Could not run composer dump-autoload automatically. Please run it manually.",
    )


def clear_caches(config: Config) -> None:
    if not config.run_post_hooks:
        return
    _run_hook(
        config,
        [config.php_binary, "artisan", "optimize:clear"],
        "Caches cleared",
        "Could not clear caches. Run php artisan optimize:clear manually.",
    )


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def cmd_create(args: argparse.Namespace, config: Config) -> int:
    kind = ModuleKind.parse(args.kind) if args.kind else None
    spec = ModuleSpec.create(
        args.name,
        config,
        kind=kind,
        overwrite=args.overwrite,
        no_tests=args.no_tests,
        no_seeders=args.no_seeders,
        no_factories=args.no_factories,
    )
    RelationAugmenter.validate(args.belongs_to, args.has_many)

    generator = ModuleGenerator(config)
    if generator.module_exists(spec.name) and not spec.overwrite:
        raise ModuleExistsError(spec.name)

    print_info(f"Generating {spec.kind.label} module: {spec.name}")
    result = generator.generate(spec)
    for warning in result.warnings:
        print_warning(f"Skipped: {warning}")

    registered = HostRegistrar(config).register(spec.name, spec.kind, on_warning=print_warning)

    relations = RelationAugmenter(config).apply(spec.name, args.belongs_to, args.has_many)
    for warning in relations.warnings:
        print_warning(warning)

    print_success("Module generated successfully!")
    print_line()
    print_info("Generated files:")
    for path in result.files:
        print_line(f"  • {relative_to_root(path, config.root_path)}")
    if result.skipped:
        print_hint(f"  ({len(result.skipped)} existing file(s) left untouched)")

    if registered:
        print_line()
        print_info("Registered: " + ", ".join(registered))
    if relations.methods_added:
        print_line(f"  ✓ Added relationships to {spec.name} model: {', '.join(relations.methods_added)}")
    if relations.columns_added:
        print_line(f"  ✓ Added foreign key columns: {', '.join(relations.columns_added)}")

    dump_autoload(config)
    _print_next_steps(config, spec.name)
    return 0


def _print_next_steps(config: Config, name: str) -> None:
    base = f"{config.modules_dir}/{name}"
    print_line()
    print_info("Next steps:")
    print_line(f"  1. Review the generated files in {base}/")
    print_line(f"  2. Customize your routes in {base}/Routes/")
    print_line(f"  3. Update your model in {base}/Models/")
    print_line("  4. Run migrations: php artisan migrate")
    print_line(f"  5. Adjust your views in {base}/Views/")
    print_line()
    print_hint("Tip: customize the stub templates with: module-maker publish-stubs")


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def cmd_delete(args: argparse.Namespace, config: Config) -> int:
    name = validate_name(args.name)
    module_path = config.module_path(name)
    if not module_path.exists():
        raise UnknownModuleError(name)

    print_info("The following will be deleted:")
    print_line(f"  • Module directory: {module_path}")
    print_line("  • Autoload and service provider registration")
    print_line("  • Route registrations")
    print_line("  • Navigation link")
    print_line()
    print_warning("⚠️  Warning: This action cannot be undone!")
    print_line()

    if not args.force:
        if not Confirm.ask(
            f"Are you sure you want to delete the '{name}' module?",
            default=False,
            console=utils.console,
        ):
            print_info("Module deletion cancelled.")
            return 0
        if not Confirm.ask(
            "This will permanently delete all files. Are you absolutely sure?",
            default=False,
            console=utils.console,
        ):
            print_info("Module deletion cancelled.")
            return 0

    print_info(f"Deleting module: {name}")
    removed = HostRegistrar(config).unregister(name)
    for registration in removed:
        print_line(f"  ✓ Removed {registration.replace('_', ' ')} registration")

    try:
        shutil.rmtree(module_path)
    except OSError as exc:
        raise GenerationError(module_path, exc) from exc
    print_line("  ✓ Deleted module directory")

    dump_autoload(config)
    clear_caches(config)

    print_line()
    print_success(f"✅ Module '{name}' has been successfully deleted!")
    print_line()
    print_hint("💡 Tip: If you had migrations for this module, you may want to:")
    print_hint("   1. Rollback the migrations first (if data needs to be preserved)")
    print_hint("   2. Or manually drop the database tables")
    return 0


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    modules = Inventory(config).list_modules()
    if not modules:
        print_info("No modules found.")
        print_hint("💡 Create your first module with: module-maker create YourModule")
        return 0

    print_info(f"Found {len(modules)} module(s):")
    print_line()
    print_table(
        ["Module", "Kind", "Routes", "Size", "Files"],
        [
            [m.name, m.kind_label, m.routes_label, format_bytes(m.size_bytes), str(m.file_count)]
            for m in modules
        ],
    )
    print_line()
    print_hint("💡 Tips:")
    print_hint("   • Check health: module-maker health ModuleName")
    print_hint("   • Delete module: module-maker delete ModuleName")
    return 0


# ---------------------------------------------------------------------------
# health
# ---------------------------------------------------------------------------


def cmd_health(args: argparse.Namespace, config: Config) -> int:
    inventory = Inventory(config)
    if args.name:
        name = validate_name(args.name)
        if not config.module_path(name).exists():
            raise UnknownModuleError(name)
        return _health_single(inventory, name)
    return _health_all(inventory)


def _health_single(inventory: Inventory, name: str) -> int:
    report = inventory.health(name)
    score = report.score

    print_info(f"🏥 Health Check: {name}")
    print_line()
    if score >= 90:
        print_success(f"✅ Health Score: {score}% - Excellent!")
    elif score >= 70:
        print_warning(f"⚠️  Health Score: {score}% - Needs Attention")
    else:
        print_error(f"❌ Health Score: {score}% - Critical Issues")

    print_line()
    print_line(f"Checks Passed: {report.passed}/{report.total}")
    print_line(f"Module Kind: {report.kind.label if report.kind else UNKNOWN_KIND}")
    if report.issues:
        print_line()
        print_warning("Issues Found:")
        for issue in report.issues:
            print_line(f"  • {issue}")
    print_line()
    return 0 if score == 100 else 1


def _health_all(inventory: Inventory) -> int:
    names = inventory.module_names()
    if not names:
        print_info("No modules found.")
        return 0

    print_info("🏥 Health Check: All Modules")
    print_line()

    rows: list[list[str]] = []
    scores: list[int] = []
    for name in names:
        report = inventory.health(name)
        scores.append(report.score)
        rows.append([
            name,
            report.status,
            f"{report.score}%",
            str(len(report.issues)),
            report.kind.label if report.kind else UNKNOWN_KIND,
        ])
    print_table(["Module", "Status", "Score", "Issues", "Kind"], rows)

    average = inventory.summary().average_health
    print_line()
    print_info(f"Average Health Score: {average}%")
    if average >= 90:
        print_success("🎉 All modules are healthy!")
    elif average >= 70:
        print_warning("⚠️  Some modules need attention.")
    else:
        print_error("❌ Critical issues found in modules.")
    return 0


# ---------------------------------------------------------------------------
# dashboard
# ---------------------------------------------------------------------------


def cmd_dashboard(args: argparse.Namespace, config: Config) -> int:
    inventory = Inventory(config)
    modules = inventory.list_modules()

    print_banner("🏗️  MODULE MAKER DASHBOARD 🏗️")

    if not modules:
        print_info("📊 No modules found. Create your first module to get started!")
        print_line()
    else:
        summary = inventory.summary(modules)
        print_info("📊 MODULE STATISTICS")
        print_line()
        print_line(f"  Total Modules:        {summary.total}")
        print_line(f"  Full-Stack Modules:   {summary.by_kind[ModuleKind.COMBINED.label]}")
        print_line(f"  API Modules:          {summary.by_kind[ModuleKind.BASIC.label]}")
        print_line(f"  Livewire Modules:     {summary.by_kind[ModuleKind.UI.label]}")
        print_line(f"  Total Routes:         {summary.routes}")
        print_line(f"  Total Files:          {summary.files}")
        print_line(f"  Total Size:           {format_bytes(summary.size_bytes)}")
        print_line(f"  Average Health:       {summary.average_health}%")
        print_line()

        print_info("📦 YOUR MODULES")
        print_line()
        rows = []
        for info in modules:
            score = inventory.health(info.name).score
            rows.append([info.name, info.kind_label, str(info.total_routes), f"{health_status(score)} {score}%"])
        print_table(["Module", "Kind", "Routes", "Health"], rows)
        print_line()

    print_info("⚡ QUICK ACTIONS")
    print_line()
    print_line("  • Create module:    module-maker create {name} --kind combined")
    print_line("  • List modules:     module-maker list")
    print_line("  • Delete module:    module-maker delete {name}")
    print_line("  • Check health:     module-maker health {name}")
    print_line("  • Customize stubs:  module-maker publish-stubs")
    print_line()
    return 0


# ---------------------------------------------------------------------------
# stubs / publish-stubs
# ---------------------------------------------------------------------------


def cmd_stubs(args: argparse.Namespace, config: Config) -> int:
    renderer = TemplateRenderer(ModuleGenerator.stub_dirs(config))
    rows = []
    for stub, path in renderer.list_stubs().items():
        if path.parent == BUNDLED_STUBS_DIR:
            source = "bundled"
        elif path.parent == config.published_stubs_path:
            source = "published"
        else:
            source = "override"
        rows.append([stub, source, str(path)])
    print_table(["Stub", "Source", "Path"], rows)
    return 0


def cmd_publish_stubs(args: argparse.Namespace, config: Config) -> int:
    target = config.published_stubs_path
    written: list[Path] = []
    for source in sorted(BUNDLED_STUBS_DIR.glob(f"*{STUB_SUFFIX}")):
        destination = target / source.name
        if destination.exists() and not args.force:
            continue
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise GenerationError(destination, exc) from exc
        written.append(destination)

    if not written:
        print_info("Stubs are already published. Use --force to overwrite them.")
        return 0
    print_success(f"Published {len(written)} stub(s) to {relative_to_root(target, config.root_path)}")
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="module-maker",
        description="Module Maker -- HMVC module scaffolding for Laravel projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  module-maker create Blog\n"
            "  module-maker create Shop --kind combined --has-many Order\n"
            "  module-maker delete Blog --force\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Host project root (default: $MODULE_MAKER_ROOT or the current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON configuration file (default: <root>/module-maker.json when present)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Generate a new module")
    create.add_argument("name", help="Module name, e.g. Blog")
    create.add_argument("--kind", choices=KIND_CHOICES, default=None, help="Module kind")
    create.add_argument("--overwrite", action="store_true", help="Regenerate existing files")
    create.add_argument("--no-tests", action="store_true", help="Skip test files")
    create.add_argument("--no-seeders", action="store_true", help="Skip the seeder")
    create.add_argument("--no-factories", action="store_true", help="Skip the factory")
    create.add_argument(
        "--belongs-to", action="append", default=[], metavar="MODEL",
        help="Add a belongsTo relationship (repeatable)",
    )
    create.add_argument(
        "--has-many", action="append", default=[], metavar="MODEL",
        help="Add a hasMany relationship (repeatable)",
    )
    create.set_defaults(handler=cmd_create)

    delete = sub.add_parser("delete", help="Delete a module and its registrations")
    delete.add_argument("name", help="Module name")
    delete.add_argument("--force", action="store_true", help="Skip the confirmation prompts")
    delete.set_defaults(handler=cmd_delete)

    listing = sub.add_parser("list", help="List generated modules")
    listing.set_defaults(handler=cmd_list)

    health = sub.add_parser("health", help="Check module health")
    health.add_argument("name", nargs="?", default=None, help="Module name (all modules if omitted)")
    health.set_defaults(handler=cmd_health)

    dashboard = sub.add_parser("dashboard", help="Show module statistics")
    dashboard.set_defaults(handler=cmd_dashboard)

    stubs = sub.add_parser("stubs", help="List stub templates and where they come from")
    stubs.set_defaults(handler=cmd_stubs)

    publish = sub.add_parser("publish-stubs", help="Copy the bundled stubs into the host project")
    publish.add_argument("--force", action="store_true", help="Overwrite published stubs")
    publish.set_defaults(handler=cmd_publish_stubs)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the selected command and return its exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = Config.discover(args.root, args.config)
    except (ValidationError, ValueError, OSError) as exc:
        print_error(f"Error: invalid configuration: {exc}")
        return 1

    try:
        return args.handler(args, config)
    except ModuleMakerError as exc:
        print_error(f"Error: {exc}")
        return exc.exit_code


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
