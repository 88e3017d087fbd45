"""Entry point: python -m steerkit <command>

- init / list / search / install / update / outdated / remove / status:
  manage framework steering documents in the workspace
- steering:  list, create, rename and delete steering documents
- validate:  check steering documents for required sections and formatting
- refs:      framework reference documentation
- define:    glossary lookup
- render:    fill {{variables}} in a template
- lint:      check a Markdown corpus (fences, tables, links, code, duplicates)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from steerkit import __version__
from steerkit.config import SteerkitConfig, load_config
from steerkit.errors import SteerkitError

logger = logging.getLogger(__name__)

# Validator findings about the document as a whole carry no line
_DOCUMENT_CODES = {"missing-section", "no-actionable-guidance", "no-examples", "content-too-short"}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_workspace(config: SteerkitConfig):
    from steerkit.workspace import Workspace

    return Workspace(config.workspace or Path.cwd())


def _build_prompter(args: argparse.Namespace):
    from steerkit.frameworks.models import ConflictAction, UpdateAction
    from steerkit.prompts import AutoPrompter, ConsolePrompter

    if args.yes:
        return AutoPrompter(
            conflict=ConflictAction.OVERWRITE,
            update=UpdateAction.UPDATE,
            confirm=True,
            write=print,
        )
    return ConsolePrompter()


def _build_manager(config: SteerkitConfig, args: argparse.Namespace, workspace=None):
    from steerkit.frameworks.manager import FrameworkManager

    return FrameworkManager(
        workspace or _build_workspace(config),
        config.library.frameworks_dir,
        prompter=_build_prompter(args),
        metadata_ttl=config.library.metadata_cache_ttl,
    )


# ── Framework commands ───────────────────────────────────────


def _cmd_init(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.initialize import initialize_workspace

    workspace = _build_workspace(config)
    manager = _build_manager(config, args, workspace) if args.recommended else None
    summary = initialize_workspace(
        workspace, manager, config.library.recommended if args.recommended else None
    )
    print(f"Initialized {workspace.kiro_path}")
    if summary is None:
        return 0
    print(summary.message)
    return 0 if summary.ok else 1


def _cmd_list(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.frameworks.models import FrameworkCategory

    manager = _build_manager(config, args)
    if args.installed:
        frameworks = manager.get_installed_frameworks()
    elif args.category:
        frameworks = manager.get_frameworks_by_category(FrameworkCategory(args.category))
    else:
        frameworks = manager.list_available_frameworks()

    for framework in frameworks:
        mark = "*" if manager.is_framework_installed(framework.id) else " "
        print(
            f"{mark} {framework.id:<22} v{framework.version:<8} "
            f"[{framework.category.label}] {framework.name}"
        )
    return 0


def _cmd_search(config: SteerkitConfig, args: argparse.Namespace) -> int:
    manager = _build_manager(config, args)
    results = manager.search_frameworks(args.query)
    if not results:
        print(f'No frameworks match "{args.query}"')
        return 0
    for framework in results:
        print(f"{framework.id:<22} {framework.name}: {framework.description}")
    return 0


def _cmd_install(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.frameworks.models import InstallOptions

    manager = _build_manager(config, args)
    options = InstallOptions(overwrite=args.overwrite, merge=args.merge, backup=args.backup)
    for framework_id in args.framework_ids:
        if not manager.install_framework(framework_id, options):
            print(f"Kept existing file for {framework_id}")
    return 0


def _cmd_update(config: SteerkitConfig, args: argparse.Namespace) -> int:
    manager = _build_manager(config, args)
    if args.all or not args.framework_id:
        updated = manager.update_all_frameworks()
        if not updated:
            print("All frameworks are up to date")
        return 0
    manager.update_framework(args.framework_id)
    return 0


def _cmd_outdated(config: SteerkitConfig, args: argparse.Namespace) -> int:
    manager = _build_manager(config, args)
    updates = manager.check_for_updates()
    if not updates:
        print("All frameworks are up to date")
        return 0
    for update in updates:
        print(f"{update.framework_id:<22} {update.current_version} -> {update.latest_version}")
    return 0


def _cmd_remove(config: SteerkitConfig, args: argparse.Namespace) -> int:
    manager = _build_manager(config, args)
    manager.remove_framework(args.framework_id)
    print(f"Removed {args.framework_id}")
    return 0


def _cmd_status(config: SteerkitConfig, args: argparse.Namespace) -> int:
    manager = _build_manager(config, args)
    manager.sync_customizations()
    updates = {u.framework_id: u for u in manager.check_for_updates()}
    installed = manager.get_installed_frameworks()
    if not installed:
        print("No frameworks installed")
        return 0
    for framework in installed:
        entry = manager.get_installed_framework_metadata(framework.id)
        flags = []
        if entry is not None and entry.customized:
            flags.append("customized")
        if framework.id in updates:
            flags.append(f"update available: v{updates[framework.id].latest_version}")
        version = entry.version if entry is not None else framework.version
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(f"{framework.id:<22} v{version}{suffix}")
    return 0


# ── Steering documents ───────────────────────────────────────


def _steering_file(config: SteerkitConfig, name: str) -> Path:
    """Bare file names are looked up in .kiro/steering/ first, then here."""
    path = Path(name)
    if path.parent == Path("."):
        steering_file = _build_workspace(config).steering_path / path
        if steering_file.exists() or not path.exists():
            return steering_file
    return path


def _cmd_steering(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.steering.catalog import SteeringCatalog
    from steerkit.steering.documents import CustomSteeringDocuments

    workspace = _build_workspace(config)
    documents = CustomSteeringDocuments(workspace, _build_prompter(args))

    if args.steering_command == "new":
        path = documents.create(args.name, overwrite=args.force)
        print(f"Created {path}")
    elif args.steering_command == "rename":
        path = documents.rename(_steering_file(config, args.file), args.name)
        print(f"Renamed to {path.name}")
    elif args.steering_command == "delete":
        documents.delete(_steering_file(config, args.file))
        print(f"Deleted {args.file}")
    else:
        catalog = SteeringCatalog(workspace, _build_manager(config, args, workspace))
        categories = catalog.get_categories()
        if not categories:
            print("No steering documents found")
        for category in categories:
            print(category.label)
            for item in catalog.get_children(category):
                if args.long:
                    print("  " + catalog.describe(item).replace("\n", "\n    "))
                    continue
                version = f" v{item.version}" if item.version else ""
                print(f"  {item.label}{version}")
    return 0


def _cmd_validate(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.steering.validator import SteeringValidator

    workspace = _build_workspace(config)
    validator = SteeringValidator(
        config.validation.required_sections, config.validation.min_length
    )
    failed = False
    for name in args.files:
        path = _steering_file(config, name)
        result = validator.validate(workspace.read_file(path))
        for issue in [*result.issues, *result.warnings]:
            location = str(path) if issue.code in _DOCUMENT_CODES else f"{path}:{issue.line + 1}"
            print(f"{location}: {issue.severity.value} {issue.code} {issue.message}")
        if result.is_valid:
            print(f"{path}: OK ({len(result.warnings)} warning(s))")
        failed = failed or not result.is_valid
    return 1 if failed else 0


# ── References, glossary, templates ──────────────────────────


def _cmd_refs(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.frameworks.references import FrameworkReferenceManager

    references = FrameworkReferenceManager(
        _build_workspace(config), config.library.references_dir
    )
    if args.refs_command == "init":
        copied = references.initialize_frameworks_directory()
        print(f"Copied {copied} reference document(s)")
    elif args.refs_command == "search":
        results = references.search_framework_references(args.query)
        if not results:
            print(f'No references match "{args.query}"')
        for result in results:
            print(f"{result.file_name}:{result.line_number}: {result.matched_text}")
    else:
        reference = references.get_framework_reference_for_steering(Path(args.file).name)
        if reference is None:
            print(f"No framework reference for {args.file}")
            return 1
        print(references.open_framework_reference(reference, initialize=args.yes))
    return 0


def _cmd_define(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.frameworks.glossary import find_definition

    definition = find_definition(args.term)
    if definition is None:
        print(f'No definition for "{args.term}"')
        return 1
    print(definition)
    return 0


def _cmd_render(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.steering.templates import TemplateEngine

    engine = TemplateEngine()
    workspace = _build_workspace(config)
    variables: dict[str, str | None] = dict(engine.get_default_variables(workspace))
    for assignment in args.variables:
        key, sep, value = assignment.partition("=")
        if not sep:
            raise SteerkitError(f"Expected key=value, got: {assignment}")
        variables[key.strip()] = value
    print(engine.render(workspace.read_file(Path(args.template)), variables), end="")
    return 0


def _cmd_lint(config: SteerkitConfig, args: argparse.Namespace) -> int:
    from steerkit.lint import CorpusLinter

    if args.threshold is not None:
        config.lint.duplicate_threshold = args.threshold
    report = CorpusLinter(config.lint).lint_paths([Path(p) for p in args.paths])
    print(report.to_json() if args.json else report.format_text())
    if report.errors or (args.strict and report.warnings):
        return 1
    return 0


# ── Parser ───────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    from steerkit.frameworks.models import FrameworkCategory

    parser = argparse.ArgumentParser(
        prog="steerkit", description="Manage framework steering documents."
    )
    parser.add_argument("--version", action="version", version=f"steerkit {__version__}")
    parser.add_argument("-c", "--config", type=Path, help="path to steerkit.toml")
    parser.add_argument(
        "-y", "--yes", action="store_true", help="answer prompts non-interactively"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log at INFO level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="create the .kiro/ layout")
    p.add_argument("--recommended", action="store_true", help="install recommended frameworks")
    p.set_defaults(func=_cmd_init)

    p = sub.add_parser("list", help="list frameworks in the library")
    p.add_argument("--category", choices=[c.value for c in FrameworkCategory])
    p.add_argument("--installed", action="store_true")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("search", help="search the framework library")
    p.add_argument("query")
    p.set_defaults(func=_cmd_search)

    p = sub.add_parser("install", help="install frameworks into .kiro/steering/")
    p.add_argument("framework_ids", nargs="+", metavar="ID")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--overwrite", action="store_true")
    mode.add_argument("--merge", action="store_true")
    p.add_argument("--backup", action="store_true")
    p.set_defaults(func=_cmd_install)

    p = sub.add_parser("update", help="update installed frameworks")
    p.add_argument("framework_id", nargs="?", metavar="ID")
    p.add_argument("--all", action="store_true")
    p.set_defaults(func=_cmd_update)

    p = sub.add_parser("outdated", help="list frameworks with newer library versions")
    p.set_defaults(func=_cmd_outdated)

    p = sub.add_parser("remove", help="remove an installed framework")
    p.add_argument("framework_id", metavar="ID")
    p.set_defaults(func=_cmd_remove)

    p = sub.add_parser("status", help="installed frameworks, customizations and updates")
    p.set_defaults(func=_cmd_status)

    p = sub.add_parser("steering", help="steering documents")
    steering = p.add_subparsers(dest="steering_command")
    s = steering.add_parser("list")
    s.add_argument(
        "-l", "--long", action="store_true", help="show framework name and last modified date"
    )
    s = steering.add_parser("new")
    s.add_argument("name")
    s.add_argument("--force", action="store_true")
    s = steering.add_parser("rename")
    s.add_argument("file")
    s.add_argument("name")
    s = steering.add_parser("delete")
    s.add_argument("file")
    p.set_defaults(func=_cmd_steering, steering_command="list", long=False)

    p = sub.add_parser("validate", help="validate steering documents")
    p.add_argument("files", nargs="+", metavar="FILE")
    p.set_defaults(func=_cmd_validate)

    p = sub.add_parser("refs", help="framework reference documentation")
    refs = p.add_subparsers(dest="refs_command", required=True)
    refs.add_parser("init")
    r = refs.add_parser("search")
    r.add_argument("query")
    r = refs.add_parser("show")
    r.add_argument("file", metavar="STEERING_FILE")
    p.set_defaults(func=_cmd_refs)

    p = sub.add_parser("define", help="look up a framework term")
    p.add_argument("term")
    p.set_defaults(func=_cmd_define)

    p = sub.add_parser("render", help="render a template")
    p.add_argument("template")
    p.add_argument(
        "-v", "--var", dest="variables", action="append", default=[], metavar="KEY=VALUE"
    )
    p.set_defaults(func=_cmd_render)

    p = sub.add_parser("lint", help="lint a Markdown corpus")
    p.add_argument("paths", nargs="+", metavar="PATH")
    p.add_argument("--json", action="store_true")
    p.add_argument("--strict", action="store_true", help="fail on warnings too")
    p.add_argument("--threshold", type=float, help="near-duplicate overlap threshold")
    p.set_defaults(func=_cmd_lint)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    _setup_logging("INFO" if args.verbose else config.log_level)

    try:
        return args.func(config, args)
    except SteerkitError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
