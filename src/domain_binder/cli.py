"""
Command-line interface for the domain binder.

Usage:
    domain-binder <webapp_name> <resource_group> <github_repo_url> <custom_domain> [options]

Credentials are read from the environment (a .env file in the working
directory is loaded first). The propagation wait is decided before the run:
by --wait/--no-wait, or by a y/n prompt when stdin is a terminal.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Mapping, Optional

from . import __version__
from .audit_logger import AuditLogger
from .command_runner import CommandRunner
from .config import (
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from .enums import DnsBackend, OnExisting
from .exceptions import DomainBinderError
from .i18n import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, get_message
from .models import HostingTarget, SourceRepository, WorkflowResult
from .orchestrator import create_orchestrator
from .prerequisites import check_prerequisites


PROG = "domain-binder"
POSITIONALS = ("webapp_name", "resource_group", "github_repo_url", "custom_domain")

PROVIDER_TITLES = {
    DnsBackend.CLOUDFLARE: "Cloudflare",
    DnsBackend.GODADDY: "GoDaddy",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Provision an Azure Static Web App and bind a custom domain",
        add_help=False,
    )
    parser.add_argument(
        "-h", "--help",
        action="store_true",
        help="Show this help and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    for name in POSITIONALS:
        parser.add_argument(name, nargs="?", default=None)

    parser.add_argument(
        "--dns",
        choices=[b.value for b in DnsBackend],
        default=None,
        help="DNS provider (default: DNS_BACKEND or cloudflare)",
    )
    parser.add_argument(
        "--on-existing",
        choices=[o.value for o in OnExisting],
        default=None,
        help="What to do if the Static Web App already exists (default: replace)",
    )
    wait_group = parser.add_mutually_exclusive_group()
    wait_group.add_argument(
        "--wait",
        dest="wait",
        action="store_const",
        const=True,
        default=None,
        help="Wait 10 minutes for DNS propagation before attaching the domain",
    )
    wait_group.add_argument(
        "--no-wait",
        dest="wait",
        action="store_const",
        const=False,
        help="Attach the domain without waiting for DNS propagation",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no commands or API requests",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to a JSON configuration file",
    )
    parser.add_argument(
        "--save-config",
        metavar="FILE",
        help="Write the effective settings (without credentials) to FILE and exit",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help=f"Output language (default: DOMAIN_BINDER_LANG or {DEFAULT_LANGUAGE})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging and detailed output",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text", "both"],
        default=None,
        help="Log line format (default: text)",
    )
    return parser


def print_usage(parser: argparse.ArgumentParser, language: str) -> None:
    """Print usage, example and required environment variables."""
    print(get_message("cli.usage", language, prog=PROG))
    print()
    print(get_message("cli.example", language, prog=PROG))
    print()
    print(get_message("cli.env_header", language))
    print(get_message("cli.env_githubpat", language))
    print(get_message("cli.env_cloudflare", language))
    print(get_message("cli.env_godaddy", language))
    print()
    print(get_message("cli.options_header", language))
    for action in parser._actions:
        if action.option_strings and action.help:
            print(f"  {', '.join(action.option_strings):<22} {action.help}")


def build_config(
    args: argparse.Namespace,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[SystemConfig]:
    """
    Build the run configuration: environment, then config file, then flags.

    Returns:
        SystemConfig, or None if the config file cannot be loaded

    Raises:
        PrerequisiteError: If the environment selects an unknown DNS backend
    """
    backend = DnsBackend(args.dns) if args.dns else None
    config = load_config_from_env(environ, backend=backend)

    if args.config:
        loaded = load_config_from_file(Path(args.config), base=config)
        if loaded is None:
            print(
                get_message("cli.config_load_failed", args.language or config.language, path=args.config),
                file=sys.stderr,
            )
            return None
        config = loaded
        if backend is not None:
            config = replace(config, dns=replace(config.dns, backend=backend))

    hosting = config.hosting
    if args.on_existing:
        hosting = replace(hosting, on_existing=OnExisting(args.on_existing))

    workflow = config.workflow
    if args.wait is not None:
        workflow = replace(workflow, wait_for_propagation=args.wait)

    logging_config = config.logging
    if args.verbose:
        logging_config = replace(logging_config, level="debug")
    if args.log_format:
        logging_config = replace(logging_config, output_format=args.log_format)

    language = args.language or config.language
    if language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    return replace(
        config,
        hosting=hosting,
        workflow=workflow,
        logging=logging_config,
        language=language,
        simulation_mode=args.dry_run or config.simulation_mode,
    )


def ask_wait_for_propagation(
    language: str,
    input_func: Callable[[str], str] = input,
) -> bool:
    """Ask whether to wait for DNS propagation; only "y" or "Y" means yes."""
    try:
        answer = input_func(get_message("cli.wait_prompt", language))
    except EOFError:
        return False
    return answer.strip() in ("y", "Y")


def print_result(result: WorkflowResult, language: str, verbose: bool = False) -> None:
    """Print the final outcome of a run."""
    if result.success:
        print()
        print(get_message("result.success", language))
        print(get_message("result.url", language, domain=result.domain.full_domain))
        print(get_message("result.ssl_note", language))
        print(get_message("result.propagation_note", language))
        if verbose:
            for record in result.records:
                print(f"  {record.type.value:<6} {record.name} -> {record.content}")
            print(f"  Duration: {result.total_duration_ms:.1f}ms")
        return

    error = result.error or {}
    step = result.failed_step.value if result.failed_step else "-"
    print(
        get_message("result.failed", language, step=step, message=error.get("message", "")),
        file=sys.stderr,
    )
    response = (error.get("details") or {}).get("response")
    if response:
        if not isinstance(response, str):
            response = json.dumps(response, ensure_ascii=False)
        print(get_message("result.response", language, response=response), file=sys.stderr)
    if result.remediation:
        print(result.remediation, file=sys.stderr)


async def bind_domain(
    config: SystemConfig,
    webapp_name: str,
    resource_group: str,
    repo_url: str,
    custom_domain: str,
    verbose: bool = False,
    runner: Optional[CommandRunner] = None,
) -> int:
    """
    Run the validation workflow for one custom domain.

    Returns:
        Exit code (0 if the domain was attached, 1 otherwise)
    """
    language = config.language
    logger = AuditLogger(
        output_format=config.logging.output_format,
        level=config.logging.level,
    )

    try:
        orchestrator = create_orchestrator(config, logger=logger, runner=runner)
    except DomainBinderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    target = HostingTarget(name=webapp_name, scope=resource_group)
    source = SourceRepository(url=repo_url, branch=config.hosting.branch)

    async with orchestrator:
        result = await orchestrator.run(custom_domain, target, source)

    print_result(result, language, verbose)
    return 0 if result.success else 1


def _build_config_or_none(args: argparse.Namespace) -> Optional[SystemConfig]:
    try:
        return build_config(args)
    except DomainBinderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return None


def save_config(config: SystemConfig, config_path: Path) -> int:
    """Write the non-secret settings of a configuration; returns an exit code."""
    if save_config_to_file(config, config_path):
        print(get_message("cli.config_saved", config.language, path=config_path))
        return 0
    print(get_message("cli.config_save_failed", config.language, path=config_path), file=sys.stderr)
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code in (0, None) else 1

    if args.help:
        print_usage(parser, args.language or DEFAULT_LANGUAGE)
        return 1

    if args.save_config:
        config = _build_config_or_none(args)
        if config is None:
            return 1
        return save_config(config, Path(args.save_config))

    positionals = [getattr(args, name) for name in POSITIONALS]
    if any(value is None for value in positionals):
        language = args.language or DEFAULT_LANGUAGE
        print(get_message("cli.missing_arguments", language), file=sys.stderr)
        print_usage(parser, language)
        return 1

    config = _build_config_or_none(args)
    if config is None:
        return 1
    language = config.language

    webapp_name, resource_group, repo_url, custom_domain = positionals

    print(get_message("cli.title", language, provider=PROVIDER_TITLES[config.dns.backend]))
    print()
    if config.simulation_mode:
        print(get_message("cli.simulation_mode", language))

    print(get_message("prereq.checking", language))
    prerequisites = check_prerequisites(
        config, webapp_name, resource_group, repo_url, custom_domain
    )
    for warning in prerequisites.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if not prerequisites.valid:
        for error in prerequisites.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1
    print(get_message("prereq.completed", language))

    if args.wait is None and sys.stdin.isatty():
        config = replace(
            config,
            workflow=replace(
                config.workflow,
                wait_for_propagation=ask_wait_for_propagation(language),
            ),
        )

    try:
        return asyncio.run(bind_domain(
            config,
            webapp_name,
            resource_group,
            repo_url,
            custom_domain,
            verbose=args.verbose,
        ))
    except KeyboardInterrupt:
        print(get_message("cli.interrupted", language), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
