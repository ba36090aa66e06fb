"""The spicewall command.

Usage:
    spicewall [--debug LOGFILE] [--config FILE] <command> [args]

Commands:
    backends                 list the available backends and their preference keys
    validate                 check the configuration file
    import                   copy API keys and queries from the configuration to the preferences
    check-key BACKEND KEY    check an API key against the live service
    check-keys               check the stored API key of every enabled backend
"""

import asyncio
import sys
from collections.abc import Callable

from .app import Spicewall
from .backends import BackendError, get_available_backends, get_backend
from .config_loader import ConfigLoader
from .keycheck import check_api_key
from .logging_setup import get_logger, init_logger
from .models import ConfigError, ConfigNotFoundError, ExitCode
from .schema import validate_config

__all__ = ["main", "use_param"]


def use_param(txt: str, argv: list[str]) -> str:
    """Check if parameter `txt` is in `argv`.

    if found, removes it from `argv` & returns the argument value
    """
    v = ""
    if txt in argv:
        i = argv.index(txt)
        if i + 1 >= len(argv):
            msg = f"{txt} expects a value"
            raise ValueError(msg)
        v = argv[i + 1]
        del argv[i : i + 2]
    return v


def run_backends(_config_file: str, _args: list[str]) -> ExitCode:
    """List the available backends."""
    for name in get_available_backends():
        descriptor = get_backend(name)
        print(f"{name:12s} {descriptor.display_name:12s} {descriptor.home_url}")
        for key in sorted(descriptor.preference_keys):
            print(f"{'':12s} - {key}")
    return ExitCode.SUCCESS


def run_validate(config_file: str, _args: list[str]) -> ExitCode:
    """Validate the configuration file without touching the preferences."""
    log = get_logger("validate")
    try:
        config = ConfigLoader(log).load(config_file)
    except ConfigNotFoundError:
        return ExitCode.ENV_ERROR
    except ConfigError:
        return ExitCode.USAGE_ERROR

    errors, warnings = validate_config(config, log)
    for error in errors:
        print(f"  ERROR: {error}")
    for warning in warnings:
        print(f"  WARNING: {warning}")

    if errors:
        print(f"Found {len(errors)} error(s) and {len(warnings)} warning(s)")
        return ExitCode.USAGE_ERROR
    if warnings:
        print(f"Found {len(warnings)} warning(s)")
    else:
        print("Configuration is valid!")
    return ExitCode.SUCCESS


def run_import(config_file: str, _args: list[str]) -> ExitCode:
    """Copy the configured API keys and queries to the preferences."""
    log = get_logger("import")
    try:
        app = Spicewall.from_file(config_file, log=log)
        added = app.import_config()
    except ConfigNotFoundError:
        return ExitCode.ENV_ERROR
    except ConfigError as e:
        log.error("%s", e)
        return ExitCode.USAGE_ERROR
    except (BackendError, ValueError) as e:
        log.error("Import failed: %s", e)
        return ExitCode.USAGE_ERROR
    print(f"{added} new quer{'y' if added == 1 else 'ies'} imported")
    return ExitCode.SUCCESS


def run_check_key(_config_file: str, args: list[str]) -> ExitCode:
    """Check the API key given on the command line."""
    log = get_logger("check")
    if len(args) != 2:  # noqa: PLR2004
        log.error("Usage: spicewall check-key BACKEND KEY")
        return ExitCode.USAGE_ERROR
    try:
        descriptor = get_backend(args[0])
    except KeyError as e:
        log.error("%s", e.args[0])
        return ExitCode.USAGE_ERROR

    if not descriptor.validate_api_key(args[1]):
        print(f"Invalid {descriptor.display_name} API key format")
        return ExitCode.USAGE_ERROR
    try:
        accepted = asyncio.run(check_api_key(descriptor, args[1], log=log))
    except BackendError as e:
        print(f"{descriptor.display_name} is unreachable: {e.message}")
        return ExitCode.KEY_ERROR
    print(f"{descriptor.display_name} API key {'accepted' if accepted else 'rejected'}")
    return ExitCode.SUCCESS if accepted else ExitCode.KEY_ERROR


def run_check_keys(config_file: str, _args: list[str]) -> ExitCode:
    """Check the stored API keys of the enabled backends."""
    log = get_logger("check")
    try:
        app = Spicewall.from_file(config_file, log=log)
    except ConfigNotFoundError:
        return ExitCode.ENV_ERROR
    except ConfigError as e:
        log.error("%s", e)
        return ExitCode.USAGE_ERROR
    results = asyncio.run(app.check_keys())
    if not results:
        print("No API key stored")
        return ExitCode.SUCCESS
    for name, accepted in results.items():
        print(f"{name:12s} {'accepted' if accepted else 'rejected'}")
    return ExitCode.SUCCESS if all(results.values()) else ExitCode.KEY_ERROR


COMMANDS: dict[str, Callable[[str, list[str]], ExitCode]] = {
    "backends": run_backends,
    "validate": run_validate,
    "import": run_import,
    "check-key": run_check_key,
    "check-keys": run_check_keys,
}


def main(argv: list[str] | None = None) -> int:
    """Run the command."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        debug_flag = use_param("--debug", args)
        config_file = use_param("--config", args)
    except ValueError as e:
        print(e)
        return ExitCode.USAGE_ERROR

    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()

    if not args or args[0] in {"--help", "-h", "help"}:
        print(__doc__)
        return ExitCode.SUCCESS if args else ExitCode.USAGE_ERROR

    command = COMMANDS.get(args[0])
    if command is None:
        print(f"Unknown command {args[0]!r}. Available: {', '.join(COMMANDS)}")
        return ExitCode.USAGE_ERROR

    log = get_logger("startup")
    try:
        return command(config_file, args[1:])
    except KeyboardInterrupt:
        return ExitCode.USAGE_ERROR
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        return ExitCode.USAGE_ERROR


if __name__ == "__main__":
    sys.exit(main())
