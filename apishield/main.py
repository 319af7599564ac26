"""Main entry point for the apishield application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import json
import logging
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from apishield.core.command_handler import CommandHandler
from apishield.core.services.api_service import ApiService

# --- Infrastructure Layer ---
# Config
from apishield.infrastructure.config.settings import (
    get_api_base_url,
    get_api_token,
    get_config,
    load_configuration,
    load_retry_config,
)
# UI
from apishield.infrastructure.cli.display import ConsoleDisplay
# Resilience
from apishield.infrastructure.resilience.api_retry import RetryingRequestExecutor
# Transport
from apishield.infrastructure.transport.httpx_transport import HttpxTransport
# Monitoring
from apishield.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(base_url: Optional[str] = None, verbose: bool = False) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root. The returned transport must be
    closed by the caller. Initialization failures (e.g. invalid retry
    settings) are shown on the console and end the command with exit code 1.
    """
    dependencies: Dict[str, Any] = {'ui': ConsoleDisplay()}

    try:
        # 1. Load Configuration First
        load_configuration()
        log_level_name = "DEBUG" if verbose else str(get_config('logging.level', 'WARNING')).upper()
        log_level = getattr(logging, log_level_name, logging.WARNING)
        log_file = get_config('logging.file')
        log_format = get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        setup_logging(log_level=log_level, log_file=log_file, log_format=log_format)
        logger.info("Configuration and logging initialized.")

        # 2. Instantiate Infrastructure Adapters & Services
        dependencies['retry_config'] = load_retry_config()
        dependencies['transport'] = HttpxTransport(
            base_url=base_url or get_api_base_url(),
            auth_token=get_api_token(),
        )
        dependencies['executor'] = RetryingRequestExecutor(
            transport=dependencies['transport'],
            config=dependencies['retry_config'],
        )

        # 3. Instantiate Core Services
        dependencies['api_service'] = ApiService(executor=dependencies['executor'])
        dependencies['command_handler'] = CommandHandler(
            api_service=dependencies['api_service'],
            ui=dependencies['ui'],
            retry_config=dependencies['retry_config'],
        )
        logger.info("All dependencies initialized successfully.")
        return dependencies

    except Exception as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Application Initialization Failed: {e}")
        raise typer.Exit(code=1)


def parse_headers(raw_headers: Optional[List[str]]) -> Dict[str, str]:
    """Parses 'Name: value' strings into a header mapping."""
    headers: Dict[str, str] = {}
    for raw in raw_headers or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Header must look like 'Name: value', got {raw!r}")
        headers[name.strip()] = value.strip()
    return headers


def parse_body(data: Optional[str]) -> Optional[Any]:
    """Parses --data as JSON, falling back to sending it as raw text."""
    if data is None:
        return None
    try:
        return json.loads(data)
    except ValueError:
        return data


# --- Typer App Definition ---
app = typer.Typer(
    name="apishield",
    help="apishield: resilient HTTP API client with retries, backoff and error classification.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---
def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs an async command body from a sync Typer command."""
    return asyncio.run(coro)


# --- CLI Commands ---

BaseUrlOption = Annotated[
    Optional[str],
    typer.Option("--base-url", "-b", help="API base URL for relative paths. Uses config 'api.base_url' if not set.")
]
RetriesOption = Annotated[
    Optional[int],
    typer.Option("--retries", "-r", min=1, help="Total attempts allowed (default from config, normally 3).")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every attempt at DEBUG level.")]
RawOption = Annotated[bool, typer.Option("--raw", help="Print compact JSON without formatting.")]
NoUnwrapOption = Annotated[bool, typer.Option("--no-unwrap", help="Keep the {success, data} envelope.")]


async def _request(
    dependencies: Dict[str, Any],
    method: str,
    url: str,
    body: Optional[Any],
    headers: Dict[str, str],
    retries: Optional[int],
    raw: bool,
    unwrap: bool,
) -> bool:
    handler: CommandHandler = dependencies['command_handler']
    async with dependencies['transport']:
        return await handler.handle_request(
            method, url, body=body, headers=headers, max_retries=retries, raw=raw, unwrap=unwrap
        )


def run_request(
    method: str,
    url: str,
    body: Optional[Any],
    headers: Dict[str, str],
    retries: Optional[int],
    base_url: Optional[str],
    raw: bool,
    unwrap: bool,
    verbose: bool,
) -> None:
    """Wires dependencies, runs one call and maps failure to exit code 1."""
    dependencies = create_dependencies(base_url=base_url, verbose=verbose)
    try:
        ok = run_async(_request(dependencies, method, url, body, headers, retries, raw, unwrap))
    except Exception as e:
        logger.error(f"Error executing request command: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def request(
    method: Annotated[str, typer.Argument(help="HTTP method (GET, POST, PUT, PATCH, DELETE).")],
    url: Annotated[str, typer.Argument(help="Path relative to the base URL, or an absolute URL.")],
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="Request body (JSON).")] = None,
    header: Annotated[Optional[List[str]], typer.Option("--header", "-H", help="Extra header 'Name: value'.")] = None,
    retries: RetriesOption = None,
    base_url: BaseUrlOption = None,
    raw: RawOption = False,
    no_unwrap: NoUnwrapOption = False,
    verbose: VerboseOption = False,
):
    """Send one request through the retry engine and print the result."""
    run_request(
        method.upper(), url, parse_body(data), parse_headers(header), retries, base_url, raw, not no_unwrap, verbose
    )


@app.command()
def get(
    url: Annotated[str, typer.Argument(help="Path relative to the base URL, or an absolute URL.")],
    header: Annotated[Optional[List[str]], typer.Option("--header", "-H", help="Extra header 'Name: value'.")] = None,
    retries: RetriesOption = None,
    base_url: BaseUrlOption = None,
    raw: RawOption = False,
    no_unwrap: NoUnwrapOption = False,
    verbose: VerboseOption = False,
):
    """Shortcut for 'request GET URL'."""
    run_request("GET", url, None, parse_headers(header), retries, base_url, raw, not no_unwrap, verbose)


@app.command()
def backoff(
    attempts: Annotated[int, typer.Option("--attempts", "-n", min=1, help="Number of failed attempts to show.")] = 5,
):
    """Show the backoff delay after each failed attempt."""
    dependencies = create_dependencies()
    try:
        dependencies['command_handler'].handle_backoff(attempts)
    except Exception as e:
        logger.error(f"Error executing backoff command: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)
    finally:
        run_async(dependencies['transport'].aclose())


@app.command()
def classify(
    status: Annotated[int, typer.Argument(help="HTTP status code to classify.")],
):
    """Show the error kind, message and retryability for a status code."""
    dependencies = create_dependencies()
    try:
        dependencies['command_handler'].handle_classify(status)
    except Exception as e:
        logger.error(f"Error executing classify command: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)
    finally:
        run_async(dependencies['transport'].aclose())


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
