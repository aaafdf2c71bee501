"""
Triport CLI — call registered operations from the shell

Commands:
    triport list          List registered operations
    triport call <name>   Invoke an operation
    triport serve-rest    Start the REST server (uvicorn)
    triport serve-mcp     Start the MCP server (stdio mode)
    triport openapi       Print the OpenAPI document
    triport init          Create ~/.triport/ and a config.env template
    triport mcp-config    Print an MCP client config snippet

CLI flags use two dashes (--raw, --params-json); operation parameters use
one (-message hello), so a parameter can never be mistaken for a flag.
"""

import asyncio
import json
import re
import shutil
import sys
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click

from triport import __version__
from triport.config import Config
from triport.core.dispatch import Dispatcher
from triport.core.errors import TriportError, ValidationError, to_triport_error
from triport.core.openapi import build_openapi_document
from triport.core.operation import RuntimeContext
from triport.core.registry import ListingContext

_NUMBER = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")


def coerce_value(value: str) -> Any:
    """Best-effort typing of a named parameter value."""
    if value == "true":
        return True
    if value == "false":
        return False
    if _NUMBER.match(value):
        if any(ch in value for ch in ".eE"):
            return float(value)
        return int(value)
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def parse_named_params(tokens: Sequence[str]) -> Dict[str, Any]:
    """Turn ['-text', 'hi', '-number', '2'] into {'text': 'hi', 'number': 2}."""
    params: Dict[str, Any] = {}
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.startswith("--"):
            raise ValidationError(f"Unknown flag: {token}", {"flag": token})
        if not token.startswith("-") or len(token) < 2:
            raise ValidationError(
                f"Invalid parameter format: {token!r} (expected -<param> <value>)",
                {"token": token},
            )
        key = token[1:]
        if index + 1 >= len(tokens):
            raise ValidationError(f"Missing value for parameter -{key}", {"param": key})
        params[key] = coerce_value(tokens[index + 1])
        index += 2
    return params


def build_call_input(params_json: Optional[str], tokens: Sequence[str]) -> Any:
    if params_json is not None:
        if tokens:
            raise ValidationError(
                "Use either --params-json or named parameters, not both",
                {"params": list(tokens)},
            )
        try:
            return json.loads(params_json)
        except ValueError as exc:
            raise ValidationError("Invalid JSON input", {"rawInput": params_json, "cause": str(exc)}) from exc
    return parse_named_params(tokens)


def _primitive_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return None


def format_output(output: Any, raw: bool = False) -> str:
    """
    Pretty JSON by default. In raw mode a primitive (or the only value of a
    single-key object, when primitive) is printed bare; anything else stays JSON.
    """
    if raw:
        if output is None:
            return ""
        text = _primitive_text(output)
        if text is not None:
            return text
        if isinstance(output, dict) and len(output) == 1:
            text = _primitive_text(next(iter(output.values())))
            if text is not None:
                return text
    return json.dumps(output, indent=2)


def _fail(ctx: click.Context, exc: BaseException):
    """Print the uniform error JSON on stderr and exit 1."""
    error = to_triport_error(exc)
    click.echo(json.dumps(error.to_dict(), indent=2), err=True)
    ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="triport")
@click.pass_context
def main(ctx):
    """Triport — one operation registry, served over REST, MCP and the command line."""
    if ctx.obj is None:
        from triport.operations import create_default_registry
        ctx.obj = create_default_registry()


@main.command("list")
@click.pass_obj
def list_operations(registry):
    """List registered operations."""
    operations = registry.list_enriched(ListingContext(transport="cli"))
    if not operations:
        click.echo("No endpoints registered.")
        return
    for op in operations:
        click.echo(f"- {op.name}: {op.summary}")


@main.command("call", context_settings={"ignore_unknown_options": True})
@click.argument("name")
@click.option("--params-json", "params_json", default=None, metavar="JSON",
              help="Operation input as a single JSON document.")
@click.option("--raw", is_flag=True, help="Print bare values instead of JSON where possible.")
@click.argument("params", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def call(ctx, name, params_json, raw, params):
    """Invoke operation NAME.

    \b
    Named parameters use a single dash:
      triport call echo -message "hello"
      triport call process -text hi -number 42
    or pass the whole input as JSON:
      triport call echo --params-json '{"message": "hello"}'

    Output is pretty-printed JSON (2-space indent) on stdout; parse it as
    JSON rather than matching text. --raw prints a bare value instead when
    the output is a primitive or a single-key object. Errors go to stderr
    as JSON with exit code 1.
    """
    registry = ctx.obj
    try:
        if name.startswith("-"):
            raise ValidationError("Endpoint name is required for call command", {"token": name})
        raw_input = build_call_input(params_json, params)
        context = RuntimeContext(request_id=str(uuid.uuid4()), transport="cli")
        output = asyncio.run(Dispatcher(registry).execute(name, raw_input, context))
    except Exception as exc:
        _fail(ctx, exc)
        return

    click.echo(format_output(output, raw=raw))


@main.command("serve-rest")
@click.option("--host", default=None, help="Bind address (default: TRIPORT_REST_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: TRIPORT_REST_PORT).")
@click.pass_context
def serve_rest(ctx, host, port):
    """Start the REST server."""
    from triport.rest import serve

    try:
        Config.validate()
    except TriportError as exc:
        _fail(ctx, exc)
        return
    serve(ctx.obj, host=host, port=port)


@main.command("serve-mcp")
@click.pass_context
def serve_mcp(ctx):
    """Start the MCP server (stdio mode)."""
    from triport.mcp.server import MCPServer

    try:
        Config.validate()
    except TriportError as exc:
        _fail(ctx, exc)
        return

    try:
        asyncio.run(MCPServer(ctx.obj).run())
    except KeyboardInterrupt:
        pass


@main.command()
@click.pass_obj
def openapi(registry):
    """Print the OpenAPI document for the RPC routes."""
    document = build_openapi_document(
        registry.list(),
        title=Config.APP_NAME,
        version=Config.APP_VERSION,
        description=Config.APP_DESCRIPTION,
    )
    click.echo(json.dumps(document, indent=2))


@main.command()
def init():
    """Initialize Triport: create ~/.triport/ and a config.env template."""
    Config.ensure_dirs()

    config_env = Config.DATA_DIR / "config.env"
    if not config_env.exists():
        config_env.write_text(
            "# Triport Configuration\n"
            "# Uncomment and edit as needed.\n"
            "\n"
            "# TRIPORT_DATA_DIR=~/.triport\n"
            "# TRIPORT_LOG_LEVEL=INFO\n"
            "# TRIPORT_REST_HOST=0.0.0.0\n"
            "# TRIPORT_REST_PORT=3000\n"
            "# TRIPORT_MCP_TRANSPORT=stdio\n"
        )

    click.echo(f"Triport initialized at {Config.DATA_DIR}")
    click.echo(f"  Config: {config_env}")
    click.echo(f"  Logs:   {Config.LOG_DIR}")
    click.echo()
    click.echo("Run `triport mcp-config` to get the MCP client JSON snippet.")


@main.command("mcp-config")
def mcp_config():
    """Print MCP client config JSON."""
    command, args = _find_executable()
    config = {
        "mcpServers": {
            "triport": {
                "command": command,
                "args": args + ["serve-mcp"],
            }
        }
    }
    click.echo(json.dumps(config, indent=2))


def _find_executable() -> Tuple[str, List[str]]:
    """Find the triport command path."""
    path = shutil.which("triport")
    if path:
        return path, []
    # Fallback: use python -m triport
    return sys.executable, ["-m", "triport"]


if __name__ == "__main__":
    main()
