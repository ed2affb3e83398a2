from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, TextIO

import yaml
from loguru import logger

from sigo.config.models import GatewayDefaults
from sigo.config.resolver import list_models, load_env_file, load_provider_config
from sigo.core.types import InvocationOutcome
from sigo.data.paths import GatewayPaths
from sigo.data.session_store import FileSessionStore
from sigo.errors import ConfigInvalid, EmptyInput
from sigo.gateway import Gateway, GatewayRequest
from sigo.llm.client import ProviderClient
from sigo.logging_utils import configure_logging

EXAMPLES = (
    "  sigo 'Hello Claude'",
    "  sigo -m gpt4 -s project 'Continue our discussion'",
    "  echo 'Explain quantum physics' | sigo -n 2000",
)


def build_parser(defaults: GatewayDefaults) -> argparse.ArgumentParser:
    # -h is handled by print_help so the listing of models and sessions is included.
    p = argparse.ArgumentParser(prog="sigo", add_help=False)
    p.add_argument("-m", dest="model", default=defaults.model, help="Model to use")
    p.add_argument("-s", dest="session", default="", help="Session ID")
    p.add_argument("-n", dest="max_tokens", type=int, default=defaults.max_tokens, help="Max tokens")
    p.add_argument("-t", dest="timeout", type=int, default=defaults.timeout_s, help="Timeout seconds")
    p.add_argument("-r", dest="retries", type=int, default=defaults.retries, help="Retry count")
    p.add_argument("-q", dest="quiet", action="store_true", help="Quiet mode")
    p.add_argument("-j", dest="json_out", action="store_true", help="JSON output")
    p.add_argument("-y", dest="yaml_out", action="store_true", help="YAML output")
    p.add_argument("-v", dest="verbose", action="store_true", help="Verbose logging")
    p.add_argument("-h", dest="help", action="store_true", help="Show help")
    p.add_argument("prompt", nargs="*", help="Prompt text (else read from stdin)")
    return p


def print_help(parser: argparse.ArgumentParser, paths: GatewayPaths, out: TextIO) -> None:
    out.write("SIGO - SI Gateway\n\n")
    out.write("Usage: sigo [options] [prompt]\n")
    out.write("       echo 'prompt' | sigo [options]\n")
    out.write("       sigo [options] < file.txt\n\n")
    out.write(parser.format_help())

    out.write("\nAvailable models:\n")
    models = list_models(paths)
    if not models:
        out.write("  (none configured)\n")
    for name in models:
        out.write(f"  {name}\n")

    out.write("\nActive sessions:\n")
    sessions = FileSessionStore(paths).list_sessions(models)
    if not sessions:
        out.write("  (none)\n")
    for session_id, model in sessions:
        out.write(f"  -s {session_id} (model: {model})\n")

    out.write("\nExamples:\n")
    out.write("\n".join(EXAMPLES) + "\n")


def read_prompt(words: List[str], stdin: TextIO, stderr: TextIO) -> str:
    """Positional words first, then piped stdin, then one interactive line."""
    if words:
        return " ".join(words).strip()

    if not stdin.isatty():
        return stdin.read().strip()

    stderr.write("Prompt: ")
    stderr.flush()
    return stdin.readline().strip()


def require_prompt(prompt: str) -> str:
    if not prompt:
        raise EmptyInput("No input")
    return prompt


def emit(outcome: InvocationOutcome, args: argparse.Namespace, out: TextIO) -> None:
    if args.json_out:
        out.write(json.dumps(outcome.to_dict(), ensure_ascii=False) + "\n")
        return
    if args.yaml_out:
        out.write(yaml.safe_dump(outcome.to_dict(), sort_keys=False, allow_unicode=True))
        return

    if outcome.error:
        if not args.quiet:
            logger.error("{}", outcome.error)
        return
    out.write(outcome.response + "\n")


def _validate(args: argparse.Namespace) -> Optional[str]:
    if args.max_tokens <= 0:
        return f"-n must be positive, got {args.max_tokens}"
    if args.timeout <= 0:
        return f"-t must be positive, got {args.timeout}"
    if args.retries < 1:
        return f"-r must be at least 1, got {args.retries}"
    return None


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)

    paths = GatewayPaths.for_root()
    load_env_file(paths)
    parser = build_parser(GatewayDefaults.from_env())
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    # Bare `sigo` on a terminal shows help; `echo x | sigo` still runs.
    if args.help or (not argv and sys.stdin.isatty()):
        print_help(parser, paths, sys.stdout)
        return 0

    problem = _validate(args)
    if problem:
        logger.error("{}", problem)
        return 1

    try:
        cfg = load_provider_config(paths, args.model)
    except ConfigInvalid as e:
        logger.error("Config: {}", e)
        return 1

    try:
        prompt = require_prompt(read_prompt(args.prompt, sys.stdin, sys.stderr))
    except EmptyInput as e:
        logger.error("{}", e)
        return 1

    gateway = Gateway(client=ProviderClient(cfg), sessions=FileSessionStore(paths))
    outcome = gateway.invoke(
        GatewayRequest(
            model=args.model,
            prompt=prompt,
            session_id=args.session,
            max_tokens=args.max_tokens,
            timeout_s=float(args.timeout),
            retries=args.retries,
        )
    )

    emit(outcome, args, sys.stdout)
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
