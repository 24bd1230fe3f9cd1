"""Command-line entry point: flags, stream handling, and exit status."""

import argparse
import contextlib
import sys

from linkerd_inject.core.constants import READ_BUFFER_SIZE
from linkerd_inject.core.errors import InjectError, InputOutputError, UsageError
from linkerd_inject.core.pipeline import inject_stream
from linkerd_inject.core.types import RunContext
from linkerd_inject.io.config import load_config, parse_bool, resolve_params
from linkerd_inject.io.output import emit_warnings


def _bool_flag(value: str) -> bool:
    try:
        return parse_bool(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (long flags take one or two leading dashes)."""
    parser = argparse.ArgumentParser(
        prog="linkerd-inject",
        description="Inject the linkerd iptables init container into Kubernetes workload manifests",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-f", dest="input_file", default="",
        help="Input Kubernetes resource filename ('-' for stdin)",
    )
    parser.add_argument(
        "-o", dest="output_file", default="",
        help="Modified output Kubernetes resource filename (default: stdout)",
    )
    # None means "not given": config file, then built-in default
    parser.add_argument(
        "-linkerdPort", "--linkerdPort", dest="linkerd_port",
        help="linkerd daemonset port which will handle outgoing requests (default: 4140)",
    )
    parser.add_argument(
        "-useServiceVip", "--useServiceVip", dest="use_service_vip",
        nargs="?", const=True, type=_bool_flag,
        help="for use in k8s envs without downward api access (default: false)",
    )
    parser.add_argument(
        "-linkerdSvcName", "--linkerdSvcName", dest="linkerd_svc_name",
        help="linkerd daemonset service name (default: l5d)",
    )
    parser.add_argument(
        "-config", "--config", dest="config_file",
        help="YAML file with linkerdPort, linkerdSvcName and useServiceVip defaults",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Do not print warnings or status lines to stderr",
    )
    return parser


def _open_input(stack: contextlib.ExitStack, path: str):
    if path == "-":
        return sys.stdin.buffer
    return stack.enter_context(open(path, "rb", buffering=READ_BUFFER_SIZE))


def _open_output(stack: contextlib.ExitStack, path: str):
    if not path:
        return sys.stdout.buffer
    return stack.enter_context(open(path, "wb"))


def run(args) -> RunContext:
    """Run one injection pass for parsed command-line *args*."""
    if not args.input_file:
        raise UsageError("Please supply an unmodified Kubernetes resource filename with -f")

    warnings: list[str] = []
    config = load_config(args.config_file)
    params = resolve_params(
        config, warnings,
        proxy_port=args.linkerd_port,
        proxy_service_name=args.linkerd_svc_name,
        use_service_vip=args.use_service_vip,
    )
    ctx = RunContext(params=params, warnings=warnings)

    # One scope owns both handles; stdin/stdout are never closed
    try:
        with contextlib.ExitStack() as stack:
            in_stream = _open_input(stack, args.input_file)
            out_stream = _open_output(stack, args.output_file)
            inject_stream(ctx, in_stream, out_stream)
            out_stream.flush()
    except OSError as exc:
        raise InputOutputError(str(exc)) from exc
    return ctx


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        ctx = run(args)
    except InjectError as exc:
        print(str(exc).replace("\n", " "), file=sys.stderr)
        return 1

    if not args.quiet:
        emit_warnings(ctx.warnings)
        if args.output_file:
            print(f"Injected {ctx.injected} of {ctx.documents} documents", file=sys.stderr)
            print(f"Wrote {args.output_file}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
