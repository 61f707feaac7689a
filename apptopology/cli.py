from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .iac_types import Plan
from .resolver import resolve
from .stacks.azure_stack import synth_outputs_json, synth_plan_json
from .utils.config_loader import load_tfvars_config
from .utils.shell import CmdError, cdktf
from .utils.validation import ConfigurationError


def _env_for(args: argparse.Namespace) -> Dict[str, str]:
    env = dict(os.environ)
    if args.vars_file:
        env["TFVARS_FILE"] = str(Path(args.vars_file).resolve())
    return env


def load_plan(args: argparse.Namespace, repo_root: Optional[Path] = None) -> Plan:
    root = Path.cwd() if repo_root is None else repo_root
    params = load_tfvars_config(repo_root=root, env=_env_for(args))
    return resolve(params)


def show_plan(args: argparse.Namespace) -> None:
    plan = load_plan(args)
    print(json.dumps(synth_plan_json(plan, redact=not args.show_sensitive), indent=2))


def show_outputs(args: argparse.Namespace) -> None:
    plan = load_plan(args)
    print(
        json.dumps(synth_outputs_json(plan, redact=not args.show_sensitive), indent=2)
    )


def show_order(args: argparse.Namespace) -> None:
    plan = load_plan(args)
    for spec in plan.topological_order():
        print(f"{spec.kind} {spec.id}")


def infra_deploy(args: argparse.Namespace) -> None:
    project = Path(args.project_dir)
    if not project.exists():
        raise CmdError(f"Project directory not found: {project}")
    env = _env_for(args)
    # Resolve from the project dir first so bad input fails before the engine starts.
    load_plan(args, repo_root=project.resolve())
    print("Synthesizing CDKTF...")
    cdktf(project, ["get"], env=env)
    cdktf(project, ["synth"], env=env)
    print("Deploying CDKTF...")
    cdktf(project, ["deploy", "--auto-approve"], env=env)
    print("CDKTF deploy completed.")


def infra_destroy(args: argparse.Namespace) -> None:
    project = Path(args.project_dir)
    if not project.exists():
        raise CmdError(f"Project directory not found: {project}")
    print("Destroying CDKTF-managed infrastructure...")
    cdktf(project, ["destroy", "--auto-approve"], env=_env_for(args))
    print("Destroy completed.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apptopology", description="Resolve and deploy app topologies on Azure"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("plan", help="Print the resolved plan as JSON")
    p.add_argument("--vars-file")
    p.add_argument("--show-sensitive", action="store_true")
    p.set_defaults(func=show_plan)

    out = sub.add_parser("outputs", help="Print the resolved outputs as JSON")
    out.add_argument("--vars-file")
    out.add_argument("--show-sensitive", action="store_true")
    out.set_defaults(func=show_outputs)

    order = sub.add_parser("order", help="Print resources in apply order")
    order.add_argument("--vars-file")
    order.set_defaults(func=show_order)

    idep = sub.add_parser("infra-deploy", help="Deploy infrastructure via CDKTF")
    idep.add_argument("--project-dir", default=".")
    idep.add_argument("--vars-file")
    idep.set_defaults(func=infra_deploy)

    ides = sub.add_parser("infra-destroy", help="Destroy infrastructure via CDKTF")
    ides.add_argument("--project-dir", default=".")
    ides.add_argument("--vars-file")
    ides.set_defaults(func=infra_destroy)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (ConfigurationError, FileNotFoundError, CmdError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
