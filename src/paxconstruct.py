"""paxconstruct - manage bundles in a multi-module Maven project

    Returns:
        int: Exit code
"""
import logging
import os
import sys
from pathlib import Path

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import load_config, apply_config
from pom.document import PomDocument, has_pom
from project.errors import ConstructError, PostMoveInconsistency
from project.importer import ImportPlanner
from project.models import Coordinate, ResolveOptions
from project.remove import BundleRemoval
from project.resolver import ArtifactGraphResolver
from project.scaffold import ScaffoldRequest, Scaffolder
from project.tree import ProjectTreeManager
from provision.runner import ProvisionRunner
from provision.session import ProvisionSession
from registry.maven.client import MavenRepositoryClient
from registry.maven.project import ProjectBuilder

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _parse_coordinate(text: str) -> Coordinate:
    try:
        return Coordinate.parse(text)
    except ValueError as exc:
        raise ConstructError(str(exc)) from exc


def import_bundle(args, tree: ProjectTreeManager) -> int:
    """Resolve a bundle and record every bundle found in the project POMs."""
    target_dir = Path(args.TARGET_DIRECTORY or args.BASE_DIRECTORY)
    provision_pom = tree.find_pom(target_dir, Constants.PROVISION_ID)
    target_pom = PomDocument.read(target_dir) if has_pom(target_dir) else None

    client = MavenRepositoryClient(Constants.REMOTE_REPOSITORIES, Constants.LOCAL_REPOSITORY)
    resolver = ArtifactGraphResolver(ProjectBuilder(client))
    options = ResolveOptions(
        exclude_transitive=args.EXCLUDE_TRANSITIVE,
        widen_scope=args.WIDEN_SCOPE,
        test_metadata=args.TEST_METADATA,
        deploy=args.DEPLOY,
    )
    actions = resolver.resolve(_parse_coordinate(args.coordinate), options)
    if not actions:
        logger.warning("No bundles found for %s", args.coordinate)

    planner = ImportPlanner(provision_pom, target_pom, overwrite=args.OVERWRITE)
    updates = planner.apply(actions)
    logger.info("Imported %d bundle(s), %d POM update(s)", len(actions), updates)
    return ExitCodes.SUCCESS.value


def move_bundle(args, tree: ProjectTreeManager) -> int:
    target = Path(args.TARGET_DIRECTORY).resolve()
    node = tree.move(args.bundle, args.BASE_DIRECTORY, target)
    logger.info("Moved %s to %s", node.manifest.id, node.directory)
    return ExitCodes.SUCCESS.value


def remove_bundle(args, tree: ProjectTreeManager) -> int:
    removal = BundleRemoval(args.BASE_DIRECTORY, args.bundle, tree)
    updated = removal.run()
    logger.info("Removed %s, %d POM(s) updated", args.bundle, updated)
    return ExitCodes.SUCCESS.value


def create_bundle(args, tree: ProjectTreeManager) -> int:
    coordinate = _parse_coordinate(args.coordinate)
    request = ScaffoldRequest(
        group_id=coordinate.group,
        artifact_id=coordinate.name,
        version=coordinate.version,
        parent_id=args.PARENT_ID,
        overwrite=args.OVERWRITE,
        compact_names=args.COMPACT_NAMES,
    )
    target = Path(args.TARGET_DIRECTORY or args.BASE_DIRECTORY).resolve()
    Scaffolder(tree).run(args.BASE_DIRECTORY, target, request)
    return ExitCodes.SUCCESS.value


def provision(args, tree: ProjectTreeManager) -> int:
    root = tree.find_project_root(args.BASE_DIRECTORY)
    if root is None:
        raise ConstructError(f"No Maven project found at {args.BASE_DIRECTORY}")

    runner = ProvisionRunner(Constants.RUNNER, Constants.FRAMEWORK)
    session = ProvisionSession(runner, deploy=args.DEPLOY)
    if args.DEPLOY_POMS:
        session.add_additional_poms(args.DEPLOY_POMS.split(","))
    root_pom = None
    for node in tree.iter_modules(root):
        root_pom = root_pom or node.manifest
        session.add_project(node.manifest)
    session.finalize(root_pom)
    return ExitCodes.SUCCESS.value


COMMANDS = {
    "import-bundle": import_bundle,
    "move-bundle": move_bundle,
    "remove-bundle": remove_bundle,
    "create-bundle": create_bundle,
    "provision": provision,
}


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    apply_config(load_config(getattr(args, "CONFIG", None)), args)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(
            event="function_entry", component="cli", action="main", target=args.COMMAND
        ))

    tree = ProjectTreeManager()
    try:
        code = COMMANDS[args.COMMAND](args, tree)
    except PostMoveInconsistency as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.INCONSISTENT_STATE.value)
    except ConstructError as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.CONSTRUCT_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug("CLI finished", extra=extra_context(
            event="function_exit", component="cli", action="main", outcome="success"
        ))
    sys.exit(code)


if __name__ == "__main__":
    main()
