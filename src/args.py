"""Argument parsing functionality for paxconstruct."""

import argparse


def _common_options():
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    common.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    common.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    common.add_argument("-b", "--base-directory",
                        dest="BASE_DIRECTORY",
                        help="A directory inside the project tree (default: current directory)",
                        action="store",
                        type=str,
                        default=".")
    return common


def _repository_options(parser):
    parser.add_argument("--repository",
                        dest="REPOSITORIES",
                        help="Remote repository URL (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--local-repository",
                        dest="LOCAL_REPOSITORY",
                        help="Local repository directory",
                        action="store",
                        type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="paxconstruct",
        description="Import, move, remove and provision bundles in a multi-module Maven project",
        add_help=True,
    )
    common = _common_options()
    commands = parser.add_subparsers(dest="COMMAND", required=True)

    imp = commands.add_parser("import-bundle", parents=[common],
                              help="Import a bundle and its provided dependencies")
    imp.add_argument("coordinate",
                     help="Bundle coordinate groupId:artifactId:version")
    imp.add_argument("-t", "--target-directory",
                     dest="TARGET_DIRECTORY",
                     help="Module receiving the dependency (default: base directory)",
                     action="store",
                     type=str)
    imp.add_argument("--provision-id",
                     dest="PROVISION_ID",
                     help="Name of the provisioning module",
                     action="store",
                     type=str)
    imp.add_argument("--exclude-transitive",
                     dest="EXCLUDE_TRANSITIVE",
                     help="Stop after the first bundle found",
                     action="store_true")
    imp.add_argument("--widen-scope",
                     dest="WIDEN_SCOPE",
                     help="Treat every non-test, non-system dependency as provided",
                     action="store_true")
    imp.add_argument("--no-test-metadata",
                     dest="TEST_METADATA",
                     help="Do not inspect jar manifests when classifying bundles",
                     action="store_false")
    imp.add_argument("--no-deploy",
                     dest="DEPLOY",
                     help="Record imports as optional (not deployed)",
                     action="store_false")
    imp.add_argument("--no-overwrite",
                     dest="OVERWRITE",
                     help="Keep existing dependency entries untouched",
                     action="store_false")
    _repository_options(imp)

    mov = commands.add_parser("move-bundle", parents=[common],
                              help="Move a bundle module to a new directory")
    mov.add_argument("bundle",
                     help="Bundle path, artifactId or symbolic name")
    mov.add_argument("-t", "--target-directory",
                     dest="TARGET_DIRECTORY",
                     help="New parent directory for the bundle",
                     action="store",
                     type=str,
                     required=True)

    rem = commands.add_parser("remove-bundle", parents=[common],
                              help="Remove a bundle module from the project")
    rem.add_argument("bundle",
                     help="Bundle path, artifactId or symbolic name")

    new = commands.add_parser("create-bundle", parents=[common],
                              help="Create a bundle module and attach it to the tree")
    new.add_argument("coordinate",
                     help="New module coordinate groupId:artifactId:version")
    new.add_argument("-t", "--target-directory",
                     dest="TARGET_DIRECTORY",
                     help="Directory to create the module in (default: base directory)",
                     action="store",
                     type=str)
    new.add_argument("--parent",
                     dest="PARENT_ID",
                     help="artifactId of the logical parent module",
                     action="store",
                     type=str)
    new.add_argument("--overwrite",
                     dest="OVERWRITE",
                     help="Replace an existing module POM",
                     action="store_true")
    new.add_argument("--no-compact-names",
                     dest="COMPACT_NAMES",
                     help="Always use group.artifact for symbolic names",
                     action="store_false")

    prov = commands.add_parser("provision", parents=[common],
                               help="Collect bundles from the project and deploy them")
    prov.add_argument("--deploy-poms",
                      dest="DEPLOY_POMS",
                      help="Comma separated list of extra POMs whose provided dependencies are deployed",
                      action="store",
                      type=str)
    prov.add_argument("--no-deploy",
                      dest="DEPLOY",
                      help="Only write the deployment POM",
                      action="store_false")
    prov.add_argument("--framework",
                      dest="FRAMEWORK",
                      help="OSGi framework to deploy onto",
                      action="store",
                      type=str)
    prov.add_argument("--runner",
                      dest="RUNNER",
                      help="Provisioning runner executable",
                      action="store",
                      type=str)

    return parser.parse_args(argv)
