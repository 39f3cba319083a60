import logging
from typing import List

import click

import resource_migrator.middleware.resources as resources_
from resource_migrator.environment import Environment
from resource_migrator.logic.batching import DEFAULT_INDEX_BATCH_SIZE
from resource_migrator.logic.engine import MigrationEngine
from resource_migrator.models.utils import ExitCode, string_from_names

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "migration_services.yaml"
DEFAULT_LOG_FILE = "migration_log.txt"
LOG_FILE_FORMAT = "%(asctime)s - %(message)s"

DEFAULT_TEMPLATE_PATTERN = "default_*"
DEFAULT_INDEX_PATTERN = "dm-idx-contra*"
DEFAULT_PIPELINE_IDS = "addElasticTimeStamp,addIndexedAtTimeStamp,clm-attachment"
DEFAULT_SCRIPT_IDS = "generic-fields-rename-or-remove,domainmodel-partial-update,domainmodel-partial-delete"


# ################### UNIVERSAL ####################


class Context(object):
    def __init__(self, config_file) -> None:
        self.config_file = config_file
        try:
            self.env = Environment.load(config_file)
        except Exception as e:
            raise click.ClickException(str(e))
        self.json = False
        self._engine = None

    @property
    def engine(self) -> MigrationEngine:
        if self._engine is None:
            self._engine = MigrationEngine(self.env.source_cluster, self.env.target_cluster, self.env.settings)
        return self._engine


def configure_logging(verbose: int, log_file: str):
    console_level = logging.WARN - (10 * verbose)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    handlers = [console_handler]
    root_level = console_level
    if log_file:
        # The log file always records the full run at INFO, whatever the console verbosity
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
        handlers.append(file_handler)
        root_level = min(console_level, logging.INFO)
    logging.basicConfig(level=root_level, handlers=handlers)


def echo_result(exit_code: ExitCode, message: str):
    if exit_code != ExitCode.SUCCESS:
        raise click.ClickException(message)
    click.echo(message)


@click.group()
@click.option("--config-file", default=DEFAULT_CONFIG_FILE,
              help="Path to config file. Cluster details are read from SOURCE_ES_*/TARGET_ES_* environment "
                   "variables when it does not exist.")
@click.option("--json", is_flag=True)
@click.option('-v', '--verbose', count=True, help="Verbosity level. Default is warn, -v is info, -vv is debug.")
@click.option("--log-file", default=DEFAULT_LOG_FILE, show_default=True,
              help="File that records every migration step. Pass an empty value to disable.")
@click.pass_context
def cli(ctx, config_file, json, verbose, log_file):
    configure_logging(verbose, log_file)
    logger.info(f"Logging set to {logging.getLevelName(logger.getEffectiveLevel())}")
    ctx.obj = Context(config_file)
    ctx.obj.json = json


def _require_clusters(ctx):
    try:
        ctx.env.require_clusters()
    except ValueError as e:
        raise click.UsageError(str(e)) from e


# ##################### TEMPLATES ###################


@cli.group(name="templates", help="Commands to validate and migrate index templates")
@click.pass_obj
def templates_group(ctx):
    _require_clusters(ctx)


@templates_group.command(name="validate")
@click.option("--pattern", default=DEFAULT_TEMPLATE_PATTERN, show_default=True, help="Index template name pattern")
@click.pass_obj
def validate_templates_cmd(ctx, pattern):
    """Compare index templates between the source and target clusters without writing anything"""
    echo_result(*resources_.validate_index_templates(ctx.env.source_cluster, ctx.env.target_cluster, pattern,
                                                     as_json=ctx.json))


@templates_group.command(name="migrate")
@click.option("--pattern", default=DEFAULT_TEMPLATE_PATTERN, show_default=True, help="Index template name pattern")
@click.pass_obj
def migrate_templates_cmd(ctx, pattern):
    """Copy index templates matching a pattern that are missing in the target cluster"""
    echo_result(*resources_.migrate_index_templates(ctx.engine, pattern, as_json=ctx.json))


# ##################### PIPELINES ###################


@cli.group(name="pipelines", help="Commands to validate and migrate ingest pipelines")
@click.pass_obj
def pipelines_group(ctx):
    _require_clusters(ctx)


@pipelines_group.command(name="validate")
@click.pass_obj
def validate_pipelines_cmd(ctx):
    """Compare all ingest pipelines between the source and target clusters without writing anything"""
    echo_result(*resources_.validate_ingest_pipelines(ctx.env.source_cluster, ctx.env.target_cluster,
                                                      as_json=ctx.json))


@pipelines_group.command(name="migrate")
@click.option("--ids", default=DEFAULT_PIPELINE_IDS, show_default=True,
              help="Comma-separated list of ingest pipeline ids")
@click.pass_obj
def migrate_pipelines_cmd(ctx, ids):
    """Copy the listed ingest pipelines that are missing in the target cluster"""
    echo_result(*resources_.migrate_ingest_pipelines(ctx.engine, ids, as_json=ctx.json))


# ##################### INDICES ###################


@cli.group(name="indices", help="Commands to migrate index settings, mappings and aliases")
@click.pass_obj
def indices_group(ctx):
    pass


@indices_group.command(name="migrate")
@click.option("--pattern", default=DEFAULT_INDEX_PATTERN, show_default=True, help="Index name pattern")
@click.pass_obj
def migrate_indices_cmd(ctx, pattern):
    """Create the indices matching a pattern that are missing in the target cluster"""
    _require_clusters(ctx)
    echo_result(*resources_.migrate_indices(ctx.engine, pattern, as_json=ctx.json))


@indices_group.command(name="migrate-all")
@click.option("--yes", "assume_yes", is_flag=True, default=False,
              help="Skip the confirmation before indices are created")
@click.pass_obj
def migrate_all_indices_cmd(ctx, assume_yes):
    """Create every visible source index that is missing in the target cluster"""
    _require_clusters(ctx)

    def confirm(names: List[str]) -> bool:
        if assume_yes:
            return True
        click.echo(f"Indices missing in target cluster: {string_from_names(names)}")
        return click.confirm(f"Do you want to migrate these {len(names)} indices?")

    echo_result(*resources_.migrate_all_indices(ctx.engine, confirm, as_json=ctx.json))


@indices_group.command(name="generate-batches")
@click.option("--output-dir", default=".", type=click.Path(file_okay=False, exists=True),
              help="Directory the batch file is written to")
@click.option("--batch-size", default=DEFAULT_INDEX_BATCH_SIZE, show_default=True, type=click.IntRange(min=1))
@click.pass_obj
def generate_batches_cmd(ctx, output_dir, batch_size):
    """Write the visible source indices to a file as comma-separated batches"""
    if ctx.env.source_cluster is None:
        raise click.UsageError("A source cluster must be defined.")
    echo_result(*resources_.generate_index_batches(ctx.env.source_cluster, ctx.env.settings, output_dir,
                                                   batch_size, as_json=ctx.json))


# ##################### SCRIPTS ###################


@cli.group(name="scripts", help="Commands to migrate stored scripts")
@click.pass_obj
def scripts_group(ctx):
    _require_clusters(ctx)


@scripts_group.command(name="migrate")
@click.option("--ids", default=DEFAULT_SCRIPT_IDS, show_default=True, help="Comma-separated list of script ids")
@click.pass_obj
def migrate_scripts_cmd(ctx, ids):
    """Copy the listed stored scripts that are missing in the target cluster"""
    echo_result(*resources_.migrate_stored_scripts(ctx.engine, ids, as_json=ctx.json))


#################################################


def main():
    cli()


if __name__ == "__main__":
    main()
